"""Reference data: players, teams, manufacturer licensing and keyword tables."""

from .index import ReferenceIndex
from .keywords import KeywordTables
from .manufacturers import ManufacturerRegistry
from .players import PlayerIndex

__all__ = ["ReferenceIndex", "KeywordTables", "ManufacturerRegistry", "PlayerIndex"]

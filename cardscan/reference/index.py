"""Single entry point to the reference snapshot."""

from dataclasses import dataclass
from pathlib import Path
from typing import FrozenSet, Optional, Union

from ..utils.log import get_logger
from .keywords import KeywordTables
from .loader import (
    KEYWORDS_FILE,
    MANUFACTURERS_FILE,
    PLAYERS_FILE,
    TEAMS_FILE,
    load_data_file,
    resolve_data_dir,
)
from .manufacturers import ManufacturerRegistry
from .players import PlayerIndex

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReferenceIndex:
    """Players, teams, manufacturers and keyword tables, loaded once and shared read-only."""

    players: PlayerIndex
    manufacturers: ManufacturerRegistry
    keywords: KeywordTables
    vocabulary: FrozenSet[str]
    data_dir: Path

    @classmethod
    def load(cls, data_dir: Optional[Union[str, Path]] = None) -> "ReferenceIndex":
        """
        Build the index from a data directory.

        Raises:
            ReferenceDataError: If any data file is missing or malformed
        """
        directory = resolve_data_dir(data_dir)
        players = PlayerIndex(
            load_data_file(directory, PLAYERS_FILE, required=("players",)),
            load_data_file(directory, TEAMS_FILE, required=("teams",)),
        )
        manufacturers = ManufacturerRegistry(
            load_data_file(directory, MANUFACTURERS_FILE, required=("manufacturers", "eras"))
        )
        keywords = KeywordTables(load_data_file(directory, KEYWORDS_FILE, required=("brands",)))

        index = cls(
            players=players,
            manufacturers=manufacturers,
            keywords=keywords,
            vocabulary=keywords.vocabulary | players.vocabulary(),
            data_dir=directory,
        )
        logger.info(
            "Reference index loaded",
            data_dir=str(directory),
            players=len(players.all_players()),
            manufacturers=len(manufacturers.manufacturers()),
            vocabulary=len(index.vocabulary),
        )
        return index

"""Resolve package: structured card fields from extracted text."""

from .fields import FieldResolver, title_case_name

__all__ = ["FieldResolver", "title_case_name"]

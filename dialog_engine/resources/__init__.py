"""Static data loading."""

from dialog_engine.resources.database import SequenceDatabase, SEQUENCE_SCHEMA

__all__ = ["SequenceDatabase", "SEQUENCE_SCHEMA"]

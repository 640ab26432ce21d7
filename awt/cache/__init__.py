"""Cache module for AWT."""

from awt.cache.commands import Command, Create, Delete, Load, TurnPage, Update
from awt.cache.result_cache import ResultCache, merge_record, record_id, replay

__all__ = [
    "Command",
    "Create",
    "Delete",
    "Load",
    "ResultCache",
    "TurnPage",
    "Update",
    "merge_record",
    "record_id",
    "replay",
]

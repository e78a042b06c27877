"""Engine: the stash and restore phases over whole streams."""

from tagstash.engine.restore import RestoreEngine, RestoreResult, restore_stream
from tagstash.engine.sources import read_source, write_output
from tagstash.engine.stash import StashedDocument, StashEngine, StashResult

__all__ = [
    "RestoreEngine",
    "RestoreResult",
    "StashEngine",
    "StashResult",
    "StashedDocument",
    "read_source",
    "restore_stream",
    "write_output",
]

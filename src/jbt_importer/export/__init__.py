"""BugTrack export directory handling."""

from .index import ExportIndexReader, read_index
from .lifecycle import FileLifecycleManager

__all__ = ['ExportIndexReader', 'read_index', 'FileLifecycleManager']

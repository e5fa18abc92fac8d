"""State layer.

Holds the per-connection current-state record. Only the record merges
decoded patches; parsers never write to it directly.
"""

from pyelogger.state.record import ArchivedSentence, CurrentStateRecord, LogEntry, LogFields

__all__ = ["ArchivedSentence", "CurrentStateRecord", "LogEntry", "LogFields"]

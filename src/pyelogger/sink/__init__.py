"""Persistence sinks for committed log entries."""

from pyelogger.sink.base import FanoutSink, PersistenceSink
from pyelogger.sink.database import SqlAlchemySink, log_entry_table, nmea_raw_table
from pyelogger.sink.http import HttpSink

__all__ = ["FanoutSink", "HttpSink", "PersistenceSink", "SqlAlchemySink", "log_entry_table", "nmea_raw_table"]

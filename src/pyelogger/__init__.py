"""pyelogger - Adaptive-rate electronic logbook for NMEA/AIS vessel data."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyelogger")
except PackageNotFoundError:
    __version__ = "0+local"
from pyelogger.ais import AISFrame, NavigationalStatus, decode_frame, extract_navigational_status, find_ais_sentence
from pyelogger.config import ELoggerConfig
from pyelogger.connection import ConnectionSession
from pyelogger.exceptions import (
    ELoggerConfigError,
    ELoggerError,
    ELoggerTransportError,
    InvalidAISFrameError,
    MalformedSentenceError,
    SchedulerBusyError,
    SinkError,
    UnsupportedMessageTypeError,
    UnsupportedSentenceTypeError,
)
from pyelogger.nmea import LineBuffer, RawSentence, SentenceDispatcher, classify, default_dispatcher
from pyelogger.sampling import SamplingRequest, SamplingScheduler, SchedulerState, interval_for_status
from pyelogger.server import ELoggerServer
from pyelogger.sink import FanoutSink, HttpSink, PersistenceSink, SqlAlchemySink
from pyelogger.state import ArchivedSentence, CurrentStateRecord, LogEntry

__all__ = [
    "__version__",
    "AISFrame",
    "ArchivedSentence",
    "ConnectionSession",
    "CurrentStateRecord",
    "ELoggerConfig",
    "ELoggerConfigError",
    "ELoggerError",
    "ELoggerServer",
    "ELoggerTransportError",
    "FanoutSink",
    "HttpSink",
    "InvalidAISFrameError",
    "LineBuffer",
    "LogEntry",
    "MalformedSentenceError",
    "NavigationalStatus",
    "PersistenceSink",
    "RawSentence",
    "SamplingRequest",
    "SamplingScheduler",
    "SchedulerBusyError",
    "SchedulerState",
    "SentenceDispatcher",
    "SinkError",
    "SqlAlchemySink",
    "UnsupportedMessageTypeError",
    "UnsupportedSentenceTypeError",
    "classify",
    "decode_frame",
    "default_dispatcher",
    "extract_navigational_status",
    "find_ais_sentence",
    "interval_for_status",
]

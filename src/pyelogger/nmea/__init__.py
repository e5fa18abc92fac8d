"""NMEA 0183 sentence handling.

This package splits raw bus text into sentences, decodes individual
fields and maps each sentence type to a patch of record fields.
"""

from pyelogger.nmea.dispatch import SentenceDispatcher, default_dispatcher
from pyelogger.nmea.tokenizer import LineBuffer, RawSentence, classify, split_lines

__all__ = [
    "LineBuffer",
    "RawSentence",
    "SentenceDispatcher",
    "classify",
    "default_dispatcher",
    "split_lines",
]

"""AIS (``!AIVDM``) payload decoding."""

from pyelogger.ais.bits import BitReader, dearmor
from pyelogger.ais.decoder import (
    AISFrame,
    NavigationalStatus,
    decode_frame,
    extract_navigational_status,
    find_ais_sentence,
)

__all__ = [
    "AISFrame",
    "BitReader",
    "NavigationalStatus",
    "dearmor",
    "decode_frame",
    "extract_navigational_status",
    "find_ais_sentence",
]

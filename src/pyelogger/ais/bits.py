"""6-bit ASCII de-armoring and fixed-width bit extraction.

AIS payloads carry 6 bits per printable character. :func:`dearmor` packs
those bits MSB-first into a byte buffer; :class:`BitReader` then reads
unsigned big-endian fields by ``(offset, width)`` without materializing
a bit string.
"""

from __future__ import annotations

from pyelogger.exceptions import InvalidAISFrameError

_BITS_PER_CHAR = 6


def sixbit_value(char: str) -> int:
    """Return the 6-bit value of an armored payload character.

    Codes 48-87 (``0``-``W``) map to 0-39 and codes 96-119 (`````-``w``)
    to 40-63; anything else is outside the armor alphabet.
    """
    code = ord(char)
    if 48 <= code <= 87:
        return code - 48
    if 96 <= code <= 119:
        return code - 56
    raise InvalidAISFrameError(f"Character {char!r} is not in the AIS armor alphabet")


def dearmor(payload: str) -> tuple[bytes, int]:
    """Unpack an armored payload into ``(buffer, bit_length)``."""
    accumulator = 0
    for char in payload:
        accumulator = (accumulator << _BITS_PER_CHAR) | sixbit_value(char)
    bit_length = len(payload) * _BITS_PER_CHAR
    pad = -bit_length % 8
    byte_length = (bit_length + pad) // 8
    return (accumulator << pad).to_bytes(byte_length, "big"), bit_length


class BitReader:
    """Read unsigned fields from a de-armored AIS payload."""

    __slots__ = ("_value", "_length")

    def __init__(self, buffer: bytes, bit_length: int | None = None) -> None:
        total = len(buffer) * 8
        if bit_length is None:
            bit_length = total
        if not 0 <= bit_length <= total:
            raise ValueError(f"bit_length {bit_length} outside buffer of {total} bits")
        self._length = bit_length
        self._value = int.from_bytes(buffer, "big") >> (total - bit_length)

    @classmethod
    def from_payload(cls, payload: str) -> BitReader:
        return cls(*dearmor(payload))

    def __len__(self) -> int:
        return self._length

    def uint(self, offset: int, width: int) -> int:
        """Extract ``width`` bits starting at ``offset`` as an unsigned int."""
        if offset < 0 or width <= 0:
            raise ValueError(f"invalid bit field offset={offset} width={width}")
        end = offset + width
        if end > self._length:
            raise InvalidAISFrameError(f"Bit field [{offset}, {end}) exceeds payload of {self._length} bits")
        return (self._value >> (self._length - end)) & ((1 << width) - 1)

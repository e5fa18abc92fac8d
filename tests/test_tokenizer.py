from __future__ import annotations

import pytest

from pyelogger.exceptions import MalformedSentenceError
from pyelogger.nmea.tokenizer import LineBuffer, classify, split_lines

RMC = "$GPRMC,123519,A,4807.038,N,01131.000,E,022.4,084.4,230394,003.1,W*6A"


def test_classify_splits_header_and_strips_checksum() -> None:
    sentence = classify(RMC + "\r")

    assert sentence is not None
    assert sentence.talker == "GP"
    assert sentence.sentence_type == "RMC"
    assert sentence.field(1) == "123519"
    # Checksum suffix removed from the last field.
    assert sentence.field(11) == "W"
    assert sentence.field(42) == ""


def test_classify_ignores_non_nmea_lines() -> None:
    assert classify("!AIVDM,1,1,,B,15M67FC000G?ufbE`FepT@3n00Sa,0*5C") is None
    assert classify("garbage") is None
    assert classify("") is None


@pytest.mark.parametrize("line", ["$GPRM,1,2", "$,1,2", "$GP RMC,1"])
def test_classify_rejects_bad_header(line: str) -> None:
    with pytest.raises(MalformedSentenceError):
        classify(line)


def test_split_lines_drops_blank_lines() -> None:
    assert split_lines("a\n\n  \nb\n") == ["a", "b"]


def test_line_buffer_reassembles_split_sentence() -> None:
    buffer = LineBuffer()

    assert buffer.feed(RMC[:20]) == []
    assert buffer.pending == RMC[:20]
    assert buffer.feed(RMC[20:] + "\n$GPHDT,274.07,T") == [RMC]
    assert buffer.flush() == ["$GPHDT,274.07,T"]
    assert buffer.flush() == []


def test_line_buffer_handles_crlf_and_multiple_lines() -> None:
    buffer = LineBuffer()

    lines = buffer.feed("$GPHDT,1.0,T\r\n$GPHDT,2.0,T\r\n")

    assert [line.strip() for line in lines] == ["$GPHDT,1.0,T", "$GPHDT,2.0,T"]
    assert buffer.pending == ""


def test_line_buffer_discards_oversize_line() -> None:
    buffer = LineBuffer(max_line_length=10)

    assert buffer.feed("x" * 25) == []
    assert buffer.pending == ""
    # The rest of the oversize line is dropped; the next line survives.
    assert buffer.feed("yyy\n$GPHDT,1,T\n") == ["$GPHDT,1,T"]

from __future__ import annotations

from pyelogger._logfmt import truncate_for_log


def test_truncate_for_log_strips_line_ending_and_control_chars() -> None:
    assert truncate_for_log("$HEHDT,90.0,T\r\n") == "$HEHDT,90.0,T"
    assert truncate_for_log("$HE\x00HDT\x1b") == "$HE?HDT?"


def test_truncate_for_log_truncates_long_strings() -> None:
    value = truncate_for_log("x" * 600, max_string=10)

    assert value.startswith("x" * 10)
    assert value.endswith("<truncated>")


def test_truncate_for_log_handles_bytes_and_mappings() -> None:
    assert truncate_for_log(b"\x00\x01\x02") == "<bytes:3b>"
    assert truncate_for_log({"line": "y" * 50, "count": 3}, max_string=5) == {
        "line": "yyyyy…<truncated>",
        "count": 3,
    }
    assert truncate_for_log(None) is None

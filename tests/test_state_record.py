from __future__ import annotations

from datetime import UTC, datetime

import pytest
from pydantic import ValidationError

from pyelogger.exceptions import ELoggerError, MalformedSentenceError
from pyelogger.state.record import ArchivedSentence, CurrentStateRecord, LogEntry


def test_new_record_is_all_none() -> None:
    record = CurrentStateRecord()

    assert record.latitude is None
    assert record.navigational_status is None
    assert all(value is None for value in record.snapshot().to_row().values() if not isinstance(value, datetime))


def test_apply_overwrites_only_named_fields() -> None:
    record = CurrentStateRecord()
    record.apply({"heading": 274.0, "speed_over_ground": 5.5})

    updated = record.apply({"heading": 275.5, "latitude": None})

    assert updated == ["heading"]
    assert record.heading == 275.5
    assert record.speed_over_ground == 5.5
    assert record.latitude is None


def test_apply_unknown_field_raises() -> None:
    record = CurrentStateRecord()

    with pytest.raises(ELoggerError, match="Unknown record fields"):
        record.apply({"depth": 12.0})


def test_apply_rejected_patch_leaves_record_untouched() -> None:
    record = CurrentStateRecord()
    record.apply({"latitude": 48.0, "heading": 10.0})

    with pytest.raises(MalformedSentenceError):
        record.apply({"latitude": 123.0, "heading": 20.0})

    assert record.latitude == 48.0
    assert record.heading == 10.0


def test_snapshot_is_frozen_and_decoupled() -> None:
    record = CurrentStateRecord()
    record.apply({"heading": 90.0, "navigational_status": 0})
    recorded_at = datetime(2024, 5, 1, 12, 0, tzinfo=UTC)

    entry = record.snapshot(recorded_at)
    record.apply({"heading": 180.0})

    assert entry.heading == 90.0
    assert entry.navigational_status == 0
    assert entry.recorded_at == recorded_at
    with pytest.raises(ValidationError):
        entry.heading = 1.0  # type: ignore[misc]


def test_log_entry_serialization() -> None:
    entry = LogEntry(
        timestamp_utc=datetime(1994, 3, 23, 12, 35, 19, tzinfo=UTC),
        latitude=48.1173,
        recorded_at=datetime(2024, 5, 1, 12, 0, tzinfo=UTC),
    )

    row = entry.to_row()
    payload = entry.to_json()

    assert row["latitude"] == 48.1173
    assert row["recorded_at"] == datetime(2024, 5, 1, 12, 0, tzinfo=UTC)
    assert row["wind_speed"] is None
    assert payload["timestamp_utc"] == "1994-03-23T12:35:19Z"
    assert payload["recorded_at"] == "2024-05-01T12:00:00Z"


def test_archived_sentences_stay_out_of_the_row() -> None:
    record = CurrentStateRecord()
    record.apply({"heading": 90.0})
    archived = ArchivedSentence(sentence="$HEHDT,90.0,T", source="HE", talker_type="HDT")

    entry = record.snapshot(datetime(2024, 5, 1, 12, 0, tzinfo=UTC), sentences=[archived])

    assert entry.sentences == (archived,)
    assert "sentences" not in entry.to_row()
    assert entry.archive_rows() == [{"sentence": "$HEHDT,90.0,T", "source": "HE", "talker_type": "HDT"}]
    assert entry.to_json()["sentences"] == [{"sentence": "$HEHDT,90.0,T", "source": "HE", "talker_type": "HDT"}]

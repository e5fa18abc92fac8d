"""Current-state record and its committed snapshots."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pyelogger.exceptions import ELoggerError, MalformedSentenceError


class LogFields(BaseModel):
    """Fields shared by the live record and its snapshots.

    Every field is ``None`` until a sentence provides it.
    """

    model_config = ConfigDict(extra="forbid")

    timestamp_utc: datetime | None = None
    latitude: float | None = Field(default=None, ge=-90.0, le=90.0)
    longitude: float | None = Field(default=None, ge=-180.0, le=180.0)
    course_over_ground: float | None = None
    speed_over_ground: float | None = None
    heading: float | None = None
    rudder_angle: float | None = None
    wind_direction: float | None = None
    wind_speed: float | None = None
    sea_state: str | None = None
    visibility: str | None = None
    barometric_pressure: float | None = None
    air_temp: float | None = None
    water_temp: float | None = None
    engine_rpm: float | None = None
    engine_mode: str | None = None
    generator_online: str | None = None
    remarks: str | None = None
    navigational_status: int | None = Field(default=None, ge=0, le=15)


class ArchivedSentence(BaseModel):
    """Raw NMEA line that contributed to a log entry."""

    model_config = ConfigDict(frozen=True)

    sentence: str
    source: str = ""
    talker_type: str = ""


class LogEntry(LogFields):
    """Frozen copy of the record handed to a persistence sink.

    ``sentences`` holds the raw lines applied to the record since the
    previous accepted snapshot of the same connection.
    """

    model_config = ConfigDict(frozen=True)

    recorded_at: datetime = Field(default_factory=lambda: datetime.now(UTC))
    sentences: tuple[ArchivedSentence, ...] = ()

    def to_row(self) -> dict[str, Any]:
        """Flat mapping of named optional fields plus ``recorded_at``."""
        return self.model_dump(exclude={"sentences"})

    def archive_rows(self) -> list[dict[str, Any]]:
        return [sentence.model_dump() for sentence in self.sentences]

    def to_json(self) -> dict[str, Any]:
        return self.model_dump(mode="json")


class CurrentStateRecord(LogFields):
    """Latest known value of every field for one connection.

    Updated in place by :meth:`apply`; no history is retained.
    """

    def apply(self, patch: Mapping[str, Any]) -> list[str]:
        """Overwrite the fields named in *patch* and return their names.

        ``None`` values are skipped. The patch is validated as a whole
        before anything is written, so a rejected patch leaves the record
        untouched.
        """
        unknown = set(patch) - set(LogFields.model_fields)
        if unknown:
            raise ELoggerError(f"Unknown record fields: {sorted(unknown)}")

        updates = {key: value for key, value in patch.items() if value is not None}
        if not updates:
            return []

        try:
            validated = LogFields.model_validate({**self._current(), **updates})
        except ValidationError as exc:
            raise MalformedSentenceError(f"Rejected record patch: {exc.error_count()} invalid field(s)") from exc

        for key in updates:
            setattr(self, key, getattr(validated, key))
        return list(updates)

    def _current(self) -> dict[str, Any]:
        return {name: getattr(self, name) for name in LogFields.model_fields}

    def snapshot(
        self,
        recorded_at: datetime | None = None,
        *,
        sentences: Iterable[ArchivedSentence] = (),
    ) -> LogEntry:
        """Freeze the current values into a :class:`LogEntry`."""
        data: dict[str, Any] = self._current()
        if recorded_at is not None:
            data["recorded_at"] = recorded_at
        data["sentences"] = tuple(sentences)
        return LogEntry.model_validate(data)

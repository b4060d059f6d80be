"""Snapshot Processing Layer implementation."""

from __future__ import annotations

import json
from datetime import datetime
from pathlib import Path
from typing import Any

from jsonschema import Draft202012Validator

from rce.core.types import DomainState, Profile, ScheduledSession, Snapshot


class SnapshotProcessingLayer:
    """Validates raw domain snapshots against JSON Schema."""

    def __init__(self, schema_path: str) -> None:
        schema = json.loads(Path(schema_path).read_text(encoding="utf-8"))
        self._validator = Draft202012Validator(schema)

    def ingest(self, raw_snapshot: dict[str, Any]) -> Snapshot:
        """Validate a raw snapshot and convert it to the internal envelope."""
        errors = sorted(self._validator.iter_errors(raw_snapshot), key=str)
        if errors:
            details = "; ".join(err.message for err in errors)
            raise ValueError(f"Invalid snapshot payload: {details}")

        profile = raw_snapshot.get("profile", {})
        return Snapshot(
            state=DomainState.from_mapping(raw_snapshot["domains"]),
            profile=Profile(
                wake_time=profile.get("wake_time"),
                bed_time=profile.get("bed_time"),
                goals=tuple(str(goal) for goal in profile.get("goals", [])),
            ),
            sessions=tuple(
                ScheduledSession(
                    type=str(item["type"]),
                    time_of_day=str(item["time_of_day"]),
                    completed=bool(item.get("completed", False)),
                    intensity=str(item.get("intensity", "moderate")),
                    duration_minutes=int(item.get("duration_minutes", 60)),
                )
                for item in raw_snapshot.get("sessions", [])
            ),
            captured_at=self._parse_timestamp(raw_snapshot.get("captured_at")),
        )

    @staticmethod
    def _parse_timestamp(raw: str | None) -> datetime | None:
        if raw is None:
            return None
        try:
            return datetime.fromisoformat(raw.replace("Z", "+00:00"))
        except ValueError as exc:
            raise ValueError(f"Invalid snapshot payload: captured_at {raw!r}") from exc

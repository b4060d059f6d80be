"""Decision history store backed by SQLite via SQLAlchemy."""

from __future__ import annotations

import json
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from sqlalchemy import DateTime, Engine, Float, String, Text, create_engine, desc, select
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column

from rce.core.types import Timeline


class Base(DeclarativeBase):
    """Declarative base for SQLite models."""


class SnapshotRecord(Base):
    """Append-only record of evaluated snapshots."""

    __tablename__ = "snapshot_history"

    snapshot_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    snapshot_json: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )


class DecisionRecord(Base):
    """Append-only record of council decisions for traceability."""

    __tablename__ = "decision_history"

    decision_id: Mapped[str] = mapped_column(String(64), primary_key=True)
    snapshot_id: Mapped[str] = mapped_column(String(64), nullable=False)
    commander_id: Mapped[str] = mapped_column(String(100), nullable=False)
    commander_priority: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    focus_domain: Mapped[str] = mapped_column(String(64), nullable=False)
    timeline_json: Mapped[str] = mapped_column(Text, nullable=False)
    annotation: Mapped[str] = mapped_column(Text, nullable=False, default="")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=lambda: datetime.now(UTC)
    )


class HistoryStore:
    """Caller-side persistence for snapshots and the decisions taken on them."""

    def __init__(self, db_url: str) -> None:
        self._engine: Engine = create_engine(db_url, future=True)
        Base.metadata.create_all(self._engine)

    def record_snapshot(self, snapshot: Mapping[str, Any]) -> str:
        """Store a raw snapshot and return its id."""
        snapshot_id = str(uuid4())
        with Session(self._engine) as session:
            session.add(
                SnapshotRecord(
                    snapshot_id=snapshot_id,
                    snapshot_json=json.dumps(dict(snapshot), ensure_ascii=False, default=str),
                )
            )
            session.commit()
        return snapshot_id

    def record_decision(self, snapshot_id: str, timeline: Timeline, annotation: str = "") -> str:
        """Store the public payload of a timeline and return the decision id."""
        decision_id = str(uuid4())
        commander = timeline.commander_action
        with Session(self._engine) as session:
            session.add(
                DecisionRecord(
                    decision_id=decision_id,
                    snapshot_id=snapshot_id,
                    commander_id=commander.id,
                    commander_priority=timeline.priority_scores.get(commander.id, 0.0),
                    focus_domain=timeline.focus_domain,
                    timeline_json=json.dumps(timeline.to_dict(), ensure_ascii=False),
                    annotation=annotation,
                )
            )
            session.commit()
        return decision_id

    def get_snapshot(self, snapshot_id: str) -> dict[str, Any] | None:
        with Session(self._engine) as session:
            record = session.get(SnapshotRecord, snapshot_id)
            if record is None:
                return None
            return dict(json.loads(record.snapshot_json))

    def recent_decisions(self, n: int) -> list[dict[str, Any]]:
        """Return the most recent decisions ordered from oldest to newest."""
        with Session(self._engine) as session:
            rows = session.execute(
                select(DecisionRecord).order_by(desc(DecisionRecord.created_at)).limit(max(0, n))
            ).scalars()
            recent = list(rows)

        recent.reverse()
        return [
            {
                "decision_id": row.decision_id,
                "snapshot_id": row.snapshot_id,
                "commander_id": row.commander_id,
                "commander_priority": row.commander_priority,
                "focus_domain": row.focus_domain,
                "timeline": json.loads(row.timeline_json),
                "annotation": row.annotation,
                "created_at": row.created_at.isoformat(),
            }
            for row in recent
        ]

    def decision_count(self) -> int:
        with Session(self._engine) as session:
            return len(session.execute(select(DecisionRecord.decision_id)).scalars().all())

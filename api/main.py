"""Minimal FastAPI interface for the recommendation council."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from fastapi import FastAPI, HTTPException, Query
from pydantic import BaseModel

from rce.annotator import OpenRouterClient, TimelineAnnotator, load_annotator_credentials
from rce.core.config import Settings
from rce.council.council import Council
from rce.ctx.builder import ContextBuilder
from rce.epl.processor import SnapshotProcessingLayer
from rce.sm.manager import HistoryStore

settings = Settings()
app = FastAPI(title="RCE API", version="0.1.0")

# Composition root: dependencies are instantiated once and kept independent by contracts.
spl = SnapshotProcessingLayer(settings.snapshot_schema_path)
builder = ContextBuilder(settings)
council = Council(settings=settings)
store = HistoryStore(settings.db_url)
annotator_credentials = load_annotator_credentials()
annotator = TimelineAnnotator(
    OpenRouterClient.from_credentials(annotator_credentials)
    if settings.enable_annotator and annotator_credentials.configured
    else None
)


class EvaluateIn(BaseModel):
    """Council evaluation request."""

    snapshot: dict[str, Any]
    now: datetime | None = None
    annotate: bool = False


@app.post("/council/evaluate")
def evaluate(request: EvaluateIn) -> dict[str, object]:
    """Validate a snapshot, run one council cycle and record the decision."""
    try:
        snapshot = spl.ingest(request.snapshot)
        context = builder.build(snapshot, request.now)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc

    timeline = council.evaluate(snapshot.state, context)

    # The annotator runs only once the authoritative timeline exists.
    annotation = annotator.annotate(timeline) if request.annotate else None

    snapshot_id = store.record_snapshot(request.snapshot)
    decision_id = store.record_decision(
        snapshot_id,
        timeline,
        annotation=annotation.text if annotation is not None else "",
    )

    response: dict[str, object] = {
        "decision_id": decision_id,
        **timeline.to_dict(),
        "expert_weights": timeline.expert_weights,
    }
    if annotation is not None:
        response["annotation"] = {"text": annotation.text, "source": annotation.source}
    return response


@app.get("/council/history")
def get_history(limit: int = Query(default=20, ge=1, le=500)) -> dict[str, object]:
    """Expose recent council decisions, oldest first."""
    return {"history": store.recent_decisions(limit)}


@app.get("/health")
def health() -> dict[str, object]:
    return {
        "status": "ok",
        "app": settings.app_name,
        "environment": settings.environment,
        "experts": council.registry.domains,
    }

"""Example continuous evaluation loop for background workers."""

from __future__ import annotations

import time

from rce.core.config import Settings
from rce.council.council import Council
from rce.ctx.builder import ContextBuilder
from rce.epl.processor import SnapshotProcessingLayer
from rce.examples.scenarios import all_examples
from rce.sm.manager import HistoryStore


def run_loop(iterations: int = 8, sleep_s: float = 0.05) -> None:
    """Evaluate the example snapshots in turn and record each decision."""
    settings = Settings()
    spl = SnapshotProcessingLayer(settings.snapshot_schema_path)
    builder = ContextBuilder(settings)
    council = Council(settings=settings)
    store = HistoryStore(settings.db_url)

    examples = all_examples()
    for index in range(iterations):
        raw = examples[index % len(examples)]
        snapshot = spl.ingest(raw)
        context = builder.build(snapshot)
        timeline = council.evaluate(snapshot.state, context)

        snapshot_id = store.record_snapshot(raw)
        store.record_decision(snapshot_id, timeline)

        commander = timeline.commander_action
        print(
            f"[{index:02d}] at={context.current_hour:02d}:{context.current_minute:02d} "
            f"commander={commander.id} priority={timeline.priority_scores.get(commander.id, 0.0):.1f} "
            f"alerts={len(timeline.alerts)} deferred={len(timeline.deferrals)} "
            f"focus={timeline.focus_domain}"
        )
        time.sleep(sleep_s)


if __name__ == "__main__":
    run_loop()

import logging

from rce.bus.handoffs import HandoffBus
from rce.core.types import Handoff


def test_bus_dedupes_by_content() -> None:
    bus = HandoffBus(["fuel", "medical"])

    assert bus.enqueue(Handoff("medical", "fuel", "low_b12", {"b12": 220}))
    assert not bus.enqueue(Handoff("medical", "fuel", "low_b12", {"b12": 220}))
    assert bus.enqueue(Handoff("medical", "fuel", "low_b12", {"b12": 180}))
    assert len(bus) == 2


def test_bus_dedupe_key_overrides_content() -> None:
    bus = HandoffBus(["fuel"])

    bus.enqueue(Handoff("medical", "fuel", "low_b12", {"b12": 220}, dedupe_key="b12"))
    bus.enqueue(Handoff("medical", "fuel", "low_b12", {"b12": 180}, dedupe_key="b12"))

    assert len(bus) == 1


def test_bus_drops_unknown_and_self_addressed(caplog) -> None:
    bus = HandoffBus(["fuel", "recovery"])

    with caplog.at_level(logging.INFO):
        assert not bus.enqueue(Handoff("recovery", "sleep_lab", "poor_sleep"))
        assert not bus.enqueue(Handoff("fuel", "fuel", "hungry"))

    assert len(bus) == 0
    assert "handoff_dropped from=recovery to=sleep_lab" in caplog.text


def test_bus_limits_each_inbox_and_keeps_order() -> None:
    bus = HandoffBus(["fuel", "mindspace"], per_domain_limit=2)
    bus.enqueue_all(
        [
            Handoff("recovery", "fuel", "a"),
            Handoff("recovery", "mindspace", "b"),
            Handoff("medical", "fuel", "c"),
            Handoff("performance", "fuel", "d"),
        ]
    )

    delivered = bus.deliver()

    assert [(h.to_domain, h.kind) for h in delivered] == [("fuel", "a"), ("fuel", "c"), ("mindspace", "b")]
    assert len(bus) == 0
    assert bus.deliver() == ()

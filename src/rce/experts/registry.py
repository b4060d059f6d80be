"""Expert registry with registration-order dispatch and failure isolation."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import TypeVar

from rce.core.types import Context, DomainState, ExpertAnalysis, ExpertOpinion, Handoff
from rce.experts.base import Expert
from rce.experts.circadian import CircadianExpert
from rce.experts.fuel import FuelExpert
from rce.experts.medical import MedicalExpert
from rce.experts.mindspace import MindspaceExpert
from rce.experts.performance import PerformanceExpert
from rce.experts.recovery import RecoveryExpert

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(slots=True)
class ExpertRegistry:
    """Ordered set of experts; one per domain.

    Every call is isolated per expert: an exception is logged and the expert
    abstains for that operation. Results always follow registration order,
    also when calls are fanned out to a thread pool.
    """

    max_workers: int = 0
    _experts: list[Expert] = field(default_factory=list)

    def register(self, expert: Expert) -> None:
        if any(existing.domain == expert.domain for existing in self._experts):
            raise ValueError(f"Expert already registered for domain: {expert.domain}")
        self._experts.append(expert)

    @property
    def domains(self) -> list[str]:
        return [expert.domain for expert in self._experts]

    def __iter__(self) -> Iterator[Expert]:
        return iter(self._experts)

    def __len__(self) -> int:
        return len(self._experts)

    def opinions(self, state: DomainState, context: Context) -> list[ExpertOpinion]:
        return self._collect("form_opinion", lambda expert: expert.form_opinion(state, context))

    def analyses(self, state: DomainState, context: Context) -> dict[str, ExpertAnalysis]:
        results = self._collect("analyze", lambda expert: expert.analyze(state, context))
        return {analysis.domain: analysis for analysis in results}

    def weights(self, state: DomainState, context: Context) -> dict[str, float]:
        pairs = self._collect(
            "get_weight",
            lambda expert: (expert.domain, expert.get_weight(state, context)),
        )
        return dict(pairs)

    def handoffs(self, state: DomainState, context: Context) -> list[Handoff]:
        batches = self._collect("handoffs", lambda expert: list(expert.handoffs(state, context)))
        return [handoff for batch in batches for handoff in batch]

    def _collect(self, operation: str, call: Callable[[Expert], T]) -> list[T]:
        if self.max_workers > 1 and len(self._experts) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                futures = [pool.submit(call, expert) for expert in self._experts]
                outcomes = []
                for expert, future in zip(self._experts, futures):
                    try:
                        outcomes.append(future.result())
                    except Exception as exc:
                        self._log_abstention(expert, operation, exc)
                return outcomes

        results: list[T] = []
        for expert in self._experts:
            try:
                results.append(call(expert))
            except Exception as exc:
                self._log_abstention(expert, operation, exc)
        return results

    @staticmethod
    def _log_abstention(expert: Expert, operation: str, exc: Exception) -> None:
        logger.warning(
            "expert_abstained domain=%s operation=%s error=%s",
            getattr(expert, "domain", "unknown"),
            operation,
            exc,
        )


def default_experts() -> list[Expert]:
    """Experts of the standard council, in registration order."""
    return [
        FuelExpert(),
        RecoveryExpert(),
        MindspaceExpert(),
        PerformanceExpert(),
        CircadianExpert(),
        MedicalExpert(),
    ]


def build_registry(experts: list[Expert] | None = None, max_workers: int = 0) -> ExpertRegistry:
    registry = ExpertRegistry(max_workers=max_workers)
    for expert in default_experts() if experts is None else experts:
        registry.register(expert)
    return registry

"""Domain experts consulted by the recommendation council."""

from rce.experts.base import CandidateRule, Expert, ExpertInput, Finding, Placeholder
from rce.experts.circadian import CircadianExpert
from rce.experts.fuel import FuelExpert
from rce.experts.medical import MedicalExpert
from rce.experts.mindspace import MindspaceExpert
from rce.experts.performance import PerformanceExpert
from rce.experts.recovery import RecoveryExpert
from rce.experts.registry import ExpertRegistry, build_registry, default_experts

__all__ = [
    "CandidateRule",
    "CircadianExpert",
    "Expert",
    "ExpertInput",
    "ExpertRegistry",
    "Finding",
    "FuelExpert",
    "MedicalExpert",
    "MindspaceExpert",
    "PerformanceExpert",
    "Placeholder",
    "RecoveryExpert",
    "build_registry",
    "default_experts",
]

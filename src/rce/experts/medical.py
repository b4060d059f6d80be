"""Medical expert: biomarkers and bloodwork follow-up."""

from __future__ import annotations

from rce.core.types import Context, DomainState, Handoff
from rce.experts.base import CandidateRule, Expert, ExpertInput, Finding, Placeholder

# Missing biomarkers are unknown and never trigger a rule.
BLOODWORK_DAYS_DEFAULT = 180.0
BLOODWORK_INTERVAL_DAYS = 90

VITAMIN_D_LOW = 30.0
B12_LOW = 300.0
CRP_HIGH = 3.0
FERRITIN_LOW = 50.0


def _marker(inp: ExpertInput, name: str) -> float | None:
    value = inp.signal(name)
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def _below(name: str, threshold: float):
    def check(inp: ExpertInput) -> bool:
        value = _marker(inp, name)
        return value is not None and value < threshold

    return check


def _above(name: str, threshold: float):
    def check(inp: ExpertInput) -> bool:
        value = _marker(inp, name)
        return value is not None and value > threshold

    return check


_low_vitamin_d = _below("vitamin_d", VITAMIN_D_LOW)
_low_b12 = _below("b12", B12_LOW)
_high_crp = _above("crp", CRP_HIGH)
_low_ferritin = _below("ferritin", FERRITIN_LOW)


def _bloodwork_due(inp: ExpertInput) -> bool:
    return inp.number("days_since_bloodwork", BLOODWORK_DAYS_DEFAULT) > BLOODWORK_INTERVAL_DAYS


RULES = (
    CandidateRule(
        key="vitamin_d",
        category="supplement",
        title="Vitamin D Supplementation",
        description=lambda inp: f"Vitamin D at {_marker(inp, 'vitamin_d'):.0f} ng/mL",
        when=_low_vitamin_d,
        urgency=60,
        impact=75,
        rationale="Low vitamin D impairs immunity, mood and recovery",
        protocol="2000-4000 IU D3 with a fat-containing meal",
    ),
    CandidateRule(
        key="b12",
        category="supplement",
        title="B12 Supplementation",
        description=lambda inp: f"B12 at {_marker(inp, 'b12'):.0f} pg/mL",
        when=_low_b12,
        urgency=65,
        impact=70,
        rationale="Low B12 causes fatigue and cognitive fog",
        protocol="Methylcobalamin 1000 mcg daily",
    ),
    CandidateRule(
        key="inflammation",
        category="medical",
        title="Inflammation Elevated",
        description=lambda inp: f"CRP at {_marker(inp, 'crp'):.1f} mg/L",
        when=_high_crp,
        urgency=75,
        impact=85,
        rationale="Elevated CRP signals systemic inflammation",
        protocol="Reduce training load, review sleep and diet, retest in 2 weeks",
    ),
    CandidateRule(
        key="iron",
        category="supplement",
        title="Iron Stores Low",
        description=lambda inp: f"Ferritin at {_marker(inp, 'ferritin'):.0f} ng/mL",
        when=_low_ferritin,
        urgency=55,
        impact=65,
        rationale="Low ferritin limits oxygen delivery and endurance",
        protocol="Iron-rich foods with vitamin C; discuss supplementation",
    ),
    CandidateRule(
        key="bloodwork",
        category="medical",
        title="Bloodwork Reminder",
        description=lambda inp: (
            f"{inp.number('days_since_bloodwork', BLOODWORK_DAYS_DEFAULT):.0f} days since last panel"
        ),
        when=_bloodwork_due,
        urgency=35,
        impact=70,
        rationale="Quarterly panels catch deficiencies early",
        protocol="Book a fasted panel: CBC, ferritin, D, B12, CRP",
    ),
    CandidateRule(
        key="investigate",
        category="medical",
        title="Investigate Persistent Fatigue",
        description="Recovery has stayed low without known biomarkers",
        when=lambda inp: inp.handoff("persistent_issue") is not None,
        urgency=70,
        impact=80,
        rationale="Persistent low recovery may have a medical cause",
        protocol="Schedule a check-up and full bloodwork",
    ),
)


class MedicalExpert(Expert):
    name = "Doctor"
    domain = "medical"
    default_score = 80.0
    rules = RULES
    focus_message = "Health markers - consider bloodwork or supplements"
    concerns = (
        Finding(_low_vitamin_d, "Vitamin D deficient"),
        Finding(_low_b12, "B12 low"),
        Finding(_high_crp, "Inflammation marker elevated"),
        Finding(_low_ferritin, "Iron stores low"),
    )
    opportunities = (
        Finding(lambda inp: not _bloodwork_due(inp), "Bloodwork up to date"),
    )
    placeholder = Placeholder(
        key="maintenance",
        title="No Medical Action",
        description="Biomarkers within range",
        rationale="No medical intervention required",
        reasoning="Biomarkers stable.",
    )

    def compute_score(self, inp: ExpertInput) -> float:
        if inp.state.has(self.domain):
            return inp.score
        return self.default_score - 10 * sum(1 for finding in self.concerns if finding.when(inp))

    def weight(self, inp: ExpertInput) -> float:
        concerns = sum(1 for finding in self.concerns if finding.when(inp))
        if concerns > 2:
            return 0.30
        if concerns > 0:
            return 0.20
        return 0.10

    def handoffs(self, state: DomainState, context: Context) -> list[Handoff]:
        inp = self.view(state, context)
        out: list[Handoff] = []
        if _low_b12(inp):
            out.append(Handoff(self.domain, "fuel", "low_b12", {"b12": _marker(inp, "b12")}))
        if _high_crp(inp):
            crp = {"crp": _marker(inp, "crp")}
            out.append(Handoff(self.domain, "circadian", "inflammation", crp))
            out.append(Handoff(self.domain, "performance", "injury_markers", crp))
        return out

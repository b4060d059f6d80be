"""Recovery expert: readiness, sleep and nervous-system load."""

from __future__ import annotations

from rce.core.types import ActionCandidate, Context, DomainState, ExpertOpinion, Handoff
from rce.experts.base import (
    CandidateRule,
    Expert,
    ExpertInput,
    Finding,
    Placeholder,
    before_bed_window,
    hours_window,
    threshold_weight,
)

DIGESTION_WINDOW_MINUTES = 180
INJURY_SCORE_THRESHOLD = 50

HRV_TREND_DEFAULT = "stable"
SLEEP_QUALITY_DEFAULT = 80.0
SLEEP_HOURS_DEFAULT = 7.0
SORENESS_DEFAULT = 0.0


def _hrv_declining(inp: ExpertInput) -> bool:
    return str(inp.signal("hrv_trend", HRV_TREND_DEFAULT)).lower() in {"declining", "low"}


def _sleep_quality(inp: ExpertInput) -> float:
    return inp.number("sleep_quality", SLEEP_QUALITY_DEFAULT)


def _soreness(inp: ExpertInput) -> float:
    return inp.number("muscle_soreness", SORENESS_DEFAULT)


def _in_wind_down(inp: ExpertInput) -> bool:
    return inp.context.is_in_last_hours_before_bed(2)


RULES = (
    CandidateRule(
        key="red_day",
        category="rest",
        title="Red Day Protocol",
        description="Recovery critically low - prioritize rest",
        when=lambda inp: inp.score < 40,
        urgency=100,
        impact=95,
        rationale=lambda inp: f"Recovery at {inp.score:.0f}% - training would be counterproductive",
        protocol="No intense training. Light walking only. Extra sleep tonight.",
    ),
    CandidateRule(
        key="nap",
        category="rest",
        title="Recovery Nap",
        description="Short nap to offset poor sleep",
        when=lambda inp: _sleep_quality(inp) < 60 and 13 <= inp.hour <= 16,
        urgency=65,
        impact=70,
        rationale=lambda inp: f"Sleep quality {_sleep_quality(inp):.0f}% - nap restores alertness",
        duration_minutes=20,
        window=lambda inp: hours_window(13, 16),
        protocol="20 min max, before 4pm, dark room",
    ),
    CandidateRule(
        key="wind_down",
        category="sleep_hygiene",
        title="Wind-Down Routine",
        description="Prepare the nervous system for sleep",
        when=_in_wind_down,
        urgency=60,
        impact=80,
        rationale="Parasympathetic shift improves deep sleep",
        duration_minutes=30,
        window=lambda inp: before_bed_window(inp, 120),
        protocol="Screens off, dim lights, light stretching",
    ),
    CandidateRule(
        key="active_recovery",
        category="movement",
        title="Active Recovery",
        description="Light movement to clear soreness",
        when=lambda inp: _soreness(inp) > 5 and inp.score >= 40 and 8 <= inp.hour <= 18,
        urgency=50,
        impact=65,
        rationale=lambda inp: f"Soreness {_soreness(inp):.0f}/10 - blood flow speeds repair",
        duration_minutes=20,
        protocol="Easy walk, mobility flow or light cycling",
    ),
    CandidateRule(
        key="cold_exposure",
        category="cold_exposure",
        title="Cold Exposure",
        description="Cold plunge or shower to reduce inflammation",
        when=lambda inp: 40 <= inp.score < 70 and 10 <= inp.hour <= 18,
        urgency=45,
        impact=70,
        rationale="Cold reduces systemic inflammation and soreness",
        duration_minutes=5,
        window=lambda inp: hours_window(10, 18),
        protocol="2-3 min cold water, 10-15C",
    ),
    CandidateRule(
        key="heat_exposure",
        category="heat_exposure",
        title="Sauna Session",
        description="Heat exposure for recovery and adaptation",
        when=lambda inp: inp.score >= 50 and 14 <= inp.hour <= 19,
        urgency=35,
        impact=60,
        rationale="Heat shock proteins support muscle repair",
        duration_minutes=20,
        window=lambda inp: hours_window(14, 19),
        protocol="15-20 min at 80-90C, hydrate after",
    ),
    CandidateRule(
        key="hrv_alert",
        category="awareness",
        title="HRV Declining",
        description="Nervous system under strain",
        when=_hrv_declining,
        urgency=70,
        impact=85,
        rationale="Declining HRV signals accumulated fatigue",
        protocol="Reduce training load, prioritize sleep and breathwork",
    ),
    CandidateRule(
        key="overreach",
        category="rest",
        title="Overreach Detected",
        description="Training load spike - schedule extra recovery",
        when=lambda inp: inp.handoff("acwr_spike") is not None,
        urgency=80,
        impact=90,
        rationale=lambda inp: (
            f"Acute:chronic load ratio {inp.handoff('acwr_spike').data.get('acwr', 0):.2f}"
            " - injury risk elevated"
        ),
        protocol="Replace next hard session with recovery work",
    ),
    CandidateRule(
        key="stress_protocol",
        category="breathwork",
        title="Stress Recovery Protocol",
        description="High stress is draining recovery capacity",
        when=lambda inp: inp.handoff("high_stress") is not None,
        urgency=70,
        impact=75,
        rationale="Chronic stress suppresses HRV and sleep quality",
        duration_minutes=10,
        protocol="Box breathing 4-4-4-4 for 10 minutes",
    ),
)


class RecoveryExpert(Expert):
    name = "Recovery Coach"
    domain = "recovery"
    default_score = 80.0
    rules = RULES
    focus_message = "Recovery priority - rest and modalities today"
    concerns = (
        Finding(lambda inp: inp.score < 40, "Recovery critically low"),
        Finding(lambda inp: 40 <= inp.score < 60, "Recovery below baseline"),
        Finding(_hrv_declining, "HRV trending down"),
        Finding(
            lambda inp: _sleep_quality(inp) < 60,
            lambda inp: f"Sleep quality only {_sleep_quality(inp):.0f}%",
        ),
        Finding(
            lambda inp: inp.number("sleep_hours", SLEEP_HOURS_DEFAULT) < 6,
            lambda inp: f"Only {inp.number('sleep_hours', SLEEP_HOURS_DEFAULT):.1f}h of sleep",
        ),
        Finding(lambda inp: _soreness(inp) > 7, "High muscle soreness"),
    )
    opportunities = (
        Finding(lambda inp: inp.score >= 80, "Fully recovered - ready for high intensity"),
        Finding(_in_wind_down, "Wind-down window open"),
    )
    placeholder = Placeholder(
        key="maintenance",
        title="Maintain Recovery Habits",
        description="Recovery within normal range",
        rationale="No recovery intervention required",
        reasoning="Recovery stable.",
    )

    def weight(self, inp: ExpertInput) -> float:
        weight = threshold_weight(inp.score, ((40, 0.50), (60, 0.40), (80, 0.30)), 0.25)
        if _hrv_declining(inp):
            weight += 0.10
        if _sleep_quality(inp) < 60:
            weight += 0.05
        return min(weight, 0.55)

    def handoffs(self, state: DomainState, context: Context) -> list[Handoff]:
        inp = self.view(state, context)
        out: list[Handoff] = []
        if _sleep_quality(inp) < 60:
            data = {"sleep_quality": _sleep_quality(inp)}
            out.append(Handoff(self.domain, "mindspace", "poor_sleep", data))
            out.append(Handoff(self.domain, "circadian", "poor_sleep", data))
        if _hrv_declining(inp):
            out.append(Handoff(self.domain, "performance", "hrv_declining"))
        if inp.score < 40 and not state.has("medical"):
            out.append(Handoff(self.domain, "medical", "persistent_issue", {"recovery": inp.score}))
        return out

    def constraints(self, inp: ExpertInput, primary: ActionCandidate) -> tuple[str, ...]:
        _ = primary
        tags: list[str] = []
        if inp.context.is_within_before_bed(DIGESTION_WINDOW_MINUTES):
            tags.append("digestive_load_risk")
        if inp.score < INJURY_SCORE_THRESHOLD or _hrv_declining(inp):
            tags.append("injury_risk")
        return tuple(tags)

    def revise(self, inp: ExpertInput, opinion: ExpertOpinion) -> ExpertOpinion:
        if not inp.context.is_within_before_bed(DIGESTION_WINDOW_MINUTES) or opinion.urgency >= 50:
            return opinion
        return ExpertOpinion(
            domain=opinion.domain,
            primary_action=opinion.primary_action,
            urgency=75,
            reasoning="Approaching sleep window. Digestion must be minimized for growth hormone release.",
            constraints=opinion.constraints,
            compromise_options=opinion.compromise_options,
        )

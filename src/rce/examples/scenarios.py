"""Example snapshots used by the worker loop, docs and tests."""

from __future__ import annotations


def red_day_example() -> dict[str, object]:
    """Late evening with recovery in the red."""
    return {
        "domains": {
            "recovery": {
                "score": 35,
                "signals": {"hrv_trend": "declining", "sleep_quality": 55, "sleep_hours": 5.5},
            },
            "fuel": {"score": 72, "signals": {"hydration_liters": 2.4}},
            "mindspace": {"score": 64, "signals": {"stress_level": 58}},
        },
        "profile": {"wake_time": "07:00", "bed_time": "23:00", "goals": ["longevity"]},
        "sessions": [],
        "captured_at": "2026-03-02T22:00:00",
    }


def late_training_example() -> dict[str, object]:
    """Training just finished, ninety minutes before bed."""
    return {
        "domains": {
            "fuel": {"score": 55, "signals": {"hydration_liters": 2.1, "hours_since_last_meal": 5}},
            "recovery": {"score": 70, "signals": {"hrv_trend": "stable", "sleep_quality": 82}},
            "performance": {"score": 78, "signals": {"acwr": 1.1}},
        },
        "profile": {"wake_time": "07:00", "bed_time": "22:30", "goals": ["muscle_gain"]},
        "sessions": [
            {
                "type": "strength",
                "time_of_day": "19:30",
                "completed": True,
                "intensity": "high",
                "duration_minutes": 60,
            }
        ],
        "captured_at": "2026-03-02T21:00:00",
    }


def afternoon_caffeine_example() -> dict[str, object]:
    """Afternoon after the stimulant cutoff with low hydration."""
    return {
        "domains": {
            "fuel": {"score": 62, "signals": {"hydration_liters": 1.1, "caffeine_mg": 250}},
            "mindspace": {"score": 58, "signals": {"stress_level": 72, "attentional_stability": 45}},
            "recovery": {"score": 81, "signals": {"sleep_quality": 78}},
        },
        "profile": {"wake_time": "07:30", "bed_time": "23:00", "goals": ["performance"]},
        "sessions": [],
        "captured_at": "2026-03-03T17:00:00",
    }


def morning_example() -> dict[str, object]:
    """Well-recovered morning with a competition later in the day."""
    return {
        "domains": {
            "fuel": {"score": 80, "signals": {"hydration_liters": 0.6}},
            "recovery": {"score": 88, "signals": {"hrv_trend": "stable", "sleep_quality": 85}},
            "performance": {"score": 84, "signals": {"acwr": 1.6}},
            "medical": {"score": 76, "signals": {"b12": 240, "crp": 1.2, "days_since_bloodwork": 40}},
        },
        "profile": {"wake_time": "06:30", "bed_time": "22:30", "goals": ["athlete"]},
        "sessions": [
            {"type": "competition", "time_of_day": "11:00", "intensity": "high", "duration_minutes": 90}
        ],
        "captured_at": "2026-03-04T07:15:00",
    }


def all_examples() -> list[dict[str, object]]:
    return [red_day_example(), late_training_example(), afternoon_caffeine_example(), morning_example()]

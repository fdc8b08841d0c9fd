"""
workout_analytics.py — Progression, volume & personal records
Pure aggregation over completed workouts (Workout -> exercises -> sets).
Callers fetch and filter by owner/status/date; this module only does arithmetic.
"""

import math
from datetime import date, timedelta

from services.habit_analytics import sunday_index, utc_today, ONE_DAY


def set_volume(s) -> float:
    return (s.reps or 0) * (s.weight or 0)


def estimate_1rm(weight: float, reps: int) -> float:
    """Epley formula. A single rep is already a max."""
    if not weight or not reps:
        return 0
    if reps == 1:
        return weight
    return weight * (1 + reps / 30)


def exercise_stats(exercise) -> dict:
    """Max weight/reps, volume and set count for one occurrence of an exercise."""
    sets = list(exercise.sets)
    max_weight = max((s.weight or 0 for s in sets), default=0)
    max_reps = max((s.reps or 0 for s in sets), default=0)
    return {
        "max_weight": max_weight,
        "max_reps": max_reps,
        "total_volume": sum(set_volume(s) for s in sets),
        "sets": len(sets),
    }


def week_key(d: date) -> str:
    """Year plus week-of-month bucket, offset by the weekday the month started on."""
    prev_month_end = d.replace(day=1) - ONE_DAY
    week = math.ceil((d.day + sunday_index(prev_month_end) + 1) / 7)
    return f"{d.year}-W{week}"


def _matches(name: str, wanted: str | None) -> bool:
    return wanted is None or name.lower() == wanted.lower()


def _chronological(workouts) -> list:
    return sorted(workouts, key=lambda w: w.date)


def progression(workouts, exercise_name: str | None = None, muscle_group: str | None = None) -> dict:
    """
    Per-exercise progression series, muscle-group volume split, per-workout
    volume trend and weekly volume totals.

    A muscle_group filter keeps whole workouts that contain at least one
    exercise tagged with that group.
    """
    exercise_progress: dict[str, list] = {}
    muscle_distribution: dict[str, float] = {}
    volume_trend = []
    weekly: dict[str, float] = {}

    for w in _chronological(workouts):
        if muscle_group and not any(e.muscle_group == muscle_group for e in w.exercises):
            continue

        workout_volume = 0
        for e in w.exercises:
            if not _matches(e.name, exercise_name):
                continue

            stats = exercise_stats(e)
            exercise_progress.setdefault(e.name, []).append({
                "date": w.date.isoformat(),
                **stats,
                "estimated_1rm": round(estimate_1rm(stats["max_weight"], stats["max_reps"]), 2),
            })
            workout_volume += stats["total_volume"]

            if e.muscle_group:
                muscle_distribution[e.muscle_group] = (
                    muscle_distribution.get(e.muscle_group, 0) + stats["total_volume"]
                )

        volume_trend.append({
            "date": w.date.isoformat(),
            "volume": workout_volume,
            "duration": w.duration or 0,
        })
        key = week_key(w.date)
        weekly[key] = weekly.get(key, 0) + workout_volume

    return {
        "exercise_progress": exercise_progress,
        "muscle_group_distribution": muscle_distribution,
        "volume_trend": volume_trend,
        "weekly_volume": [{"week": k, "volume": v} for k, v in weekly.items()],
    }


def personal_records(workouts, exercise_name: str | None = None) -> dict:
    """
    Best-ever weight, reps and volume per exercise with the date each was set.

    Every occurrence is recorded in exercise_history; an occurrence that ties
    or beats the stored best on a dimension takes over that record and is
    flagged under is_pr. The first occurrence only sets the baseline.
    """
    prs: dict[str, dict] = {}
    history: dict[str, list] = {}

    for w in _chronological(workouts):
        day = w.date.isoformat()
        for e in w.exercises:
            if not _matches(e.name, exercise_name):
                continue

            stats = exercise_stats(e)
            flags = {"weight": False, "reps": False, "volume": False}
            record = prs.get(e.name)

            if record is None:
                prs[e.name] = {
                    "max_weight": stats["max_weight"],
                    "max_weight_date": day,
                    "max_reps": stats["max_reps"],
                    "max_reps_date": day,
                    "max_volume": stats["total_volume"],
                    "max_volume_date": day,
                }
            else:
                for flag, field, value in (
                    ("weight", "max_weight", stats["max_weight"]),
                    ("reps", "max_reps", stats["max_reps"]),
                    ("volume", "max_volume", stats["total_volume"]),
                ):
                    if value >= record[field]:
                        record[field] = value
                        record[f"{field}_date"] = day
                        flags[flag] = True

            history.setdefault(e.name, []).append({"date": day, **stats, "is_pr": flags})

    return {"prs": prs, "exercise_history": history}


def summary(workouts, today: date | None = None) -> dict:
    """Totals plus this-week count and a consecutive-days workout streak."""
    today = today or utc_today()
    week_start = today - timedelta(days=sunday_index(today))
    workouts = list(workouts)

    streak = 0
    check = today
    for w in sorted(workouts, key=lambda w: w.date, reverse=True):
        if w.date == check:
            streak += 1
            check -= ONE_DAY
        elif w.date < check:
            break

    this_week = sum(1 for w in workouts if w.date >= week_start)
    return {
        "total_workouts": len(workouts),
        "this_week_workouts": this_week,
        "total_duration": sum(w.duration or 0 for w in workouts),
        "total_calories": sum(w.calories_burned or 0 for w in workouts),
        "streak": streak,
    }

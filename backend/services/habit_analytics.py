"""
habit_analytics.py — Streaks & completion analytics
Pure functions over a habit's completion records (anything with .date,
.completed and .value). Nothing here touches the database.
"""

from datetime import date, datetime, timezone, timedelta

HEATMAP_DAYS = 30
ONE_DAY = timedelta(days=1)


def utc_today() -> date:
    return datetime.now(timezone.utc).date()


def sunday_index(d: date) -> int:
    """Day of week with Sunday=0 ... Saturday=6."""
    return (d.weekday() + 1) % 7


def completed_dates(completions) -> list[date]:
    """Distinct completed days, most recent first."""
    return sorted({c.date for c in completions if c.completed}, reverse=True)


def current_streak(completions, today: date | None = None) -> int:
    """Count backward consecutive. 1 day grace period for today."""
    today = today or utc_today()
    days = [d for d in completed_dates(completions) if d <= today]
    if not days:
        return 0

    # The streak is alive only if the last completion is today or yesterday
    if days[0] not in (today, today - ONE_DAY):
        return 0

    streak = 1
    check = days[0] - ONE_DAY
    for d in days[1:]:
        if d != check:
            break
        streak += 1
        check -= ONE_DAY
    return streak


def longest_streak(completions) -> int:
    """Longest run of consecutive completed days over the whole history."""
    days = completed_dates(completions)
    if not days:
        return 0

    longest = run = 1
    for prev, curr in zip(days, days[1:]):
        if (prev - curr).days == 1:
            run += 1
        else:
            longest = max(longest, run)
            run = 1
    return max(longest, run)


def window_start(today: date, days: int, start_date: date | None = None) -> date:
    start = today - timedelta(days=days)
    if start_date and start_date > start:
        start = start_date
    return start


def completion_rate(completions, days: int = 30, start_date: date | None = None,
                    today: date | None = None) -> float:
    today = today or utc_today()
    start = window_start(today, days, start_date)
    elapsed = (today - start).days + 1
    if elapsed <= 0:
        return 0.0
    done = sum(1 for c in completions if c.completed and start <= c.date <= today)
    return round(done / elapsed * 100, 2)


def weekly_counts(completions, start: date, today: date) -> list[dict]:
    buckets = [{"day": i, "count": 0} for i in range(7)]
    for c in completions:
        if c.completed and start <= c.date <= today:
            buckets[sunday_index(c.date)]["count"] += 1
    return buckets


def heatmap(completions, today: date | None = None, length: int = HEATMAP_DAYS) -> list[dict]:
    """One entry per day for the trailing `length` days, oldest first."""
    today = today or utc_today()
    by_day = {c.date: c for c in completions if c.completed}
    cells = []
    for offset in range(length - 1, -1, -1):
        d = today - timedelta(days=offset)
        hit = by_day.get(d)
        cells.append({
            "date": d.isoformat(),
            "completed": hit is not None,
            "value": hit.value if hit is not None else None,
        })
    return cells


def analyze(completions, days: int = 30, start_date: date | None = None,
            today: date | None = None) -> dict:
    """Full analytics bundle for one habit."""
    today = today or utc_today()
    completions = list(completions)
    start = window_start(today, days, start_date)
    total = sum(1 for c in completions if c.completed and start <= c.date <= today)

    return {
        "completion_rate": completion_rate(completions, days, start_date, today),
        "current_streak": current_streak(completions, today),
        "longest_streak": longest_streak(completions),
        "total_completions": total,
        "weekly_data": weekly_counts(completions, start, today),
        "heatmap_data": heatmap(completions, today),
    }


def daily_summary(habits, target: date | None = None) -> dict:
    """Completed/missed counts for one day plus the best live streak across habits."""
    target = target or utc_today()
    completed_today = 0
    best_streak = 0

    for h in habits:
        if any(c.completed and c.date == target for c in h.completions):
            completed_today += 1
        best_streak = max(best_streak, current_streak(h.completions, target))

    total = len(habits)
    rate = completed_today / total * 100 if total else 0
    return {
        "date": target.isoformat(),
        "total_habits": total,
        "completed_today": completed_today,
        "missed_today": total - completed_today,
        "current_streak": best_streak,
        "completion_rate": round(rate, 2),
    }

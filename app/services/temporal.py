from __future__ import annotations

import calendar
import math
from datetime import date, datetime, timezone
from typing import Any, Dict, Optional


def _quarter_bounds(year: int, quarter: int) -> tuple[date, date]:
    start_month = (quarter - 1) * 3 + 1
    end_month = quarter * 3
    last_day = calendar.monthrange(year, end_month)[1]
    return date(year, start_month, 1), date(year, end_month, last_day)


def current_date_context(now: Optional[datetime] = None) -> Dict[str, Any]:
    """
    Temporal context for relative questions ("next quarter", "past few weeks").

    Calendar fields follow the local time of ``now``; ``current_datetime`` is
    always reported in UTC.
    """
    if now is None:
        now = datetime.now().astimezone()
    elif now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)

    year = now.year
    month = now.month
    quarter = math.ceil(month / 3)
    q_start, q_end = _quarter_bounds(year, quarter)

    next_quarter = 1 if quarter == 4 else quarter + 1
    next_year = year + 1 if quarter == 4 else year
    nq_start, nq_end = _quarter_bounds(next_year, next_quarter)

    jan1 = now.replace(month=1, day=1, hour=0, minute=0, second=0, microsecond=0)
    week_of_year = math.ceil((now - jan1).total_seconds() / (7 * 24 * 60 * 60))

    return {
        "current_date": now.date().isoformat(),
        "current_datetime": now.astimezone(timezone.utc).isoformat(),
        "current_year": year,
        "current_month": month,
        "current_quarter": f"Q{quarter} {year}",
        "current_quarter_start": q_start.isoformat(),
        "current_quarter_end": q_end.isoformat(),
        "next_quarter": f"Q{next_quarter} {next_year}",
        "next_quarter_start": nq_start.isoformat(),
        "next_quarter_end": nq_end.isoformat(),
        "timezone": now.tzname() or "UTC",
        "day_of_week": calendar.day_name[now.weekday()],
        "week_of_year": week_of_year,
    }

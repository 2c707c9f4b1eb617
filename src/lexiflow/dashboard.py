from datetime import date
from typing import Dict, List, Tuple

import pandas as pd

from .models import WordStats


def today_progress(stats: WordStats) -> Dict[str, int]:
    """Reviewed vs. still pending words for today, with the done percentage."""
    total = stats.today_review + stats.today_reviewed
    percent = round(stats.today_reviewed / total * 100) if total else 0
    return {
        "pending": stats.today_review,
        "reviewed": stats.today_reviewed,
        "percent": percent,
    }


def heatmap_series(counts: Dict[str, int], end: date) -> List[Tuple[str, int]]:
    """One (YYYY-MM-DD, count) pair per day over the year ending at end."""
    start = pd.Timestamp(end) - pd.DateOffset(years=1)
    days = pd.date_range(start=start, end=pd.Timestamp(end), freq="D")
    series = pd.Series(counts, dtype="int64").reindex(
        days.strftime("%Y-%m-%d"), fill_value=0
    )
    return [(day, int(count)) for day, count in series.items()]

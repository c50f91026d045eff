"""Grouping, aggregation and time-series helpers for dashboard charts."""

from datetime import datetime, timedelta
from typing import Any, Callable, Dict, Hashable, Iterable, List, Mapping, Optional, Sequence, TypeVar

from .dates import parse_datetime
from .guards import finite_or_zero, safe_divide
from .models import DateLike, TimeInterval

T = TypeVar("T")
K = TypeVar("K", bound=Hashable)


def group_by_field(records: Optional[Iterable[T]], key_of: Optional[Callable[[T], K]]) -> Dict[K, List[T]]:
    """Partition records by the key ``key_of`` extracts, keeping input order."""
    if records is None or key_of is None:
        return {}

    groups: Dict[K, List[T]] = {}
    for record in records:
        groups.setdefault(key_of(record), []).append(record)
    return groups


def aggregate_by_field(
    records: Optional[Iterable[T]],
    key_of: Optional[Callable[[T], K]],
    value_of: Optional[Callable[[T], Any]],
) -> List[Dict]:
    """Count, sum, average, min and max of ``value_of`` per group. Missing values count as 0."""
    if records is None or key_of is None or value_of is None:
        return []

    result = []
    for key, members in group_by_field(records, key_of).items():
        values = [_numeric(value_of(member)) for member in members]
        total = sum(values)
        count = len(values)
        result.append(
            {
                "key": key,
                "count": count,
                "sum": total,
                "average": safe_divide(total, count),
                "min": min(values) if values else 0.0,
                "max": max(values) if values else 0.0,
            }
        )
    return result


def bucket_time_series(
    records: Optional[Iterable[T]],
    date_of: Optional[Callable[[T], DateLike]],
    value_of: Optional[Callable[[T], Any]],
    interval: TimeInterval = TimeInterval.DAY,
) -> List[Dict]:
    """
    Bucket records by day, week, month or year of ``date_of``.

    Each bucket reports ``value`` as the total of its values and ``average``
    as the per-record mean, alongside ``count``, ``min`` and ``max``. Buckets
    come back sorted by their date key. Records whose date cannot be parsed
    are skipped without failing the whole series.
    """
    if records is None or date_of is None or value_of is None:
        return []

    interval = _coerce_interval(interval)
    buckets: Dict[str, List[float]] = {}
    for record in records:
        moment = parse_datetime(date_of(record))
        if moment is None:
            continue
        buckets.setdefault(bucket_key(moment, interval), []).append(_numeric(value_of(record)))

    return [
        {
            "date": key,
            "value": sum(values),
            "average": safe_divide(sum(values), len(values)),
            "count": len(values),
            "min": min(values),
            "max": max(values),
        }
        for key, values in sorted(buckets.items())
    ]


def bucket_key(moment: datetime, interval: TimeInterval = TimeInterval.DAY) -> str:
    """Return the bucket label for ``moment``; weeks start on Sunday."""
    if interval == TimeInterval.WEEK:
        # weekday() is 0 for Monday, so Sunday is 6 days after it.
        week_start = moment - timedelta(days=(moment.weekday() + 1) % 7)
        return week_start.strftime("%Y-%m-%d")
    if interval == TimeInterval.MONTH:
        return f"{moment.year:04d}-{moment.month:02d}"
    if interval == TimeInterval.YEAR:
        return f"{moment.year:04d}"
    return moment.strftime("%Y-%m-%d")


def compute_moving_average(
    series: Optional[Sequence[Mapping[str, Any]]],
    window_size: int = 7,
    value_of: Callable[[Mapping[str, Any]], Any] = lambda point: point.get("value"),
) -> List[Dict]:
    """
    Add a centred ``moving_average`` to copies of each point.

    The window spans ``window_size // 2`` points on each side and is clipped
    at both ends of the series, so edge points average over fewer values.
    """
    if not series:
        return []

    half_window = max(int(window_size), 1) // 2
    values = [_numeric(value_of(point)) for point in series]
    last_index = len(values) - 1

    result = []
    for index, point in enumerate(series):
        window_start = max(0, index - half_window)
        window_end = min(last_index, index + half_window)
        window = values[window_start : window_end + 1]
        result.append({**point, "moving_average": safe_divide(sum(window), len(window))})
    return result


def compute_funnel(
    stages: Optional[Sequence[str]],
    subjects: Optional[Sequence[T]],
    has_completed: Callable[[T, str], bool],
) -> List[Dict]:
    """
    Count how many subjects reach each stage and where they drop off.

    ``percentage`` is always relative to the total number of subjects. The
    first stage's drop-off is measured against that total; every later
    stage's drop-off is measured against the previous stage's count.
    """
    if stages is None or subjects is None:
        return []

    subject_list = list(subjects)
    total = len(subject_list)
    previous_count = total

    funnel = []
    for index, stage in enumerate(stages):
        count = sum(1 for subject in subject_list if has_completed(subject, stage))
        baseline = total if index == 0 else previous_count
        drop_off = baseline - count
        funnel.append(
            {
                "stage": stage,
                "count": count,
                "percentage": safe_divide(count, total) * 100,
                "drop_off_count": drop_off,
                "drop_off_percentage": safe_divide(drop_off, baseline) * 100,
            }
        )
        previous_count = count
    return funnel


def _coerce_interval(interval: Any) -> TimeInterval:
    try:
        return TimeInterval(interval)
    except ValueError:
        return TimeInterval.DAY


def _numeric(value: Any) -> float:
    if value is None or isinstance(value, bool):
        return 0.0
    return finite_or_zero(value)

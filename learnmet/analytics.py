"""Pure rate and score calculators that work on generic learning records."""

from dataclasses import asdict
from datetime import datetime, timedelta
from math import isnan
from typing import Callable, Dict, Iterable, Mapping, Optional, TypeVar

from .dates import parse_utc, to_utc, utc_now
from .guards import clamp, finite_or_zero, round_half_up, safe_divide
from .log import get_logger
from .models import (
    AssessmentResult,
    ComplianceItem,
    CompletionRecord,
    DateLike,
    EffectivenessWeights,
    EngagementMetrics,
    EngagementWeights,
)

logger = get_logger(__name__)

T = TypeVar("T")

# Fixed normalization maxima: a learner at or above the ceiling scores 100 for
# that category.
ENGAGEMENT_CEILINGS: Dict[str, float] = {
    "logins": 30,
    "page_views": 500,
    "time_spent": 1000,
    "interactions": 1000,
    "completed_activities": 50,
}

# Feedback is collected on a 1-5 scale.
FEEDBACK_SCALE_FACTOR = 20

SECONDS_PER_DAY = 24 * 60 * 60


def compute_completion_rate(completions: float, enrollments: float) -> float:
    """Percentage of enrollments that were completed; 0 when nobody enrolled."""
    if not enrollments:
        return 0.0
    return clamp(safe_divide(completions, enrollments) * 100, 0.0, 100.0)


def compute_compliance_rate(
    required: Optional[Iterable[ComplianceItem]],
    completed: Optional[Iterable[ComplianceItem]],
) -> Dict:
    """Share of required items that appear, by id, among the completed items."""
    if required is None or completed is None:
        return empty_compliance_rate()

    required_list = list(required)
    completed_ids = {item.id for item in completed}
    matched = sum(1 for item in required_list if item.id in completed_ids)
    total = len(required_list)

    return {
        "rate": safe_divide(matched, total) * 100,
        "completed": matched,
        "total": total,
    }


def compute_retention_rate(
    records: Optional[Iterable[T]],
    start_of: Callable[[T], DateLike],
    last_activity_of: Callable[[T], DateLike],
    window_days: float = 30,
    now: Optional[datetime] = None,
) -> Dict:
    """
    Compute retention among subjects tenured for at least ``window_days``.

    A subject is eligible once ``now - start >= window`` and retained when
    ``now - last_activity <= window``. ``now`` is read once per call and can be
    injected for reproducible results. Subjects with an unparsable start date
    are never eligible; an unparsable last activity is never retained.
    """
    if records is None:
        return empty_retention_rate()

    reference = to_utc(now) if now is not None else utc_now()
    window = timedelta(days=window_days)

    eligible = []
    for record in records:
        started = parse_utc(start_of(record))
        if started is not None and reference - started >= window:
            eligible.append(record)

    if not eligible:
        return empty_retention_rate()

    retained = 0
    for record in eligible:
        last_activity = parse_utc(last_activity_of(record))
        if last_activity is not None and reference - last_activity <= window:
            retained += 1

    return {
        "rate": safe_divide(retained, len(eligible)) * 100,
        "retained": retained,
        "total": len(eligible),
    }


def compute_engagement_score(
    metrics: Optional[EngagementMetrics],
    weights: EngagementWeights = EngagementWeights(),
) -> int:
    """
    Blend activity counters into a 0-100 engagement score.

    Each counter is divided by its ceiling in ``ENGAGEMENT_CEILINGS`` and capped
    at 1 before scaling to 100. Categories the caller did not measure (``None``)
    drop out, and the remaining weights are renormalized.
    """
    if metrics is None:
        return 0

    raw = {
        "logins": metrics.logins,
        "page_views": metrics.page_views,
        "time_spent": metrics.time_spent_minutes,
        "interactions": metrics.interactions,
        "completed_activities": metrics.completed_activities,
    }
    normalized = {
        category: _normalize_counter(value, ENGAGEMENT_CEILINGS[category])
        for category, value in raw.items()
        if value is not None
    }

    score = 0.0
    total_weight = 0.0
    for category, weight in asdict(weights).items():
        if category in normalized:
            score += normalized[category] * weight
            total_weight += weight

    return _round_score(safe_divide(score, total_weight))


def compute_learning_effectiveness(
    assessment_results: Optional[Iterable[AssessmentResult]],
    feedback_scores: Optional[Iterable[float]],
    weights: EffectivenessWeights = EffectivenessWeights(),
) -> int:
    """
    Combine assessment scores (0-100) with learner feedback (1-5) into 0-100.

    Feedback alone cannot produce a score: without assessments the result is 0.
    """
    results = list(assessment_results or [])
    if not results:
        return 0

    avg_assessment = safe_divide(sum(finite_or_zero(result.score) for result in results), len(results))

    feedback = [finite_or_zero(score) for score in (feedback_scores or [])]
    avg_feedback = safe_divide(sum(feedback), len(feedback)) * FEEDBACK_SCALE_FACTOR

    effectiveness = avg_assessment * weights.assessment + avg_feedback * weights.feedback
    return _round_score(effectiveness)


def compute_weighted_score(
    scores: Optional[Mapping[str, float]],
    weights: Optional[Mapping[str, float]],
) -> float:
    """Weighted mean over the categories present in both mappings."""
    if not scores or not weights:
        return 0.0

    weighted_sum = 0.0
    total_weight = 0.0
    for category, weight in weights.items():
        if category in scores:
            weighted_sum += finite_or_zero(scores[category]) * finite_or_zero(weight)
            total_weight += finite_or_zero(weight)

    return safe_divide(weighted_sum, total_weight)


def compute_average_completion_time(records: Optional[Iterable[CompletionRecord]]) -> Dict:
    """
    Average days from start to end over completion records.

    Records with unparsable dates or an end before the start are left out of
    the average and reported in ``flagged``.
    """
    if records is None:
        return {"average_days": 0.0, "counted": 0, "flagged": 0}

    total_days = 0.0
    counted = 0
    flagged = 0
    for record in records:
        start = parse_utc(record.start_date)
        end = parse_utc(record.end_date)
        if start is None or end is None or end < start:
            flagged += 1
            continue
        total_days += (end - start).total_seconds() / SECONDS_PER_DAY
        counted += 1

    if flagged:
        logger.warning("Skipped %d completion records with missing or inverted dates", flagged)

    return {
        "average_days": safe_divide(total_days, counted),
        "counted": counted,
        "flagged": flagged,
    }


def empty_compliance_rate() -> Dict:
    """Return the zero-valued compliance structure."""
    return {"rate": 0.0, "completed": 0, "total": 0}


def empty_retention_rate() -> Dict:
    """Return the zero-valued retention structure."""
    return {"rate": 0.0, "retained": 0, "total": 0}


def _normalize_counter(value: float, ceiling: float) -> float:
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if isnan(number) or number <= 0:
        return 0.0
    # Infinite counters saturate at the ceiling.
    return min(safe_divide(number, ceiling, default=1.0), 1.0) * 100


def _round_score(value: float) -> int:
    return int(round_half_up(clamp(value, 0.0, 100.0)))

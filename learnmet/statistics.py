"""Gap and statistical analysis over skill levels and score distributions."""

from math import exp, isfinite, pi, sqrt
from typing import Dict, Iterable, List, Optional, Sequence

from .guards import clamp, clamp_non_negative, finite_or_zero, safe_divide
from .models import SkillRecord, TimeSeriesPoint


def compute_skill_gap(
    required_skills: Optional[Iterable[SkillRecord]],
    actual_skills: Optional[Iterable[SkillRecord]],
) -> Dict:
    """
    Compare required proficiency against actual proficiency per skill id.

    Skills the subject does not have count as level 0. A skill above its
    target has a gap of 0, never a negative one.
    """
    if required_skills is None or actual_skills is None:
        return empty_skill_gap()

    actual_levels = {skill.id: finite_or_zero(skill.level) for skill in actual_skills}

    gaps = []
    for required in required_skills:
        required_level = finite_or_zero(required.level)
        actual_level = actual_levels.get(required.id, 0.0)
        gaps.append(
            {
                "skill_id": required.id,
                "skill_name": required.name,
                "required_level": required_level,
                "actual_level": actual_level,
                "gap": clamp_non_negative(required_level - actual_level),
            }
        )

    total_gap = sum(item["gap"] for item in gaps)
    return {
        "gaps": gaps,
        "total_gap": total_gap,
        "average_gap": safe_divide(total_gap, len(gaps)),
    }


def empty_skill_gap() -> Dict:
    return {"gaps": [], "total_gap": 0.0, "average_gap": 0.0}


def compute_correlation(x_values: Optional[Sequence[float]], y_values: Optional[Sequence[float]]) -> float:
    """
    Pearson correlation coefficient between two equally long series.

    Returns 0 for empty or mismatched series and when either series is
    constant (zero variance leaves the coefficient undefined).
    """
    if not x_values or not y_values or len(x_values) != len(y_values):
        return 0.0

    xs = _scaled_deviations(x_values)
    ys = _scaled_deviations(y_values)
    if xs is None or ys is None:
        return 0.0

    x_sum_squares = sum(dx * dx for dx in xs)
    y_sum_squares = sum(dy * dy for dy in ys)
    sum_products = sum(dx * dy for dx, dy in zip(xs, ys))

    coefficient = safe_divide(sum_products, sqrt(x_sum_squares * y_sum_squares))
    return clamp(coefficient, -1.0, 1.0)


def compute_percentile_rank(value: float, dataset: Optional[Iterable[float]]) -> float:
    """
    Share of the dataset strictly below ``value``, as a percentage.

    This is a rank-below percentile: the index of the first element that is
    greater than or equal to ``value`` divided by the dataset size. It does
    not interpolate between ranks. A value above every element ranks 100.
    """
    sorted_data = sorted(finite_or_zero(item) for item in (dataset or []))
    if not sorted_data:
        return 0.0

    target = finite_or_zero(value)
    for position, item in enumerate(sorted_data):
        if item >= target:
            return position / len(sorted_data) * 100
    return 100.0


def generate_normal_distribution(
    mean: float,
    standard_deviation: float,
    point_count: int = 100,
    range_multiplier: float = 3,
) -> List[TimeSeriesPoint]:
    """
    Sample the Gaussian PDF at evenly spaced points within ``mean +/- k * sd``.

    Returns no points when the range does not fit in a float.
    """
    mean = finite_or_zero(mean)
    sd = finite_or_zero(standard_deviation)
    if sd <= 0 or point_count <= 0:
        return []

    coefficient = finite_or_zero(1 / (sd * sqrt(2 * pi)))
    if point_count == 1:
        return [TimeSeriesPoint(x=mean, y=coefficient)]

    low = mean - sd * range_multiplier
    high = mean + sd * range_multiplier
    step = (high - low) / (point_count - 1)
    if not (isfinite(low) and isfinite(high) and isfinite(step)):
        return []

    points = []
    for index in range(point_count):
        x = low + step * index
        z = (x - mean) / sd
        points.append(TimeSeriesPoint(x=x, y=coefficient * exp(-0.5 * z * z)))
    return points


def _scaled_deviations(values: Sequence[float]) -> Optional[List[float]]:
    """Deviations from the mean divided by the largest one; ``None`` when all are 0 or out of range."""
    numbers = [finite_or_zero(value) for value in values]
    if min(numbers) == max(numbers):
        return None
    mean = sum(number / len(numbers) for number in numbers)
    deviations = [number - mean for number in numbers]
    scale = max(abs(deviation) for deviation in deviations)
    if scale == 0 or not isfinite(scale):
        return None
    return [deviation / scale for deviation in deviations]

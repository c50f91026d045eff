from math import isfinite, pi, sqrt

import pytest

from learnmet.models import SkillRecord
from learnmet.statistics import (
    compute_correlation,
    compute_percentile_rank,
    compute_skill_gap,
    generate_normal_distribution,
)


def test_skill_gap_basic():
    result = compute_skill_gap(
        [SkillRecord(id="a", name="SQL", level=4)],
        [SkillRecord(id="a", level=2)],
    )

    assert result == {
        "gaps": [
            {"skill_id": "a", "skill_name": "SQL", "required_level": 4, "actual_level": 2, "gap": 2}
        ],
        "total_gap": 2,
        "average_gap": 2,
    }


def test_skill_gap_never_negative_and_missing_skills_count_as_zero():
    result = compute_skill_gap(
        [
            SkillRecord(id="py", name="Python", level=3),
            SkillRecord(id="ml", name="ML", level=2),
        ],
        [SkillRecord(id="py", level=5)],
    )

    gaps = {item["skill_id"]: item["gap"] for item in result["gaps"]}
    assert gaps == {"py": 0, "ml": 2}
    assert result["total_gap"] == 2
    assert result["average_gap"] == 1


def test_skill_gap_without_required_skills():
    assert compute_skill_gap([], [SkillRecord(id="a", level=1)]) == {
        "gaps": [],
        "total_gap": 0,
        "average_gap": 0,
    }
    assert compute_skill_gap(None, [])["average_gap"] == 0


def test_correlation_self_and_inverse():
    series = [1, 2, 3, 5, 8]

    assert compute_correlation(series, series) == pytest.approx(1.0)
    assert compute_correlation(series, [-value for value in series]) == pytest.approx(-1.0)


def test_correlation_degenerate_inputs_return_zero():
    assert compute_correlation([1, 1, 1], [2, 2, 2]) == 0
    assert compute_correlation([], []) == 0
    assert compute_correlation([1, 2], [1, 2, 3]) == 0
    assert compute_correlation(None, [1]) == 0


def test_percentile_rank_counts_values_below():
    data = [10, 20, 30, 40]

    assert compute_percentile_rank(30, data) == 50
    assert compute_percentile_rank(25, data) == 50
    assert compute_percentile_rank(5, data) == 0
    assert compute_percentile_rank(41, data) == 100
    assert compute_percentile_rank(10, []) == 0


def test_normal_distribution_is_symmetric_and_peaks_at_mean():
    points = generate_normal_distribution(mean=50, standard_deviation=10, point_count=5, range_multiplier=2)

    assert [point.x for point in points] == [30, 40, 50, 60, 70]
    assert points[2].y == pytest.approx(1 / (10 * sqrt(2 * pi)))
    assert points[0].y == pytest.approx(points[4].y)
    assert points[1].y == pytest.approx(points[3].y)
    assert max(points, key=lambda point: point.y) is points[2]


def test_normal_distribution_degenerate_inputs():
    assert generate_normal_distribution(0, 0) == []
    assert generate_normal_distribution(0, -1) == []
    assert generate_normal_distribution(0, 1, point_count=0) == []

    single = generate_normal_distribution(3, 1, point_count=1)
    assert len(single) == 1
    assert single[0].x == 3
    assert all(isfinite(point.y) for point in generate_normal_distribution(0, 1))
    assert len(generate_normal_distribution(0, 1)) == 100


def test_correlation_of_very_large_values():
    assert compute_correlation([0.0, 1e200], [0.0, 1e200]) == pytest.approx(1.0)
    assert compute_correlation([0.0, 1e200, 5e199], [3.0, 1.0, 2.0]) == pytest.approx(-1.0)
    assert compute_correlation([-1.7e308, 1.7e308, 1.7e308], [1, 2, 3]) == 0


def test_normal_distribution_with_very_wide_spread():
    points = generate_normal_distribution(0, 1e200, point_count=3)

    assert [point.x for point in points] == pytest.approx([-3e200, 0, 3e200])
    assert all(isfinite(point.y) for point in points)
    assert points[1].y * 1e200 == pytest.approx(1 / sqrt(2 * pi))
    assert points[0].y == pytest.approx(points[2].y)
    assert 0 < points[0].y < points[1].y
    assert generate_normal_distribution(0, 1e308, point_count=3) == []

from datetime import datetime, timezone

import pytest

from learnmet.models import (
    CareerPathRecord,
    EngagementMetrics,
    EngagementRecord,
    EnrollmentRecord,
    EnrollmentStatus,
    PotentialPath,
    SkillAssessment,
    TrainingImpactSnapshot,
)
from learnmet.reports import (
    build_skill_gap_report,
    compute_career_path_stats,
    compute_course_completion_stats,
    compute_learner_metrics,
    compute_monthly_trends,
    compute_training_effectiveness,
    rank_engagement,
    summarize_enrollments,
    summarize_skill_levels,
    target_skill_levels,
)


def _enrollment(user_id, status, **kwargs):
    return EnrollmentRecord(user_id=user_id, course_id="c1", status=status, **kwargs)


def test_summarize_enrollments_status_breakdown():
    enrollments = [
        _enrollment("u1", EnrollmentStatus.COMPLETED),
        _enrollment("u2", EnrollmentStatus.IN_PROGRESS),
        _enrollment("u3", "Not Started"),
    ]

    assert summarize_enrollments(enrollments) == {
        "total": 3,
        "completed": 1,
        "in_progress": 1,
        "not_started": 1,
        "completion_rate": 33,
    }
    assert summarize_enrollments(None)["completion_rate"] == 0


def test_course_completion_stats():
    enrollments = [
        _enrollment(
            "u1",
            EnrollmentStatus.COMPLETED,
            enrolled_at=datetime(2026, 1, 1),
            updated_at=datetime(2026, 1, 4, 12),
            department="Engineering",
            completed_module_ids=("m1", "m2"),
        ),
        _enrollment(
            "u2",
            EnrollmentStatus.COMPLETED,
            enrolled_at=datetime(2026, 1, 1),
            updated_at=datetime(2026, 1, 3),
            department="Engineering",
            completed_module_ids=("m1", "m2", "unknown"),
        ),
        _enrollment("u3", EnrollmentStatus.IN_PROGRESS, department="Sales", completed_module_ids=("m1",)),
        _enrollment("u4", EnrollmentStatus.NOT_STARTED),
    ]

    stats = compute_course_completion_stats(enrollments, ["m1", "m2", "m3"])

    assert stats["enrollment_stats"]["completion_rate"] == 50
    # 4 days (3.5 rounded up) and 2 days.
    assert stats["average_completion_days"] == 3
    assert stats["flagged_completions"] == 0
    assert stats["department_breakdown"] == [
        {"department": "Engineering", "enrollments": 2, "completed": 2, "completion_rate": 100},
        {"department": "Sales", "enrollments": 1, "completed": 0, "completion_rate": 0},
    ]
    assert stats["module_completion"] == [
        {"module_id": "m1", "completions": 3, "completion_rate": 75},
        {"module_id": "m2", "completions": 2, "completion_rate": 50},
        {"module_id": "m3", "completions": 0, "completion_rate": 0},
    ]


def test_course_completion_stats_flags_inverted_and_missing_dates(caplog):
    enrollments = [
        _enrollment(
            "u1",
            EnrollmentStatus.COMPLETED,
            enrolled_at=datetime(2026, 1, 10),
            updated_at=datetime(2026, 1, 1),
        ),
        _enrollment("u2", EnrollmentStatus.COMPLETED, enrolled_at=datetime(2026, 1, 1)),
        _enrollment(
            "u3",
            EnrollmentStatus.COMPLETED,
            enrolled_at=datetime(2026, 1, 1),
            updated_at=datetime(2026, 1, 3),
        ),
    ]

    with caplog.at_level("WARNING", logger="learnmet.reports"):
        stats = compute_course_completion_stats(enrollments, [])

    assert stats["average_completion_days"] == 2
    assert stats["flagged_completions"] == 2
    assert "2 enrollments with missing or inverted dates" in caplog.text

    only_inverted = compute_course_completion_stats(enrollments[:1], [])
    assert only_inverted["average_completion_days"] is None
    assert only_inverted["flagged_completions"] == 1


def test_course_completion_stats_without_completions():
    stats = compute_course_completion_stats([], [])

    assert stats["average_completion_days"] is None
    assert stats["module_completion"] == []
    assert stats["enrollment_stats"]["total"] == 0


def test_learner_metrics_counts_partial_progress():
    enrollments = [
        _enrollment("u1", EnrollmentStatus.COMPLETED, course_duration_minutes=120, course_category="Data"),
        _enrollment(
            "u1", EnrollmentStatus.IN_PROGRESS, course_duration_minutes=60, progress_percentage=50
        ),
        _enrollment("u1", EnrollmentStatus.NOT_STARTED, course_duration_minutes=600),
    ]

    metrics = compute_learner_metrics(enrollments)

    assert metrics["learning_time"] == {"total_minutes": 150, "total_hours": 2.5}
    assert metrics["category_distribution"] == [{"category": "Data", "count": 1}]
    assert metrics["enrollment_stats"]["completed"] == 1


def test_monthly_trends_cover_trailing_months_oldest_first():
    now = datetime(2026, 2, 15, tzinfo=timezone.utc)
    enrollments = [
        _enrollment("u1", EnrollmentStatus.COMPLETED, enrolled_at=datetime(2025, 12, 5), updated_at=datetime(2026, 2, 1)),
        _enrollment("u2", EnrollmentStatus.IN_PROGRESS, enrolled_at=datetime(2026, 2, 10), updated_at=datetime(2026, 2, 11)),
        _enrollment("u3", EnrollmentStatus.NOT_STARTED, enrolled_at=datetime(2025, 6, 1)),
    ]

    trends = compute_monthly_trends(enrollments, months=3, now=now)

    assert trends == [
        {"month": "2025-12", "enrollments": 1, "completions": 0},
        {"month": "2026-01", "enrollments": 0, "completions": 0},
        {"month": "2026-02", "enrollments": 1, "completions": 1},
    ]
    assert compute_monthly_trends(enrollments, months=0, now=now) == []


def test_training_effectiveness_factors():
    snapshot = TrainingImpactSnapshot(
        average_skills_per_employee=2.5,
        performance_correlation="Positive",
        high_training_group=5,
        medium_training_group=3,
        low_training_group=2,
    )

    result = compute_training_effectiveness(snapshot)

    # 20 (skills) + 30 (positive) + 30 (half the staff in high training).
    assert result["effectiveness_score"] == 80
    # 0.5 * 10 + 0.3 * 5
    assert result["engagement_score"] == pytest.approx(6.5)


def test_training_effectiveness_with_empty_groups():
    snapshot = TrainingImpactSnapshot(
        average_skills_per_employee=10,
        performance_correlation="Neutral",
        high_training_group=0,
        medium_training_group=0,
        low_training_group=0,
    )

    assert compute_training_effectiveness(snapshot) == {"effectiveness_score": 55, "engagement_score": 0}
    assert compute_training_effectiveness(None) == {"effectiveness_score": 0, "engagement_score": 0}


def test_skill_levels_and_targets():
    assessments = [
        SkillAssessment("e1", "SQL", 2, assessed_at=datetime(2025, 10, 1), skill_category="Technical"),
        SkillAssessment("e2", "SQL", 4, assessed_at=datetime(2026, 2, 1), skill_category="Technical"),
        SkillAssessment("e1", "Negotiation", 3, assessed_at=datetime(2026, 2, 1), skill_category="Communication"),
        SkillAssessment("e2", "Mentoring", 1),
    ]

    levels = summarize_skill_levels(assessments, previous_before=datetime(2025, 12, 31))

    assert levels["current"] == {"SQL": 3, "Negotiation": 3, "Mentoring": 1}
    assert levels["previous"] == {"SQL": 2}
    assert levels["categories"]["Mentoring"] == "General"

    assert target_skill_levels(levels["categories"]) == {"SQL": 4, "Negotiation": 3, "Mentoring": 3}
    assert target_skill_levels(levels["categories"], department="Sales")["Negotiation"] == 4.5
    assert target_skill_levels({"Go": "Technical"}, department="Engineering") == {"Go": 4.5}


def test_skill_gap_report_sorts_and_summarizes():
    report = build_skill_gap_report(
        current={"SQL": 2, "Python": 5, "Excel": 1},
        target={"SQL": 4, "Python": 4, "Excel": 3.5},
        previous={"SQL": 1, "Python": 5},
        categories={"SQL": "Technical", "Python": "Technical"},
    )

    assert [row["skill"] for row in report["rows"]] == ["Excel", "SQL", "Python"]
    assert report["rows"][2]["gap"] == 0
    assert report["stats"]["total_skills"] == 3
    assert report["stats"]["skills_with_gap"] == 2
    assert report["stats"]["average_gap"] == 1.5
    # SQL and Excel improved on their previous levels.
    assert report["stats"]["improvement_rate"] == 67
    assert [row["skill"] for row in report["stats"]["no_gap_skills"]] == ["Python"]
    assert report["categories"] == ["Technical", "Uncategorized"]


def test_skill_gap_report_category_filter_and_no_previous():
    report = build_skill_gap_report(
        current={"SQL": 2},
        target={"SQL": 4, "Excel": 3},
        categories={"SQL": "Technical"},
        category="Technical",
    )

    assert [row["skill"] for row in report["rows"]] == ["SQL"]
    assert report["stats"]["improvement_rate"] is None
    assert build_skill_gap_report(None, None)["stats"]["average_gap"] == 0


def test_career_path_stats_picks_most_common_top_role():
    paths = [
        CareerPathRecord(
            "e1",
            2.0,
            (PotentialPath("Lead", 0.9), PotentialPath("Manager", 0.7)),
        ),
        CareerPathRecord("e2", 4.0, (PotentialPath("Manager", 0.8),)),
        CareerPathRecord("e3", 0.0, (PotentialPath("Lead", 0.95), PotentialPath("Architect", 0.95))),
        CareerPathRecord("e4", 2.0),
    ]

    stats = compute_career_path_stats(paths)

    assert stats["employee_count"] == 4
    assert stats["average_paths"] == 1.25
    assert stats["average_gap_score"] == 2
    assert stats["most_common_next_role"] == "Lead"
    assert compute_career_path_stats([]) == {
        "employee_count": 0,
        "average_paths": 0,
        "average_gap_score": 0,
        "most_common_next_role": None,
    }


def test_rank_engagement_shares_ranks_on_ties():
    entries = [
        EngagementRecord("low", EngagementMetrics(logins=3)),
        EngagementRecord("top", EngagementMetrics(logins=30, page_views=500, time_spent_minutes=1000, interactions=1000, completed_activities=50)),
        EngagementRecord("mid-a", EngagementMetrics(logins=30)),
        EngagementRecord("mid-b", EngagementMetrics(logins=30), department="Sales"),
    ]

    board = rank_engagement(entries, limit=3)

    assert [(row["rank"], row["user_id"], row["score"]) for row in board] == [
        (1, "top", 100),
        (2, "mid-a", 20),
        (2, "mid-b", 20),
    ]
    assert board[2]["department"] == "Sales"
    assert rank_engagement(None) == []

"""Application service orchestrating repositories and pure analytics."""

from datetime import datetime, timedelta
from typing import Dict, List, Optional

from .analytics import compute_learning_effectiveness, compute_retention_rate
from .config import Settings, get_settings
from .dates import to_utc, utc_now
from .errors import InvalidPeriodError
from .log import get_logger
from .models import AssessmentResult, EnrollmentStatus, TimeInterval
from .ports import LearningRecordsRepository
from .reports import (
    build_skill_gap_report,
    compute_career_path_stats,
    compute_course_completion_stats,
    compute_department_stats,
    compute_learner_metrics,
    compute_monthly_trends,
    compute_training_effectiveness,
    rank_engagement,
    summarize_enrollments,
    summarize_skill_levels,
    target_skill_levels,
)
from .series import aggregate_by_field, bucket_time_series, compute_moving_average
from .statistics import compute_correlation

logger = get_logger(__name__)


class LearningAnalyticsService:
    """Facade service that exposes dashboard metrics independent of web frameworks."""

    def __init__(self, repo: LearningRecordsRepository, settings: Optional[Settings] = None):
        self.repo = repo
        self.settings = settings or get_settings()

    def get_course_completion_stats(
        self,
        course_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Dict:
        start, end = self._normalize_period(start_date, end_date)
        enrollments = self.repo.fetch_enrollments(start, end, course_id=course_id)
        module_ids = self.repo.fetch_course_module_ids(course_id)
        logger.debug("Course %s: %d enrollments, %d modules", course_id, len(enrollments), len(module_ids))

        stats = compute_course_completion_stats(enrollments, module_ids)
        stats["course_id"] = course_id
        stats["period"] = _period(start, end)
        return stats

    def get_learner_metrics(
        self,
        user_id: str,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Dict:
        start, end = self._normalize_period(start_date, end_date)
        enrollments = self.repo.fetch_enrollments(start, end, user_id=user_id)
        metrics = compute_learner_metrics(enrollments)
        metrics["user_id"] = user_id
        metrics["period"] = _period(start, end)
        return metrics

    def get_overall_analytics(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        department: Optional[str] = None,
    ) -> Dict:
        start, end = self._normalize_period(start_date, end_date)
        enrollments = self.repo.fetch_enrollments(start, end, department=department)

        categories = aggregate_by_field(
            enrollments,
            lambda record: record.course_category or "Uncategorized",
            lambda record: 1 if record.status == EnrollmentStatus.COMPLETED else 0,
        )
        return {
            "period": _period(start, end),
            "enrollment_stats": summarize_enrollments(enrollments),
            "department_stats": compute_department_stats(enrollments),
            "category_distribution": [
                {"category": bucket["key"], "enrollments": bucket["count"], "completions": bucket["sum"]}
                for bucket in categories
            ],
            "monthly_trends": compute_monthly_trends(
                enrollments, months=self.settings.trend_months, now=end
            ),
        }

    def get_enrollment_trend(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        interval: TimeInterval = TimeInterval.DAY,
        window_size: int = 7,
    ) -> List[Dict]:
        """New enrollments per bucket with a centred moving average."""
        start, end = self._normalize_period(start_date, end_date)
        enrollments = self.repo.fetch_enrollments(start, end)
        series = bucket_time_series(enrollments, lambda record: record.enrolled_at, lambda _: 1, interval)
        return compute_moving_average(series, window_size=window_size)

    def get_retention(
        self,
        department: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> Dict:
        activity = self.repo.fetch_learner_activity(department=department)
        return compute_retention_rate(
            activity,
            lambda record: record.first_enrolled_at,
            lambda record: record.last_active_at,
            window_days=self.settings.retention_window_days,
            now=now,
        )

    def get_engagement_leaderboard(
        self,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        department: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> List[Dict]:
        start, end = self._normalize_period(start_date, end_date)
        entries = self.repo.fetch_engagement(start, end, department=department)
        size = self.settings.leaderboard_size if limit is None else limit
        return rank_engagement(entries, limit=size)

    def get_skill_gap_analysis(
        self,
        department: Optional[str] = None,
        previous_before: Optional[datetime] = None,
        category: Optional[str] = None,
    ) -> Dict:
        assessments = self.repo.fetch_skill_assessments(department=department)
        levels = summarize_skill_levels(assessments, previous_before=previous_before)
        targets = target_skill_levels(levels["categories"], department=department)
        report = build_skill_gap_report(
            levels["current"],
            targets,
            previous=levels["previous"] if previous_before is not None else None,
            categories=levels["categories"],
            category=category,
        )
        report["target_levels"] = targets
        return report

    def get_training_effectiveness(self, department: Optional[str] = None) -> Dict:
        """Effectiveness and engagement scores from the latest training impact snapshot."""
        snapshot = self.repo.fetch_training_impact(department=department)
        if snapshot is None:
            logger.debug("No training impact snapshot for department %s", department)
        result = compute_training_effectiveness(snapshot)
        result["department"] = department
        return result

    def get_career_path_stats(self, department: Optional[str] = None) -> Dict:
        paths = self.repo.fetch_career_paths(department=department)
        stats = compute_career_path_stats(paths)
        stats["department"] = department
        return stats

    def get_learning_effectiveness(
        self,
        course_id: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
    ) -> Dict:
        start, end = self._normalize_period(start_date, end_date)
        assessments = self.repo.fetch_learner_assessments(start, end, course_id=course_id)

        scores = [AssessmentResult(score=record.score) for record in assessments]
        feedback = [record.feedback_score for record in assessments if record.feedback_score is not None]
        paired = [(record.score, record.feedback_score) for record in assessments if record.feedback_score is not None]

        return {
            "period": _period(start, end),
            "effectiveness_score": compute_learning_effectiveness(scores, feedback),
            "assessment_count": len(scores),
            "feedback_count": len(feedback),
            "score_feedback_correlation": compute_correlation(
                [score for score, _ in paired], [rating for _, rating in paired]
            ),
        }

    def _normalize_period(
        self,
        start_date: Optional[datetime],
        end_date: Optional[datetime],
    ) -> tuple[datetime, datetime]:
        end = to_utc(end_date) if end_date is not None else utc_now()
        start = to_utc(start_date) if start_date is not None else end - timedelta(days=self.settings.default_period_days)
        if start > end:
            raise InvalidPeriodError(f"Period start {start.isoformat()} is after end {end.isoformat()}")
        return start, end


def _period(start: datetime, end: datetime) -> Dict:
    return {"start": start.isoformat(), "end": end.isoformat()}

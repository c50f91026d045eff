"""SQLAlchemy repository adapter for LearnMet."""

from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..dates import parse_datetime
from ..errors import RepositoryError
from ..log import get_logger
from ..models import (
    CareerPathRecord,
    EngagementMetrics,
    EngagementRecord,
    EnrollmentRecord,
    EnrollmentStatus,
    LearnerActivity,
    LearnerAssessment,
    PotentialPath,
    SkillAssessment,
    TrainingImpactSnapshot,
)

logger = get_logger(__name__)


class SQLAlchemyLearningRepository:
    """Fetches raw LMS rows from relational tables and maps them to domain models."""

    def __init__(self, db: Session):
        self.db = db

    def fetch_enrollments(
        self,
        start_date: datetime,
        end_date: datetime,
        course_id: Optional[str] = None,
        user_id: Optional[str] = None,
        department: Optional[str] = None,
    ) -> Sequence[EnrollmentRecord]:
        filters, params = _optional_filters(
            {"e.course_id": course_id, "e.user_id": user_id, "e.department": department}
        )
        params.update({"start_date": start_date, "end_date": end_date})
        where = " AND ".join(
            ["COALESCE(e.updated_at, e.enrolled_at) >= :start_date", "e.enrolled_at <= :end_date", *filters]
        )

        rows = self._fetch(
            f"""
            SELECT e.user_id, e.course_id, e.status, e.enrolled_at, e.updated_at,
                   e.progress_percentage, e.department, e.course_category,
                   e.course_duration_minutes
            FROM enrollments e
            WHERE {where}
            """,
            params,
        )
        module_rows = self._fetch(
            f"""
            SELECT cm.user_id, cm.course_id, cm.module_id
            FROM completed_modules cm
            JOIN enrollments e ON e.user_id = cm.user_id AND e.course_id = cm.course_id
            WHERE {where}
            """,
            params,
        )

        completed_modules: Dict[Tuple[str, str], List[str]] = {}
        for row in module_rows:
            completed_modules.setdefault((str(row.user_id), str(row.course_id)), []).append(str(row.module_id))

        return [
            EnrollmentRecord(
                user_id=str(row.user_id),
                course_id=str(row.course_id),
                status=_parse_status(row.status),
                enrolled_at=parse_datetime(row.enrolled_at),
                updated_at=parse_datetime(row.updated_at),
                progress_percentage=float(row.progress_percentage or 0),
                department=row.department,
                course_category=row.course_category,
                course_duration_minutes=row.course_duration_minutes,
                completed_module_ids=tuple(completed_modules.get((str(row.user_id), str(row.course_id)), [])),
            )
            for row in rows
        ]

    def fetch_course_module_ids(self, course_id: str) -> Sequence[str]:
        rows = self._fetch(
            """
            SELECT module_id
            FROM course_modules
            WHERE course_id = :course_id
            ORDER BY position
            """,
            {"course_id": course_id},
        )
        return [str(row.module_id) for row in rows]

    def fetch_engagement(
        self,
        start_date: datetime,
        end_date: datetime,
        department: Optional[str] = None,
    ) -> Sequence[EngagementRecord]:
        filters, params = _optional_filters({"department": department})
        params.update({"start_date": start_date, "end_date": end_date})
        where = " AND ".join(["recorded_at >= :start_date", "recorded_at <= :end_date", *filters])

        rows = self._fetch(
            f"""
            SELECT user_id, department,
                   SUM(logins) AS logins,
                   SUM(page_views) AS page_views,
                   SUM(time_spent_minutes) AS time_spent_minutes,
                   SUM(interactions) AS interactions,
                   SUM(completed_activities) AS completed_activities
            FROM engagement_stats
            WHERE {where}
            GROUP BY user_id, department
            """,
            params,
        )
        return [
            EngagementRecord(
                user_id=str(row.user_id),
                department=row.department,
                metrics=EngagementMetrics(
                    logins=row.logins,
                    page_views=row.page_views,
                    time_spent_minutes=row.time_spent_minutes,
                    interactions=row.interactions,
                    completed_activities=row.completed_activities,
                ),
            )
            for row in rows
        ]

    def fetch_learner_activity(self, department: Optional[str] = None) -> Sequence[LearnerActivity]:
        filters, params = _optional_filters({"department": department})
        where = f"WHERE {' AND '.join(filters)}" if filters else ""

        rows = self._fetch(
            f"""
            SELECT user_id, department,
                   MIN(enrolled_at) AS first_enrolled_at,
                   MAX(COALESCE(updated_at, enrolled_at)) AS last_active_at
            FROM enrollments
            {where}
            GROUP BY user_id, department
            """,
            params,
        )
        return [
            LearnerActivity(
                user_id=str(row.user_id),
                department=row.department,
                first_enrolled_at=parse_datetime(row.first_enrolled_at),
                last_active_at=parse_datetime(row.last_active_at),
            )
            for row in rows
        ]

    def fetch_skill_assessments(self, department: Optional[str] = None) -> Sequence[SkillAssessment]:
        filters, params = _optional_filters({"department": department})
        where = f"WHERE {' AND '.join(filters)}" if filters else ""

        rows = self._fetch(
            f"""
            SELECT employee_id, skill_name, skill_category, proficiency_level, assessed_at
            FROM skill_assessments
            {where}
            """,
            params,
        )
        return [
            SkillAssessment(
                employee_id=str(row.employee_id),
                skill_name=row.skill_name,
                skill_category=row.skill_category,
                proficiency_level=float(row.proficiency_level or 0),
                assessed_at=parse_datetime(row.assessed_at),
            )
            for row in rows
        ]

    def fetch_learner_assessments(
        self,
        start_date: datetime,
        end_date: datetime,
        course_id: Optional[str] = None,
    ) -> Sequence[LearnerAssessment]:
        filters, params = _optional_filters({"course_id": course_id})
        params.update({"start_date": start_date, "end_date": end_date})
        where = " AND ".join(["assessed_at >= :start_date", "assessed_at <= :end_date", *filters])

        rows = self._fetch(
            f"""
            SELECT user_id, course_id, score, feedback_score, assessed_at
            FROM learner_assessments
            WHERE {where}
            """,
            params,
        )
        return [
            LearnerAssessment(
                user_id=str(row.user_id),
                course_id=str(row.course_id),
                score=float(row.score or 0),
                feedback_score=float(row.feedback_score) if row.feedback_score is not None else None,
                assessed_at=parse_datetime(row.assessed_at),
            )
            for row in rows
        ]

    def fetch_training_impact(self, department: Optional[str] = None) -> Optional[TrainingImpactSnapshot]:
        filters, params = _optional_filters({"department": department})
        where = f"WHERE {' AND '.join(filters)}" if filters else ""

        rows = self._fetch(
            f"""
            SELECT average_skills_per_employee, performance_correlation,
                   high_training_group, medium_training_group, low_training_group
            FROM training_impact
            {where}
            ORDER BY recorded_at DESC
            LIMIT 1
            """,
            params,
        )
        if not rows:
            return None

        row = rows[0]
        return TrainingImpactSnapshot(
            average_skills_per_employee=float(row.average_skills_per_employee or 0),
            performance_correlation=row.performance_correlation or "",
            high_training_group=int(row.high_training_group or 0),
            medium_training_group=int(row.medium_training_group or 0),
            low_training_group=int(row.low_training_group or 0),
        )

    def fetch_career_paths(self, department: Optional[str] = None) -> Sequence[CareerPathRecord]:
        filters, params = _optional_filters({"cp.department": department})
        where = f"WHERE {' AND '.join(filters)}" if filters else ""

        rows = self._fetch(
            f"""
            SELECT cp.employee_id, cp.skill_gap_score
            FROM career_paths cp
            {where}
            """,
            params,
        )
        option_rows = self._fetch(
            f"""
            SELECT po.employee_id, po.role, po.match_score
            FROM career_path_options po
            JOIN career_paths cp ON cp.employee_id = po.employee_id
            {where}
            ORDER BY po.employee_id, po.position
            """,
            params,
        )

        options: Dict[str, List[PotentialPath]] = {}
        for row in option_rows:
            options.setdefault(str(row.employee_id), []).append(
                PotentialPath(role=row.role, match_score=float(row.match_score or 0))
            )

        return [
            CareerPathRecord(
                employee_id=str(row.employee_id),
                skill_gap_score=float(row.skill_gap_score or 0),
                potential_paths=tuple(options.get(str(row.employee_id), [])),
            )
            for row in rows
        ]

    def _fetch(self, sql: str, params: Dict[str, Any]) -> list:
        try:
            return self.db.execute(text(sql), params).fetchall()
        except SQLAlchemyError as exc:
            logger.error("Query failed: %s", exc)
            raise RepositoryError("Failed to read learning records") from exc


def _optional_filters(values: Dict[str, Any]) -> Tuple[List[str], Dict[str, Any]]:
    """Build ``column = :param`` clauses for the values that are set."""
    clauses = []
    params: Dict[str, Any] = {}
    for column, value in values.items():
        if value is None:
            continue
        name = column.rsplit(".", 1)[-1]
        clauses.append(f"{column} = :{name}")
        params[name] = value
    return clauses, params


def _parse_status(raw_status) -> EnrollmentStatus:
    try:
        return EnrollmentStatus(raw_status)
    except ValueError:
        return EnrollmentStatus.NOT_STARTED

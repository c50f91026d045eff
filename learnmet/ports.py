"""Port definitions for fetching learning records from any source."""

from datetime import datetime
from typing import Optional, Protocol, Sequence

from .models import (
    CareerPathRecord,
    EngagementRecord,
    EnrollmentRecord,
    LearnerActivity,
    LearnerAssessment,
    SkillAssessment,
    TrainingImpactSnapshot,
)


class LearningRecordsRepository(Protocol):
    """Repository interface that adapters can implement for any backend."""

    def fetch_enrollments(
        self,
        start_date: datetime,
        end_date: datetime,
        course_id: Optional[str] = None,
        user_id: Optional[str] = None,
        department: Optional[str] = None,
    ) -> Sequence[EnrollmentRecord]:
        """Return enrollments created or updated within a period."""

    def fetch_course_module_ids(self, course_id: str) -> Sequence[str]:
        """Return the ids of a course's modules in course order."""

    def fetch_engagement(
        self,
        start_date: datetime,
        end_date: datetime,
        department: Optional[str] = None,
    ) -> Sequence[EngagementRecord]:
        """Return per-learner engagement counters for a period."""

    def fetch_learner_activity(self, department: Optional[str] = None) -> Sequence[LearnerActivity]:
        """Return first-enrollment and last-activity timestamps per learner."""

    def fetch_skill_assessments(self, department: Optional[str] = None) -> Sequence[SkillAssessment]:
        """Return the latest skill proficiency assessments."""

    def fetch_learner_assessments(
        self,
        start_date: datetime,
        end_date: datetime,
        course_id: Optional[str] = None,
    ) -> Sequence[LearnerAssessment]:
        """Return assessment scores and course feedback for a period."""

    def fetch_training_impact(self, department: Optional[str] = None) -> Optional[TrainingImpactSnapshot]:
        """Return the most recent training impact snapshot, or ``None`` when there is none."""

    def fetch_career_paths(self, department: Optional[str] = None) -> Sequence[CareerPathRecord]:
        """Return each employee's skill gap score and potential next roles."""

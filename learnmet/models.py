"""Core domain models used by the analytics engine."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Hashable, Optional, Sequence, Tuple, Union

DateLike = Union[datetime, str, None]


class TimeInterval(str, Enum):
    """Bucket width for time-series aggregation."""

    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class ColorScheme(str, Enum):
    """Palette generation strategies for chart colors."""

    SEQUENTIAL = "sequential"
    DIVERGING = "diverging"
    RANDOM = "random"


class EnrollmentStatus(str, Enum):
    NOT_STARTED = "Not Started"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"


@dataclass(frozen=True)
class EngagementMetrics:
    """
    Raw activity counters for one learner.

    A ``None`` field means the counter was not measured; that category is then
    left out of the weighted engagement score instead of counting as zero.
    """

    logins: Optional[float] = 0
    page_views: Optional[float] = 0
    time_spent_minutes: Optional[float] = 0
    interactions: Optional[float] = 0
    completed_activities: Optional[float] = 0


@dataclass(frozen=True)
class EngagementWeights:
    """Relative weight of each engagement category. Weights need not sum to 1."""

    logins: float = 0.2
    page_views: float = 0.1
    time_spent: float = 0.3
    interactions: float = 0.2
    completed_activities: float = 0.2


@dataclass(frozen=True)
class EffectivenessWeights:
    """Weights applied to assessment and feedback averages."""

    assessment: float = 0.7
    feedback: float = 0.3


@dataclass(frozen=True)
class SkillRecord:
    """A skill at a proficiency level (0-5). ``name`` is optional for actual skills."""

    id: Hashable
    level: Optional[float]
    name: Optional[str] = None


@dataclass(frozen=True)
class AssessmentResult:
    score: float


@dataclass(frozen=True)
class CompletionRecord:
    start_date: DateLike
    end_date: DateLike


@dataclass(frozen=True)
class ComplianceItem:
    id: Hashable


@dataclass(frozen=True)
class TimeSeriesPoint:
    x: float
    y: float


@dataclass(frozen=True)
class SkillScore:
    """A named score plotted on one radar chart axis."""

    name: str
    score: Optional[float]


@dataclass(frozen=True)
class RadarChartOptions:
    levels: Tuple[float, ...] = (0, 20, 40, 60, 80, 100)
    max_value: float = 100


@dataclass(frozen=True)
class EnrollmentRecord:
    """A learner's enrollment in a course, flattened with the course facts reports need."""

    user_id: str
    course_id: str
    status: EnrollmentStatus
    enrolled_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    progress_percentage: float = 0
    department: Optional[str] = None
    course_category: Optional[str] = None
    course_duration_minutes: Optional[float] = None
    completed_module_ids: Sequence[str] = field(default_factory=tuple)


@dataclass(frozen=True)
class EngagementRecord:
    """Engagement counters attributed to one learner for a period."""

    user_id: str
    metrics: EngagementMetrics
    department: Optional[str] = None


@dataclass(frozen=True)
class SkillAssessment:
    """One proficiency assessment of an employee on a skill."""

    employee_id: str
    skill_name: str
    proficiency_level: float
    assessed_at: Optional[datetime] = None
    skill_category: Optional[str] = None


@dataclass(frozen=True)
class LearnerAssessment:
    """An assessment score with optional course feedback (1-5) from the same learner."""

    user_id: str
    course_id: str
    score: float
    feedback_score: Optional[float] = None
    assessed_at: Optional[datetime] = None


@dataclass(frozen=True)
class TrainingImpactSnapshot:
    """Department-level learning impact figures for one reporting date."""

    average_skills_per_employee: float
    performance_correlation: str
    high_training_group: int
    medium_training_group: int
    low_training_group: int


@dataclass(frozen=True)
class PotentialPath:
    role: Optional[str]
    match_score: float


@dataclass(frozen=True)
class CareerPathRecord:
    employee_id: str
    skill_gap_score: float
    potential_paths: Sequence[PotentialPath] = field(default_factory=tuple)


@dataclass(frozen=True)
class LearnerActivity:
    """First enrollment and latest activity timestamps for one learner."""

    user_id: str
    first_enrolled_at: Optional[datetime]
    last_active_at: Optional[datetime]
    department: Optional[str] = None

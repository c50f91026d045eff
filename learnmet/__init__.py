"""LearnMet - reusable learning analytics for LMS dashboards."""

from .analytics import (
    compute_average_completion_time,
    compute_completion_rate,
    compute_compliance_rate,
    compute_engagement_score,
    compute_learning_effectiveness,
    compute_retention_rate,
    compute_weighted_score,
)
from .charts import format_radar_chart_data, generate_chart_colors
from .series import (
    aggregate_by_field,
    bucket_time_series,
    compute_funnel,
    compute_moving_average,
    group_by_field,
)
from .service import LearningAnalyticsService
from .statistics import (
    compute_correlation,
    compute_percentile_rank,
    compute_skill_gap,
    generate_normal_distribution,
)

__all__ = [
    "LearningAnalyticsService",
    "compute_completion_rate",
    "compute_compliance_rate",
    "compute_retention_rate",
    "compute_engagement_score",
    "compute_learning_effectiveness",
    "compute_weighted_score",
    "compute_average_completion_time",
    "compute_skill_gap",
    "compute_correlation",
    "compute_percentile_rank",
    "generate_normal_distribution",
    "group_by_field",
    "aggregate_by_field",
    "bucket_time_series",
    "compute_moving_average",
    "compute_funnel",
    "generate_chart_colors",
    "format_radar_chart_data",
]

__version__ = "0.1.0"

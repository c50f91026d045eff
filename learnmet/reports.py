"""Dashboard report builders that compose the metric functions over LMS records."""

from datetime import datetime
from math import ceil
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from .analytics import compute_completion_rate, compute_engagement_score
from .dates import to_utc, utc_now
from .guards import clamp_non_negative, finite_or_zero, round_half_up, safe_divide
from .log import get_logger
from .models import (
    CareerPathRecord,
    EngagementRecord,
    EnrollmentRecord,
    EnrollmentStatus,
    SkillAssessment,
    TimeInterval,
    TrainingImpactSnapshot,
)
from .series import bucket_key, group_by_field

logger = get_logger(__name__)

DEFAULT_SKILL_CATEGORY = "General"
UNCATEGORIZED = "Uncategorized"
DEFAULT_TARGET_LEVEL = 3.0
CATEGORY_TARGET_LEVELS: Dict[str, float] = {"Technical": 4.0, "Leadership": 3.5}
DEPARTMENT_TARGET_LEVELS: Dict[Tuple[str, str], float] = {
    ("Engineering", "Technical"): 4.5,
    ("Sales", "Communication"): 4.5,
}
TOP_GAP_COUNT = 5
RADAR_SKILL_COUNT = 8


def summarize_enrollments(enrollments: Optional[Iterable[EnrollmentRecord]]) -> Dict:
    """Status breakdown of enrollments with a whole-number completion rate."""
    records = list(enrollments or [])
    completed = sum(1 for record in records if record.status == EnrollmentStatus.COMPLETED)
    in_progress = sum(1 for record in records if record.status == EnrollmentStatus.IN_PROGRESS)
    return {
        "total": len(records),
        "completed": completed,
        "in_progress": in_progress,
        "not_started": len(records) - completed - in_progress,
        "completion_rate": _whole_percent(completed, len(records)),
    }


def compute_department_stats(enrollments: Optional[Iterable[EnrollmentRecord]]) -> List[Dict]:
    """Enrollment and completion counts per department. Records without a department are ignored."""
    by_department = group_by_field(
        (record for record in enrollments or [] if record.department),
        lambda record: record.department,
    )
    stats = []
    for department, records in by_department.items():
        summary = summarize_enrollments(records)
        stats.append(
            {
                "department": department,
                "enrollments": summary["total"],
                "completed": summary["completed"],
                "completion_rate": summary["completion_rate"],
            }
        )
    return stats


def compute_course_completion_stats(
    enrollments: Optional[Iterable[EnrollmentRecord]],
    module_ids: Optional[Iterable[str]] = None,
) -> Dict:
    """
    Completion statistics for one course.

    Completion time counts whole days, rounded up, between enrollment and the
    last update of each completed enrollment. Completed enrollments with a
    missing date or an update before the enrollment are left out of the
    average and counted in ``flagged_completions``. ``average_completion_days``
    is ``None`` when no completed enrollment is left to average.
    """
    records = list(enrollments or [])
    total = len(records)

    completion_days = []
    flagged = 0
    for record in records:
        if record.status != EnrollmentStatus.COMPLETED:
            continue
        if record.enrolled_at is None or record.updated_at is None:
            flagged += 1
            continue
        elapsed = (to_utc(record.updated_at) - to_utc(record.enrolled_at)).total_seconds()
        if elapsed < 0:
            flagged += 1
            continue
        completion_days.append(ceil(elapsed / 86400))

    if flagged:
        logger.warning("Course completion time skipped %d enrollments with missing or inverted dates", flagged)

    average_days = None
    if completion_days:
        average_days = round_half_up(sum(completion_days) / len(completion_days), 1)

    module_completions = {module_id: 0 for module_id in module_ids or []}
    for record in records:
        for module_id in record.completed_module_ids:
            if module_id in module_completions:
                module_completions[module_id] += 1

    return {
        "enrollment_stats": summarize_enrollments(records),
        "average_completion_days": average_days,
        "flagged_completions": flagged,
        "department_breakdown": compute_department_stats(records),
        "module_completion": [
            {
                "module_id": module_id,
                "completions": completions,
                "completion_rate": _whole_percent(completions, total),
            }
            for module_id, completions in module_completions.items()
        ],
    }


def compute_learner_metrics(enrollments: Optional[Iterable[EnrollmentRecord]]) -> Dict:
    """Learning time and category mix for a single learner's enrollments."""
    records = list(enrollments or [])

    total_minutes = 0.0
    category_counts: Dict[str, int] = {}
    for record in records:
        duration = finite_or_zero(record.course_duration_minutes)
        if record.status == EnrollmentStatus.COMPLETED:
            total_minutes += duration
            if record.course_category:
                category_counts[record.course_category] = category_counts.get(record.course_category, 0) + 1
        elif record.status == EnrollmentStatus.IN_PROGRESS:
            total_minutes += duration * finite_or_zero(record.progress_percentage) / 100

    return {
        "enrollment_stats": summarize_enrollments(records),
        "learning_time": {
            "total_minutes": int(round_half_up(total_minutes)),
            "total_hours": round_half_up(total_minutes / 60, 1),
        },
        "category_distribution": [
            {"category": category, "count": count} for category, count in category_counts.items()
        ],
    }


def compute_monthly_trends(
    enrollments: Optional[Iterable[EnrollmentRecord]],
    months: int = 6,
    now: Optional[datetime] = None,
) -> List[Dict]:
    """New enrollments and completions for each of the last ``months`` calendar months, oldest first."""
    if months <= 0:
        return []

    reference = to_utc(now) if now is not None else utc_now()
    keys = []
    for offset in range(months - 1, -1, -1):
        year, month_index = divmod(reference.year * 12 + reference.month - 1 - offset, 12)
        keys.append(f"{year:04d}-{month_index + 1:02d}")

    trends = {key: {"month": key, "enrollments": 0, "completions": 0} for key in keys}
    for record in enrollments or []:
        if record.enrolled_at is not None:
            key = bucket_key(to_utc(record.enrolled_at), TimeInterval.MONTH)
            if key in trends:
                trends[key]["enrollments"] += 1
        if record.status == EnrollmentStatus.COMPLETED and record.updated_at is not None:
            key = bucket_key(to_utc(record.updated_at), TimeInterval.MONTH)
            if key in trends:
                trends[key]["completions"] += 1

    return [trends[key] for key in keys]


def compute_training_effectiveness(snapshot: Optional[TrainingImpactSnapshot]) -> Dict:
    """
    Score a department's training impact.

    The effectiveness score (0-100) adds three factors:
    - skill development, up to 40, saturating at 5 skills per employee;
    - performance correlation, 30 when positive and 15 when neutral;
    - completion distribution, up to 30, saturating when half of employees
      are in the high-training group.

    The engagement score (0-10) weights the high-training share by 10 and the
    medium-training share by 5.
    """
    if snapshot is None:
        return {"effectiveness_score": 0, "engagement_score": 0.0}

    skill_factor = min(clamp_non_negative(snapshot.average_skills_per_employee) / 5, 1) * 40

    correlation = (snapshot.performance_correlation or "").strip().lower()
    performance_factor = {"positive": 30, "neutral": 15}.get(correlation, 0)

    high = clamp_non_negative(snapshot.high_training_group)
    medium = clamp_non_negative(snapshot.medium_training_group)
    low = clamp_non_negative(snapshot.low_training_group)
    total_groups = high + medium + low
    high_ratio = safe_divide(high, total_groups)
    medium_ratio = safe_divide(medium, total_groups)

    completion_factor = min(high_ratio * 2, 1) * 30
    engagement = min(round_half_up(high_ratio * 10 + medium_ratio * 5, 1), 10.0)

    return {
        "effectiveness_score": int(round_half_up(skill_factor + performance_factor + completion_factor)),
        "engagement_score": engagement,
    }


def summarize_skill_levels(
    assessments: Optional[Iterable[SkillAssessment]],
    previous_before: Optional[datetime] = None,
) -> Dict:
    """
    Average proficiency per skill, now and as of ``previous_before``.

    ``previous`` only includes assessments taken on or before
    ``previous_before`` and is empty when no cut-off is given.
    """
    records = list(assessments or [])
    cutoff = to_utc(previous_before) if previous_before is not None else None

    current: Dict[str, List[float]] = {}
    previous: Dict[str, List[float]] = {}
    categories: Dict[str, str] = {}
    for record in records:
        level = finite_or_zero(record.proficiency_level)
        current.setdefault(record.skill_name, []).append(level)
        categories[record.skill_name] = record.skill_category or DEFAULT_SKILL_CATEGORY
        if cutoff is not None and record.assessed_at is not None and to_utc(record.assessed_at) <= cutoff:
            previous.setdefault(record.skill_name, []).append(level)

    return {
        "current": {skill: sum(levels) / len(levels) for skill, levels in current.items()},
        "previous": {skill: sum(levels) / len(levels) for skill, levels in previous.items()},
        "categories": categories,
    }


def target_skill_levels(
    skill_categories: Optional[Mapping[str, Optional[str]]],
    department: Optional[str] = None,
) -> Dict[str, float]:
    """Target proficiency per skill from its category, raised for some departments."""
    targets = {}
    for skill, category in (skill_categories or {}).items():
        level = CATEGORY_TARGET_LEVELS.get(category, DEFAULT_TARGET_LEVEL)
        targets[skill] = DEPARTMENT_TARGET_LEVELS.get((department, category), level)
    return targets


def build_skill_gap_report(
    current: Optional[Mapping[str, float]],
    target: Optional[Mapping[str, float]],
    previous: Optional[Mapping[str, float]] = None,
    categories: Optional[Mapping[str, str]] = None,
    category: Optional[str] = None,
) -> Dict:
    """
    Per-skill gaps against target levels, largest gap first, with summary stats.

    ``improvement_rate`` is the share of skills whose current level beats the
    previous one, or ``None`` when no previous levels are supplied. Passing
    ``category`` restricts the report to skills in that category.
    """
    current = current or {}
    categories = categories or {}

    rows = []
    for skill, target_level in (target or {}).items():
        skill_category = categories.get(skill) or UNCATEGORIZED
        if category is not None and skill_category != category:
            continue
        current_level = finite_or_zero(current.get(skill))
        target_level = finite_or_zero(target_level)
        rows.append(
            {
                "skill": skill,
                "category": skill_category,
                "current": current_level,
                "target": target_level,
                "gap": clamp_non_negative(target_level - current_level),
                "previous": finite_or_zero((previous or {}).get(skill)),
            }
        )
    rows.sort(key=lambda row: row["gap"], reverse=True)

    total_skills = len(rows)
    improvement_rate = None
    if previous is not None:
        improved = sum(1 for row in rows if row["current"] > row["previous"])
        improvement_rate = _whole_percent(improved, total_skills)

    return {
        "rows": rows,
        "stats": {
            "total_skills": total_skills,
            "skills_with_gap": sum(1 for row in rows if row["gap"] > 0),
            "average_gap": round_half_up(safe_divide(sum(row["gap"] for row in rows), total_skills), 1),
            "improvement_rate": improvement_rate,
            "top_gaps": rows[:TOP_GAP_COUNT],
            "no_gap_skills": [row for row in rows if row["gap"] == 0],
        },
        "radar": [
            {"skill": row["skill"], "current": row["current"], "target": row["target"]}
            for row in rows[:RADAR_SKILL_COUNT]
        ],
        "categories": sorted({categories.get(skill) or UNCATEGORIZED for skill in target or {}}),
    }


def compute_career_path_stats(paths: Optional[Iterable[CareerPathRecord]]) -> Dict:
    """Averages over employees' career paths and the most common best-match next role."""
    records = list(paths or [])
    employee_count = len(records)
    total_paths = sum(len(record.potential_paths) for record in records)
    total_gap_score = sum(finite_or_zero(record.skill_gap_score) for record in records)

    return {
        "employee_count": employee_count,
        "average_paths": safe_divide(total_paths, employee_count),
        "average_gap_score": safe_divide(total_gap_score, employee_count),
        "most_common_next_role": _most_common_next_role(records),
    }


def rank_engagement(entries: Optional[Iterable[EngagementRecord]], limit: int = 10) -> List[Dict]:
    """
    Leaderboard of engagement scores, highest first.

    Equal scores share a rank and the next rank skips ahead (1, 2, 2, 4).
    """
    scored = [
        (compute_engagement_score(entry.metrics), entry) for entry in entries or []
    ]
    scored.sort(key=lambda item: item[0], reverse=True)

    leaderboard = []
    previous_score = None
    rank = 0
    for position, (score, entry) in enumerate(scored[: max(limit, 0)], start=1):
        if score != previous_score:
            rank = position
            previous_score = score
        leaderboard.append(
            {
                "rank": rank,
                "user_id": entry.user_id,
                "department": entry.department,
                "score": score,
            }
        )
    return leaderboard


def _most_common_next_role(records: List[CareerPathRecord]) -> Optional[str]:
    role_counts: Dict[str, int] = {}
    max_count = 0
    most_common = None
    for record in records:
        if not record.potential_paths:
            continue
        # max() keeps the first path among equal match scores.
        top_path = max(record.potential_paths, key=lambda path: finite_or_zero(path.match_score))
        if not top_path.role:
            continue
        role_counts[top_path.role] = role_counts.get(top_path.role, 0) + 1
        if role_counts[top_path.role] > max_count:
            max_count = role_counts[top_path.role]
            most_common = top_path.role
    return most_common


def _whole_percent(part: float, whole: float) -> int:
    return int(round_half_up(compute_completion_rate(part, whole)))

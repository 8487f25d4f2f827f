"""Report Generation - Pure functions for progress and averages.

All functions are pure: same input always produces same output, no side effects.
Reducers that would divide by the number of records return None for empty
input so callers can answer with "no data" instead of NaN.
"""

from collections import Counter

from .dates import week_start
from .models import (
    DailyLog,
    NutrientLog,
    NutrientGoals,
    WorkoutStatus,
    Workout,
    CompletionStatus,
    StepProgress,
    CalorieProgress,
    MacroAverages,
    WorkoutFrequency,
    CompletionCounts,
)


def _by_date(logs):
    return sorted(logs, key=lambda log: log.log_date)


def calculate_step_progress(logs: list[DailyLog]) -> StepProgress | None:
    """Compare the earliest and latest step counts.

    Args:
        logs: Daily logs in any order

    Returns:
        StepProgress (latest - earliest), or None if there are no logs
    """
    if not logs:
        return None

    ordered = _by_date(logs)
    first, last = ordered[0], ordered[-1]

    return StepProgress(
        initial_steps=first.steps,
        latest_steps=last.steps,
        progress=last.steps - first.steps,
    )


def calculate_calorie_progress(
    logs: list[NutrientLog], goals: NutrientGoals
) -> CalorieProgress | None:
    """Compare the earliest and latest calorie intake against the goal.

    Args:
        logs: Nutrient logs in any order
        goals: The user's nutrient goals

    Returns:
        CalorieProgress, or None if there are no logs
    """
    if not logs:
        return None

    ordered = _by_date(logs)
    first, last = ordered[0], ordered[-1]

    return CalorieProgress(
        calorie_goal=goals.calories_goal,
        initial_calories=first.calories,
        latest_calories=last.calories,
        progress=last.calories - first.calories,
    )


def calculate_macro_averages(logs: list[NutrientLog]) -> MacroAverages | None:
    """Average protein, carbohydrates and fats over a set of days.

    Args:
        logs: Nutrient logs for the window

    Returns:
        MacroAverages rounded to one decimal, or None if there are no logs
    """
    days = len(logs)
    if days == 0:
        return None

    total_protein = sum(log.protein for log in logs)
    total_carbs = sum(log.carbohydrates for log in logs)
    total_fat = sum(log.fats for log in logs)

    return MacroAverages(
        protein=round(total_protein / days, 1),
        carbs=round(total_carbs / days, 1),
        fat=round(total_fat / days, 1),
        days_logged=days,
    )


def calculate_workout_frequency(statuses: list[WorkoutStatus]) -> WorkoutFrequency:
    """Average completed workouts per active week.

    Only weeks with at least one completion count towards the average.
    Weeks start on Sunday.

    Args:
        statuses: Workout statuses in any order; only "Yes" entries count

    Returns:
        WorkoutFrequency with per-week completion counts
    """
    completed = [s for s in statuses if s.status == CompletionStatus.YES.value]
    if not completed:
        return WorkoutFrequency(average_workouts_per_week=0, total_completed_workouts=0)

    weekly = Counter(week_start(s.log_date).isoformat() for s in _by_date(completed))
    total = len(completed)

    return WorkoutFrequency(
        average_workouts_per_week=round(total / len(weekly), 2),
        total_completed_workouts=total,
        weekly_data=dict(sorted(weekly.items())),
    )


def count_completions(
    statuses: list[WorkoutStatus], workouts: dict[str, Workout]
) -> CompletionCounts | None:
    """Count completions per workout name.

    Statuses whose workout no longer exists are skipped.

    Args:
        statuses: Workout statuses for the window
        workouts: Workouts keyed by ID

    Returns:
        CompletionCounts ordered by first appearance, or None if nothing counted
    """
    counts: Counter[str] = Counter()
    for status in _by_date(statuses):
        if status.status != CompletionStatus.YES.value:
            continue
        workout = workouts.get(status.workout_id)
        if workout is None:
            continue
        counts[workout.name] += 1

    if not counts:
        return None

    return CompletionCounts(labels=list(counts.keys()), data=list(counts.values()))

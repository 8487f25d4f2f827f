"""Workout Routes - Workout plans, daily completion statuses and reports."""

import logging

from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from ...core.dates import Period, canonical_day, window_start
from ...core.errors import FitLogError
from ...core.models import Workout, WorkoutChanges, WorkoutStatus
from ...core.reports import calculate_workout_frequency, count_completions
from .responses import read_body, success, error, invalid, server_error, get_workouts


logger = logging.getLogger(__name__)


async def check_workouts(request: Request) -> JSONResponse:
    """Number of workouts a user owns."""
    username = request.path_params["username"]

    try:
        count = get_workouts(request).count_workouts(username)
    except Exception as e:
        logger.error("Error counting workouts: %s", str(e))
        return server_error("Error retrieving workout count.")

    return JSONResponse({"count": count, "limit": get_workouts(request).max_workouts})


async def log_workout(request: Request) -> JSONResponse:
    """Create a workout plan, up to the per-user limit."""
    try:
        body = await read_body(request)
    except ValueError:
        return error("Invalid JSON body.")

    try:
        workout = Workout(
            username=body.get("username"),
            name=body.get("name"),
            exercises=body.get("exercises"),
            duration=body.get("duration"),
            intensity=body.get("intensity"),
        )
    except ValidationError as e:
        return invalid(
            "All fields are required: username, name, exercises, duration, intensity.", e
        )

    try:
        saved = get_workouts(request).create_workout(workout)
    except FitLogError as e:
        return error(e.message, e.status_code)
    except Exception as e:
        logger.error("Error logging workout: %s", str(e))
        return server_error("Server error while logging workout.")

    return success(201, message="Workout logged successfully.", workout=saved.to_response())


async def get_user_workouts(request: Request) -> JSONResponse:
    username = request.path_params["username"]

    try:
        workouts = get_workouts(request).list_workouts(username)
    except Exception as e:
        logger.error("Error fetching workouts: %s", str(e))
        return server_error("Server error fetching workouts")

    return success(workouts=[w.to_response() for w in workouts])


async def update_workout(request: Request) -> JSONResponse:
    """Replace a workout's name, exercises, duration and intensity."""
    try:
        body = await read_body(request)
    except ValueError:
        return error("Invalid JSON body.")

    message = "All fields are required: id, name, exercises, duration, intensity."
    workout_id = body.get("id")
    if not workout_id or not isinstance(workout_id, str):
        return error(message)

    try:
        changes = WorkoutChanges.model_validate(body)
    except ValidationError as e:
        return invalid(message, e)

    try:
        updated = get_workouts(request).update_workout(workout_id, changes)
    except FitLogError as e:
        return error(e.message, e.status_code)
    except Exception as e:
        logger.error("Error updating workout: %s", str(e))
        return server_error("Error updating workout")

    return success(workout=updated.to_response())


async def delete_workout(request: Request) -> JSONResponse:
    """Delete a workout and its completion statuses."""
    try:
        body = await read_body(request)
    except ValueError:
        return error("Invalid JSON body.")

    workout_id = body.get("id")
    if not workout_id or not isinstance(workout_id, str):
        logger.warning("Delete workout request without id")
        return error("Workout id is required.")

    try:
        deleted_statuses = get_workouts(request).delete_workout(workout_id)
    except FitLogError as e:
        return error(e.message, e.status_code)
    except Exception as e:
        logger.error("Error deleting workout or associated statuses: %s", str(e))
        return server_error("Server error while deleting the workout.")

    return success(
        message="Workout and associated statuses deleted successfully.",
        deletedStatuses=deleted_statuses,
    )


async def update_workout_status(request: Request) -> JSONResponse:
    """Record completion statuses for several workouts in one write."""
    try:
        body = await read_body(request)
    except ValueError:
        return error("Invalid JSON body.")

    message = "Invalid data. Username and updated workouts are required."
    username = body.get("username")
    items = body.get("updatedWorkouts")
    if not username or not isinstance(items, list) or not items:
        return error(message)

    try:
        statuses = [
            WorkoutStatus(
                username=username,
                workout_id=item.get("id"),
                status=item.get("status"),
                log_date=canonical_day(item.get("date")),
            )
            for item in items
        ]
    except ValidationError as e:
        return invalid(message, e)
    except (ValueError, AttributeError):
        return error(message)

    try:
        get_workouts(request).save_statuses(statuses)
    except FitLogError as e:
        return error(e.message, e.status_code)
    except Exception as e:
        logger.error("Error saving workout statuses: %s", str(e))
        return server_error("Error saving workout statuses")

    return success(message="Workout statuses updated successfully.", updated=len(statuses))


async def get_workout_statuses(request: Request) -> JSONResponse:
    """Statuses recorded on one day, each with its workout attached."""
    username = request.query_params.get("username")
    date_param = request.query_params.get("date")
    if not username or not date_param:
        return error("Username and date are required.")

    try:
        log_date = canonical_day(date_param)
    except ValueError:
        return error("Invalid date format. Please use YYYY-MM-DD.")

    store = get_workouts(request)
    try:
        statuses = store.get_statuses_for_day(username, log_date)
        workouts = store.get_workouts_by_id({s.workout_id for s in statuses})
    except Exception as e:
        logger.error("Error fetching workout statuses: %s", str(e))
        return server_error("Error fetching workout statuses")

    results = []
    for status in statuses:
        workout = workouts.get(status.workout_id)
        results.append({
            **status.to_response(),
            "workout": workout.to_response() if workout else None,
        })
    return success(statuses=results)


async def get_workout_progress(request: Request) -> JSONResponse:
    """Average completed workouts per week across all recorded history."""
    username = request.query_params.get("username")
    if not username:
        return error("Username is required")

    try:
        completed = get_workouts(request).get_completed(username)
    except Exception as e:
        logger.error("Error fetching average workouts per week: %s", str(e))
        return server_error("Error fetching average workouts per week")

    return success(**calculate_workout_frequency(completed).to_response())


async def get_workout_completions(request: Request) -> JSONResponse:
    """Completions per workout name over a weekly or monthly window."""
    username = request.query_params.get("username")
    period_param = request.query_params.get("period")
    if not username or not period_param:
        return error("Username and period are required")

    try:
        period = Period(period_param)
    except ValueError:
        return error("Invalid period")

    store = get_workouts(request)
    try:
        completed = store.get_completed(username, since=window_start(period))
        workouts = store.get_workouts_by_id({s.workout_id for s in completed})
    except Exception as e:
        logger.error("Error fetching workout completion data: %s", str(e))
        return server_error("Error fetching workout completion data")

    counts = count_completions(completed, workouts)
    if counts is None:
        return error("No workout data found for the specified period", 404)
    return success(**counts.to_response())


routes = [
    Route("/check-workouts/{username}", check_workouts, methods=["GET"]),
    Route("/log-workout", log_workout, methods=["POST"]),
    Route("/get-workouts/{username}", get_user_workouts, methods=["GET"]),
    Route("/update-workout", update_workout, methods=["PUT"]),
    Route("/delete-workout", delete_workout, methods=["DELETE"]),
    Route("/update-workout-status", update_workout_status, methods=["PUT"]),
    Route("/get-workout-statuses", get_workout_statuses, methods=["GET"]),
    Route("/get-workout-progress", get_workout_progress, methods=["GET"]),
    Route("/get-workout-completions", get_workout_completions, methods=["GET"]),
]

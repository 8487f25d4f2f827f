"""Activity Routes - Daily steps, workout and sleep logs."""

import logging

from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from ...core.dates import canonical_day
from ...core.errors import FitLogError
from ...core.models import DailyLog
from ...core.reports import calculate_step_progress
from .responses import read_body, success, error, invalid, server_error, get_db


logger = logging.getLogger(__name__)


async def log_activity(request: Request) -> JSONResponse:
    """Create or overwrite the activity log for a day (defaults to today)."""
    try:
        body = await read_body(request)
    except ValueError:
        return error("Invalid JSON body.")

    try:
        log = DailyLog(
            username=body.get("username"),
            log_date=canonical_day(body.get("logDate")),
            steps=body.get("steps"),
            workout=body.get("workout"),
            workout_duration=body.get("workoutDuration"),
            sleep_hours=body.get("sleep"),
        )
    except ValidationError as e:
        return invalid("All fields are required.", e)
    except ValueError:
        return error("Invalid date format.")

    try:
        saved, created = get_db(request).log_activity(log)
    except Exception as e:
        logger.error("Error logging activity: %s", str(e))
        return server_error("Server error while logging activity.")

    if created:
        return success(201, message="Activity log created successfully.", log=saved.to_response())
    return success(message="Activity log updated successfully.", log=saved.to_response())


async def get_daily_log(request: Request) -> JSONResponse:
    """Fetch the activity log for a day (defaults to today)."""
    username = request.query_params.get("username")
    if not username:
        return error("Username is required.")

    try:
        log_date = canonical_day(request.query_params.get("date"))
    except ValueError:
        return error("Invalid date format.")

    try:
        log = get_db(request).get_daily_log(username, log_date)
    except FitLogError as e:
        return error(e.message, e.status_code)
    except Exception as e:
        logger.error("Error fetching daily log: %s", str(e))
        return server_error("Server error while fetching the log.")

    if log is None:
        return JSONResponse({"success": False, "message": "No log for this date."})
    return success(log=log.to_response())


async def delete_daily_log(request: Request) -> JSONResponse:
    """Delete the activity log for a given day."""
    try:
        body = await read_body(request)
    except ValueError:
        return error("Invalid JSON body.")

    username = body.get("username")
    if not username or not body.get("date"):
        return error("Username and date are required.")

    try:
        log_date = canonical_day(body["date"])
    except ValueError:
        return error("Invalid date format.")

    try:
        get_db(request).delete_daily_log(username, log_date)
    except FitLogError as e:
        return error(e.message, e.status_code)
    except Exception as e:
        logger.error("Error deleting daily log: %s", str(e))
        return server_error("Server error while deleting daily log.")

    return success(message="Daily log deleted successfully.")


async def get_step_progress(request: Request) -> JSONResponse:
    """Difference between the latest and the earliest logged step count."""
    username = request.query_params.get("username")
    if not username:
        return error("Username is required.")

    try:
        logs = get_db(request).get_daily_logs(username)
    except FitLogError as e:
        return error(e.message, e.status_code)
    except Exception as e:
        logger.error("Error fetching step progress: %s", str(e))
        return server_error("Server error while fetching step progress.")

    progress = calculate_step_progress(logs)
    if progress is None:
        return error("No step data found for the user.", 404)
    return success(**progress.to_response())


routes = [
    Route("/log-activity", log_activity, methods=["POST"]),
    Route("/get-daily-log", get_daily_log, methods=["GET"]),
    Route("/delete-daily-log", delete_daily_log, methods=["DELETE"]),
    Route("/get-step-progress", get_step_progress, methods=["GET"]),
]

"""Weight Routes - Daily weight logs and history."""

import logging

from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from ...core.dates import Period, canonical_day, window_start
from ...core.errors import FitLogError
from ...core.models import WeightLog
from .responses import read_body, success, error, invalid, server_error, get_db


logger = logging.getLogger(__name__)


async def log_weight(request: Request) -> JSONResponse:
    """Create or overwrite the weight log for a day (defaults to today)."""
    try:
        body = await read_body(request)
    except ValueError:
        return error("Invalid JSON body.")

    try:
        log = WeightLog(
            username=body.get("username"),
            log_date=canonical_day(body.get("logDate")),
            weight=body.get("weight"),
        )
    except ValidationError as e:
        return invalid("Username and a weight between 30 and 300 are required.", e)
    except ValueError:
        return error("Invalid date format.")

    try:
        saved, created = get_db(request).log_weight(log)
    except Exception as e:
        logger.error("Error logging weight: %s", str(e))
        return server_error("Server error while logging weight.")

    if created:
        return success(201, message="Weight log created successfully.", log=saved.to_response())
    return success(message="Weight log updated successfully.", log=saved.to_response())


async def get_latest_weight(request: Request) -> JSONResponse:
    username = request.query_params.get("username")
    if not username:
        return error("Username is required.")

    try:
        log = get_db(request).get_latest_weight(username)
    except FitLogError as e:
        return error(e.message, e.status_code)
    except Exception as e:
        logger.error("Error fetching latest weight: %s", str(e))
        return server_error("Server error")

    if log is None:
        return error("No weight data found", 404)
    return success(log=log.to_response())


async def get_weight_log(request: Request) -> JSONResponse:
    """Fetch the weight log for a specific day."""
    username = request.query_params.get("username")
    date_param = request.query_params.get("date")
    if not username or not date_param:
        return error("Username and date are required.")

    try:
        log_date = canonical_day(date_param)
    except ValueError:
        return error("Invalid date format.")

    try:
        log = get_db(request).get_weight_log(username, log_date)
    except FitLogError as e:
        return error(e.message, e.status_code)
    except Exception as e:
        logger.error("Error fetching weight log: %s", str(e))
        return server_error("Server error while fetching weight log.")

    if log is None:
        return error("No weight log found for this date.", 404)
    return success(log=log.to_response())


async def _weights_in_window(request: Request, period: Period) -> JSONResponse:
    username = request.query_params.get("username")
    if not username:
        return error("Username is required.")

    try:
        logs = get_db(request).get_weight_logs(username, since=window_start(period))
    except FitLogError as e:
        return error(e.message, e.status_code)
    except Exception as e:
        logger.error("Error fetching %s weight logs: %s", period.value, str(e))
        return server_error(f"Server error while fetching {period.value} weight logs.")

    return success(logs=[log.to_response() for log in logs])


async def get_weekly_weight(request: Request) -> JSONResponse:
    return await _weights_in_window(request, Period.WEEKLY)


async def get_monthly_weight(request: Request) -> JSONResponse:
    return await _weights_in_window(request, Period.MONTHLY)


routes = [
    Route("/log-weight", log_weight, methods=["POST"]),
    Route("/get-latest-weight", get_latest_weight, methods=["GET"]),
    Route("/get-weight-log", get_weight_log, methods=["GET"]),
    Route("/get-weekly-weight", get_weekly_weight, methods=["GET"]),
    Route("/get-monthly-weight", get_monthly_weight, methods=["GET"]),
]

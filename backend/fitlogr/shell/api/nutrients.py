"""Nutrient Routes - Daily nutrient logs, goals and intake reports."""

import logging

from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from ...core.dates import Period, canonical_day, window_start
from ...core.errors import FitLogError
from ...core.models import NutrientLog, NutrientGoals
from ...core.reports import calculate_macro_averages, calculate_calorie_progress
from .responses import read_body, success, error, invalid, server_error, get_db


logger = logging.getLogger(__name__)

# Request key -> model field
GOAL_KEYS = {
    "caloriesGoal": "calories_goal",
    "proteinGoal": "protein_goal",
    "fatsGoal": "fats_goal",
    "carbohydratesGoal": "carbohydrates_goal",
    "waterGoal": "water_goal",
    "weightGoal": "weight_goal",
}


async def log_nutrients(request: Request) -> JSONResponse:
    """Create or overwrite the nutrient log for a day (defaults to today)."""
    try:
        body = await read_body(request)
    except ValueError:
        return error("Invalid JSON body.")

    try:
        log = NutrientLog(
            username=body.get("username"),
            log_date=canonical_day(body.get("logDate")),
            calories=body.get("calories"),
            protein=body.get("protein"),
            fats=body.get("fats"),
            carbohydrates=body.get("carbohydrates"),
            water=body.get("water"),
        )
    except ValidationError as e:
        return invalid("All nutrient fields are required.", e)
    except ValueError:
        return error("Invalid date format.")

    try:
        saved, created = get_db(request).log_nutrients(log)
    except Exception as e:
        logger.error("Error logging nutrients: %s", str(e))
        return server_error("Server error while logging nutrients.")

    if created:
        return success(201, message="Nutrient log created successfully.", log=saved.to_response())
    return success(message="Nutrient log updated successfully.", log=saved.to_response())


async def get_nutrient_log(request: Request) -> JSONResponse:
    """Fetch the nutrient log for a day (defaults to today)."""
    username = request.query_params.get("username")
    if not username:
        return error("Username is required.")

    try:
        log_date = canonical_day(request.query_params.get("date"))
    except ValueError:
        return error("Invalid date format.")

    try:
        log = get_db(request).get_nutrient_log(username, log_date)
    except FitLogError as e:
        return error(e.message, e.status_code)
    except Exception as e:
        logger.error("Error fetching nutrient log: %s", str(e))
        return server_error("Server error while fetching nutrient log.")

    if log is None:
        return JSONResponse({"success": False, "message": "No log found for this date."})
    return success(log=log.to_response())


async def set_nutrient_goals(request: Request) -> JSONResponse:
    """Set goals on first call; later calls change only the goals given."""
    try:
        body = await read_body(request)
    except ValueError:
        return error("Invalid JSON body.")

    if not body.get("username"):
        return error("Username is required.")

    provided = {field: body[key] for key, field in GOAL_KEYS.items() if body.get(key) is not None}
    if not provided:
        return error("At least one goal field must be provided.")

    try:
        goals = NutrientGoals(username=body["username"], **provided)
    except ValidationError as e:
        return invalid("Invalid nutrient goals.", e)

    try:
        saved, created = get_db(request).set_nutrient_goals(goals)
    except Exception as e:
        logger.error("Error setting nutrient goals: %s", str(e))
        return server_error("Server error while setting nutrient goals.")

    if created:
        return success(201, message="Nutrient goals set successfully.", goals=saved.to_response())
    return success(message="Nutrient goals updated successfully.", goals=saved.to_response())


async def get_nutrient_goals(request: Request) -> JSONResponse:
    username = request.query_params.get("username")
    if not username:
        return error("Username is required.")

    try:
        goals = get_db(request).get_nutrient_goals(username)
    except FitLogError as e:
        return error(e.message, e.status_code)
    except Exception as e:
        logger.error("Error fetching nutrient goals: %s", str(e))
        return server_error("Server error while fetching nutrient goals.")

    if goals is None:
        return error("No nutrient goals found for this user.", 404)
    return success(goals=goals.to_response())


async def get_calorie_goal(request: Request) -> JSONResponse:
    username = request.query_params.get("username")
    if not username:
        return error("Username is required")

    try:
        goals = get_db(request).get_nutrient_goals(username)
    except FitLogError as e:
        return error(e.message, e.status_code)
    except Exception as e:
        logger.error("Error fetching calorie goal: %s", str(e))
        return server_error("Error fetching calorie goal")

    if goals is None:
        return error("Nutrient goals not found for this user", 404)
    return success(calorieGoal=goals.calories_goal)


async def _calories_in_window(request: Request, period: Period) -> JSONResponse:
    username = request.query_params.get("username")
    if not username:
        return error("Username is required")

    try:
        logs = get_db(request).get_nutrient_logs(username, since=window_start(period))
    except FitLogError as e:
        return error(e.message, e.status_code)
    except Exception as e:
        logger.error("Error fetching %s calories: %s", period.value, str(e))
        return server_error(f"Error fetching {period.value} calories")

    return success(logs=[{"date": log.log_date.isoformat(), "calories": log.calories} for log in logs])


async def get_weekly_calories(request: Request) -> JSONResponse:
    """Calories per logged day over the last 7 days."""
    return await _calories_in_window(request, Period.WEEKLY)


async def get_monthly_calories(request: Request) -> JSONResponse:
    """Calories per logged day over the last month."""
    return await _calories_in_window(request, Period.MONTHLY)


async def _averages_in_window(request: Request, period: Period) -> JSONResponse:
    username = request.query_params.get("username")
    if not username:
        return error("Username is required")

    try:
        logs = get_db(request).get_nutrient_logs(username, since=window_start(period))
    except FitLogError as e:
        return error(e.message, e.status_code)
    except Exception as e:
        logger.error("Error fetching %s nutrients: %s", period.value, str(e))
        return server_error(f"Error fetching {period.value} nutrients")

    averages = calculate_macro_averages(logs)
    if averages is None:
        return error("No nutrient data found for this period.", 404)
    return success(averages=averages.to_response())


async def get_weekly_nutrients(request: Request) -> JSONResponse:
    """Average protein, carbs and fat over the last 7 days."""
    return await _averages_in_window(request, Period.WEEKLY)


async def get_monthly_nutrients(request: Request) -> JSONResponse:
    """Average protein, carbs and fat over the last month."""
    return await _averages_in_window(request, Period.MONTHLY)


async def get_calories_intake(request: Request) -> JSONResponse:
    """Earliest vs latest calorie intake, alongside the calorie goal."""
    username = request.query_params.get("username")
    if not username:
        return error("Username is required")

    db = get_db(request)
    try:
        logs = db.get_nutrient_logs(username)
        goals = db.get_nutrient_goals(username) if logs else None
    except FitLogError as e:
        return error(e.message, e.status_code)
    except Exception as e:
        logger.error("Error fetching calorie intake: %s", str(e))
        return server_error("Error fetching calorie intake")

    if not logs:
        return error("No calorie intake data found for this user.", 404)
    if goals is None:
        return error("No nutrient goals found for this user.", 404)

    progress = calculate_calorie_progress(logs, goals)
    return success(**progress.to_response())


routes = [
    Route("/log-nutrients", log_nutrients, methods=["POST"]),
    Route("/get-nutrient-log", get_nutrient_log, methods=["GET"]),
    Route("/set-nutrient-goals", set_nutrient_goals, methods=["POST"]),
    Route("/get-nutrient-goals", get_nutrient_goals, methods=["GET"]),
    Route("/get-calorie-goal", get_calorie_goal, methods=["GET"]),
    Route("/get-weekly-calories", get_weekly_calories, methods=["GET"]),
    Route("/get-monthly-calories", get_monthly_calories, methods=["GET"]),
    Route("/get-weekly-nutrients", get_weekly_nutrients, methods=["GET"]),
    Route("/get-monthly-nutrients", get_monthly_nutrients, methods=["GET"]),
    Route("/get-calories-intake", get_calories_intake, methods=["GET"]),
]

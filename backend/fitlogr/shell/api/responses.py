"""Shared request/response helpers for route handlers."""

from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse

from ..auth import AuthClient
from ..firestore_client import FitLogFirestoreClient
from ..workout_store import WorkoutStore


async def read_body(request: Request) -> dict:
    """Parse a JSON object body. An empty body reads as ``{}``.

    Raises:
        ValueError: If the body is not a JSON object
    """
    if not await request.body():
        return {}
    body = await request.json()
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object")
    return body


def success(status_code: int = 200, **payload) -> JSONResponse:
    return JSONResponse({"success": True, **payload}, status_code=status_code)


def error(message: str, status_code: int = 400, **extra) -> JSONResponse:
    return JSONResponse({"success": False, "error": message, **extra}, status_code=status_code)


def invalid(message: str, exc: ValidationError) -> JSONResponse:
    """400 with a static message plus ``field: problem`` details."""
    details = [
        f"{'.'.join(str(part) for part in err['loc']) or 'body'}: {err['msg']}"
        for err in exc.errors()
    ]
    return error(message, details=details)


def server_error(message: str) -> JSONResponse:
    return error(message, status_code=500)


def get_db(request: Request) -> FitLogFirestoreClient:
    return request.app.state.firestore


def get_auth(request: Request) -> AuthClient:
    return request.app.state.auth


def get_workouts(request: Request) -> WorkoutStore:
    return request.app.state.workouts

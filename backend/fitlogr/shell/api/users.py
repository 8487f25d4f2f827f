"""User Routes - Registration, sign-in and profile management."""

import logging

from pydantic import ValidationError
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from ...core.errors import FitLogError
from ...core.models import Registration, ProfileUpdate
from .responses import read_body, success, error, invalid, server_error, get_auth


logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid username or password."


def _provided(body: dict, key: str):
    """Body value, treating empty strings as absent."""
    value = body.get(key)
    return None if value == "" else value


async def register(request: Request) -> JSONResponse:
    """Register a new user with a hashed password."""
    try:
        registration = Registration.model_validate(await read_body(request))
    except ValidationError as e:
        return invalid("All fields are required.", e)
    except ValueError:
        return error("Invalid JSON body.")

    try:
        get_auth(request).register_user(registration)
    except FitLogError as e:
        return error(e.message, e.status_code)
    except Exception as e:
        logger.error("Registration failed: %s", str(e))
        return server_error("Server error.")

    return success(201, message="User registered successfully!")


async def check_username(request: Request) -> JSONResponse:
    """Report whether a username is already registered."""
    username = request.query_params.get("username")
    if not username:
        return error("Username is required.")

    try:
        taken = get_auth(request).username_taken(username)
    except Exception as e:
        logger.error("Error checking username: %s", str(e))
        return JSONResponse({"isTaken": False, "error": "Server error."}, status_code=500)

    return JSONResponse({"isTaken": taken})


async def signin(request: Request) -> JSONResponse:
    """Check credentials. Returns a boolean outcome only, no session."""
    try:
        body = await read_body(request)
    except ValueError:
        return error("Invalid JSON body.")

    username = body.get("username")
    password = body.get("password")
    if not isinstance(username, str) or not isinstance(password, str):
        return error(INVALID_CREDENTIALS)

    try:
        valid = get_auth(request).authenticate(username, password)
    except Exception as e:
        logger.error("Sign-in failed: %s", str(e))
        return server_error("Server error.")

    if not valid:
        # Same body for unknown user and wrong password
        return error(INVALID_CREDENTIALS)
    return success()


async def get_user_profile(request: Request) -> JSONResponse:
    """Profile data for a user, without the password hash."""
    username = request.query_params.get("username")
    if not username:
        return error("Username is required.")

    try:
        user = get_auth(request).get_user(username)
    except Exception as e:
        logger.error("Error fetching user profile: %s", str(e))
        return server_error("Server error.")

    if user is None:
        return error("User not found.", 404)
    return success(**user.profile().to_response())


async def update_user_profile(request: Request) -> JSONResponse:
    """Update any of dob, height, weight, gender, goal and password."""
    try:
        body = await read_body(request)
    except ValueError:
        return error("Invalid JSON body.")

    username = body.get("username")
    if not username:
        return error("Username is required.")

    try:
        update = ProfileUpdate(
            dob=_provided(body, "newDob"),
            height=_provided(body, "height"),
            weight=_provided(body, "weight"),
            gender=_provided(body, "gender"),
            goal=_provided(body, "goal"),
            new_password=_provided(body, "newPassword"),
        )
    except ValidationError as e:
        return invalid("Invalid profile data.", e)

    try:
        user = get_auth(request).update_profile(username, update)
    except FitLogError as e:
        return error(e.message, e.status_code)
    except Exception as e:
        logger.error("Error updating profile: %s", str(e))
        return server_error("An error occurred while updating the profile.")

    return success(profile=user.profile().to_response())


async def verify_old_password(request: Request) -> JSONResponse:
    """Check a user's current password before allowing a change.

    Accepts a JSON body on POST, or ``?username=&password=`` on GET.
    """
    if request.method == "GET":
        body = dict(request.query_params)
    else:
        try:
            body = await read_body(request)
        except ValueError:
            return error("Invalid JSON body.")

    username = body.get("username")
    password = body.get("password")
    if not username or not isinstance(password, str):
        return error("Username and password are required.")

    try:
        valid = get_auth(request).check_password(username, password)
    except FitLogError as e:
        return error(e.message, e.status_code)
    except Exception as e:
        logger.error("Error verifying old password: %s", str(e))
        return server_error("Server error.")

    if not valid:
        return error("Old password is incorrect")
    return success()


async def delete_user_account(request: Request) -> JSONResponse:
    """Delete a user together with their daily activity logs."""
    username = request.query_params.get("username")
    if not username:
        return error("Username is required.")

    try:
        deleted_logs = get_auth(request).delete_user(username)
    except FitLogError as e:
        return error(e.message, e.status_code)
    except Exception as e:
        logger.error("Error deleting user account and daily logs: %s", str(e))
        return server_error("Server error while deleting the account and daily logs.")

    return success(
        message="User account and daily logs deleted successfully.",
        deletedLogs=deleted_logs,
    )


routes = [
    Route("/register", register, methods=["POST"]),
    Route("/check-username", check_username, methods=["GET"]),
    Route("/signin", signin, methods=["POST"]),
    Route("/get-user-profile", get_user_profile, methods=["GET"]),
    Route("/update-user-profile", update_user_profile, methods=["POST"]),
    Route("/verify-old-password", verify_old_password, methods=["GET", "POST"]),
    Route("/delete-user-account", delete_user_account, methods=["DELETE"]),
]

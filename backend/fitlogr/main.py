"""FitLogr API Server - Entry point.

Builds the Starlette application and runs it with uvicorn.
Store handles are created once per app and injected through ``app.state``.
"""

import logging
import os

import uvicorn
from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.middleware.cors import CORSMiddleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from .shell.api import activity, nutrients, users, weight, workouts
from .shell.auth import AuthClient
from .shell.firestore_client import FitLogFirestoreClient, FirestoreConfig
from .shell.workout_store import WorkoutStore


logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

DEFAULT_CORS_ORIGINS = "http://localhost:5173"


async def health_check(request: Request) -> JSONResponse:
    """Health check endpoint."""
    return JSONResponse({"status": "healthy", "service": "fitlogr"})


def cors_origins() -> list[str]:
    """Allowed origins from the comma-separated CORS_ORIGINS variable."""
    raw = os.environ.get("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def create_app(firestore_client: FitLogFirestoreClient | None = None) -> Starlette:
    """Create the Starlette application.

    Args:
        firestore_client: Store to use; built from the environment if omitted.
            The underlying Firestore connection is opened lazily.
    """
    db = firestore_client or FitLogFirestoreClient(FirestoreConfig.from_env())

    routes = [
        Route("/health", health_check, methods=["GET"]),
        *users.routes,
        *activity.routes,
        *nutrients.routes,
        *weight.routes,
        *workouts.routes,
    ]

    app = Starlette(
        routes=routes,
        middleware=[
            Middleware(
                CORSMiddleware,
                allow_origins=cors_origins(),
                allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
                allow_headers=["*"],
            ),
        ],
    )

    app.state.firestore = db
    app.state.auth = AuthClient(db)
    app.state.workouts = WorkoutStore(db)

    return app


# Create app at module level for uvicorn
app = create_app()


def main() -> None:
    """Run the server."""
    port = int(os.environ.get("PORT", 8080))
    host = os.environ.get("HOST", "0.0.0.0")

    logger.info("Starting FitLogr API server on %s:%d", host, port)

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    main()

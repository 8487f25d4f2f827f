"""Firestore Client - Persistence for per-day logs and nutrient goals.

This module handles all database I/O for the logging resources.
All I/O is contained here; business logic is in the core module.
"""

import logging
import os
from dataclasses import dataclass
from datetime import date
from typing import Any, TypeVar

from google.api_core.exceptions import AlreadyExists
from google.cloud import firestore

from ..core.errors import NotFoundError
from ..core.models import (
    WireModel,
    DailyLog,
    NutrientLog,
    NutrientGoals,
    WeightLog,
    is_document_id,
    utc_now,
)


logger = logging.getLogger(__name__)

DAILY_LOGS = "daily_logs"
NUTRIENT_LOGS = "nutrient_logs"
WEIGHT_LOGS = "weight_logs"

LogT = TypeVar("LogT", DailyLog, NutrientLog, WeightLog)


@dataclass
class FirestoreConfig:
    """Configuration for Firestore client.

    Attributes:
        project_id: GCP project ID (None for default)
        database: Firestore database name (None for default database)
    """

    project_id: str | None = None
    database: str | None = None

    @classmethod
    def from_env(cls) -> "FirestoreConfig":
        """Read FIRESTORE_PROJECT and FIRESTORE_DATABASE."""
        return cls(
            project_id=os.environ.get("FIRESTORE_PROJECT") or None,
            database=os.environ.get("FIRESTORE_DATABASE", "fitlogr"),
        )


class FitLogFirestoreClient:
    """Client for persisting fitness logs to Firestore.

    Document structure:
        users/{username}: { password_hash, dob, height, ... }
            daily_logs/{YYYY-MM-DD}: { steps, workout, ... }
            nutrient_logs/{YYYY-MM-DD}: { calories, protein, ... }
            weight_logs/{YYYY-MM-DD}: { weight }
            settings/nutrient_goals: { calories_goal, ... }
        workouts/{workout_id}
        workout_statuses/{workout_id}_{YYYY-MM-DD}

    Per-day logs use the calendar day as document ID, so the store holds at
    most one log per user per day.
    """

    def __init__(
        self,
        config: FirestoreConfig | None = None,
        client: firestore.Client | None = None,
    ) -> None:
        """Initialize Firestore client.

        Args:
            config: Firestore configuration
            client: Pre-built client (skips lazy construction)
        """
        self.config = config or FirestoreConfig()
        self._client = client

    @property
    def client(self) -> firestore.Client:
        """Lazy initialization of Firestore client."""
        if self._client is None:
            kwargs: dict[str, Any] = {}
            if self.config.project_id:
                kwargs["project"] = self.config.project_id
            if self.config.database:
                kwargs["database"] = self.config.database
            self._client = firestore.Client(**kwargs)
        return self._client

    def user_ref(self, username: str) -> firestore.DocumentReference:
        """Get reference to user document.

        Raises:
            NotFoundError: If username cannot be a document ID
        """
        if not is_document_id(username):
            raise NotFoundError("User not found.")
        return self.client.collection("users").document(username)

    def _day_ref(self, username: str, kind: str, log_date: date) -> firestore.DocumentReference:
        """Get reference to a per-day log document."""
        return self.user_ref(username).collection(kind).document(log_date.isoformat())

    def _goals_ref(self, username: str) -> firestore.DocumentReference:
        return self.user_ref(username).collection("settings").document("nutrient_goals")

    # ==================== Upsert Resolution ====================

    def _resolve(
        self,
        ref: firestore.DocumentReference,
        record: WireModel,
        mutable_fields: tuple[str, ...],
    ) -> tuple[dict, bool]:
        """Create the document, or overwrite its mutable fields if it exists.

        ``create`` is a conditional write that fails when the document is
        already there, so two concurrent requests for the same path can
        never both insert.

        Args:
            ref: Target document
            record: Full record to insert
            mutable_fields: Fields copied onto an existing document

        Returns:
            Tuple of (stored document, was_created)
        """
        document = record.to_document()
        try:
            ref.create(document)
            logger.info("Created %s", ref.path)
            return document, True
        except AlreadyExists:
            changes = {name: document[name] for name in mutable_fields}
            changes["updated_at"] = document["updated_at"]
            ref.update(changes)
            logger.info("Updated %s", ref.path)
            return ref.get().to_dict(), False

    def _get_day(self, username: str, kind: str, log_date: date, model: type[LogT]) -> LogT | None:
        logger.debug("Fetching %s for %s on %s", kind, username, log_date)
        doc = self._day_ref(username, kind, log_date).get()
        if not doc.exists:
            return None
        return model.model_validate(doc.to_dict())

    def _get_range(
        self,
        username: str,
        kind: str,
        model: type[LogT],
        since: date | None = None,
    ) -> list[LogT]:
        """Fetch a user's logs ordered by date ascending.

        Args:
            username: Owner of the logs
            kind: Log subcollection name
            model: Record type to build
            since: Earliest day to include (None for all)

        Returns:
            List of logs found (may be empty)
        """
        logger.debug("Fetching %s for %s since %s", kind, username, since)
        query = self.user_ref(username).collection(kind)
        if since is not None:
            query = query.where("log_date", ">=", since.isoformat())
        query = query.order_by("log_date")

        logs = [model.model_validate(doc.to_dict()) for doc in query.stream()]
        logger.debug("Found %d %s", len(logs), kind)
        return logs

    # ==================== Daily Activity ====================

    def log_activity(self, log: DailyLog) -> tuple[DailyLog, bool]:
        """Create or overwrite the activity log for ``log.log_date``."""
        ref = self._day_ref(log.username, DAILY_LOGS, log.log_date)
        data, created = self._resolve(ref, log, DailyLog.MUTABLE_FIELDS)
        return DailyLog.model_validate(data), created

    def get_daily_log(self, username: str, log_date: date) -> DailyLog | None:
        return self._get_day(username, DAILY_LOGS, log_date, DailyLog)

    def get_daily_logs(self, username: str, since: date | None = None) -> list[DailyLog]:
        return self._get_range(username, DAILY_LOGS, DailyLog, since)

    def delete_daily_log(self, username: str, log_date: date) -> None:
        """Delete one day's activity log.

        Raises:
            NotFoundError: If there is no log for that day
        """
        ref = self._day_ref(username, DAILY_LOGS, log_date)
        if not ref.get().exists:
            raise NotFoundError("Log not found.")
        ref.delete()
        logger.info("Deleted daily log for %s on %s", username, log_date)

    # ==================== Nutrients ====================

    def log_nutrients(self, log: NutrientLog) -> tuple[NutrientLog, bool]:
        """Create or overwrite the nutrient log for ``log.log_date``."""
        ref = self._day_ref(log.username, NUTRIENT_LOGS, log.log_date)
        data, created = self._resolve(ref, log, NutrientLog.MUTABLE_FIELDS)
        return NutrientLog.model_validate(data), created

    def get_nutrient_log(self, username: str, log_date: date) -> NutrientLog | None:
        return self._get_day(username, NUTRIENT_LOGS, log_date, NutrientLog)

    def get_nutrient_logs(self, username: str, since: date | None = None) -> list[NutrientLog]:
        return self._get_range(username, NUTRIENT_LOGS, NutrientLog, since)

    def set_nutrient_goals(self, goals: NutrientGoals) -> tuple[NutrientGoals, bool]:
        """Create the user's goals, or update only the goals provided.

        Args:
            goals: Goals to store; None fields keep their current value

        Returns:
            Tuple of (stored goals, was_created)
        """
        ref = self._goals_ref(goals.username)
        provided = goals.provided_goals()
        try:
            ref.create(goals.to_document())
            logger.info("Created nutrient goals for %s", goals.username)
            return goals, True
        except AlreadyExists:
            ref.update({**provided, "updated_at": utc_now().isoformat()})
            logger.info("Updated nutrient goals for %s: %s", goals.username, sorted(provided))
            return NutrientGoals.model_validate(ref.get().to_dict()), False

    def get_nutrient_goals(self, username: str) -> NutrientGoals | None:
        logger.debug("Fetching nutrient goals for %s", username)
        doc = self._goals_ref(username).get()
        if not doc.exists:
            return None
        return NutrientGoals.model_validate(doc.to_dict())

    # ==================== Weight ====================

    def log_weight(self, log: WeightLog) -> tuple[WeightLog, bool]:
        """Create or overwrite the weight log for ``log.log_date``."""
        ref = self._day_ref(log.username, WEIGHT_LOGS, log.log_date)
        data, created = self._resolve(ref, log, WeightLog.MUTABLE_FIELDS)
        return WeightLog.model_validate(data), created

    def get_weight_log(self, username: str, log_date: date) -> WeightLog | None:
        return self._get_day(username, WEIGHT_LOGS, log_date, WeightLog)

    def get_weight_logs(self, username: str, since: date | None = None) -> list[WeightLog]:
        return self._get_range(username, WEIGHT_LOGS, WeightLog, since)

    def get_latest_weight(self, username: str) -> WeightLog | None:
        """Most recent weight log by date."""
        query = (
            self.user_ref(username)
            .collection(WEIGHT_LOGS)
            .order_by("log_date", direction=firestore.Query.DESCENDING)
            .limit(1)
        )
        for doc in query.stream():
            return WeightLog.model_validate(doc.to_dict())
        return None

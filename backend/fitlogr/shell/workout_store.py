"""Workout Store - Persistence for workout plans and completion statuses.

Workouts live in a top-level collection so they can be addressed by ID alone.
Statuses use ``{workout_id}_{YYYY-MM-DD}`` as document ID, which keeps a
single status per workout per day.
"""

import logging
from datetime import date

from google.cloud import firestore

from ..core.errors import DuplicateWorkoutNameError, NotFoundError, WorkoutLimitError
from ..core.models import (
    MAX_WORKOUTS_PER_USER,
    CompletionStatus,
    Workout,
    WorkoutChanges,
    WorkoutStatus,
    is_document_id,
    utc_now,
)
from .firestore_client import FitLogFirestoreClient


logger = logging.getLogger(__name__)


def _workout_from_doc(doc) -> Workout:
    return Workout.model_validate({**doc.to_dict(), "id": doc.id})


class WorkoutStore:
    """Client for workout plans and their daily completion statuses."""

    def __init__(self, db: FitLogFirestoreClient, max_workouts: int = MAX_WORKOUTS_PER_USER) -> None:
        """Initialize workout store.

        Args:
            db: Firestore client wrapper
            max_workouts: Cap on workouts per user
        """
        self._db = db
        self.max_workouts = max_workouts

    @property
    def _workouts(self) -> firestore.CollectionReference:
        return self._db.client.collection("workouts")

    @property
    def _statuses(self) -> firestore.CollectionReference:
        return self._db.client.collection("workout_statuses")

    def _workout_ref(self, workout_id: str) -> firestore.DocumentReference:
        if not is_document_id(workout_id):
            raise NotFoundError("Workout not found.")
        return self._workouts.document(workout_id)

    def _owned_query(self, username: str):
        return self._workouts.where("username", "==", username)

    # ==================== Workout Operations ====================

    def count_workouts(self, username: str) -> int:
        return sum(1 for _ in self._owned_query(username).stream())

    def list_workouts(self, username: str) -> list[Workout]:
        """All workouts of a user, oldest first."""
        workouts = [_workout_from_doc(doc) for doc in self._owned_query(username).stream()]
        return sorted(workouts, key=lambda w: w.created_at)

    def get_workout(self, workout_id: str) -> Workout | None:
        doc = self._workout_ref(workout_id).get()
        if not doc.exists:
            return None
        return _workout_from_doc(doc)

    def get_workouts_by_id(self, workout_ids: set[str]) -> dict[str, Workout]:
        """Fetch several workouts at once; missing IDs are left out."""
        if not workout_ids:
            return {}
        refs = [self._workout_ref(workout_id) for workout_id in sorted(workout_ids)]
        return {
            doc.id: _workout_from_doc(doc)
            for doc in self._db.client.get_all(refs)
            if doc.exists
        }

    def create_workout(self, workout: Workout) -> Workout:
        """Store a new workout, enforcing the per-user cap and unique names.

        The count, the name check and the insert run in one transaction, so
        concurrent requests cannot push a user past the cap.

        Args:
            workout: Validated workout without an ID

        Returns:
            The stored workout with its new ID

        Raises:
            WorkoutLimitError: If the user already has the maximum
            DuplicateWorkoutNameError: If the user has a workout with that name
        """
        ref = self._workouts.document()
        owned_query = self._owned_query(workout.username)
        limit = self.max_workouts

        def create(transaction):
            owned = list(owned_query.stream(transaction=transaction))
            if len(owned) >= limit:
                raise WorkoutLimitError(limit)
            if any(doc.to_dict().get("name") == workout.name for doc in owned):
                raise DuplicateWorkoutNameError()
            transaction.create(ref, workout.to_document())

        firestore.transactional(create)(self._db.client.transaction())
        logger.info("Created workout %s (%s) for %s", ref.id, workout.name, workout.username)
        return workout.model_copy(update={"id": ref.id})

    def update_workout(self, workout_id: str, changes: WorkoutChanges) -> Workout:
        """Replace a workout's editable fields.

        Raises:
            NotFoundError: If the workout does not exist
            DuplicateWorkoutNameError: If the owner has another workout with the new name
        """
        ref = self._workout_ref(workout_id)
        update = {**changes.model_dump(mode="json"), "updated_at": utc_now().isoformat()}

        def apply(transaction):
            snapshot = ref.get(transaction=transaction)
            if not snapshot.exists:
                raise NotFoundError("Workout not found.")
            owner = snapshot.to_dict()["username"]
            same_name = (
                self._owned_query(owner)
                .where("name", "==", changes.name)
                .stream(transaction=transaction)
            )
            if any(doc.id != workout_id for doc in same_name):
                raise DuplicateWorkoutNameError()
            transaction.update(ref, update)
            return {**snapshot.to_dict(), **update}

        data = firestore.transactional(apply)(self._db.client.transaction())
        logger.info("Updated workout %s", workout_id)
        return Workout.model_validate({**data, "id": workout_id})

    def delete_workout(self, workout_id: str) -> int:
        """Delete a workout and every status that references it, atomically.

        Returns:
            Number of statuses deleted

        Raises:
            NotFoundError: If the workout does not exist
        """
        ref = self._workout_ref(workout_id)
        statuses_query = self._statuses.where("workout_id", "==", workout_id)

        def delete(transaction):
            if not ref.get(transaction=transaction).exists:
                raise NotFoundError("Workout not found.")
            statuses = list(statuses_query.stream(transaction=transaction))
            for status in statuses:
                transaction.delete(status.reference)
            transaction.delete(ref)
            return len(statuses)

        deleted = firestore.transactional(delete)(self._db.client.transaction())
        logger.info("Deleted workout %s and %d statuses", workout_id, deleted)
        return deleted

    # ==================== Status Operations ====================

    def save_statuses(self, statuses: list[WorkoutStatus]) -> None:
        """Upsert a list of statuses in one transaction: all are written or none.

        Every status must reference an existing workout owned by the same user.

        Raises:
            NotFoundError: If a referenced workout does not exist
        """
        refs = [self._workout_ref(workout_id) for workout_id in sorted({s.workout_id for s in statuses})]

        def save(transaction):
            owners = {
                doc.id: doc.to_dict()["username"]
                for doc in transaction.get_all(refs)
                if doc.exists
            }
            for status in statuses:
                if owners.get(status.workout_id) != status.username:
                    raise NotFoundError("Workout not found.")
            for status in statuses:
                transaction.set(self._statuses.document(status.document_id), status.to_document())

        firestore.transactional(save)(self._db.client.transaction())
        logger.info("Saved %d workout statuses", len(statuses))

    def get_statuses_for_day(self, username: str, log_date: date) -> list[WorkoutStatus]:
        query = (
            self._statuses.where("username", "==", username)
            .where("log_date", "==", log_date.isoformat())
        )
        return [WorkoutStatus.model_validate(doc.to_dict()) for doc in query.stream()]

    def get_completed(self, username: str, since: date | None = None) -> list[WorkoutStatus]:
        """Statuses marked "Yes", ordered by date ascending.

        Args:
            username: Owner of the statuses
            since: Earliest day to include (None for all)
        """
        query = (
            self._statuses.where("username", "==", username)
            .where("status", "==", CompletionStatus.YES.value)
        )
        if since is not None:
            query = query.where("log_date", ">=", since.isoformat())
        query = query.order_by("log_date")
        return [WorkoutStatus.model_validate(doc.to_dict()) for doc in query.stream()]

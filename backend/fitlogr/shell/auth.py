"""Authentication - Password hashing and user account operations.

Passwords are hashed with bcrypt. Plaintext passwords are never stored or logged.
"""

import logging
import os

import bcrypt
from google.api_core.exceptions import AlreadyExists, NotFound
from google.cloud import firestore

from ..core.errors import NotFoundError, UsernameTakenError
from ..core.models import Registration, User, ProfileUpdate, is_document_id
from .firestore_client import FitLogFirestoreClient, DAILY_LOGS


logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = int(os.environ.get("BCRYPT_ROUNDS", 12))


def hash_password(password: str) -> str:
    """Hash a password with a fresh salt.

    Args:
        password: The plaintext password

    Returns:
        bcrypt hash as a string
    """
    # bcrypt requires bytes, returns bytes. We store as string.
    salt = bcrypt.gensalt(rounds=BCRYPT_ROUNDS)
    return bcrypt.hashpw(password.encode("utf-8"), salt).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    """Check a plaintext password against a stored hash.

    Args:
        password: The plaintext password
        password_hash: Hash produced by hash_password

    Returns:
        True if they match
    """
    if not password or not password_hash:
        return False
    password_bytes = password.encode("utf-8")
    if len(password_bytes) > 72:
        return False
    try:
        return bcrypt.checkpw(password_bytes, password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def _delete_user_and_logs(transaction, user_ref) -> int:
    snapshot = user_ref.get(transaction=transaction)
    if not snapshot.exists:
        raise NotFoundError("User not found.")

    logs = list(user_ref.collection(DAILY_LOGS).stream(transaction=transaction))
    for log in logs:
        transaction.delete(log.reference)
    transaction.delete(user_ref)
    return len(logs)


class AuthClient:
    """Client for user registration, sign-in and profile operations.

    Handles user accounts against Firestore.
    """

    def __init__(self, db: FitLogFirestoreClient) -> None:
        """Initialize auth client.

        Args:
            db: Firestore client wrapper
        """
        self._db = db

    def _get_user_ref(self, username: str) -> firestore.DocumentReference:
        """Get reference to user document."""
        return self._db.user_ref(username)

    def register_user(self, registration: Registration) -> User:
        """Register a new user.

        The document ID is the username and ``create`` fails if it exists,
        so usernames stay unique without a separate lookup.

        Args:
            registration: Validated sign-up form

        Returns:
            The stored user

        Raises:
            UsernameTakenError: If the username is already registered
        """
        logger.info("Registering new user: %s", registration.username)

        user = User(
            password_hash=hash_password(registration.password),
            **registration.model_dump(exclude={"password"}),
        )

        try:
            self._get_user_ref(user.username).create(user.to_document())
        except AlreadyExists:
            logger.warning("Username already taken: %s", user.username)
            raise UsernameTakenError()

        logger.info("User registered successfully: %s", user.username)
        return user

    def get_user(self, username: str) -> User | None:
        """Get user by username.

        Args:
            username: The user's name

        Returns:
            User if found, None otherwise
        """
        if not is_document_id(username):
            return None
        user_doc = self._get_user_ref(username).get()
        if user_doc.exists:
            return User.model_validate(user_doc.to_dict())
        return None

    def username_taken(self, username: str) -> bool:
        """Check if a username is registered."""
        if not is_document_id(username):
            return False
        return self._get_user_ref(username).get().exists

    def authenticate(self, username: str, password: str) -> bool:
        """Check sign-in credentials.

        Unknown users and wrong passwords both return False.
        """
        user = self.get_user(username)
        if user is None:
            logger.warning("Sign-in for unknown user")
            return False
        if not verify_password(password, user.password_hash):
            logger.warning("Sign-in with wrong password for %s", username)
            return False
        return True

    def check_password(self, username: str, password: str) -> bool:
        """Verify a user's current password.

        Raises:
            NotFoundError: If the user does not exist
        """
        user = self.get_user(username)
        if user is None:
            raise NotFoundError("User not found.")
        return verify_password(password, user.password_hash)

    def update_profile(self, username: str, update: ProfileUpdate) -> User:
        """Apply a partial profile update; a new password is re-hashed.

        Raises:
            NotFoundError: If the user does not exist
        """
        changes = update.changes()
        if update.new_password:
            changes["password_hash"] = hash_password(update.new_password)

        ref = self._get_user_ref(username)
        if changes:
            try:
                ref.update(changes)
            except NotFound:
                raise NotFoundError("User not found.")
            logger.info("Updated profile for %s: %s", username, sorted(changes))

        user = self.get_user(username)
        if user is None:
            raise NotFoundError("User not found.")
        return user

    def delete_user(self, username: str) -> int:
        """Delete a user and all of their daily activity logs atomically.

        Args:
            username: The user to delete

        Returns:
            Number of daily logs deleted

        Raises:
            NotFoundError: If the user does not exist
        """
        delete_in_transaction = firestore.transactional(_delete_user_and_logs)
        deleted_logs = delete_in_transaction(
            self._db.client.transaction(), self._get_user_ref(username)
        )
        logger.info("Deleted user %s and %d daily logs", username, deleted_logs)
        return deleted_logs

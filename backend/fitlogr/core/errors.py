"""Domain Errors - Raised by the store layer, mapped to HTTP by handlers."""


class FitLogError(Exception):
    """Base class for expected, user-facing failures."""

    status_code = 400

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(FitLogError):
    """The addressed record does not exist."""

    status_code = 404


class UsernameTakenError(FitLogError):
    def __init__(self) -> None:
        super().__init__("Username is already taken.")


class WorkoutLimitError(FitLogError):
    def __init__(self, limit: int) -> None:
        super().__init__(f"A user can have a maximum of {limit} workout plans.")
        self.limit = limit


class DuplicateWorkoutNameError(FitLogError):
    def __init__(self) -> None:
        super().__init__(
            "A workout with this name already exists. Please choose a different name."
        )

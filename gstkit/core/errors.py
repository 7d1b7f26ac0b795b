# gstkit/core/errors.py
"""Exception types shared by the engines, repositories and API layer."""


class CalculationInputError(ValueError):
    """Raised when an engine receives a cost, amount, rate or margin it cannot price."""

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message)
        self.field = field


class StorageError(Exception):
    """Raised when the key-value store cannot read, write or decode a value."""

    def __init__(self, message: str, key: str | None = None):
        super().__init__(message)
        self.key = key


class PresetProtectedError(Exception):
    """Raised when deleting or overwriting a built-in margin preset."""
    pass


class ReminderNotFoundError(LookupError):
    """Raised when a reminder id is not among the active reminders."""
    pass


class InputParseError(CalculationInputError):
    """One or more raw form fields failed to parse; ``details`` lists each failure."""

    def __init__(self, details: list[dict[str, str | None]]):
        super().__init__("; ".join(d["message"] for d in details), field=details[0]["field"] if details else None)
        self.details = details

"""Lead store errors.

These propagate to the request that caused them; the HTTP layer maps them to
400 / 409 responses. Sheet sync failures are never raised, see
app.services.sync_state.SyncResult.
"""


class LeadError(Exception):
    """Base class for lead store errors."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class LeadValidationError(LeadError):
    """A required lead field is missing or malformed."""


class DuplicateLeadError(LeadError):
    """A lead with the same email already exists."""

    def __init__(self, message: str = "Email already registered"):
        super().__init__(message)

"""Error hierarchy for the relay service."""


class RelayError(Exception):
    """Base error. ``status_code`` is what the HTTP layer answers with."""

    status_code = 500

    def __init__(self, message: str, code: str = "RELAY_ERROR"):
        self.message = message
        self.code = code
        super().__init__(message)


class RelayValidationError(RelayError):
    """Missing or malformed request field."""

    status_code = 400

    def __init__(self, message: str = "Invalid request"):
        super().__init__(message, code="VALIDATION_ERROR")


class SessionInactiveError(RelayError):
    """Send refused because the session gate is closed."""

    status_code = 403

    def __init__(self, session: str):
        self.session = session
        super().__init__("Session not active", code="SESSION_INACTIVE")


class StorageError(RelayError):
    """Backing store failed to read or write a record."""

    status_code = 500

    def __init__(self, message: str = "Storage failure"):
        super().__init__(message, code="STORAGE_ERROR")

"""Exceptions raised inside the weather chat pipeline."""


class WeatherChatError(Exception):
    """Base exception for pipeline errors."""


class MalformedModelOutputError(WeatherChatError):
    """Raised when model output cannot be parsed or fails validation."""

    def __init__(self, message: str, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text


class SessionNotFoundError(WeatherChatError):
    """Raised when an operation targets a session that does not exist."""

    def __init__(self, session_id: str):
        super().__init__(f"Session {session_id} not found")
        self.session_id = session_id


class RequestValidationError(WeatherChatError):
    """Raised when a request payload is malformed, e.g. an empty message."""


class PersistenceError(WeatherChatError):
    """Raised when a turn cannot be written to the session store."""


class WeatherServiceError(WeatherChatError):
    """Raised when the weather-analysis service fails or is unreachable."""

"""Error taxonomy for the meal planning core."""

from enum import StrEnum

import httpx


class ErrorCategory(StrEnum):
    """Broad failure categories surfaced to callers."""

    SERVICE_UNAVAILABLE = "service_unavailable"
    CONFIGURATION = "configuration"
    INVALID_FORMAT = "invalid_format"
    NOT_FOUND = "not_found"
    GENERATION = "generation"


class MealPlannerError(Exception):
    """Base class for errors raised by the meal planner."""

    category: ErrorCategory = ErrorCategory.GENERATION

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ServiceUnavailableError(MealPlannerError):
    """Upstream transport failure that persisted after retries."""

    category = ErrorCategory.SERVICE_UNAVAILABLE


class ConfigurationError(MealPlannerError):
    """Authentication or configuration problem; never retried."""

    category = ErrorCategory.CONFIGURATION


class InvalidResponseFormatError(MealPlannerError):
    """The model returned content that could not be parsed."""

    category = ErrorCategory.INVALID_FORMAT


class NotFoundError(MealPlannerError):
    """A requested entity does not exist."""

    category = ErrorCategory.NOT_FOUND

    def __init__(self, resource: str, identifier: str) -> None:
        super().__init__(f"{resource} with id '{identifier}' not found")
        self.resource = resource
        self.identifier = identifier


class MealNotFoundError(NotFoundError):
    """No stored plan contains the requested meal."""

    def __init__(self, meal_id: str) -> None:
        super().__init__("Meal", meal_id)


class MealPlanNotFoundError(NotFoundError):
    """The requested meal plan does not exist."""

    def __init__(self, plan_id: str) -> None:
        super().__init__("Meal plan", plan_id)


class GenerationError(MealPlannerError):
    """Fatal upstream failure that is neither transport nor configuration."""

    category = ErrorCategory.GENERATION


_BUSY_MESSAGE = "The AI service is currently busy. Please try again in a few minutes."
_RATE_LIMIT_MESSAGE = "You have reached the rate limit. Please try again in a minute."
_UNAVAILABLE_MESSAGE = (
    "The AI service is temporarily unavailable. Please try again later."
)
_TRANSPORT_MARKERS = ("network", "connection error", "timeout", "timed out")


def classify_upstream_error(exc: Exception, default_message: str) -> MealPlannerError:
    """Map a raw upstream failure onto the error taxonomy."""
    if isinstance(exc, MealPlannerError):
        return exc
    text = str(exc).lower()
    status_code = status_code_from_exception(exc)
    if isinstance(exc, httpx.TransportError):
        return ServiceUnavailableError(_UNAVAILABLE_MESSAGE)
    if "rate limit" in text:
        return ServiceUnavailableError(_RATE_LIMIT_MESSAGE)
    if status_code == 429 or "429" in text:
        return ServiceUnavailableError(_BUSY_MESSAGE)
    if status_code in {500, 503} or "500" in text or "503" in text:
        return ServiceUnavailableError(_UNAVAILABLE_MESSAGE)
    if any(marker in text for marker in _TRANSPORT_MARKERS):
        return ServiceUnavailableError(_UNAVAILABLE_MESSAGE)
    if status_code in {401, 403} or "unauthorized" in text or "authenticat" in text:
        return ConfigurationError(
            "The AI service is not configured correctly. Please contact support."
        )
    return GenerationError(default_message)


def status_code_from_exception(exc: Exception) -> int | None:
    """Extract an HTTP status code from an exception, if available."""
    status_code = getattr(exc, "status_code", None)
    if isinstance(status_code, int):
        return status_code
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return status_code
    return None

"""Error taxonomy for suggestion generation and verification."""


class ProviderError(Exception):
    """Base class for failures raised by a suggestion provider."""


class RateLimitedError(ProviderError):
    """Provider refused the request because of rate limiting."""


class QuotaExceededError(ProviderError):
    """Provider account has no remaining quota."""


class InvalidKeyError(ProviderError):
    """Provider rejected the configured credentials."""


class ProviderServerError(ProviderError):
    """Provider answered with an unexpected HTTP status."""

    def __init__(self, status_code: int, detail: str = "") -> None:
        self.status_code = status_code
        message = f"server error {status_code}"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class ProviderNetworkError(ProviderError):
    """Provider could not be reached."""


TRANSIENT_SKIP_ERRORS: tuple[type[ProviderError], ...] = (
    RateLimitedError,
    QuotaExceededError,
)


class SuggestionParseError(ValueError):
    """Provider output could not be turned into a valid meal suggestion."""


class AllProvidersUnavailableError(RuntimeError):
    """Every provider in the chain failed for one request."""

    def __init__(self, errors: list[str] | None = None) -> None:
        self.errors = list(errors or [])
        message = "All suggestion providers are currently unavailable"
        if self.errors:
            message = f"{message}: {'; '.join(self.errors)}"
        super().__init__(message)


class ReferenceLookupError(RuntimeError):
    """Reference nutrient database request failed."""


class SelectionCancelledError(RuntimeError):
    """A pending manual selection was cancelled before it was resolved."""


class PlanGenerationError(RuntimeError):
    """A meal inside a multi-day run failed, so the whole run failed."""

    def __init__(self, day_number: int, meal_type: str, cause: Exception) -> None:
        self.day_number = day_number
        self.meal_type = meal_type
        self.cause = cause
        super().__init__(
            f"Generation failed for day {day_number} {meal_type}: {cause}"
        )


class SelectionNotActiveError(LookupError):
    """The referenced selection is not the one currently presented."""

class ModerationError(Exception):
    """Base class for failures inside the moderation pipeline."""


class RateLimiterUnavailableError(ModerationError):
    """The rate limiter store could not be reached or the check failed."""


class ModerationProviderError(ModerationError):
    """The AI provider call itself raised."""


class EmptyModerationOutputError(ModerationError):
    """The provider answered but returned no text."""


class MalformedVerdictError(ModerationError):
    """The provider text is not a JSON verdict object."""

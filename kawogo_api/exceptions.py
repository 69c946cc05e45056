"""
Error taxonomy for the analysis pipeline.

Every error carries the HTTP status and the public message the API returns
for it, so routes only have to render them.
"""
from typing import Optional


class AnalysisError(Exception):
    """Base class for failures of an analysis request."""

    status_code = 500
    default_message = "Analysis failed"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def public_message(self) -> str:
        return self.default_message


class ClientInputError(AnalysisError):
    """The upload is missing, empty, not an image or too large."""

    status_code = 400
    default_message = "Invalid image upload"

    @property
    def public_message(self) -> str:
        return self.message


class ConfigurationError(AnalysisError):
    """A required endpoint or credential is not configured."""

    status_code = 500
    default_message = "Service not configured"

    @property
    def public_message(self) -> str:
        return self.message


class ClassificationUpstreamError(AnalysisError):
    """
    The classification service could not produce a result.

    ``kind`` is one of: timeout, unavailable, rate_limited, auth,
    http_error, malformed.
    """

    STATUS_BY_KIND = {
        "timeout": 503,
        "unavailable": 503,
        "rate_limited": 429,
        "auth": 500,
        "http_error": 500,
        "malformed": 500,
    }

    MESSAGE_BY_KIND = {
        "timeout": "External service unavailable. Please try again later.",
        "unavailable": "External service unavailable. Please try again later.",
        "rate_limited": "Rate limit exceeded. Please wait and try again.",
        "auth": "API authentication failed. Please check configuration.",
    }

    def __init__(self, message: str, kind: str = "http_error", upstream_status: Optional[int] = None):
        super().__init__(message)
        self.kind = kind
        self.upstream_status = upstream_status

    @property
    def status_code(self) -> int:
        return self.STATUS_BY_KIND.get(self.kind, 500)

    @property
    def public_message(self) -> str:
        return self.MESSAGE_BY_KIND.get(self.kind, self.default_message)

    @property
    def exposes_details(self) -> bool:
        """Only the generic failure carries a details field."""
        return self.kind not in self.MESSAGE_BY_KIND


class AdviceUpstreamError(AnalysisError):
    """The text-generation service failed; always recovered by the fallback table."""

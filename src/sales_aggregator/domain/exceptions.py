"""Exception hierarchy for sales aggregation failures."""

from __future__ import annotations

from typing import Any, Mapping


class SalesAggregatorError(Exception):
    """Base class for all domain-level errors in the sales aggregator."""

    default_message = "Sales aggregator error occurred"

    def __init__(
        self, message: str | None = None, *, context: Mapping[str, Any] | None = None
    ):
        self.message = message or self.default_message
        self.context: Mapping[str, Any] = dict(context or {})
        formatted = self._format_message()
        super().__init__(formatted)

    def _format_message(self) -> str:
        if self.context:
            return f"{self.message} | context={self.context}"
        return self.message


class ConfigurationError(SalesAggregatorError):
    """Raised when the request cannot be resolved against the configuration."""

    default_message = "Sales aggregator is misconfigured"


class ValidationError(SalesAggregatorError):
    """Raised when a report query is malformed."""

    default_message = "Report query validation failed"


class UpstreamError(SalesAggregatorError):
    """Non-success response or transport fault while talking to the upstream API."""

    default_message = "Upstream request failed"

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        body: Any = None,
        context: Mapping[str, Any] | None = None,
    ):
        self.status_code = status_code
        self.body = body
        super().__init__(message, context=context)


class UpstreamTimeoutError(UpstreamError):
    """The upstream API did not answer within the configured timeout."""

    default_message = "Upstream request timed out"


class PaginationError(UpstreamError):
    """The upstream kept announcing pages beyond the configured page limit."""

    default_message = "Upstream pagination did not terminate"

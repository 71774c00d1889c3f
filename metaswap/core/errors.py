"""
Error Classification

Error types raised by the validator and the provider adapters.
The meta-aggregator swallows every per-provider error after logging it;
only direct single-provider calls see them.
"""

from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(str, Enum):
    """Categories of errors surfaced by the swapper."""

    VALIDATION = "validation"        # Request failed structural checks
    UNAVAILABLE = "unavailable"      # Provider cannot serve (missing credential)
    PROVIDER_HTTP = "provider_http"  # Status >= 400 or transport failure
    NO_ROUTE = "no_route"            # Every provider failed or found nothing
    MALFORMED = "malformed"          # Provider body missing expected fields


class SwapperError(Exception):
    """Base class for all swapper errors."""

    status_code: int = 500

    def __init__(
        self,
        message: str,
        category: ErrorCategory,
        provider: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.provider = provider
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.category.value,
            "message": self.message,
            "provider": self.provider,
            "details": self.details,
        }


class InvalidInput(SwapperError):
    """Swap request rejected by the parameter validator."""

    status_code = 400

    def __init__(self, message: str = "invalid input", provider: Optional[str] = None):
        super().__init__(message, category=ErrorCategory.VALIDATION, provider=provider)


class ProviderUnavailable(SwapperError):
    """Provider requires a credential that is not configured."""

    status_code = 503

    def __init__(self, provider: str, env_var: Optional[str] = None, message: Optional[str] = None):
        super().__init__(
            message or (f"missing env.{env_var}" if env_var else f"{provider} unavailable"),
            category=ErrorCategory.UNAVAILABLE,
            provider=provider,
            details={"env_var": env_var} if env_var else None,
        )


class ProviderHttpError(SwapperError):
    """Provider answered with status >= 400, or the request never completed.

    ``status`` is 0 for transport errors (connection refused, timeout).
    """

    status_code = 502

    def __init__(self, provider: str, status: int, reason: str = "", body: str = ""):
        super().__init__(
            f"{status}: {reason} - {body or '?'}",
            category=ErrorCategory.PROVIDER_HTTP,
            provider=provider,
            details={"status": status, "reason": reason, "body": body},
        )
        self.status = status
        self.reason = reason
        self.body = body


class MalformedResponse(SwapperError):
    """Provider body lacks a field the adapter depends on."""

    status_code = 502

    def __init__(self, provider: str, message: str):
        super().__init__(message, category=ErrorCategory.MALFORMED, provider=provider)


class NoRouteFound(SwapperError):
    """No provider produced a route. Raised only by the API and CLI surfaces."""

    status_code = 404

    def __init__(self, message: str = "No viable route found"):
        super().__init__(message, category=ErrorCategory.NO_ROUTE)

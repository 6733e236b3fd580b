"""
Domain errors raised by the tenant operator core.

NotFound is never raised from here: a missing Tenant or an already-absent
Namespace is a converged state, not a failure. Only the kopf boundary
(handlers.py) turns these into kopf.TemporaryError / kopf.PermanentError.
"""
import json
from typing import Optional


class TenantOperatorError(Exception):
    """Base class for all operator errors."""


class ConflictError(TenantOperatorError):
    """Optimistic-concurrency violation: the stored object moved on since it was read."""

    def __init__(self, kind: str, key: str, resource_version: Optional[str] = None):
        self.kind = kind
        self.key = key
        self.resource_version = resource_version
        super().__init__(
            f"{kind} {key} was modified concurrently "
            f"(stale resourceVersion={resource_version})"
        )


class ProvisionError(TenantOperatorError):
    """Namespace create/delete failed for a reason other than already-converged."""

    def __init__(self, operation: str, name: str, cause: Exception, status: Optional[int] = None):
        self.operation = operation
        self.name = name
        self.cause = cause
        self.status = status
        self.detail = error_detail(cause)
        super().__init__(f"Failed to {operation} namespace {name}: {self.detail}")


class PermanentInputError(ProvisionError):
    """The API server rejected the request as invalid; retrying will not help."""


def error_detail(cause: Exception) -> str:
    """
    Human-readable reason for an API failure.

    The API server explains a rejection in the Status object it returns as
    the response body; the exception's reason is only the HTTP phrase.
    """
    body = getattr(cause, "body", None)
    if body:
        if isinstance(body, bytes):
            body = body.decode("utf-8", errors="replace")
        try:
            message = json.loads(body).get("message")
        except (TypeError, ValueError, AttributeError):
            message = None
        if message:
            return message
    return getattr(cause, "reason", None) or str(cause)

"""
Faults - Domain-specific fault types.

Provides concrete fault classes for each domain:
- CONFIG faults (marker misuse)
- REGISTRY faults (router construction)
- SECURITY faults (guards, rate limiting)
- FLOW faults (procedure lookup)
"""

from typing import Any, Optional
from .core import Fault, FaultDomain, Severity


# ============================================================================
# CONFIG Faults
# ============================================================================

class ConfigFault(Fault):
    """Base class for configuration faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.FATAL,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.CONFIG,
            severity=severity,
            retryable=False,
            public=False,
            metadata=metadata,
        )


class ConfigInvalidFault(ConfigFault):
    """Configuration value is invalid."""

    def __init__(self, key: str, reason: str, **kwargs):
        super().__init__(
            code="CONFIG_INVALID",
            message=f"Configuration key '{key}' is invalid: {reason}",
            metadata={"key": key, "reason": reason, **kwargs.get("metadata", {})},
        )


class MarkerTargetFault(ConfigFault):
    """A marker was applied to a target it cannot resolve (strict mode only)."""

    def __init__(self, marker: str, reason: str, **kwargs):
        super().__init__(
            code="MARKER_TARGET_INVALID",
            message=f"Marker '{marker}' cannot be applied here: {reason}",
            metadata={"marker": marker, "reason": reason, **kwargs.get("metadata", {})},
        )


# ============================================================================
# REGISTRY Faults
# ============================================================================

class RegistrationFault(Fault):
    """Base class for router construction faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.FATAL,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.REGISTRY,
            severity=severity,
            retryable=False,
            public=False,
            metadata=metadata,
        )


class DuplicateRouteFault(RegistrationFault):
    """Two methods of one controller resolve to the same route name."""

    def __init__(self, route: str, controller: str, **kwargs):
        super().__init__(
            code="DUPLICATE_ROUTE",
            message=f'Duplicate route name "{route}" in {controller}',
            metadata={"route": route, "controller": controller, **kwargs.get("metadata", {})},
        )


class DuplicateNamespaceFault(RegistrationFault):
    """Two controllers resolve to the same router namespace."""

    def __init__(self, namespace: str, **kwargs):
        super().__init__(
            code="DUPLICATE_NAMESPACE",
            message=f'Duplicate controller router name "{namespace}"',
            metadata={"namespace": namespace, **kwargs.get("metadata", {})},
        )


class HandlerNotCallableFault(RegistrationFault):
    """A declared member is missing or not callable on the instance."""

    def __init__(self, member: str, controller: str, **kwargs):
        super().__init__(
            code="HANDLER_NOT_CALLABLE",
            message=f'Handler "{member}" on {controller} is not a function',
            metadata={"member": member, "controller": controller, **kwargs.get("metadata", {})},
        )


# ============================================================================
# SECURITY Faults
# ============================================================================

class SecurityFault(Fault):
    """Base class for security faults."""

    def __init__(
        self,
        code: str,
        message: str,
        *,
        severity: Severity = Severity.ERROR,
        public: bool = True,
        metadata: Optional[dict[str, Any]] = None,
    ):
        super().__init__(
            code=code,
            message=message,
            domain=FaultDomain.SECURITY,
            severity=severity,
            retryable=False,
            public=public,
            metadata=metadata,
        )


class AuthorizationFault(SecurityFault):
    """
    Guard rejected the call.

    ``code`` is either ``"UNAUTHORIZED"`` or ``"FORBIDDEN"``.
    """

    def __init__(self, code: str = "UNAUTHORIZED", path: Optional[str] = None, **kwargs):
        if code not in ("UNAUTHORIZED", "FORBIDDEN"):
            code = "UNAUTHORIZED"
        super().__init__(
            code=code,
            message="Forbidden" if code == "FORBIDDEN" else "Unauthorized",
            severity=Severity.WARN,
            metadata={"path": path, **kwargs.get("metadata", {})},
        )


class RateLimitExceededFault(SecurityFault):
    """Fixed-window limit exceeded for a route/key pair."""

    def __init__(self, limit: int, window: float, retry_after: float, **kwargs):
        super().__init__(
            code="TOO_MANY_REQUESTS",
            message=f"Rate limit exceeded ({limit} requests per {window:g}s). Retry after {int(retry_after)}s",
            severity=Severity.WARN,
            metadata={
                "limit": limit,
                "window": window,
                "retry_after": retry_after,
                **kwargs.get("metadata", {}),
            },
        )


# ============================================================================
# FLOW Faults
# ============================================================================

class ProcedureNotFoundFault(Fault):
    """No procedure is mounted at the requested path."""

    def __init__(self, path: str, **kwargs):
        super().__init__(
            code="PROCEDURE_NOT_FOUND",
            message=f'No procedure at path "{path}"',
            domain=FaultDomain.FLOW,
            public=True,
            metadata={"path": path, **kwargs.get("metadata", {})},
        )

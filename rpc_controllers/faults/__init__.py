"""
Faults - structured errors raised by rpc_controllers.

Errors are typed values with a stable ``code`` and a ``domain``:

- REGISTRY faults are raised while routers are built, so a
  misconfigured controller fails at startup rather than at first call.
- SECURITY faults are raised by guard and rate-limit middleware at
  call time.
- CONFIG faults cover invalid settings and, in strict mode, markers
  applied to targets they cannot resolve.
- FLOW faults cover calls to paths with no mounted procedure.
"""

from .core import (
    Fault,
    FaultDomain,
    Severity,
)

from .domains import (
    ConfigFault,
    ConfigInvalidFault,
    MarkerTargetFault,
    RegistrationFault,
    DuplicateRouteFault,
    DuplicateNamespaceFault,
    HandlerNotCallableFault,
    SecurityFault,
    AuthorizationFault,
    RateLimitExceededFault,
    ProcedureNotFoundFault,
)

__all__ = [
    # Core types
    "Fault",
    "FaultDomain",
    "Severity",

    # Config
    "ConfigFault",
    "ConfigInvalidFault",
    "MarkerTargetFault",

    # Registry
    "RegistrationFault",
    "DuplicateRouteFault",
    "DuplicateNamespaceFault",
    "HandlerNotCallableFault",

    # Security
    "SecurityFault",
    "AuthorizationFault",
    "RateLimitExceededFault",

    # Flow
    "ProcedureNotFoundFault",
]

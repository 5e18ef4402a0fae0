"""
Faults System (faults/).
"""

import pytest

from rpc_controllers.faults import (
    AuthorizationFault,
    ConfigInvalidFault,
    DuplicateNamespaceFault,
    DuplicateRouteFault,
    Fault,
    FaultDomain,
    HandlerNotCallableFault,
    MarkerTargetFault,
    ProcedureNotFoundFault,
    RateLimitExceededFault,
    RegistrationFault,
    SecurityFault,
    Severity,
)
from rpc_controllers.faults.core import DOMAIN_DEFAULTS


class TestFaultDomain:

    def test_standard_domains(self):
        assert FaultDomain.CONFIG.name == "config"
        assert FaultDomain.REGISTRY.name == "registry"
        assert FaultDomain.SECURITY.name == "security"
        assert FaultDomain.FLOW.name == "flow"

    def test_equality(self):
        assert FaultDomain("x") == FaultDomain("x")
        assert FaultDomain("x") != FaultDomain("y")
        assert FaultDomain.CONFIG == "config"

    def test_defaults_cover_standard_domains(self):
        for domain in (FaultDomain.CONFIG, FaultDomain.REGISTRY, FaultDomain.SECURITY, FaultDomain.FLOW):
            assert domain in DOMAIN_DEFAULTS


class TestFault:

    def test_requires_code_message_domain(self):
        with pytest.raises(TypeError):
            Fault(code="X")

    def test_domain_defaults(self):
        fault = Fault(code="X", message="m", domain=FaultDomain.REGISTRY)
        assert fault.severity is Severity.FATAL
        assert fault.retryable is False

    def test_str(self):
        fault = Fault(code="X", message="went wrong", domain=FaultDomain.FLOW)
        assert str(fault) == "[X] went wrong"

    def test_to_dict(self):
        fault = Fault(
            code="X", message="m", domain=FaultDomain.FLOW, public=True, metadata={"k": 1},
        )
        assert fault.to_dict() == {
            "code": "X",
            "message": "m",
            "domain": "flow",
            "severity": "error",
            "retryable": False,
            "public": True,
            "metadata": {"k": 1},
        }


class TestDomainFaults:

    def test_registration_faults(self):
        for fault in (
            DuplicateRouteFault("get", "Users"),
            DuplicateNamespaceFault("users"),
            HandlerNotCallableFault("get", "Users"),
        ):
            assert isinstance(fault, RegistrationFault)
            assert fault.domain == FaultDomain.REGISTRY

    def test_duplicate_route_message(self):
        fault = DuplicateRouteFault("get", "Users")
        assert fault.message == 'Duplicate route name "get" in Users'

    def test_authorization_codes(self):
        assert AuthorizationFault().code == "UNAUTHORIZED"
        assert AuthorizationFault("FORBIDDEN").code == "FORBIDDEN"
        assert AuthorizationFault("SOMETHING").code == "UNAUTHORIZED"
        assert isinstance(AuthorizationFault(), SecurityFault)
        assert AuthorizationFault().public is True

    def test_rate_limit(self):
        fault = RateLimitExceededFault(5, 60.0, 12.7, metadata={"key": "a:global"})
        assert fault.code == "TOO_MANY_REQUESTS"
        assert fault.severity is Severity.WARN
        assert fault.metadata == {"limit": 5, "window": 60.0, "retry_after": 12.7, "key": "a:global"}
        assert "Retry after 12s" in fault.message

    def test_config_faults(self):
        assert ConfigInvalidFault("k", "bad").domain == FaultDomain.CONFIG
        assert MarkerTargetFault("Query", "no target").metadata == {
            "marker": "Query", "reason": "no target",
        }

    def test_procedure_not_found(self):
        fault = ProcedureNotFoundFault("users.get")
        assert fault.domain == FaultDomain.FLOW
        assert fault.metadata["path"] == "users.get"

"""
Controller Base Class

Provides the optional Controller base class, the call objects the RPC
runtime hands to middleware and resolvers, and the protocols describing
the external RPC root this package builds procedures against.
"""

from typing import (
    Any,
    Awaitable,
    Callable,
    Dict,
    Literal,
    Mapping,
    Optional,
    Protocol,
    Union,
    runtime_checkable,
)
from dataclasses import dataclass, field


GuardResult = Union[bool, Literal["UNAUTHORIZED", "FORBIDDEN"]]
Guard = Callable[[Any, Any], Union[GuardResult, Awaitable[GuardResult]]]


@dataclass
class ProcedureCall:
    """
    Native call shape the RPC runtime passes to a resolver.

    A controller method without parameter markers receives this object
    as its single argument.

    Attributes:
        ctx: Request context built by the runtime
        input: Validated input (or raw input when no validator is attached)
        path: Dotted procedure path (e.g. ``"math.double"``)
        type: Procedure type (``"query"``, ``"mutation"``, ``"subscription"``)
        meta: Procedure metadata attached at build time
    """

    ctx: Any = None
    input: Any = None
    path: Optional[str] = None
    type: Optional[str] = None
    meta: Dict[str, Any] = field(default_factory=dict)


@dataclass
class MiddlewareCall(ProcedureCall):
    """
    Call shape passed to a middleware unit.

    ``next`` must be awaited to continue the chain; it optionally takes
    a replacement ``ctx`` for downstream units.
    """

    next: Optional[Callable[..., Awaitable[Any]]] = None


Middleware = Callable[[MiddlewareCall], Awaitable[Any]]


@runtime_checkable
class ProcedureBuilder(Protocol):
    """Immutable procedure builder exposed by the RPC root."""

    def use(self, middleware: Middleware) -> "ProcedureBuilder":
        ...

    def input(self, schema: Any) -> "ProcedureBuilder":
        ...

    def output(self, schema: Any) -> "ProcedureBuilder":
        ...

    def meta(self, meta: Mapping[str, Any]) -> "ProcedureBuilder":
        ...

    def query(self, resolver: Callable[..., Any]) -> Any:
        ...

    def mutation(self, resolver: Callable[..., Any]) -> Any:
        ...

    def subscription(self, resolver: Callable[..., Any]) -> Any:
        ...


@runtime_checkable
class RpcRoot(Protocol):
    """RPC root object: a base procedure builder plus a router factory."""

    @property
    def procedure(self) -> ProcedureBuilder:
        ...

    def router(self, record: Mapping[str, Any]) -> Any:
        ...


class Controller:
    """
    Optional base class for controllers.

    Subclasses have their method-level markers bound at class-definition
    time instead of on first read. Plain classes work the same way; they
    are bound lazily when a router is first built from them.

    Example:
        @Router("users")
        class UsersController(Controller):
            def __init__(self, repo):
                self.repo = repo

            @Query("byId")
            @UseSchema(UserIdSchema)
            async def get_by_id(self, call):
                return await self.repo.get(call.input["id"])
    """

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        from .metadata import bind_declarations
        bind_declarations(cls)

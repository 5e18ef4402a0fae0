"""
Controller Compiler - turns reconciled metadata plus a live instance
into procedures on an external RPC root.

For each declared method:
- class-level middleware, then method-level middleware
- merged meta (method entries override class entries)
- input validator, then output validator
- resolver (parameter-injecting wrapper when parameter markers exist)
- terminal call selected by kind: mutation / subscription / query
"""

from typing import Any, Callable, Dict, List, Optional, Tuple
from dataclasses import dataclass, field
import logging

from ..faults import DuplicateRouteFault, HandlerNotCallableFault
from .base import ProcedureCall, RpcRoot
from .metadata import (
    LIBRARY_TOKEN,
    ClassMeta,
    MetadataToken,
    MethodKind,
    MethodMeta,
    ParamMeta,
    read_store,
)

logger = logging.getLogger("rpc_controllers.controller.compiler")


@dataclass
class ControllerRouter:
    """Router built from one controller, with its explicit namespace (if any)."""
    name: Optional[str]
    router: Any


@dataclass
class RouteDescription:
    """Static description of one declared procedure."""
    controller: str
    member: str
    route: str
    kind: str
    middlewares: int = 0
    input: Any = None
    output: Any = None
    meta: Dict[str, Any] = field(default_factory=dict)
    ctx_index: Optional[int] = None
    input_index: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "controller": self.controller,
            "member": self.member,
            "route": self.route,
            "kind": self.kind,
            "middlewares": self.middlewares,
            "input": _schema_name(self.input),
            "output": _schema_name(self.output),
            "meta": self.meta,
            "ctx_index": self.ctx_index,
            "input_index": self.input_index,
        }


def _schema_name(schema: Any) -> Optional[str]:
    if schema is None:
        return None
    return getattr(schema, "__name__", None) or type(schema).__name__


def _kind_of(meta: MethodMeta) -> MethodKind:
    try:
        return MethodKind(meta.kind) if meta.kind is not None else MethodKind.QUERY
    except ValueError:
        return MethodKind.QUERY


def resolve_routes(owner: type, methods: Dict[str, MethodMeta]) -> List[Tuple[str, str]]:
    """
    Pair each declared member with its route name.

    Raises:
        DuplicateRouteFault: Two members resolve to the same route name
    """
    seen: Dict[str, str] = {}
    pairs = []
    for member, meta in methods.items():
        route = meta.name or member
        if route in seen:
            raise DuplicateRouteFault(
                route,
                owner.__name__,
                metadata={"members": [seen[route], member]},
            )
        seen[route] = member
        pairs.append((member, route))
    return pairs


def build_resolver(
    instance: Any,
    member: str,
    param_meta: Optional[ParamMeta] = None,
) -> Callable[[ProcedureCall], Any]:
    """
    Resolver for ``instance.member``.

    Without parameter markers the bound method receives the runtime's
    ``ProcedureCall`` unchanged. Otherwise the call is spread into a
    positional argument list with ``ctx`` and ``input`` at their marked
    indices and ``None`` in any gap.

    Raises:
        HandlerNotCallableFault: Member is missing or not callable
    """
    bound = getattr(instance, member, None)
    if not callable(bound):
        raise HandlerNotCallableFault(member, type(instance).__name__)

    if param_meta is None or param_meta.is_empty:
        return bound

    ctx_index = param_meta.ctx_index
    input_index = param_meta.input_index
    size = max(i for i in (ctx_index, input_index) if i is not None) + 1

    def resolver(call: ProcedureCall) -> Any:
        args: List[Any] = [None] * size
        if ctx_index is not None:
            args[ctx_index] = call.ctx
        if input_index is not None:
            args[input_index] = call.input
        return bound(*args)

    resolver.__name__ = member
    resolver.__wrapped__ = bound
    return resolver


def build_procedure(
    root: RpcRoot,
    instance: Any,
    member: str,
    class_meta: ClassMeta,
    method_meta: MethodMeta,
    param_meta: Optional[ParamMeta] = None,
) -> Any:
    """Build one procedure on ``root`` from reconciled metadata."""
    builder = root.procedure
    for mw in class_meta.middlewares:
        builder = builder.use(mw)
    for mw in method_meta.middlewares:
        builder = builder.use(mw)

    combined_meta = {**class_meta.meta, **method_meta.meta}
    if combined_meta:
        builder = builder.meta(combined_meta)
    if method_meta.input is not None:
        builder = builder.input(method_meta.input)
    if method_meta.output is not None:
        builder = builder.output(method_meta.output)

    resolver = build_resolver(instance, member, param_meta)

    kind = _kind_of(method_meta)
    if kind is MethodKind.MUTATION:
        return builder.mutation(resolver)
    if kind is MethodKind.SUBSCRIPTION:
        return builder.subscription(resolver)
    return builder.query(resolver)


def controller_to_router(
    root: RpcRoot,
    instance: Any,
    token: MetadataToken = LIBRARY_TOKEN,
) -> ControllerRouter:
    """
    Build a router from one controller instance.

    Raises:
        DuplicateRouteFault: Route names collide within the controller
        HandlerNotCallableFault: A declared member is not callable
    """
    owner = type(instance)
    store = read_store(owner, token)
    class_meta = store.class_meta or ClassMeta()

    record: Dict[str, Any] = {}
    for member, route in resolve_routes(owner, store.methods):
        record[route] = build_procedure(
            root,
            instance,
            member,
            class_meta,
            store.methods[member],
            store.params.get(member),
        )
        logger.debug(
            "Built %s procedure %s.%s -> %s",
            _kind_of(store.methods[member]).value, owner.__name__, member, route,
        )

    return ControllerRouter(name=class_meta.name, router=root.router(record))


def describe_controller(
    controller: Any,
    token: MetadataToken = LIBRARY_TOKEN,
) -> List[RouteDescription]:
    """
    Describe the procedures a controller class (or instance) declares.

    Applies the same registration checks as ``controller_to_router``
    without needing an RPC root.
    """
    owner = controller if isinstance(controller, type) else type(controller)
    store = read_store(owner, token)
    class_meta = store.class_meta or ClassMeta()

    descriptions = []
    for member, route in resolve_routes(owner, store.methods):
        if not callable(getattr(controller, member, None)):
            raise HandlerNotCallableFault(member, owner.__name__)
        meta = store.methods[member]
        params = store.params.get(member) or ParamMeta()
        descriptions.append(RouteDescription(
            controller=owner.__name__,
            member=member,
            route=route,
            kind=_kind_of(meta).value,
            middlewares=len(class_meta.middlewares) + len(meta.middlewares),
            input=meta.input,
            output=meta.output,
            meta={**class_meta.meta, **meta.meta},
            ctx_index=params.ctx_index,
            input_index=params.input_index,
        ))
    return descriptions

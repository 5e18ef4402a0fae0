"""
Controller Markers

Declarative markers for classes, methods and parameters. Markers only
record intent in the metadata store; nothing is built until a router is
requested.

Example:
    @Router("math")
    class MathController:
        @Query("double")
        @UseSchema(DoubleInput, int)
        def double(self, ctx: Annotated[AppCtx, Ctx()], input: Annotated[dict, Input()]):
            return input["x"] * 2
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Iterable, Mapping, Optional

from ..config import get_config
from ..faults import MarkerTargetFault
from ..middleware_ext.guard import create_auth_middleware
from ..middleware_ext.rate_limit import FixedWindowStore, create_rate_limit_middleware
from .base import Guard
from .metadata import (
    LIBRARY_TOKEN,
    ClassMeta,
    MetadataToken,
    MethodKind,
    MethodMeta,
    add_pending_marker,
    ensure_class_meta,
    ensure_method_meta,
    ensure_param_meta,
    get_store_from_context,
    get_store_from_owner,
)
from .targets import (
    ClassTarget,
    ContextTarget,
    DeferredTarget,
    MarkerTarget,
    MethodTarget,
    ParamTarget,
    Unresolved,
    classify_target,
)

logger = logging.getLogger("rpc_controllers.controller.decorators")

Marker = Callable[..., Any]


def _first(args: tuple) -> Any:
    return args[0] if args else None


def _unresolved(marker_name: str, target: MarkerTarget) -> None:
    reason = target.reason if isinstance(target, Unresolved) else (
        f"{type(target).__name__} is not supported"
    )
    if get_config().strict_markers:
        raise MarkerTargetFault(marker_name, reason)
    logger.debug("Marker %s ignored: %s", marker_name, reason)


def _class_meta_for(target: MarkerTarget, token: MetadataToken) -> Optional[ClassMeta]:
    if isinstance(target, ContextTarget):
        if not target.is_class:
            return None
        return ensure_class_meta(get_store_from_context(target.context, token))
    if isinstance(target, ClassTarget):
        return ensure_class_meta(get_store_from_owner(target.owner, token))
    return None


def _method_meta_for(target: MarkerTarget, token: MetadataToken) -> Optional[MethodMeta]:
    if isinstance(target, ContextTarget):
        name = getattr(target.context, "name", None)
        if target.is_class or not name:
            return None
        return ensure_method_meta(get_store_from_context(target.context, token), name)
    if isinstance(target, (MethodTarget, ParamTarget)):
        return ensure_method_meta(get_store_from_owner(target.owner, token), target.name)
    return None


# ============================================================================
# Marker constructors
# ============================================================================

def create_class_decorator(
    marker_name: str,
    apply: Callable[[ClassMeta], None],
    token: MetadataToken = LIBRARY_TOKEN,
) -> Marker:
    def marker(*args: Any) -> Any:
        target = classify_target(args)
        meta = _class_meta_for(target, token)
        if meta is None:
            _unresolved(marker_name, target)
        else:
            apply(meta)
        return _first(args)

    marker.__qualname__ = marker_name
    return marker


def create_method_decorator(
    marker_name: str,
    apply: Callable[[MethodMeta], None],
    token: MetadataToken = LIBRARY_TOKEN,
) -> Marker:
    def marker(*args: Any) -> Any:
        target = classify_target(args)
        if isinstance(target, DeferredTarget):
            add_pending_marker(target.member, marker)
            return target.member
        meta = _method_meta_for(target, token)
        if meta is None:
            _unresolved(marker_name, target)
        else:
            apply(meta)
        return _first(args)

    marker.__qualname__ = marker_name
    return marker


def create_class_or_method_decorator(
    marker_name: str,
    apply_class: Callable[[ClassMeta], None],
    apply_method: Callable[[MethodMeta], None],
    token: MetadataToken = LIBRARY_TOKEN,
) -> Marker:
    def marker(*args: Any) -> Any:
        target = classify_target(args)
        if isinstance(target, DeferredTarget):
            add_pending_marker(target.member, marker)
            return target.member

        class_meta = _class_meta_for(target, token)
        if class_meta is not None:
            apply_class(class_meta)
            return _first(args)

        method_meta = _method_meta_for(target, token)
        if method_meta is not None:
            apply_method(method_meta)
        else:
            _unresolved(marker_name, target)
        return _first(args)

    marker.__qualname__ = marker_name
    return marker


def normalize_middlewares(middlewares: Iterable[Any]) -> list:
    """Flatten one level of list/tuple nesting and drop empty entries."""
    flat = []
    for item in middlewares:
        if isinstance(item, (list, tuple)):
            flat.extend(mw for mw in item if mw)
        elif item:
            flat.append(item)
    return flat


def _append_middlewares(units: list) -> Callable[[Any], None]:
    def apply(meta: Any) -> None:
        meta.middlewares = [*meta.middlewares, *units]
    return apply


# ============================================================================
# Class markers
# ============================================================================

def Router(name: Optional[str] = None) -> Marker:
    """Set the namespace under which the controller is mounted."""
    def apply(meta: ClassMeta) -> None:
        if name:
            meta.name = name
    return create_class_decorator("Router", apply)


# ============================================================================
# Method markers
# ============================================================================

def _kind_marker(marker_name: str, kind: MethodKind, name: Optional[str]) -> Marker:
    def apply(meta: MethodMeta) -> None:
        meta.kind = kind
        if name:
            meta.name = name
    return create_method_decorator(marker_name, apply)


def Query(name: Optional[str] = None) -> Marker:
    """Declare a read procedure, optionally under an explicit route name."""
    return _kind_marker("Query", MethodKind.QUERY, name)


def Mutation(name: Optional[str] = None) -> Marker:
    """Declare a write procedure, optionally under an explicit route name."""
    return _kind_marker("Mutation", MethodKind.MUTATION, name)


def Subscription(name: Optional[str] = None) -> Marker:
    """Declare a stream procedure, optionally under an explicit route name."""
    return _kind_marker("Subscription", MethodKind.SUBSCRIPTION, name)


def UseSchema(input: Any, output: Any = None) -> Marker:
    """Attach an input validator and, optionally, an output validator."""
    def apply(meta: MethodMeta) -> None:
        meta.input = input
        if output is not None:
            meta.output = output
    return create_method_decorator("UseSchema", apply)


# ============================================================================
# Class-or-method markers
# ============================================================================

def UseMiddlewares(*middlewares: Any) -> Marker:
    """Append middleware units to the class or method they decorate."""
    units = normalize_middlewares(middlewares)
    apply = _append_middlewares(units)
    return create_class_or_method_decorator("UseMiddlewares", apply, apply)


def Auth(guard: Guard) -> Marker:
    """
    Guard a class or method with an authorization predicate.

    ``guard(ctx, input)`` returns ``True`` to proceed, or ``False`` /
    ``"UNAUTHORIZED"`` / ``"FORBIDDEN"`` to reject.
    """
    apply = _append_middlewares([create_auth_middleware(guard)])
    return create_class_or_method_decorator("Auth", apply, apply)


def RateLimit(
    points: int,
    duration_sec: float,
    key: Optional[Callable[[Any], Optional[str]]] = None,
    *,
    store: Optional[FixedWindowStore] = None,
) -> Marker:
    """
    Limit calls to ``points`` per fixed window of ``duration_sec`` seconds.

    Args:
        points: Admitted calls per window
        duration_sec: Window length (clamped to the configured minimum)
        key: Derives the limiter key from the request context
        store: Counter store; the process-wide default when omitted
    """
    mw = create_rate_limit_middleware(points, duration_sec, key, store=store)
    apply = _append_middlewares([mw])
    return create_class_or_method_decorator("RateLimit", apply, apply)


def Meta(meta: Optional[Mapping[str, Any]] = None, **entries: Any) -> Marker:
    """Shallow-merge free-form entries into the class or method meta."""
    extra = {**(meta or {}), **entries}

    def apply(target_meta: Any) -> None:
        target_meta.meta = {**target_meta.meta, **extra}
    return create_class_or_method_decorator("Meta", apply, apply)


# ============================================================================
# Parameter markers
# ============================================================================

class ParamMarker:
    """
    Marks the positional parameter that receives the context or the input.

    Apply directly as ``Ctx()(Owner, "method", 0)`` or place it in a
    hint: ``ctx: Annotated[AppCtx, Ctx()]``.
    """

    __rpc_param_marker__ = True

    def __init__(self, slot: str):
        self.slot = slot

    def __repr__(self) -> str:
        return "Ctx()" if self.slot == "ctx" else "Input()"

    def __call__(self, *args: Any) -> Any:
        target = classify_target(args)
        if not isinstance(target, ParamTarget):
            _unresolved(repr(self), target)
            return _first(args)

        store = get_store_from_owner(target.owner, LIBRARY_TOKEN)
        ensure_method_meta(store, target.name)
        meta = ensure_param_meta(store, target.name)
        if self.slot == "ctx":
            meta.ctx_index = target.index
        else:
            meta.input_index = target.index
        return _first(args)


def Ctx() -> ParamMarker:
    """Mark the parameter that receives the request context."""
    return ParamMarker("ctx")


def Input() -> ParamMarker:
    """Mark the parameter that receives the validated input."""
    return ParamMarker("input")

"""
Controller Metadata Store

Declarations made by markers are kept in a ``DecoratorStore`` per class,
in one of two physical locations:

- legacy:  ``cls.__rpc_controllers__[token]``, written by markers applied
           directly to a class or to ``(owner, name[, index])``
- modern:  ``cls.__rpc_metadata__[token]``, the per-class metadata bag
           reached through a ``DecoratorContext``

``read_store`` reconciles both into one logical view. Tokens are
private per marker family, so stores written by one
``make_decorators(root)`` factory are invisible to another.
"""

from __future__ import annotations

import builtins
import inspect
import logging
import sys
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, TypeVar

from ..config import get_config
from ..faults import MarkerTargetFault
from .targets import DecoratorContext

logger = logging.getLogger("rpc_controllers.controller.metadata")

LEGACY_ATTR = "__rpc_controllers__"
METADATA_ATTR = "__rpc_metadata__"
PENDING_ATTR = "__rpc_markers__"
BOUND_ATTR = "__rpc_bound__"

T = TypeVar("T")


class MetadataToken:
    """Private key under which one marker family stores its declarations."""

    __slots__ = ("name",)

    def __init__(self, name: str):
        self.name = name

    def __repr__(self) -> str:
        return f"MetadataToken({self.name!r})"


LIBRARY_TOKEN = MetadataToken("rpc-controllers")


class MethodKind(str, Enum):
    """Procedure kind; selects the terminal builder call."""
    QUERY = "query"
    MUTATION = "mutation"
    SUBSCRIPTION = "subscription"


# ============================================================================
# Data model
# ============================================================================

@dataclass
class ClassMeta:
    """
    Class-level declarations.

    Attributes:
        name: Router namespace (``None`` falls back to the class name)
        middlewares: Units applied before every method-level unit
        meta: Free-form entries merged into every procedure's meta
    """
    name: Optional[str] = None
    middlewares: List[Any] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)


@dataclass
class MethodMeta:
    """
    Method-level declarations.

    Attributes:
        kind: Procedure kind (``None`` builds a query)
        name: Route name override (``None`` uses the member name)
        input: Input validator reference
        output: Output validator reference
        middlewares: Method-level units, in declaration order
        meta: Free-form entries (override class-level entries)
    """
    kind: Optional[MethodKind] = None
    name: Optional[str] = None
    input: Any = None
    output: Any = None
    middlewares: List[Any] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)


@dataclass
class ParamMeta:
    """Zero-based positions (``self`` excluded) for the context and input arguments."""
    ctx_index: Optional[int] = None
    input_index: Optional[int] = None

    @property
    def is_empty(self) -> bool:
        return self.ctx_index is None and self.input_index is None


@dataclass
class DecoratorStore:
    class_meta: Optional[ClassMeta] = None
    methods: Dict[str, MethodMeta] = field(default_factory=dict)
    params: Dict[str, ParamMeta] = field(default_factory=dict)


def ensure_class_meta(store: DecoratorStore) -> ClassMeta:
    if store.class_meta is None:
        store.class_meta = ClassMeta()
    return store.class_meta


def ensure_method_meta(store: DecoratorStore, name: str) -> MethodMeta:
    return store.methods.setdefault(name, MethodMeta())


def ensure_param_meta(store: DecoratorStore, name: str) -> ParamMeta:
    return store.params.setdefault(name, ParamMeta())


# ============================================================================
# Physical accessors
# ============================================================================

def _ensure_store(holder: Dict[Any, Any], token: MetadataToken) -> DecoratorStore:
    store = holder.get(token)
    if store is None:
        store = holder[token] = DecoratorStore()
    return store


def _own_holder(owner: type, attr: str) -> Dict[Any, Any]:
    # Own attribute only; a subclass never writes into its parent's stores
    holder = vars(owner).get(attr)
    if holder is None:
        holder = {}
        setattr(owner, attr, holder)
    return holder


def get_store_from_owner(owner: type, token: MetadataToken = LIBRARY_TOKEN) -> DecoratorStore:
    """Legacy accessor: the store attached directly to the class."""
    return _ensure_store(_own_holder(owner, LEGACY_ATTR), token)


def get_store_from_context(context: Any, token: MetadataToken = LIBRARY_TOKEN) -> DecoratorStore:
    """Modern accessor: the store inside the context's shared metadata bag."""
    bag = getattr(context, "metadata", None)
    if bag is None:
        bag = {}
        context.metadata = bag
    return _ensure_store(bag, token)


def class_metadata(owner: type) -> Dict[Any, Any]:
    """The per-class metadata bag handed to modern-mode contexts."""
    return _own_holder(owner, METADATA_ATTR)


# ============================================================================
# Deferred declarations
# ============================================================================

def _underlying_function(member: Any) -> Any:
    if isinstance(member, (staticmethod, classmethod)):
        return member.__func__
    return member


def add_pending_marker(member: Any, marker: Callable[..., Any]) -> None:
    """Record a marker applied with decorator syntax for replay at binding."""
    func = _underlying_function(member)
    pending = func.__dict__.get(PENDING_ATTR)
    if pending is None:
        pending = []
        setattr(func, PENDING_ATTR, pending)
    pending.append(marker)


def pending_markers(member: Any) -> List[Callable[..., Any]]:
    func = _underlying_function(member)
    return list(getattr(func, "__dict__", {}).get(PENDING_ATTR, ()))


@dataclass
class _BindState:
    """How far binding has progressed for one member of one class."""
    replayed: int = 0
    params_bound: bool = False


def bind_declarations(owner: type) -> None:
    """
    Replay pending markers of ``owner``'s own members.

    Each member's markers run in application order against a
    ``DecoratorContext`` sharing the class metadata bag. Parameter
    markers found in ``Annotated`` hints are applied through the legacy
    ``(owner, name, index)`` path.

    Progress is tracked per member, so a call after a failed replay, or
    after more markers were deferred onto a member, picks up where the
    previous one stopped. Markers already replayed never run twice.
    """
    for attr, member in list(vars(owner).items()):
        func = _underlying_function(member)
        if not inspect.isfunction(func):
            continue

        state = (vars(owner).get(BOUND_ATTR) or {}).get(attr) or _BindState()

        markers = pending_markers(member)
        if len(markers) > state.replayed:
            state = _own_holder(owner, BOUND_ATTR).setdefault(attr, state)
            context = DecoratorContext(
                kind="method",
                name=attr,
                metadata=class_metadata(owner),
                static=isinstance(member, staticmethod),
            )
            for marker in markers[state.replayed:]:
                marker(member, context)
                state.replayed += 1
            logger.debug("Bound %d marker(s) on %s.%s", len(markers), owner.__qualname__, attr)

        if not state.params_bound and _bind_annotated_params(owner, attr, member, func):
            _own_holder(owner, BOUND_ATTR).setdefault(attr, state).params_bound = True


# ============================================================================
# Parameter hints
# ============================================================================

class _HintNamespace(dict):
    """Evaluation namespace for string hints; unknown names become ``Any``."""

    def __init__(self, func: Any):
        super().__init__()
        self._globals = getattr(func, "__globals__", {})

    def __missing__(self, key: str) -> Any:
        if key in self._globals:
            return self._globals[key]
        if hasattr(builtins, key):
            return getattr(builtins, key)
        return Any


def _signature(func: Any) -> inspect.Signature:
    if sys.version_info >= (3, 14):
        import annotationlib
        return inspect.signature(func, annotation_format=annotationlib.Format.FORWARDREF)
    return inspect.signature(func)


def _resolve_hint(owner: type, attr: str, param: inspect.Parameter, func: Any) -> Any:
    """
    One parameter's hint, evaluated on its own.

    Names that cannot be resolved (``TYPE_CHECKING`` imports, forward
    references) evaluate to ``Any`` so ``Annotated`` metadata survives.
    Returns ``None`` when the hint cannot be evaluated at all.
    """
    hint = param.annotation
    if hint is inspect.Parameter.empty:
        return None
    if not isinstance(hint, str):
        return hint

    try:
        return eval(hint, getattr(func, "__globals__", {}), _HintNamespace(func))
    except Exception as e:
        reason = f"cannot evaluate hint {hint!r} of parameter {param.name!r} ({e})"
        if "Annotated" in hint and get_config().strict_markers:
            raise MarkerTargetFault(f"{owner.__qualname__}.{attr}", reason) from e
        logger.debug("Skipping %s.%s: %s", owner.__qualname__, attr, reason)
        return None


def _bind_annotated_params(owner: type, attr: str, member: Any, func: Any) -> bool:
    """Apply parameter markers found in hints; True when any was applied."""
    params = list(_signature(func).parameters.values())
    if not isinstance(member, staticmethod) and params:
        params = params[1:]

    applied = False
    for index, param in enumerate(params):
        hint = _resolve_hint(owner, attr, param, func)
        for marker in getattr(hint, "__metadata__", ()):
            if getattr(marker, "__rpc_param_marker__", False):
                marker(owner, attr, index)
                applied = True
    return applied


# ============================================================================
# Merge engine
# ============================================================================

def _prefer(modern: Any, legacy: Any) -> Any:
    return modern if modern is not None else legacy


def merge_class_meta(legacy: Optional[ClassMeta], modern: Optional[ClassMeta]) -> Optional[ClassMeta]:
    if legacy is None and modern is None:
        return None
    legacy = legacy or ClassMeta()
    modern = modern or ClassMeta()
    return ClassMeta(
        name=_prefer(modern.name, legacy.name),
        middlewares=[*legacy.middlewares, *modern.middlewares],
        meta={**legacy.meta, **modern.meta},
    )


def merge_method_meta(legacy: Optional[MethodMeta], modern: Optional[MethodMeta]) -> Optional[MethodMeta]:
    if legacy is None and modern is None:
        return None
    legacy = legacy or MethodMeta()
    modern = modern or MethodMeta()
    return MethodMeta(
        kind=_prefer(modern.kind, legacy.kind),
        name=_prefer(modern.name, legacy.name),
        input=_prefer(modern.input, legacy.input),
        output=_prefer(modern.output, legacy.output),
        middlewares=[*legacy.middlewares, *modern.middlewares],
        meta={**legacy.meta, **modern.meta},
    )


def merge_param_meta(legacy: Optional[ParamMeta], modern: Optional[ParamMeta]) -> Optional[ParamMeta]:
    if legacy is None and modern is None:
        return None
    legacy = legacy or ParamMeta()
    modern = modern or ParamMeta()
    return ParamMeta(
        ctx_index=_prefer(modern.ctx_index, legacy.ctx_index),
        input_index=_prefer(modern.input_index, legacy.input_index),
    )


def _merge_record(
    legacy: Dict[str, T],
    modern: Dict[str, T],
    merge_value: Callable[[Optional[T], Optional[T]], Optional[T]],
) -> Dict[str, T]:
    result: Dict[str, T] = {}
    for key in [*legacy, *(k for k in modern if k not in legacy)]:
        merged = merge_value(legacy.get(key), modern.get(key))
        if merged is not None:
            result[key] = merged
    return result


def merge_stores(legacy: Optional[DecoratorStore], modern: Optional[DecoratorStore]) -> DecoratorStore:
    """Reconcile a legacy-mode and a modern-mode store into one view."""
    legacy = legacy or DecoratorStore()
    modern = modern or DecoratorStore()
    return DecoratorStore(
        class_meta=merge_class_meta(legacy.class_meta, modern.class_meta),
        methods=_merge_record(legacy.methods, modern.methods, merge_method_meta),
        params=_merge_record(legacy.params, modern.params, merge_param_meta),
    )


def read_own_store(owner: type, token: MetadataToken = LIBRARY_TOKEN) -> DecoratorStore:
    """Merged view of the declarations made on ``owner`` itself."""
    bind_declarations(owner)
    legacy = (vars(owner).get(LEGACY_ATTR) or {}).get(token)
    modern = (vars(owner).get(METADATA_ATTR) or {}).get(token)
    return merge_stores(legacy, modern)


def inherit_store(base: DecoratorStore, derived: DecoratorStore) -> DecoratorStore:
    """
    Layer a subclass's declarations over its parent's.

    Class-level declarations merge like the two storage modes (derived
    plays the modern side). Method and parameter entries are replaced
    whole by member name; inherited members keep their position.
    """
    return DecoratorStore(
        class_meta=merge_class_meta(base.class_meta, derived.class_meta),
        methods={**base.methods, **derived.methods},
        params={**base.params, **derived.params},
    )


def read_store(owner: type, token: MetadataToken = LIBRARY_TOKEN) -> DecoratorStore:
    """
    Merged view of ``owner``'s declarations for ``token``, inherited ones
    included.

    Walks ``owner.__mro__`` from the most basic class, binding each class
    first. Physical stores are only read, never mutated.
    """
    store = DecoratorStore()
    for cls in reversed(owner.__mro__):
        if cls is object:
            continue
        store = inherit_store(store, read_own_store(cls, token))
    return store

"""
Marker Target Classification

Markers can be invoked in several shapes. ``classify_target`` looks at
the positional arguments once and returns a tagged variant, so each
marker only switches on the variant type:

    (target, context)         -> ContextTarget   (modern: shared metadata bag)
    (cls,)                    -> ClassTarget     (legacy: class attribute)
    (func,)                   -> DeferredTarget  (decorator syntax on a def)
    (owner, name[, None])     -> MethodTarget    (legacy)
    (owner, name, index)      -> ParamTarget     (legacy)
    anything else             -> Unresolved
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union


@dataclass
class DecoratorContext:
    """
    Per-declaration context for modern-mode markers.

    Attributes:
        kind: ``"class"`` or ``"method"``
        name: Declared member (or class) name
        metadata: Per-class metadata bag shared by every declaration of
            the class; created on first use when ``None``
        static: Whether the member is a staticmethod
    """
    kind: str
    name: Optional[str] = None
    metadata: Optional[Dict[Any, Any]] = None
    static: bool = False


def is_decorator_context(value: Any) -> bool:
    """True when ``value`` exposes ``kind`` and ``name`` like a DecoratorContext."""
    if isinstance(value, DecoratorContext):
        return True
    if value is None or isinstance(value, (str, int, type)):
        return False
    return hasattr(value, "kind") and hasattr(value, "name")


@dataclass(frozen=True)
class ContextTarget:
    target: Any
    context: Any

    @property
    def is_class(self) -> bool:
        return self.context.kind == "class"


@dataclass(frozen=True)
class ClassTarget:
    owner: type


@dataclass(frozen=True)
class DeferredTarget:
    member: Any


@dataclass(frozen=True)
class MethodTarget:
    owner: type
    name: str


@dataclass(frozen=True)
class ParamTarget:
    owner: type
    name: str
    index: int


@dataclass(frozen=True)
class Unresolved:
    reason: str


MarkerTarget = Union[
    ContextTarget, ClassTarget, DeferredTarget, MethodTarget, ParamTarget, Unresolved
]


def _owner_of(target: Any) -> Optional[type]:
    if target is None:
        return None
    if isinstance(target, type):
        return target
    return type(target)


def _is_member_name(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def _is_index(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _is_declarable(value: Any) -> bool:
    if isinstance(value, (staticmethod, classmethod)):
        return True
    return callable(value) and hasattr(value, "__dict__")


def classify_target(args: tuple) -> MarkerTarget:
    """Classify the positional arguments a marker was invoked with."""
    if not args:
        return Unresolved("no target given")

    if len(args) == 2 and is_decorator_context(args[1]):
        return ContextTarget(args[0], args[1])

    if len(args) == 1:
        target = args[0]
        if isinstance(target, type):
            return ClassTarget(target)
        if _is_declarable(target):
            return DeferredTarget(target)
        return Unresolved(f"cannot decorate {type(target).__name__!r} object")

    if len(args) > 3:
        return Unresolved(f"unexpected {len(args)} arguments")

    owner = _owner_of(args[0])
    name = args[1]
    if owner is None:
        return Unresolved("target has no owning class")
    if not _is_member_name(name):
        return Unresolved("missing member name")

    if len(args) == 3 and args[2] is not None:
        if not _is_index(args[2]):
            return Unresolved(f"invalid parameter index {args[2]!r}")
        return ParamTarget(owner, name, args[2])

    return MethodTarget(owner, name)

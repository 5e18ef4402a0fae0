"""
Root-bound marker factory.

``make_decorators(root)`` returns markers that record into a store
private to that factory, plus a ``controller_to_router`` reading only
that store. Two factories never see each other's declarations, even on
the same class.

Example:
    d = make_decorators(root)

    class UserController:
        @d.query(input=UserId)
        def get_by_id(self, call):
            return {"id": call.input["id"]}

    users = d.controller_to_router(UserController())
"""

from dataclasses import dataclass
from typing import Any, Callable, Mapping, Optional

from .base import RpcRoot
from .compiler import controller_to_router as _controller_to_router
from .decorators import Marker, create_method_decorator, normalize_middlewares
from .metadata import MetadataToken, MethodKind, MethodMeta


@dataclass(frozen=True)
class Decorators:
    query: Callable[..., Marker]
    mutation: Callable[..., Marker]
    input: Callable[[Any], Marker]
    use: Callable[..., Marker]
    meta: Callable[..., Marker]
    controller_to_router: Callable[[Any], Any]
    token: MetadataToken


def _default_kind(meta: MethodMeta) -> None:
    if meta.kind is None:
        meta.kind = MethodKind.QUERY


def make_decorators(root: RpcRoot) -> Decorators:
    """Create markers and a router converter bound to ``root``."""
    token = MetadataToken(f"rpc-controllers:{id(root):x}")

    def _apply_options(
        meta: MethodMeta,
        input: Any = None,
        use: Any = None,
        extra: Optional[Mapping[str, Any]] = None,
    ) -> None:
        if input is not None:
            meta.input = input
        if use:
            units = normalize_middlewares(use if isinstance(use, (list, tuple)) else [use])
            meta.middlewares = [*meta.middlewares, *units]
        if extra:
            meta.meta = {**meta.meta, **extra}

    def _kind(marker_name: str, kind: MethodKind) -> Callable[..., Marker]:
        def factory(
            *,
            input: Any = None,
            use: Any = None,
            meta: Optional[Mapping[str, Any]] = None,
        ) -> Marker:
            def apply(method_meta: MethodMeta) -> None:
                method_meta.kind = kind
                _apply_options(method_meta, input, use, meta)
            return create_method_decorator(marker_name, apply, token)
        return factory

    def input(schema: Any) -> Marker:
        def apply(meta: MethodMeta) -> None:
            _default_kind(meta)
            meta.input = schema
        return create_method_decorator("input", apply, token)

    def use(*middlewares: Any) -> Marker:
        units = normalize_middlewares(middlewares)

        def apply(meta: MethodMeta) -> None:
            _default_kind(meta)
            meta.middlewares = [*meta.middlewares, *units]
        return create_method_decorator("use", apply, token)

    def meta(extra: Optional[Mapping[str, Any]] = None, **entries: Any) -> Marker:
        merged = {**(extra or {}), **entries}

        def apply(method_meta: MethodMeta) -> None:
            _default_kind(method_meta)
            method_meta.meta = {**method_meta.meta, **merged}
        return create_method_decorator("meta", apply, token)

    def controller_to_router(instance: Any) -> Any:
        return _controller_to_router(root, instance, token).router

    return Decorators(
        query=_kind("query", MethodKind.QUERY),
        mutation=_kind("mutation", MethodKind.MUTATION),
        input=input,
        use=use,
        meta=meta,
        controller_to_router=controller_to_router,
        token=token,
    )

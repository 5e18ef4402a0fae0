"""
Class Router - composes per-controller routers into one namespaced tree.
"""

from typing import Any, Dict, List, Mapping, Union
from dataclasses import dataclass, field
import logging

from ..config import get_config
from ..faults import DuplicateNamespaceFault
from .base import RpcRoot
from .compiler import RouteDescription, controller_to_router, describe_controller
from .metadata import read_store

logger = logging.getLogger("rpc_controllers.controller.router")

Controllers = Union[List[Any], tuple, Mapping[str, Any]]


@dataclass
class ClassRouterResult:
    """
    Attributes:
        router: Combined router keyed by namespace
        routers: The individual per-namespace routers
    """
    router: Any
    routers: Dict[str, Any] = field(default_factory=dict)


def default_router_name(class_name: str) -> str:
    """Lower-camel-case a class name; empty names fall back to the configured default."""
    if not class_name:
        return get_config().default_router_name
    return class_name[0].lower() + class_name[1:]


def namespace_for(controller: Any) -> str:
    """Explicit namespace of the controller's class, else its lower-camel-cased name."""
    owner = controller if isinstance(controller, type) else type(controller)
    class_meta = read_store(owner).class_meta
    if class_meta is not None and class_meta.name:
        return class_meta.name
    return default_router_name(owner.__name__)


def _iter_namespaced(controllers: Controllers):
    if isinstance(controllers, Mapping):
        yield from controllers.items()
        return

    seen = set()
    for controller in controllers:
        key = namespace_for(controller)
        if key in seen:
            raise DuplicateNamespaceFault(key)
        seen.add(key)
        yield key, controller


def create_class_router(root: RpcRoot, controllers: Controllers) -> ClassRouterResult:
    """
    Build one router from many controller instances.

    A sequence derives each namespace from the controller (duplicates are
    rejected); a mapping uses its keys as namespaces verbatim.

    Raises:
        DuplicateNamespaceFault: Two sequence entries share a namespace
        DuplicateRouteFault: Route names collide within one controller
        HandlerNotCallableFault: A declared member is not callable
    """
    routers: Dict[str, Any] = {}
    for key, controller in _iter_namespaced(controllers):
        routers[key] = controller_to_router(root, controller).router
        logger.debug("Mounted %s under %r", type(controller).__name__, key)

    return ClassRouterResult(router=root.router(dict(routers)), routers=routers)


def describe_controllers(controllers: Controllers) -> Dict[str, List[RouteDescription]]:
    """Describe every controller by namespace, applying registration checks."""
    return {
        key: describe_controller(controller)
        for key, controller in _iter_namespaced(controllers)
    }

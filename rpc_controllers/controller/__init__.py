"""
Controllers - declarative RPC controllers.

Classes and methods are annotated with markers; routers are built from
the recorded declarations against any root implementing ``RpcRoot``.

Example:
    @Router("math")
    class MathController:
        @Query()
        @UseSchema(DoubleInput)
        def double(self, call):
            return call.input["x"] * 2

    result = create_class_router(root, [MathController()])
"""

from .base import (
    Controller,
    Guard,
    GuardResult,
    Middleware,
    MiddlewareCall,
    ProcedureBuilder,
    ProcedureCall,
    RpcRoot,
)
from .targets import DecoratorContext, classify_target
from .metadata import (
    LIBRARY_TOKEN,
    ClassMeta,
    DecoratorStore,
    MetadataToken,
    MethodKind,
    MethodMeta,
    ParamMeta,
    bind_declarations,
    merge_stores,
    read_store,
)
from .decorators import (
    Auth,
    Ctx,
    Input,
    Meta,
    Mutation,
    Query,
    RateLimit,
    Router,
    Subscription,
    UseMiddlewares,
    UseSchema,
    create_class_decorator,
    create_class_or_method_decorator,
    create_method_decorator,
)
from .compiler import (
    ControllerRouter,
    RouteDescription,
    build_procedure,
    controller_to_router,
    describe_controller,
)
from .router import (
    ClassRouterResult,
    create_class_router,
    default_router_name,
    describe_controllers,
)
from .factory import Decorators, make_decorators

__all__ = [
    # Base
    "Controller",
    "Guard",
    "GuardResult",
    "Middleware",
    "MiddlewareCall",
    "ProcedureBuilder",
    "ProcedureCall",
    "RpcRoot",
    # Metadata
    "DecoratorContext",
    "classify_target",
    "LIBRARY_TOKEN",
    "ClassMeta",
    "DecoratorStore",
    "MetadataToken",
    "MethodKind",
    "MethodMeta",
    "ParamMeta",
    "bind_declarations",
    "merge_stores",
    "read_store",
    # Markers
    "Auth",
    "Ctx",
    "Input",
    "Meta",
    "Mutation",
    "Query",
    "RateLimit",
    "Router",
    "Subscription",
    "UseMiddlewares",
    "UseSchema",
    "create_class_decorator",
    "create_class_or_method_decorator",
    "create_method_decorator",
    # Routers
    "ControllerRouter",
    "RouteDescription",
    "build_procedure",
    "controller_to_router",
    "describe_controller",
    "ClassRouterResult",
    "create_class_router",
    "default_router_name",
    "describe_controllers",
    "Decorators",
    "make_decorators",
]

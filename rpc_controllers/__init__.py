"""
rpc_controllers - class-based controllers for RPC routers.

Declare procedures with markers on plain classes, then build routers
against an RPC root:

    from rpc_controllers import Router, Query, Mutation, UseSchema, Auth, RateLimit
    from rpc_controllers import create_class_router

    @Router("users")
    class UsersController:
        @Query("byId")
        @UseSchema(UserId)
        async def get_by_id(self, call):
            ...

        @Mutation()
        @Auth(lambda ctx, input: ctx.user is not None)
        @RateLimit(5, 60)
        async def rename(self, call):
            ...

    app = create_class_router(root, [UsersController()]).router
"""

__version__ = "1.0.0"

from .controller import (
    Auth,
    ClassRouterResult,
    Controller,
    ControllerRouter,
    Ctx,
    DecoratorContext,
    Decorators,
    Input,
    LIBRARY_TOKEN,
    Meta,
    MetadataToken,
    MethodKind,
    Middleware,
    MiddlewareCall,
    Mutation,
    ProcedureBuilder,
    ProcedureCall,
    Query,
    RateLimit,
    RouteDescription,
    Router,
    RpcRoot,
    Subscription,
    UseMiddlewares,
    UseSchema,
    controller_to_router,
    create_class_router,
    describe_controller,
    make_decorators,
)
from .middleware_ext import (
    FixedWindowStore,
    create_auth_middleware,
    create_rate_limit_middleware,
)
from .config import ConfigLoader, ControllersConfig, get_config, set_config
from .faults import (
    AuthorizationFault,
    DuplicateNamespaceFault,
    DuplicateRouteFault,
    Fault,
    FaultDomain,
    HandlerNotCallableFault,
    MarkerTargetFault,
    RateLimitExceededFault,
)

__all__ = [
    "__version__",
    # Markers
    "Router",
    "Query",
    "Mutation",
    "Subscription",
    "UseSchema",
    "UseMiddlewares",
    "Auth",
    "RateLimit",
    "Meta",
    "Ctx",
    "Input",
    # Building
    "Controller",
    "controller_to_router",
    "create_class_router",
    "describe_controller",
    "make_decorators",
    "ClassRouterResult",
    "ControllerRouter",
    "Decorators",
    "RouteDescription",
    # Protocols and call shapes
    "RpcRoot",
    "ProcedureBuilder",
    "ProcedureCall",
    "MiddlewareCall",
    "Middleware",
    "DecoratorContext",
    "MetadataToken",
    "LIBRARY_TOKEN",
    "MethodKind",
    # Middleware
    "FixedWindowStore",
    "create_auth_middleware",
    "create_rate_limit_middleware",
    # Config
    "ConfigLoader",
    "ControllersConfig",
    "get_config",
    "set_config",
    # Faults
    "Fault",
    "FaultDomain",
    "AuthorizationFault",
    "RateLimitExceededFault",
    "DuplicateRouteFault",
    "DuplicateNamespaceFault",
    "HandlerNotCallableFault",
    "MarkerTargetFault",
]

import pkgutil
from importlib import import_module
from typing import Iterator

from fastapi import APIRouter
from fastapi.routing import APIRoute

from library_api.logging import logger

HTTP_API_PACKAGE = "library_api.api.http"


def iter_module_routers(
    package: str = HTTP_API_PACKAGE,
) -> Iterator[tuple[str, APIRouter]]:
    """
    Yield ``(module name, router)`` for every module in package that
    defines a module-level ``router``, in name order.
    """
    modules = sorted(
        info.name for info in pkgutil.iter_modules(import_module(package).__path__)
    )

    for name in modules:
        router = getattr(import_module(f"{package}.{name}"), "router", None)
        if not isinstance(router, APIRouter):
            logger.debug(f"Skipping {package}.{name}: no router")
            continue
        yield name, router


def collect_subrouters(package: str = HTTP_API_PACKAGE) -> APIRouter:
    """Include every module router of package into one APIRouter."""
    api = APIRouter()
    for name, router in iter_module_routers(package):
        api.include_router(router)
        logger.debug(f"Registered {len(router.routes)} routes from {name}")
    return api


def collect_api_routes(package: str = HTTP_API_PACKAGE) -> list[APIRoute]:
    """
    Every endpoint declared in package, read from the module routers.

    The module routers hold the APIRoute objects their decorators created
    (prefix included), whatever shape the application gives them once they
    are included.
    """
    return [
        route
        for _, router in iter_module_routers(package)
        for route in router.routes
        if isinstance(route, APIRoute)
    ]

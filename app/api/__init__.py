from fastapi import APIRouter
import importlib
import logging
import pkgutil
import pathlib
from typing import Dict

logger = logging.getLogger(__name__)

api_router = APIRouter(prefix="/api/v1")
BASE_PACKAGE = "app.api"
BASE_PATH = pathlib.Path(__file__).parent


def include_routers_from_package(package: str, path: pathlib.Path) -> Dict[str, int]:
    """
    Discover every module in the API package that exposes a ``router`` and
    mount it on the versioned API router, in module name order.
    :param package: Dotted package name to scan.
    :param path: Filesystem path of that package.
    :return: Mapping of loaded module name to its number of routes.
    """
    loaded: Dict[str, int] = {}

    logger.info(f"📋 Taskflow API - Loading routers from {package}")

    modules = sorted(
        pkgutil.iter_modules([str(path)], prefix=f"{package}."),
        key=lambda module_info: module_info.name,
    )
    for module_info in modules:
        module_name = module_info.name.rsplit(".", 1)[-1]
        if module_name.startswith("_"):
            continue

        module = importlib.import_module(module_info.name)
        router = getattr(module, "router", None)
        if not isinstance(router, APIRouter):
            logger.debug(f"No router in {module_info.name}")
            continue

        api_router.include_router(router)
        loaded[module_name] = len(router.routes)
        logger.info(
            f"✅ Mounted {module_name} at {router.prefix or '/'} "
            f"({loaded[module_name]} routes)"
        )

    logger.info(f"📊 {len(loaded)} routers mounted: {', '.join(loaded)}")
    return loaded


loaded_modules = include_routers_from_package(BASE_PACKAGE, BASE_PATH)

__all__ = ["api_router", "loaded_modules"]

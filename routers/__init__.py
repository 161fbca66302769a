from dynaconf import Dynaconf

from .base import BaseRouter
from .openwrt import OpenWrtRouter  # Import all concrete implementations


def get_router(config: Dynaconf) -> BaseRouter:
    """Router factory: returns an instance of the appropriate router class."""

    router_type = config.general.router_type

    if router_type == "openwrt":
        return OpenWrtRouter(config.openwrt)
    else:
        raise ValueError(f"Unsupported router type: {router_type}")

"""Infrastructure layer: configuration."""

from .config import (
    DeliveryConfig,
    get_config,
    get_default_config,
    get_delivery_config,
    load_config,
    reload_config,
    reset_config_cache,
    save_config,
)

__all__ = [
    "DeliveryConfig",
    "get_config",
    "get_default_config",
    "get_delivery_config",
    "load_config",
    "reload_config",
    "reset_config_cache",
    "save_config",
]

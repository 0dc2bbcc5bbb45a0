"""
Gateway Configuration

All settings come from the environment once, at app creation, and are then
passed around explicitly as a GatewayConfig value.
"""

import os
from dataclasses import dataclass

STORE_BACKENDS = ("memory", "file")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


@dataclass
class GatewayConfig:
    """Configuration for the Figma image gateway."""
    # Figma API
    figma_token: str = ""
    figma_api_base: str = "https://api.figma.com"

    # Admin gate (empty credentials deny every admin request)
    admin_username: str = ""
    admin_password: str = ""

    # Stores
    store_backend: str = "memory"          # "memory" or "file"
    store_dir: str = "./figma_image_store"

    # Edge cache
    edge_cache_enabled: bool = True
    edge_cache_dir: str = "./figma_image_cache"
    edge_cache_max_size_mb: int = 500
    edge_cache_ttl_hours: int = 24

    def __post_init__(self):
        if self.store_backend not in STORE_BACKENDS:
            raise ValueError(
                f"Invalid store backend: {self.store_backend}. Use: {', '.join(STORE_BACKENDS)}"
            )

    @classmethod
    def from_env(cls) -> "GatewayConfig":
        return cls(
            figma_token=os.getenv("FIGMA_TOKEN", ""),
            figma_api_base=os.getenv("FIGMA_API_BASE", "https://api.figma.com"),
            admin_username=os.getenv("ADMIN_USERNAME", ""),
            admin_password=os.getenv("ADMIN_PASSWORD", ""),
            store_backend=os.getenv("IMAGE_STORE_BACKEND", "memory").strip().lower(),
            store_dir=os.getenv("IMAGE_STORE_DIR", "./figma_image_store"),
            edge_cache_enabled=_env_bool("EDGE_CACHE_ENABLED", True),
            edge_cache_dir=os.getenv("EDGE_CACHE_DIR", "./figma_image_cache"),
            edge_cache_max_size_mb=int(os.getenv("EDGE_CACHE_MAX_SIZE_MB", "500")),
            edge_cache_ttl_hours=int(os.getenv("EDGE_CACHE_TTL_HOURS", "24")),
        )

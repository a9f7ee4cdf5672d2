from .loader import load_config
from .models import (
    BuildConfig,
    ChecksConfig,
    EnvironmentConfig,
    ServerConfig,
    SiteConfig,
    SiteMetaConfig,
    WatchConfig,
)

__all__ = [
    "BuildConfig",
    "ChecksConfig",
    "EnvironmentConfig",
    "ServerConfig",
    "SiteConfig",
    "SiteMetaConfig",
    "WatchConfig",
    "load_config",
]

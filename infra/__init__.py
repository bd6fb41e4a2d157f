from .paths import LOG_DIR, MATCH_STORAGE_DIR, PROJECT_ROOT, STORAGE_DIR
from .logger import configure_from_settings, configure_logging, get_logger
from .settings import Settings, get_settings

__all__ = [
    "PROJECT_ROOT",
    "STORAGE_DIR",
    "MATCH_STORAGE_DIR",
    "LOG_DIR",
    "configure_logging",
    "configure_from_settings",
    "get_logger",
    "Settings",
    "get_settings",
]

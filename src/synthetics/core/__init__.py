from .config import ConfigManager, deep_merge
from .exceptions import (
    SyntheticsError,
    ConfigurationError,
    LoaderError,
    SessionError,
)

__all__ = [
    # Configuration
    "ConfigManager",
    "deep_merge",

    # Exceptions
    "SyntheticsError",
    "ConfigurationError",
    "LoaderError",
    "SessionError",
]

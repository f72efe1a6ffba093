"""Core types shared by every layer."""

from .config import ConfigError, ReleaseConfig, load_config, resolve_token
from .errors import ErrorCode
from .result import Err, Ok, Result

__all__ = [
    # config
    "ConfigError",
    "ReleaseConfig",
    "load_config",
    "resolve_token",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Result",
]

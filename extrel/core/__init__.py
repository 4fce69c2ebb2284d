"""Core types: results, exit codes, configuration."""

from .config import ConfigError, ReleaseConfig, load_config
from .errors import ErrorCode
from .result import Err, Ok, Outcome, Result, Skipped, is_err, is_ok, is_skipped

__all__ = [
    # config
    "ConfigError",
    "ReleaseConfig",
    "load_config",
    # errors
    "ErrorCode",
    # result
    "Err",
    "Ok",
    "Outcome",
    "Result",
    "Skipped",
    "is_err",
    "is_ok",
    "is_skipped",
]

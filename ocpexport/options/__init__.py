"""
Export option handling.

Provides the closed set of recognized options and the per-session
store holding their values.
"""

from .store import (
    ConfigurationStore,
    OptionKey,
    OptionSpec,
    OPTION_SPECS,
)

__all__ = [
    "ConfigurationStore",
    "OptionKey",
    "OptionSpec",
    "OPTION_SPECS",
]

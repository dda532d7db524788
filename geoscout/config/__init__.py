"""
TOML configuration loading for geoscout.
"""

from .manager import ConfigManager, isConfiguredValue, loadDotEnv, substituteEnvVars

__all__ = [
    "ConfigManager",
    "isConfiguredValue",
    "loadDotEnv",
    "substituteEnvVars",
]

"""
Configuration management for geoscout.
"""

import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional

import tomli

from geoscout.exceptions import ConfigurationError
from geoscout.rate_limiter import RateLimiterManagerConfig

logger = logging.getLogger(__name__)

# Values treated as "not configured" for API keys
PLACEHOLDER_VALUES = frozenset({"", "YOUR_API_KEY_HERE", "YOUR_GEOAPIFY_API_KEY"})
ENV_PLACEHOLDER_RE = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_-]*)\}")


def replaceMatchToEnv(match: re.Match[str]) -> str:
    """Replace environment variable placeholder with its value.

    Returns the original placeholder if the variable is not set.
    """
    key = match.group(1)
    return os.getenv(key, match.group(0))


def substituteEnvVars(value: Any) -> Any:
    """Recursively substitute ${VAR_NAME} placeholders in configuration values, dood!

    Strings are substituted, dicts and lists are processed recursively,
    everything else is returned unchanged.
    """
    if isinstance(value, str):
        return ENV_PLACEHOLDER_RE.sub(replaceMatchToEnv, value)
    elif isinstance(value, dict):
        return {k: substituteEnvVars(v) for k, v in value.items()}
    elif isinstance(value, list):
        return [substituteEnvVars(item) for item in value]
    return value


def loadDotEnv(path: str = ".env") -> Dict[str, str]:
    """
    Simple dotenv file loader.

    Reads KEY=VALUE lines into the process environment. Variables that are
    already set are not overridden. A missing file is not an error.

    Returns:
        Dictionary of key-value pairs from the file
    """
    ret: Dict[str, str] = {}
    dotEnvPath = Path(path)
    if not dotEnvPath.is_file():
        return ret

    with open(dotEnvPath, "rt") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, value = line.split("=", 1)
            ret[key.strip()] = value.strip().strip('"')

    for k, v in ret.items():
        os.environ.setdefault(k, v)
    logger.debug(f"Loaded {len(ret)} variables from {path}")
    return ret


def isConfiguredValue(value: Any) -> bool:
    """False for empty values, known placeholders and unresolved ${VAR} references."""
    if not isinstance(value, str):
        return value is not None
    value = value.strip()
    return value not in PLACEHOLDER_VALUES and not ENV_PLACEHOLDER_RE.search(value)


class ConfigManager:
    """Manages configuration loading for geoscout, dood!

    Example config.toml:
        [nominatim]
        user-agent = "my-app/1.0 (me@example.com)"
        min-interval = 1.0

        [geoapify]
        api-key = "${GEOAPIFY_API_KEY}"
    """

    def __init__(
        self,
        configPath: str = "config.toml",
        configDirs: Optional[List[str]] = None,
        dotEnvFile: Optional[str] = ".env",
    ):
        """Load the main config file, merge config directories and substitute env vars.

        Raises:
            ConfigurationError: If nothing can be loaded
        """
        self.configPath = configPath
        self.configDirs = configDirs or []
        if dotEnvFile:
            loadDotEnv(dotEnvFile)
        self.config: Dict[str, Any] = substituteEnvVars(self._loadConfig())

    def _findTomlFilesRecursive(self, directory: str) -> List[Path]:
        """Recursively find all .toml files in a directory, dood!"""
        tomlFiles: List[Path] = []
        dirPath = Path(directory)

        if not dirPath.exists():
            logger.warning(f"Config directory {directory} does not exist, skipping, dood!")
            return tomlFiles

        if not dirPath.is_dir():
            logger.warning(f"Config path {directory} is not a directory, skipping, dood!")
            return tomlFiles

        for tomlFile in dirPath.rglob("*.toml"):
            if tomlFile.is_file():
                tomlFiles.append(tomlFile)
                logger.debug(f"Found config file: {tomlFile}")

        return sorted(tomlFiles)

    def _mergeConfigs(self, baseConfig: Dict[str, Any], newConfig: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge two configuration dictionaries, dood!"""
        merged = baseConfig.copy()

        for key, value in newConfig.items():
            if key in merged and isinstance(merged[key], dict) and isinstance(value, dict):
                merged[key] = self._mergeConfigs(merged[key], value)
            else:
                merged[key] = value

        return merged

    def _loadTomlFile(self, path: Path) -> Dict[str, Any]:
        try:
            with open(path, "rb") as f:
                return tomli.load(f)
        except (OSError, tomli.TOMLDecodeError) as e:
            logger.error(f"Failed to load config file {path}: {e}")
            raise ConfigurationError(f"Failed to load config file {path}: {e}", query=str(path)) from e

    def _loadConfig(self) -> Dict[str, Any]:
        """Load configuration from TOML file and optional config directories.

        Files found in config directories are merged over the main file in
        sorted order. A broken directory file is logged and skipped.
        """
        configFile = Path(self.configPath)
        hasConfigFile = configFile.is_file()
        if not hasConfigFile and not self.configDirs:
            logger.error(f"Configuration file {self.configPath} not found!")
            raise ConfigurationError(f"Configuration file {self.configPath} not found", query=self.configPath)

        config: Dict[str, Any] = {}
        if hasConfigFile:
            config = self._loadTomlFile(configFile)
            logger.info(f"Loaded main config from {self.configPath}")

        for configDir in self.configDirs:
            tomlFiles = self._findTomlFilesRecursive(configDir)
            logger.info(f"Found {len(tomlFiles)} .toml files in {configDir}")

            for tomlFile in tomlFiles:
                try:
                    dirConfig = self._loadTomlFile(tomlFile)
                except ConfigurationError:
                    continue
                config = self._mergeConfigs(config, dirConfig)
                logger.info(f"Merged config from {tomlFile}")

        logger.info("Configuration loaded and merged successfully, dood!")
        return config

    def get(self, key: str, default=None) -> Any:
        """Get configuration value by key."""
        return self.config.get(key, default)

    def getLoggingConfig(self) -> Dict[str, Any]:
        """Get logging-specific configuration."""
        return self.get("logging", {})

    def getCacheConfig(self) -> Dict[str, Any]:
        """Get geocoding cache configuration (enabled = true by default)."""
        return self.get("cache", {})

    def getNominatimConfig(self) -> Dict[str, Any]:
        """
        Get Nominatim configuration

        Returns:
            Dict with base-url, user-agent, timeout, min-interval and
            accept-language keys (all optional)
        """
        return self.get("nominatim", {})

    def getGeoapifyConfig(self) -> Dict[str, Any]:
        """
        Get Geoapify configuration

        Returns:
            Dict with api-key, base-url, timeout and accept-language keys
            (all optional)
        """
        return self.get("geoapify", {})

    def getGeoapifyApiKey(self) -> Optional[str]:
        """Geoapify API key, None if unset or still a placeholder, dood!"""
        apiKey = self.getGeoapifyConfig().get("api-key")
        if not isConfiguredValue(apiKey):
            logger.info("Geoapify API key is not configured, category search is disabled")
            return None
        return str(apiKey).strip()

    def getRateLimiterConfig(self) -> RateLimiterManagerConfig:
        """Get ratelimiter-specific configuration."""
        return self.get("ratelimiter", {})

# src/ngspice_core/config.py
"""
Loads the process-wide engine configuration.

The configuration is read once, when the shared engine is first used. Values come
from an optional YAML file, validated against a cerberus schema, and are then
overridden by environment variables.
"""
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Optional, Union

import cerberus
import yaml

logger = logging.getLogger(__name__)

CONFIG_PATH_ENV_VAR = "NGSPICE_CORE_CONFIG"
LIBRARY_PATH_ENV_VAR = "NGSPICE_LIBRARY_PATH"
FATAL_POLICY_ENV_VAR = "NGSPICE_CORE_FATAL_POLICY"

FATAL_POLICY_RAISE = "raise"
FATAL_POLICY_ABORT = "abort"
FATAL_POLICIES = (FATAL_POLICY_RAISE, FATAL_POLICY_ABORT)


class ConfigParsingError(ValueError):
    """Custom exception for errors during engine configuration parsing."""
    pass


@dataclass(frozen=True)
class EngineConfig:
    """
    Settings for the shared ngspice engine.

    Attributes:
        library_path: Explicit path (or soname) of the ngspice shared library. When None,
                      the platform default name is searched for.
        fatal_policy: What to do when ngspice calls its fatal-exit hook. 'raise' marks the
                      engine as aborted and raises `EngineAbortedError` in the calling
                      thread; 'abort' terminates the process from inside the hook.
                      'abort' is the recommended setting for production processes,
                      since ngspice may have left global state half torn down. 'raise'
                      is the default so callers and tests can observe the fault; the
                      engine stays locked out for the rest of the process either way.
        reject_unsafe_directives: Reject 'quit', 'exit' and 'bg_*' directives before
                                  they reach the engine.
    """
    library_path: Optional[str] = None
    fatal_policy: str = FATAL_POLICY_RAISE
    reject_unsafe_directives: bool = True


_CONFIG_SCHEMA = {
    "library_path": {"type": "string", "empty": False, "nullable": True},
    "fatal_policy": {"type": "string", "allowed": list(FATAL_POLICIES)},
    "reject_unsafe_directives": {"type": "boolean"},
}


def parse_engine_config(raw_config: Optional[Dict[str, Any]]) -> EngineConfig:
    """
    Validates a raw configuration mapping and converts it to an `EngineConfig`.
    Missing keys keep their defaults.
    """
    if raw_config is None:
        return EngineConfig()
    if not isinstance(raw_config, dict):
        raise ConfigParsingError(
            f"Engine configuration must be a mapping, got {type(raw_config).__name__}."
        )
    validator = cerberus.Validator(_CONFIG_SCHEMA)
    if not validator.validate(raw_config):
        raise ConfigParsingError(f"Invalid engine configuration: {validator.errors}")
    return EngineConfig(**validator.document)


def _apply_environment(config: EngineConfig) -> EngineConfig:
    overrides: Dict[str, Any] = {}
    if library_path := os.environ.get(LIBRARY_PATH_ENV_VAR):
        overrides["library_path"] = library_path
    if fatal_policy := os.environ.get(FATAL_POLICY_ENV_VAR):
        fatal_policy = fatal_policy.strip().lower()
        if fatal_policy not in FATAL_POLICIES:
            raise ConfigParsingError(
                f"{FATAL_POLICY_ENV_VAR} must be one of {list(FATAL_POLICIES)}, got '{fatal_policy}'."
            )
        overrides["fatal_policy"] = fatal_policy
    if overrides:
        logger.debug(f"Engine configuration overridden from environment: {sorted(overrides)}")
        config = replace(config, **overrides)
    return config


def load_config(path: Optional[Union[str, Path]] = None) -> EngineConfig:
    """
    Loads the engine configuration.

    Args:
        path: Optional path to a YAML file. Defaults to the file named by the
              NGSPICE_CORE_CONFIG environment variable, if set.

    Returns:
        The validated `EngineConfig`, with environment overrides applied.

    Raises:
        ConfigParsingError: If the file cannot be read or fails validation.
    """
    if path is None:
        path = os.environ.get(CONFIG_PATH_ENV_VAR)

    raw_config = None
    if path is not None:
        config_path = Path(path)
        try:
            raw_config = yaml.safe_load(config_path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            raise ConfigParsingError(f"Failed to read engine configuration '{config_path}': {e}") from e
        logger.info(f"Loaded engine configuration from '{config_path}'.")

    return _apply_environment(parse_engine_config(raw_config))

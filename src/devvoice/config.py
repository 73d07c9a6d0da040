"""Application configuration.

Values come from safe defaults, then an optional YAML file, then environment
variables (highest precedence). Invalid values are logged and replaced by the
default so a bad setting never stops the assistant from starting.
"""

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any

import yaml

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "devvoice.yaml"
DEFAULT_DB_PATH = str(Path.home() / ".devvoice" / "devvoice.db")

STT_PROVIDERS = ("stub", "openai", "elevenlabs")
TTS_PROVIDERS = ("stub", "openai", "elevenlabs")
PLANNERS = ("keyword", "openai")

# config key -> environment variable
ENV_VARS = {
    "stt_provider": "DEVVOICE_STT_PROVIDER",
    "tts_provider": "DEVVOICE_TTS_PROVIDER",
    "planner": "DEVVOICE_PLANNER",
    "no_agent": "DEVVOICE_NO_AGENT",
    "record_seconds": "DEVVOICE_RECORD_SECONDS",
    "confirm_record_seconds": "DEVVOICE_CONFIRM_RECORD_SECONDS",
    "command_timeout": "DEVVOICE_COMMAND_TIMEOUT",
    "db_path": "DEVVOICE_DB_PATH",
    "enable_metrics": "DEVVOICE_ENABLE_METRICS",
    "mute": "DEVVOICE_MUTE",
}

_TRUE_VALUES = ("true", "1", "yes", "on")
_FALSE_VALUES = ("false", "0", "no", "off")


@dataclass
class AppConfig:
    """Runtime settings shared by the CLI and the HTTP server."""

    stt_provider: str = "elevenlabs"
    tts_provider: str = "elevenlabs"
    planner: str | None = None
    no_agent: bool = False
    record_seconds: int = 8
    confirm_record_seconds: int = 5
    command_timeout: float | None = None
    db_path: str = DEFAULT_DB_PATH
    enable_metrics: bool = False
    mute: bool = False
    openai_api_key: str | None = field(default=None, repr=False)
    elevenlabs_api_key: str | None = field(default=None, repr=False)

    @classmethod
    def from_env(
        cls,
        environ: Mapping[str, str] | None = None,
        config_path: str | None = None,
    ) -> "AppConfig":
        """Build the configuration from defaults, YAML file and environment.

        Args:
            environ: Environment mapping (defaults to os.environ)
            config_path: YAML file to read. Defaults to DEVVOICE_CONFIG_FILE,
                then devvoice.yaml in the working directory.

        Returns:
            AppConfig with every field validated
        """
        env = os.environ if environ is None else environ
        config = cls()

        path = config_path or env.get("DEVVOICE_CONFIG_FILE") or DEFAULT_CONFIG_FILE
        config.apply(load_config_file(path))

        overrides = {key: env[var] for key, var in ENV_VARS.items() if env.get(var)}
        config.apply(overrides)

        config.openai_api_key = env.get("OPENAI_API_KEY") or config.openai_api_key
        config.elevenlabs_api_key = env.get("ELEVENLABS_API_KEY") or config.elevenlabs_api_key
        return config

    def apply(self, values: Mapping[str, Any]) -> None:
        """Overlay raw values onto this config, keeping current values on error."""
        known = {f.name for f in fields(self)}
        for key, raw in values.items():
            if key not in known:
                logger.warning("Ignoring unknown config key: %s", key)
                continue
            try:
                setattr(self, key, _PARSERS[key](raw))
            except (TypeError, ValueError) as e:
                logger.warning(
                    "Invalid value for %s (%r): %s; keeping %r", key, raw, e, getattr(self, key)
                )


def load_config_file(path: str | Path) -> dict[str, Any]:
    """Load a YAML mapping of config values.

    Returns:
        The mapping, or an empty dict when the file is missing or invalid
    """
    if not os.path.exists(path):
        return {}

    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except (yaml.YAMLError, OSError) as e:
        logger.warning("Failed to load config from %s: %s", path, e)
        return {}

    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.warning("Config file %s must contain a YAML dictionary", path)
        return {}

    logger.debug("Loaded config from %s", path)
    return data


def parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE_VALUES:
        return True
    if text in _FALSE_VALUES:
        return False
    raise ValueError("expected a boolean")


def _parse_positive_int(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError("expected an integer")
    number = int(value)
    if number <= 0:
        raise ValueError("must be positive")
    return number


def _parse_timeout(value: Any) -> float | None:
    if value is None or str(value).strip().lower() in ("", "none", "0"):
        return None
    number = float(value)
    if number <= 0:
        raise ValueError("must be positive")
    return number


def _choice(options: tuple[str, ...]):
    def parse(value: Any) -> str:
        text = str(value).strip().lower()
        if text not in options:
            raise ValueError(f"expected one of {', '.join(options)}")
        return text

    return parse


def _optional_choice(options: tuple[str, ...]):
    parse_choice = _choice(options)

    def parse(value: Any) -> str | None:
        if value is None or str(value).strip().lower() in ("", "auto"):
            return None
        return parse_choice(value)

    return parse


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _non_empty_str(value: Any) -> str:
    text = str(value).strip()
    if not text:
        raise ValueError("must not be empty")
    return os.path.expanduser(text)


_PARSERS = {
    "stt_provider": _choice(STT_PROVIDERS),
    "tts_provider": _choice(TTS_PROVIDERS),
    "planner": _optional_choice(PLANNERS),
    "no_agent": parse_bool,
    "record_seconds": _parse_positive_int,
    "confirm_record_seconds": _parse_positive_int,
    "command_timeout": _parse_timeout,
    "db_path": _non_empty_str,
    "enable_metrics": parse_bool,
    "mute": parse_bool,
    "openai_api_key": _optional_str,
    "elevenlabs_api_key": _optional_str,
}

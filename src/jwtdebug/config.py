"""Configuration file handling.

Settings persist as a small JSON document. Values from the file only apply to
options the user did not set on the command line.
"""

import json
import logging
import os
from pathlib import Path
from typing import Iterable, List, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .errors import ConfigError
from .files import read_bounded_file
from .models import Options, OutputFormat

logger = logging.getLogger(__name__)


class Config(BaseModel):
    """Persisted defaults (camelCase on disk)."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    default_format: OutputFormat = Field("pretty", alias="defaultFormat")
    color_enabled: bool = Field(True, alias="colorEnabled")
    default_key_file: str = Field("", alias="defaultKeyFile")
    show_header: bool = Field(False, alias="showHeader")
    show_claims: bool = Field(True, alias="showClaims")
    show_signature: bool = Field(False, alias="showSignature")
    show_expiration: bool = Field(False, alias="showExpiration")
    decode_signature: bool = Field(False, alias="decodeSignature")
    ignore_expiration: bool = Field(False, alias="ignoreExpiration")


# Option name -> config field it falls back to
CONFIG_FALLBACKS = {
    "output_format": "default_format",
    "color": "color_enabled",
    "key_file": "default_key_file",
    "show_header": "show_header",
    "show_claims": "show_claims",
    "show_signature": "show_signature",
    "show_expiration": "show_expiration",
    "decode_signature": "decode_signature",
    "ignore_expiration": "ignore_expiration",
}


def default_config_paths() -> List[Path]:
    """Config locations in order of precedence.

    The working directory is never searched: a config dropped into a checkout
    could silently change key files or verification settings.
    """
    try:
        home = Path.home()
    except RuntimeError:
        return []
    return [
        home / ".jwtdebug.json",
        home / ".config" / "jwtdebug.json",
        home / ".config" / "jwtdebug" / "config.json",
    ]


def find_config_file(explicit_path: Optional[str] = None) -> Optional[Path]:
    if explicit_path:
        return Path(explicit_path)
    for path in default_config_paths():
        if path.exists():
            return path
    return None


def load_config(explicit_path: Optional[str] = None, missing_ok: bool = False) -> Config:
    """Load the config file, or defaults when none exists.

    An explicit path that does not exist is an error unless ``missing_ok``
    is set (``--save-config`` creating a new file).

    Raises:
        ConfigError: If the file cannot be read or is not a valid config
    """
    path = find_config_file(explicit_path)
    if path is None or (missing_ok and not path.exists()):
        return Config()

    data = read_bounded_file(path, label="config file", error=ConfigError)
    try:
        config = Config.model_validate_json(data)
    except ValidationError as e:
        raise ConfigError(f"failed to parse config file {path}: {e}") from e

    logger.debug(f"Loaded configuration from {path}")
    return config


def apply_config(options: Options, config: Config, explicit: Iterable[str]) -> Options:
    """Fill options not set on the command line from the config.

    A key file given explicitly always wins; an empty one falls back to
    ``defaultKeyFile``.
    """
    explicit = set(explicit)
    updates = {}
    for option_name, config_field in CONFIG_FALLBACKS.items():
        if option_name in explicit:
            continue
        if option_name == "key_file" and options.key_file:
            continue
        updates[option_name] = getattr(config, config_field)
    return options.model_copy(update=updates)


def config_from_options(config: Config, options: Options) -> Config:
    """Config reflecting the effective options, for ``--save-config``."""
    updates = {
        config_field: getattr(options, option_name)
        for option_name, config_field in CONFIG_FALLBACKS.items()
    }
    return config.model_copy(update=updates)


def save_config(config: Config, path: Optional[str] = None) -> Path:
    """Write the config as JSON, readable only by the owner.

    Raises:
        ConfigError: If the file cannot be written
    """
    target = Path(path) if path else Path.home() / ".jwtdebug.json"
    payload = json.dumps(config.model_dump(by_alias=True), indent=2) + "\n"
    try:
        fd = os.open(target, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload)
    except OSError as e:
        raise ConfigError(f"failed to write config file: {e}") from e

    logger.debug(f"Saved configuration to {target}")
    return target

"""Sweep configuration and settings.

This module provides the configuration model and I/O functions for
vmsweep. Connection defaults, the disk file pattern, extra exclusion
patterns, the rename grace period and enumeration parallelism can be
set here instead of on every command line.

Configuration is stored in ~/.config/vmsweep/config.toml. The password
is never stored; it is read from VMSWEEP_PASSWORD or prompted for.
"""

import logging
import os
import tomllib
from pathlib import Path
from tempfile import NamedTemporaryFile
from typing import Annotated

import tomli_w
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from vmsweep.core.paths import get_config_path
from vmsweep.errors import ConfigError, ConfigNotFoundError, ConfigParseError

logger = logging.getLogger(__name__)

PASSWORD_ENV_VAR = "VMSWEEP_PASSWORD"


class SweepConfig(BaseModel):
    """Configuration for vmsweep runs.

    Attributes:
        server: Default vCenter host.
        user: Default vCenter user.
        port: vCenter HTTPS port.
        verify_ssl: Verify the vCenter TLS certificate.
        disk_pattern: Glob pattern for disk files on datastores.
        exclude: Extra file name patterns never treated as orphans.
        grace_days: Days added to the run date in rename targets.
        workers: Datastores searched concurrently.
        output_dir: Report directory (None = XDG data dir).
    """

    model_config = ConfigDict(extra="forbid")

    server: Annotated[str | None, Field(description="Default vCenter host")] = None
    user: Annotated[str | None, Field(description="Default vCenter user")] = None
    port: Annotated[int, Field(ge=1, le=65535, description="vCenter HTTPS port")] = 443
    verify_ssl: Annotated[bool, Field(description="Verify TLS certificates")] = True
    disk_pattern: Annotated[
        str,
        Field(min_length=1, description="Glob pattern for disk files"),
    ] = "*.vmdk"
    exclude: Annotated[
        list[str],
        Field(description="Extra file name patterns to never treat as orphans"),
    ] = []
    grace_days: Annotated[
        int,
        Field(ge=0, le=365, description="Days until a renamed disk may be deleted"),
    ] = 15
    workers: Annotated[
        int,
        Field(ge=1, le=32, description="Datastores searched concurrently"),
    ] = 1
    output_dir: Annotated[
        Path | None,
        Field(description="Report directory (None = default data dir)"),
    ] = None


def load_config(path: Path | None = None) -> SweepConfig:
    """Load configuration from a TOML file.

    Args:
        path: Path to the config file. If None, uses the default config path.

    Returns:
        Validated SweepConfig object.

    Raises:
        ConfigNotFoundError: If the config file doesn't exist.
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    config_path = path or get_config_path()

    if not config_path.exists():
        raise ConfigNotFoundError(f"Config not found: {config_path}")

    try:
        with open(config_path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise ConfigParseError(f"Invalid TOML syntax: {e}") from e
    except OSError as e:
        raise ConfigError(f"Failed to read config: {e}") from e

    if "password" in data:
        logger.warning("Ignoring 'password' in %s; use %s instead", config_path, PASSWORD_ENV_VAR)
        data.pop("password")

    try:
        return SweepConfig.model_validate(data)
    except (ValueError, ValidationError) as e:
        raise ConfigError(f"Invalid config content: {e}") from e


def load_config_or_default(path: Path | None = None) -> SweepConfig:
    """Load the config file, falling back to defaults if it doesn't exist.

    Raises:
        ConfigParseError: If the TOML syntax is invalid.
        ConfigError: If the content doesn't match the schema.
    """
    try:
        return load_config(path)
    except ConfigNotFoundError:
        logger.debug("No config file, using defaults")
        return get_default_config()


def save_config(config: SweepConfig, path: Path | None = None) -> Path:
    """Save configuration to a TOML file.

    The file is written atomically by first writing to a temporary file
    and then using os.replace() for atomic rename.

    Args:
        config: The SweepConfig object to save.
        path: Path to save the config. If None, uses the default config path.

    Returns:
        Path where the config was saved.

    Raises:
        ConfigError: If the file cannot be written.
    """
    config_path = path or get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    data = _config_to_dict(config)

    tmp_path: Path | None = None
    try:
        with NamedTemporaryFile(
            mode="wb",
            dir=config_path.parent,
            delete=False,
            suffix=".tmp",
        ) as f:
            tmp_path = Path(f.name)
            tomli_w.dump(data, f)
        os.replace(str(tmp_path), str(config_path))
    except OSError as e:
        if tmp_path is not None and tmp_path.exists():
            tmp_path.unlink()
        raise ConfigError(f"Failed to write config: {e}") from e

    return config_path


def _config_to_dict(config: SweepConfig) -> dict[str, object]:
    """Convert SweepConfig to a dictionary for TOML serialization.

    TOML has no null, so unset optional values are left out.
    """
    data = config.model_dump(exclude_none=True)
    if "output_dir" in data:
        data["output_dir"] = str(data["output_dir"])
    return data


def get_default_config() -> SweepConfig:
    """Create a default SweepConfig."""
    return SweepConfig()


def get_password() -> str | None:
    """Return the vCenter password from the environment, if set."""
    return os.environ.get(PASSWORD_ENV_VAR) or None

import logging
import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from patchcov.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_PATH = Path("coverage/artifact-pr-patch-coverage-results.json")
DEFAULT_CONFIG_FILE = ".patchcov.yml"
ENV_PREFIX = "PATCHCOV_"


class Settings(BaseModel):
    """
    Options for one `pr-patch-coverage` run.

    Values are layered: field defaults, then the YAML config file, then
    ``PATCHCOV_*`` environment variables, then command-line flags.
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
    )

    base_branch: str | None = None
    head_branch: str | None = None
    head_tip_commit: str | None = None
    last_merge_commit: str | None = None
    output: str = str(DEFAULT_OUTPUT_PATH)
    repo_dir: Path = Path(".")
    timeout_sec: int = 60
    log_level: str = "INFO"


def _normalize_keys(data: dict[str, Any]) -> dict[str, Any]:
    return {str(key).replace("-", "_"): value for key, value in data.items()}


def read_config_file(config_path: Path) -> dict[str, Any]:
    config_path = Path(config_path)
    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with config_path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid config file ({config_path}): {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")
    return _normalize_keys(data)


def read_env_overrides() -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for field in Settings.model_fields:
        value = os.getenv(ENV_PREFIX + field.upper())
        if value is None or value == "":
            continue
        overrides[field] = value
    return overrides


def load_settings(
    config_path: Path | None = None,
    repo_dir: Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """
    Assemble `Settings` from every configuration layer.

    Without ``config_path``, ``.patchcov.yml`` in the repository is read when
    it exists. ``None`` entries in ``overrides`` are treated as unset.

    Raises:
        ConfigError: the config file is unreadable or a value is invalid.
    """
    cli = {k: v for k, v in (overrides or {}).items() if v is not None}
    if repo_dir is not None:
        cli.setdefault("repo_dir", repo_dir)

    values: dict[str, Any] = {}
    if config_path is None:
        candidate = Path(cli.get("repo_dir", ".")) / DEFAULT_CONFIG_FILE
        if candidate.exists():
            config_path = candidate

    if config_path is not None:
        logger.debug("Reading config from %s", config_path)
        values.update(read_config_file(config_path))

    values.update(read_env_overrides())
    values.update(cli)

    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigError(f"Invalid settings: {e}") from e

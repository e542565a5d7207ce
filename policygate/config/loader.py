"""Locate, read and validate policygate.yaml."""

import logging
import os
import re
from collections.abc import Iterator
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .models import PolicyGateConfig

PROJECT_CONFIG = "policygate.yaml"
USER_CONFIG = Path(".policygate") / "config.yaml"

_ENV_REF = re.compile(r"\$\{(\w+)\}")

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "error": logging.ERROR,
}


def config_candidates(path: str | os.PathLike | None = None) -> Iterator[Path]:
    """Yield the files ``load_config`` tries, highest precedence first."""
    if path:
        yield Path(path)
    yield Path.cwd() / PROJECT_CONFIG
    yield Path.home() / USER_CONFIG


def load_config(path: str | os.PathLike | None = None) -> PolicyGateConfig:
    """Return the first non-empty config file found, or the defaults.

    Files are tried in ``config_candidates`` order: ``path``, then
    ``./policygate.yaml``, then ``~/.policygate/config.yaml``. Missing and
    empty files are skipped. ``${VAR}`` in string values is replaced from the
    environment; unset variables expand to ``""``.

    Raises:
        ValueError: the selected file is not valid YAML or fails validation.
    """
    for candidate in config_candidates(path):
        data = _read_yaml(candidate)
        if data is not None:
            return _validate(candidate, data)
    return PolicyGateConfig()


def configure_logging(config: PolicyGateConfig) -> logging.Logger:
    """Apply ``config.log_level`` to the library logger only; handlers are left to the app."""
    logger = logging.getLogger("policygate")
    logger.setLevel(_LEVELS[config.log_level])
    return logger


def _read_yaml(path: Path) -> Any:
    if not path.is_file():
        return None
    try:
        return yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e


def _validate(path: Path, data: Any) -> PolicyGateConfig:
    try:
        return PolicyGateConfig.model_validate(_expand_env_vars(data))
    except ValidationError as e:
        raise ValueError(f"Invalid config in {path}: {e}") from e


def _expand_env_vars(value: Any) -> Any:
    if isinstance(value, str):
        return _ENV_REF.sub(_env_value, value)
    if isinstance(value, dict):
        return {key: _expand_env_vars(item) for key, item in value.items()}
    if isinstance(value, list):
        return list(map(_expand_env_vars, value))
    return value


def _env_value(match: re.Match) -> str:
    return os.environ.get(match.group(1), "")

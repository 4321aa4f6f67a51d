"""Loading of the landscape file."""

from pathlib import Path
from typing import Any, Literal, overload

import yaml  # type: ignore[import-untyped]
from loguru import logger
from pydantic import ValidationError

from src.app.landscape.models import LandscapeValues
from src.app.runtime.config.config_utils import (
    load_secret_files_into_env,
    substitute_env_vars,
)
from src.infra.constants import DEFAULT_CONSTANTS

LANDSCAPE_PATH = Path(DEFAULT_CONSTANTS.LANDSCAPE_FILE)


@overload
def load_values(
    file_path: Path = ..., processed: Literal[True] = ...
) -> LandscapeValues: ...


@overload
def load_values(file_path: Path = ..., *, processed: Literal[False]) -> dict[str, Any]: ...


def load_values(
    file_path: Path = LANDSCAPE_PATH, processed: bool = True
) -> LandscapeValues | dict[str, Any]:
    """
    Load the landscape file with environment variable substitution.

    Args:
        file_path: Path to the YAML file (default: landscape.yaml)
        processed: Whether to substitute environment variables and validate.
                  - True (default): substitute env vars and validate as LandscapeValues
                  - False: return the raw dict without validation or substitution

    Returns:
        LandscapeValues if processed is True, raw dict otherwise

    Raises:
        ValueError: If required environment variables are missing, validation fails,
                   or the YAML structure is invalid (missing 'landscape' key)
        FileNotFoundError: If the YAML file doesn't exist

    YAML Structure Requirements:
        The YAML file must have a top-level 'landscape:' key containing the values.
    """
    with open(file_path) as f:
        content = f.read()

    if processed:
        secrets = load_secret_files_into_env()
        if secrets:
            logger.info(f"Loaded {secrets} secret(s) into the environment")
        content = substitute_env_vars(content)

    try:
        loaded: dict[str, Any] = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML: {e}") from e

    if not processed:
        return loaded
    if not isinstance(loaded, dict):
        raise ValueError("Failed to parse YAML")
    if "landscape" not in loaded:
        raise ValueError("Invalid YAML structure: missing 'landscape' key")

    try:
        values = LandscapeValues.model_validate(loaded["landscape"])
    except ValidationError as e:
        raise ValueError(f"Invalid landscape values: {e}") from e

    logger.info(f"Loaded landscape {values.landscape_name} (version {values.version}) from {file_path}")
    return values

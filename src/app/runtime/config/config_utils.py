"""Environment variable substitution for the landscape file."""

import os
import re
from pathlib import Path

from loguru import logger

# Secret files larger than this are not loaded into the environment
MAX_SECRET_FILE_SIZE = 65536

_ENV_PATTERN = re.compile(r"\$\{([^}]+)\}")


def load_secret_files_into_env(directory: Path | None = None) -> int:
    """Export each file of the secrets directory as an environment variable.

    The variable name is the upper-cased file stem with non-alphanumeric
    characters replaced by underscores, e.g. ``gardener-ca.crt`` becomes
    ``GARDENER_CA``. Variables that are already set are left alone.

    Args:
        directory: Secrets directory (default: $LANDSCAPE_SECRETS_DIR)

    Returns:
        Number of variables set
    """
    if directory is None:
        custom_dir = os.getenv("LANDSCAPE_SECRETS_DIR")
        if not custom_dir:
            return 0
        directory = Path(custom_dir)
    if not directory.is_dir():
        logger.warning(f"Secrets directory {directory} does not exist")
        return 0

    loaded = 0
    for file_path in sorted(directory.iterdir()):
        if not file_path.is_file():
            continue
        env_name = "".join(c if c.isalnum() else "_" for c in file_path.stem.upper())
        if not env_name or env_name in os.environ:
            continue
        if file_path.stat().st_size > MAX_SECRET_FILE_SIZE:
            logger.warning(f"Skipping secret file {file_path.name}: larger than {MAX_SECRET_FILE_SIZE} bytes")
            continue

        value = file_path.read_text(encoding="utf-8").strip()
        if not value:
            continue
        os.environ[env_name] = value
        loaded += 1
        logger.debug(f"Loaded secret {env_name} from {file_path.name}")
    return loaded


def substitute_env_vars(text: str) -> str:
    """
    Substitute environment variable placeholders in text.

    Supports formats:
    - ${VAR_NAME} - required variable (raises error if missing)
    - ${VAR_NAME:-default} - optional with default value
    - ${VAR_NAME:?error_message} - required with custom error message
    """

    def replacer(match: re.Match[str]) -> str:
        var_expr = match.group(1)

        if ":-" in var_expr:
            var_name, default = var_expr.split(":-", 1)
            return os.getenv(var_name, default)

        if ":?" in var_expr:
            var_name, error_msg = var_expr.split(":?", 1)
            value = os.getenv(var_name)
            if value is None:
                raise ValueError(f"Required environment variable {var_name}: {error_msg}")
            return value

        value = os.getenv(var_expr)
        if value is None:
            raise ValueError(f"Required environment variable {var_expr} not set")
        return value

    return _ENV_PATTERN.sub(replacer, text)

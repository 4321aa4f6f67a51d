"""Deep merge for layered Helm values.

Component values are built from hard-coded defaults overlaid with the
operator's overrides from the landscape values.

Example:
    >>> base = {"image": {"tag": "v1.80.0"}, "replicaCount": 1}
    >>> deep_merge(base, {"replicaCount": 2})
    {'image': {'tag': 'v1.80.0'}, 'replicaCount': 2}
"""

from __future__ import annotations

from copy import deepcopy
from typing import Any


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge override into base.

    Nested dictionaries are merged; any other value in override (lists
    included) replaces the value in base.

    Args:
        base: Base dictionary (lower priority)
        override: Override dictionary (higher priority)

    Returns:
        New dictionary with merged values (does not modify inputs)
    """
    result = deepcopy(base)

    for key, override_value in override.items():
        current = result.get(key)
        if isinstance(current, dict) and isinstance(override_value, dict):
            result[key] = deep_merge(current, override_value)
        else:
            result[key] = deepcopy(override_value)

    return result

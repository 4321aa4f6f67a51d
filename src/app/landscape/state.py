"""Structural validation and normalization of persisted landscape state.

The validator only checks shape. Semantic corrections, such as raising the
minimum virtual cluster version, belong to the installer chain.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from loguru import logger

from src.app.landscape.errors import MalformedStateError
from src.app.landscape.models import ApiserverState, LandscapeValues, StateValues


def empty_state(version: str) -> StateValues:
    """Create the minimal state of a landscape that was never installed."""
    return StateValues(version=version, apiserver=ApiserverState(version=None))


def state_problems(state: Any) -> list[str]:
    """List the structural problems of a persisted state.

    Args:
        state: Raw state as loaded from the store, or a StateValues instance

    Returns:
        Descriptions of missing or invalid fields; empty if the state is valid
    """
    if isinstance(state, StateValues):
        state = state.model_dump()
    if not isinstance(state, Mapping):
        return [f"expected a mapping, got {type(state).__name__}"]

    problems: list[str] = []
    version = state.get("version")
    if not isinstance(version, str) or not version.strip():
        problems.append("'version' must be a non-empty string")

    apiserver = state.get("apiserver")
    if not isinstance(apiserver, Mapping):
        problems.append("'apiserver' must be an object")
    else:
        apiserver_version = apiserver.get("version")
        if apiserver_version is not None and not isinstance(apiserver_version, str):
            problems.append("'apiserver.version' must be a string or null")
    return problems


def is_state_values(state: Any) -> bool:
    """Whether a persisted state has the shape of StateValues."""
    return not state_problems(state)


def validate_state(state: Any) -> StateValues:
    """Validate a persisted state and return it as a fresh StateValues.

    Raises:
        MalformedStateError: If required fields are missing or invalid
    """
    problems = state_problems(state)
    if problems:
        raise MalformedStateError(problems)
    if isinstance(state, StateValues):
        return state.model_copy(deep=True)
    return StateValues.model_validate(dict(state))


def normalize(
    prior_state: Any | None,
    desired_values: LandscapeValues,
) -> StateValues:
    """Return a validated working copy of the prior state.

    For a fresh install (no prior state) an empty state tagged with the
    desired version is synthesized.

    Raises:
        MalformedStateError: If the prior state has an unexpected structure
    """
    if prior_state is None:
        logger.info(
            f"No prior state found, creating empty state for version {desired_values.version}"
        )
        return empty_state(desired_values.version)

    state = validate_state(prior_state)
    logger.debug(f"Loaded prior state of version {state.version}")
    return state

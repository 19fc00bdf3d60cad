"""Configuration validation for the maze solver."""

import logging
from typing import Any, List
from omegaconf import DictConfig

from maze_solver.core.data_models import Direction
from maze_solver.search.frontier import FRONTIER_KINDS

logger = logging.getLogger(__name__)


class ConfigValidationError(Exception):
    """Exception raised when configuration validation fails."""
    pass


def validate_config(config: DictConfig) -> None:
    """Validate the complete configuration.

    Args:
        config: Configuration to validate

    Raises:
        ConfigValidationError: If validation fails
    """
    try:
        validate_solver_config(config.get('solver', {}))
        validate_grid_config(config.get('grid', {}))
        validate_search_config(config.get('search', {}))
        validate_development_config(config.get('development', {}))
    except ConfigValidationError:
        raise
    except Exception as e:
        raise ConfigValidationError(f"Configuration validation failed: {e}") from e

    logger.info("Configuration validation passed")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def validate_solver_config(solver_config: DictConfig) -> None:
    """Validate solver configuration section."""
    if not solver_config:
        return

    timeout = solver_config.get('timeout_seconds', 30.0)
    if not _is_number(timeout) or timeout <= 0:
        raise ConfigValidationError(
            f"timeout_seconds must be positive number, got {timeout}"
        )


def validate_grid_config(grid_config: DictConfig) -> None:
    """Validate the marker alphabet and initial heading."""
    if not grid_config:
        return

    markers = [
        grid_config.get('wall_char', '#'),
        grid_config.get('empty_char', '.'),
        grid_config.get('start_char', 'S'),
        grid_config.get('end_char', 'E'),
    ]
    for marker in markers:
        if not isinstance(marker, str) or len(marker) != 1:
            raise ConfigValidationError(
                f"grid markers must be single characters, got {marker!r}"
            )
    if len(set(markers)) != len(markers):
        raise ConfigValidationError(f"grid markers must be distinct, got {markers}")

    heading = grid_config.get('initial_heading', 'right')
    try:
        Direction.from_name(str(heading))
    except ValueError:
        raise ConfigValidationError(
            f"grid.initial_heading must be one of "
            f"{[d.name.lower() for d in Direction]}, got {heading!r}"
        )


def validate_search_config(search_config: DictConfig) -> None:
    """Validate search configuration section."""
    if not search_config:
        return

    frontier = search_config.get('frontier', 'linked')
    if frontier not in FRONTIER_KINDS:
        raise ConfigValidationError(
            f"search.frontier must be one of {list(FRONTIER_KINDS)}, got {frontier!r}"
        )

    costs_config = search_config.get('costs', {})
    if costs_config:
        for key in ['step', 'turn']:
            cost = costs_config.get(key, 0)
            if not _is_int(cost) or cost < 0:
                raise ConfigValidationError(
                    f"costs.{key} must be non-negative integer, got {cost}"
                )

    limits_config = search_config.get('limits', {})
    if limits_config:
        max_nodes = limits_config.get('max_nodes_expanded')
        if max_nodes is not None and (not _is_int(max_nodes) or max_nodes <= 0):
            raise ConfigValidationError(
                f"limits.max_nodes_expanded must be positive integer or null, got {max_nodes}"
            )

        max_cost = limits_config.get('max_cost')
        if max_cost is not None and (not _is_int(max_cost) or max_cost < 0):
            raise ConfigValidationError(
                f"limits.max_cost must be non-negative integer or null, got {max_cost}"
            )

        max_time = limits_config.get('max_computation_time')
        if max_time is not None and (not _is_number(max_time) or max_time <= 0):
            raise ConfigValidationError(
                f"limits.max_computation_time must be positive number or null, got {max_time}"
            )


def validate_development_config(dev_config: DictConfig) -> None:
    """Validate development configuration section."""
    if not dev_config:
        return

    testing_config = dev_config.get('testing', {})
    if testing_config:
        seed = testing_config.get('random_seed', 42)
        if not _is_int(seed) or seed < 0:
            raise ConfigValidationError(
                f"testing.random_seed must be non-negative integer, got {seed}"
            )


def check_config_consistency(config: DictConfig) -> List[str]:
    """Check configuration consistency and return issues.

    Args:
        config: Configuration to check

    Returns:
        List of consistency issues
    """
    issues = []

    costs = config.get('search', {}).get('costs', {})
    step, turn = costs.get('step', 1), costs.get('turn', 1000)
    if turn <= step:
        issues.append(
            f"Turn cost ({turn}) does not exceed step cost ({step}); "
            f"paths will not prefer going straight"
        )

    solver_timeout = config.get('solver', {}).get('timeout_seconds', 30.0)
    search_timeout = config.get('search', {}).get('limits', {}).get('max_computation_time')
    if search_timeout is not None and abs(solver_timeout - search_timeout) > 0.1:
        issues.append(
            f"Inconsistent timeout: solver={solver_timeout}s, search={search_timeout}s"
        )

    return issues

"""Hydra-backed configuration for the maze solver.

``conf/config.yaml`` is composed with ``key=value`` overrides into an
OmegaConf ``DictConfig``. The most recently loaded configuration is also
kept module-wide so library code can read parameters without passing the
config around.
"""

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from hydra import compose, initialize_config_dir
from hydra.core.global_hydra import GlobalHydra
from omegaconf import DictConfig, OmegaConf, open_dict

from maze_solver.core.data_models import Direction
from maze_solver.integration.io import MarkerAlphabet
from maze_solver.search.dijkstra import SearchConfig

from .validators import validate_config

logger = logging.getLogger(__name__)

_global_config: Optional[DictConfig] = None


def default_config_dir() -> Path:
    """The ``conf`` directory at the project root."""
    return Path(__file__).parent.parent.parent.parent / "conf"


class ConfigManager:
    """Composes, validates and edits the solver configuration."""

    def __init__(self, config_dir: Optional[Union[str, Path]] = None):
        """
        Args:
            config_dir: Directory holding ``config.yaml``; defaults to the project ``conf``
        """
        self.config_dir = Path(config_dir or default_config_dir()).resolve()
        self.config: Optional[DictConfig] = None

        if not self.config_dir.is_dir():
            raise FileNotFoundError(f"Configuration directory not found: {self.config_dir}")

        logger.debug(f"Using configuration directory {self.config_dir}")

    def load_config(self,
                    config_name: str = "config",
                    overrides: Optional[List[str]] = None,
                    validate: bool = True) -> DictConfig:
        """Compose ``config_name`` with Hydra overrides.

        Args:
            config_name: YAML file name without extension
            overrides: Hydra overrides such as ``search.costs.turn=500``
            validate: Run ``validate_config`` on the composed result

        Raises:
            ConfigValidationError: If ``validate`` is set and a value is invalid
        """
        global _global_config
        overrides = list(overrides or [])

        # compose() refuses to run while another Hydra instance is initialized
        GlobalHydra.instance().clear()
        try:
            with initialize_config_dir(config_dir=str(self.config_dir), version_base=None):
                cfg = compose(config_name=config_name, overrides=overrides)
            if validate:
                validate_config(cfg)
        except Exception as e:
            logger.error(f"Could not load configuration '{config_name}': {e}")
            raise

        self.config = cfg
        _global_config = cfg

        logger.info(f"Loaded configuration '{config_name}'"
                    + (f" with overrides {overrides}" if overrides else ""))
        return cfg

    def get_config(self) -> Optional[DictConfig]:
        return self.config

    def _require_config(self) -> DictConfig:
        if self.config is None:
            raise RuntimeError("No configuration loaded. Call load_config() first.")
        return self.config

    def get_parameter(self, key: str, default: Any = None) -> Any:
        """Read a dotted key such as ``search.limits.max_cost``."""
        return OmegaConf.select(self._require_config(), key, default=default)

    def set_parameter(self, key: str, value: Any) -> None:
        """Set a dotted key, creating it if needed. Values are not re-validated."""
        config = self._require_config()
        with open_dict(config):
            OmegaConf.update(config, key, value)
        logger.debug(f"Parameter set: {key} = {value}")

    def update_config(self, updates: Dict[str, Any]) -> None:
        """Apply several dotted-key updates."""
        self._require_config()
        for key, value in updates.items():
            self.set_parameter(key, value)
        logger.info(f"Configuration updated: {updates}")

    def save_config(self, output_path: Union[str, Path]) -> None:
        """Write the current configuration as YAML."""
        config = self._require_config()
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        OmegaConf.save(config, output_path)
        logger.info(f"Configuration saved to {output_path}")

    def print_config(self, resolve: bool = True) -> None:
        if self.config is None:
            print("No configuration loaded.")
            return

        print("Current Configuration:")
        print("=" * 50)
        print(OmegaConf.to_yaml(self.config, resolve=resolve))

    def search_config(self) -> SearchConfig:
        """Search settings from the ``search`` section."""
        return SearchConfig.from_config(self._require_config().get('search', {}))

    def marker_alphabet(self) -> MarkerAlphabet:
        """Grid characters from the ``grid`` section."""
        grid = self._require_config().get('grid', {})
        return MarkerAlphabet(
            wall=grid.get('wall_char', '#'),
            empty=grid.get('empty_char', '.'),
            start=grid.get('start_char', 'S'),
            end=grid.get('end_char', 'E'),
        )

    def initial_heading(self) -> Direction:
        grid = self._require_config().get('grid', {})
        return Direction.from_name(str(grid.get('initial_heading', 'right')))


def load_config(config_name: str = "config",
                overrides: Optional[List[str]] = None,
                config_dir: Optional[Union[str, Path]] = None,
                validate: bool = True) -> DictConfig:
    """Load a configuration with a throwaway ``ConfigManager``."""
    return ConfigManager(config_dir).load_config(config_name, overrides, validate)


def get_config() -> Optional[DictConfig]:
    """The most recently loaded configuration, or None."""
    return _global_config


def get_parameter(key: str, default: Any = None) -> Any:
    """Read a dotted key from the most recently loaded configuration."""
    if _global_config is None:
        logger.warning("get_parameter called before any configuration was loaded")
        return default
    return OmegaConf.select(_global_config, key, default=default)


class ConfigContext:
    """Temporarily override dotted keys of the loaded configuration.

    Keys that did not exist before are removed again on exit.

    Example:
        with ConfigContext(**{"search.costs.turn": 10}) as cfg:
            ...
    """

    _MISSING = object()

    def __init__(self, **overrides):
        self.overrides = overrides
        self.saved: Dict[str, Any] = {}
        self.config = get_config()

    def __enter__(self) -> DictConfig:
        if self.config is None:
            raise RuntimeError("No global configuration loaded")

        with open_dict(self.config):
            for key, value in self.overrides.items():
                self.saved[key] = OmegaConf.select(self.config, key, default=self._MISSING)
                OmegaConf.update(self.config, key, value)
        return self.config

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self.config is None:
            return

        with open_dict(self.config):
            for key, value in self.saved.items():
                if value is not self._MISSING:
                    OmegaConf.update(self.config, key, value)
                    continue
                parent_key, _, leaf = key.rpartition('.')
                parent = OmegaConf.select(self.config, parent_key) if parent_key else self.config
                if parent is not None:
                    parent.pop(leaf, None)

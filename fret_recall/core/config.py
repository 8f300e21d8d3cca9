"""JSON-backed settings for Fret Recall components.

Each section is stored as ``<section>.json`` in the config directory
(``~/.config/fret_recall`` unless told otherwise). Values are stored as
given; the components that consume them validate and raise rather than clamp.
"""

import copy
import json
import os
from pathlib import Path
from typing import Any, Dict, Iterable, Optional

from ..logger import get_logger

logger = get_logger(__name__)

DEFAULT_CONFIG_DIR = os.path.join("~", ".config", "fret_recall")

DEFAULT_SECTIONS: Dict[str, Dict[str, Any]] = {
    "instrument": {
        "string_count": 6,
        "fret_count": 24,
    },
    "audio_input": {
        "sample_rate": 44100.0,
        "buffer_size": 4096,
        "device_id": None,  # None selects the system default input
    },
    "pitch_detector": {
        "min_frequency": 20.0,
        "max_frequency": 1400.0,
        "min_confidence": 0.8,
        "noise_gate": 0.01,
        "min_samples": 256,
    },
    "matcher": {
        "tolerance_cents": 50.0,
    },
}


class ConfigManager:
    """Loads, updates and resets the per-section settings files.

    Only keys present in a section's defaults are accepted, since each
    section is passed straight to a component constructor as keyword
    arguments.
    """

    def __init__(
        self,
        config_dir: Optional[str] = None,
        defaults: Optional[Dict[str, Dict[str, Any]]] = None,
    ):
        """Initialize the configuration manager.

        Args:
            config_dir: Directory holding the section files, or None for the default
            defaults: Section defaults, or None for :data:`DEFAULT_SECTIONS`
        """
        self.config_dir = Path(os.path.expanduser(config_dir or DEFAULT_CONFIG_DIR))
        self.config_dir.mkdir(parents=True, exist_ok=True)
        self.default_configs = copy.deepcopy(defaults or DEFAULT_SECTIONS)
        self.configs = {
            name: self.load_config(name, section) for name, section in self.default_configs.items()
        }

    @property
    def sections(self) -> Iterable[str]:
        return self.default_configs.keys()

    def _path(self, name: str) -> Path:
        return self.config_dir / f"{name}.json"

    def load_config(self, name: str, default_config: Dict[str, Any]) -> Dict[str, Any]:
        """Read one section, writing its defaults first if the file is missing.

        Keys absent from the file come from ``default_config`` and unknown
        keys are dropped. A file that cannot be read or parsed is left in
        place and the defaults are used instead.
        """
        path = self._path(name)
        if not path.exists():
            config = dict(default_config)
            self.save_config(name, config)
            return config

        try:
            with open(path, "r") as f:
                stored = json.load(f)
            if not isinstance(stored, dict):
                raise ValueError(f"expected an object, found {type(stored).__name__}")
        except (OSError, ValueError) as e:
            logger.error(f"Error loading configuration from {path}: {e}")
            return dict(default_config)

        unknown = sorted(set(stored) - set(default_config))
        if unknown:
            logger.warning(f"Ignoring unknown keys in {path}: {', '.join(unknown)}")
        logger.info(f"Loaded configuration from {path}")
        return {key: stored.get(key, value) for key, value in default_config.items()}

    def save_config(self, name: str, config: Dict[str, Any]) -> bool:
        """Write one section; returns False (and logs) if it cannot be written."""
        path = self._path(name)
        try:
            with open(path, "w") as f:
                json.dump(config, f, indent=2)
        except (OSError, TypeError) as e:
            logger.error(f"Error saving configuration to {path}: {e}")
            return False
        logger.info(f"Saved configuration to {path}")
        return True

    def get_config(self, name: str) -> Dict[str, Any]:
        """Return a copy of a section, or an empty dict for an unknown name."""
        return dict(self.configs.get(name, {}))

    def update_config(self, name: str, updates: Dict[str, Any]) -> bool:
        """Merge ``updates`` into a section and save it.

        Returns:
            False if the section or any key is unknown (nothing is changed)
            or the file cannot be written
        """
        if name not in self.configs:
            logger.error(f"Unknown configuration: {name}")
            return False

        unknown = sorted(set(updates) - set(self.default_configs[name]))
        if unknown:
            logger.error(f"Unknown {name} settings: {', '.join(unknown)}")
            return False

        self.configs[name].update(updates)
        return self.save_config(name, self.configs[name])

    def reset_config(self, name: str) -> bool:
        """Restore a section's defaults and save them."""
        if name not in self.default_configs:
            logger.error(f"Unknown configuration: {name}")
            return False

        self.configs[name] = dict(self.default_configs[name])
        return self.save_config(name, self.configs[name])

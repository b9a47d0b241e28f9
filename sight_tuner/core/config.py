"""Configuration management for Sight Tuner components."""

from typing import Dict, Any, Optional, Tuple
import copy
import json
import os
from pathlib import Path

from ..detection.stability_filter import SMOOTHING_MODES
from ..exceptions import ConfigError
from ..logger import get_logger
from ..note_types import DISPLAY_MODES

logger = get_logger(__name__)


class ConfigManager:
    """Configuration manager for Sight Tuner components."""

    def __init__(self, config_dir: Optional[str] = None):
        """Initialize the configuration manager.

        Args:
            config_dir: Directory to store configuration files, or None to use default
        """
        if config_dir is None:
            # Use ~/.config/sight_tuner by default
            home = os.path.expanduser("~")
            config_dir = os.path.join(home, ".config", "sight_tuner")

        self.config_dir = Path(config_dir)
        self.config_dir.mkdir(parents=True, exist_ok=True)

        # Default configurations
        self.default_configs = {
            "pitch_detector": {
                "silence_rms": 0.01,
                "trim_threshold": 0.2,
            },
            "smoothing": {
                "mode": "basic",
                # mode -> [closeness in Hz, consecutive frames]
                "modes": {name: list(values) for name, values in SMOOTHING_MODES.items()},
            },
            "display": {
                "mode": "note",
            },
            "game": {
                "cooldown": 0.8,
            },
            "audio_input": {
                "sample_rate": 44100,
                "buffer_size": 2048,
                "chunk_size": 512,
                "frame_rate": 60,
                "channels": 1,
            },
        }

        # Load existing configurations or create default ones
        self.configs = {}
        for config_name, default_config in self.default_configs.items():
            self.configs[config_name] = self.load_config(config_name, default_config)

    def load_config(self, name: str, default_config: Dict[str, Any]) -> Dict[str, Any]:
        """Load configuration from file or create default.

        Args:
            name: Configuration name
            default_config: Default configuration to use if file doesn't exist

        Returns:
            Configuration dictionary
        """
        config_file = self.config_dir / f"{name}.json"

        if config_file.exists():
            try:
                with open(config_file, "r") as f:
                    config = json.load(f)
                logger.info(f"Loaded configuration from {config_file}")
            except (OSError, ValueError) as e:
                logger.error(f"Error loading configuration from {config_file}: {e}")
                return copy.deepcopy(default_config)

            # Ensure all default keys are present
            for key, value in default_config.items():
                if key not in config:
                    config[key] = copy.deepcopy(value)
            return config

        # Create default configuration
        config = copy.deepcopy(default_config)
        self.save_config(name, config)
        return config

    def save_config(self, name: str, config: Dict[str, Any]) -> bool:
        """Save configuration to file.

        Args:
            name: Configuration name
            config: Configuration dictionary

        Returns:
            True if saved successfully, False otherwise
        """
        config_file = self.config_dir / f"{name}.json"

        try:
            with open(config_file, "w") as f:
                json.dump(config, f, indent=2)
            logger.info(f"Saved configuration to {config_file}")
            return True
        except OSError as e:
            logger.error(f"Error saving configuration to {config_file}: {e}")
            return False

    def get_config(self, name: str) -> Dict[str, Any]:
        """Get a copy of the configuration by name."""
        return copy.deepcopy(self.configs.get(name, {}))

    def update_config(self, name: str, updates: Dict[str, Any]) -> bool:
        """Update configuration and save to file.

        Returns:
            True if updated and saved successfully, False otherwise
        """
        if name not in self.configs:
            logger.error(f"Unknown configuration: {name}")
            return False

        self.configs[name].update(updates)
        return self.save_config(name, self.configs[name])

    def reset_config(self, name: str) -> bool:
        """Reset configuration to default.

        Returns:
            True if reset successfully, False otherwise
        """
        if name not in self.default_configs:
            logger.error(f"Unknown configuration: {name}")
            return False

        self.configs[name] = copy.deepcopy(self.default_configs[name])
        return self.save_config(name, self.configs[name])

    def smoothing_modes(self) -> Dict[str, Tuple[float, int]]:
        """Smoothing mode table as {mode: (closeness, required_frames)}."""
        modes = self.configs["smoothing"]["modes"]
        try:
            return {
                name: (float(closeness), int(frames))
                for name, (closeness, frames) in modes.items()
            }
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Malformed smoothing modes {modes!r}: {e}") from e

    def display_mode(self) -> str:
        mode = self.configs["display"]["mode"]
        if mode not in DISPLAY_MODES:
            raise ConfigError(
                f"Unknown display mode '{mode}', expected one of {list(DISPLAY_MODES)}"
            )
        return mode

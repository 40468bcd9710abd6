"""
machi Configuration Settings

Settings for the layers around the engine (runner storage, chart rendering,
logging). The engine itself reads none of these. Values default here and can
be overridden via environment variables or at runtime.
"""

import logging
import os

VALID_THEMES = ("dark", "light")
VALID_DIRECTIONS = ("vertical", "horizontal")


class MachiConfig:
    """Configuration for the runner, chart generation and logging."""

    def __init__(self):
        self.log_level: str = os.getenv("MACHI_LOG_LEVEL", "WARNING").upper()

        # Chart rendering
        self.chart_theme: str = os.getenv("MACHI_CHART_THEME", "light")
        self.chart_direction: str = os.getenv("MACHI_CHART_DIRECTION", "vertical")
        self.chart_width: int = int(os.getenv("MACHI_CHART_WIDTH", "800"))
        self.chart_height: int = int(os.getenv("MACHI_CHART_HEIGHT", "600"))
        self.mmdc_path: str = os.getenv("MACHI_MMDC_PATH", "mmdc")

        # Runner persistence
        self.storage_key: str = os.getenv("MACHI_STORAGE_KEY", "MACHI_CONTEXT")

    def update(self, **kwargs) -> 'MachiConfig':
        """Update configuration values at runtime."""
        for key, value in kwargs.items():
            if hasattr(self, key):
                setattr(self, key, value)
            else:
                raise ValueError(f"Unknown configuration parameter: {key}")
        return self

    def validate(self) -> bool:
        """Validate the current values."""
        if self.chart_theme not in VALID_THEMES:
            raise ValueError(f"chart_theme must be one of {VALID_THEMES}, got {self.chart_theme!r}")
        if self.chart_direction not in VALID_DIRECTIONS:
            raise ValueError(f"chart_direction must be one of {VALID_DIRECTIONS}, got {self.chart_direction!r}")
        if self.chart_width <= 0 or self.chart_height <= 0:
            raise ValueError("chart_width and chart_height must be positive")
        if not isinstance(logging.getLevelName(self.log_level), int):
            raise ValueError(f"Unknown log level: {self.log_level}")
        if not self.storage_key:
            raise ValueError("storage_key must not be empty")
        return True


# Global configuration instance
config = MachiConfig()


def set_machi_config(**kwargs) -> MachiConfig:
    """Convenience function to update global configuration."""
    return config.update(**kwargs)


def get_machi_config() -> MachiConfig:
    """Get the global configuration instance."""
    return config

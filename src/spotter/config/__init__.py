"""Configuration module for Spotter."""

from spotter.config.loader import ConfigLoader
from spotter.config.settings import SettingsConfig, SpotterConfig

__all__ = ["ConfigLoader", "SettingsConfig", "SpotterConfig"]

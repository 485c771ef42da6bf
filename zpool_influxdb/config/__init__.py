"""Configuration management for zpool-influxdb."""

from zpool_influxdb.config.settings import Settings, get_settings, reset_settings

__all__ = ["Settings", "get_settings", "reset_settings"]

"""Configuration module for the fleetdesk backend."""
from .settings import AppConfig, load_settings

__all__ = ["AppConfig", "load_settings"]

# instafeed/inputs/__init__.py
from .settings import SettingsLoader, load_policy

__all__ = ["SettingsLoader", "load_policy"]

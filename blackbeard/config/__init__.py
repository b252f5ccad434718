from .loader import load_settings, save_settings
from .settings import ClientSettings

__all__ = [
    "ClientSettings",
    "load_settings",
    "save_settings",
]

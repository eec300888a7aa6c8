# instafeed/orchestrators/__init__.py
from .client import InstagramClient, check_meta, select_images

__all__ = ["InstagramClient", "check_meta", "select_images"]

# instafeed/core/media/__init__.py
from .cache import MediaCache
from .loader import ImageLoader, RequestsImageLoader
from .preload import PreloadBarrier, PreloadCoordinator

__all__ = [
    "MediaCache",
    "ImageLoader",
    "RequestsImageLoader",
    "PreloadBarrier",
    "PreloadCoordinator",
]

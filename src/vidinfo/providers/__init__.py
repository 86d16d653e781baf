"""Video service providers."""

from .base import BaseProvider
from .dailymotion import DailymotionProvider
from .direct import DirectVideoProvider
from .googledrive import GoogleDriveProvider
from .registry import ProviderRegistry, build_registry
from .vimeo import VimeoProvider
from .youtube import YouTubeProvider

__all__ = [
    "BaseProvider",
    "DailymotionProvider",
    "DirectVideoProvider",
    "GoogleDriveProvider",
    "ProviderRegistry",
    "VimeoProvider",
    "YouTubeProvider",
    "build_registry",
]

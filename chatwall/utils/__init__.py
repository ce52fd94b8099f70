"""Utilities"""
from .config import OverlayConfig
from .logging_config import setup_logging

__all__ = ["OverlayConfig", "setup_logging"]

"""
Utility Functions and Helpers

Common utilities for the volume fraction pipeline.
"""

from .config_manager import ConfigManager

__all__ = ['ConfigManager']

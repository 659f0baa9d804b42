"""
Engine configuration.
"""

from .engine_settings import EngineSettings

__all__ = ['EngineSettings']

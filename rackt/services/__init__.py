"""
Services package for the rating and tournament engine.
"""

from .base import BaseService

__all__ = ['BaseService']

"""Definition loaders."""

from .base import BaseLoader
from .files import FileLoader
from .memory import MemoryLoader

__all__ = (
    'BaseLoader',
    'FileLoader',
    'MemoryLoader',
)

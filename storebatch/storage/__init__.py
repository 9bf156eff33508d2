"""
Storage backends which provide the get/put/delete/copy primitives batch operations are built on.
"""
from .base import StorageAdapter
from .http import HTTPStorage
from .local import LocalStorage
from .memory import MemoryStorage

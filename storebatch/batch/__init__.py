"""
The batch engine: runs a user function over every object in a working context with bounded concurrency.
"""
from .config import BatchConfig
from .limiter import ConcurrencyLimiter, TaskResult, TaskState
from .modes import MISSING
from .request import BatchRequest

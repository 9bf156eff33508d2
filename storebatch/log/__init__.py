"""
Logging levels and the logger class used by every StoreBatch module.
"""
import logging

#: Level for summaries of completed batch operations, just below INFO
INFO_EXTRA = logging.INFO - 1
logging.addLevelName(INFO_EXTRA, "INFO_EXTRA")

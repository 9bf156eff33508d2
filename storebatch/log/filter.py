"""
All logging filters specific to this package.
"""
import logging
import re


def format_full_func_name(record: logging.LogRecord, width: int = 40) -> None:
    """
    Set fully qualified path name to function including module path to the given record.
    Optionally, provide a max ``width`` to attempt to truncate the path name to
    by taking only the first letter of each part of the path until the length is equal to ``width``.
    """
    path_split = record.name.split(".")
    if record.funcName and record.funcName != "<module>" and path_split[-1] != record.funcName:
        path_split.append(record.funcName)

    # truncate long paths by taking first letters of each part until short enough
    path = ".".join(path_split)
    for i, part in enumerate(path_split[:-1]):
        if len(path) <= width:
            break
        if not part:
            continue

        # take all upper case characters if they exist in part, else, if all lower case, take first letter
        path_split[i] = re.sub("[a-z_]+", "", part) if re.match("[A-Z]", part) else part[0]
        path = ".".join(path_split)

    record.funcName = path


class LogConsoleFilter(logging.Filter):
    """
    Filter for logging to the console.

    :param module_width: The maximum width a module string can be in the log record.
        Truncates module string if longer that this length.
    """

    __slots__ = ("module_width",)

    def __init__(self, name: str = "", module_width: int = 40):
        super().__init__(name)
        self.module_width = module_width

    # noinspection PyMissingOrEmptyDocstring
    def filter(self, record: logging.LogRecord) -> logging.LogRecord | None:
        format_full_func_name(record, width=self.module_width)
        return record


class LogFileFilter(logging.Filter):
    """
    Filter for logging to a file. Removes ANSI colour codes from the message.

    :param module_width: The maximum width a module string can be in the log record.
        Truncates module string if longer that this length.
    """

    __slots__ = ("module_width",)

    def __init__(self, name: str = "", module_width: int = 40):
        super().__init__(name)
        self.module_width = module_width

    # noinspection PyMissingOrEmptyDocstring
    def filter(self, record: logging.LogRecord) -> logging.LogRecord:
        record.msg = re.sub("\33.*?m", "", str(record.msg))
        format_full_func_name(record, width=self.module_width)
        return record

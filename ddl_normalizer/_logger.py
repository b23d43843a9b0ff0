"""
Log output setup

Modules of the package log through `logging.getLogger(__name__)`;
`init_logger` attaches file and console handlers to the package logger
that write lines in the form

```
[INFO]    2024/07/14 12:00:00, normalize, normalized table public.mytable
```

Classes
-------
- `LogLevel` : Log levels
- `LogFormatter` : Formatter of the line format above

Functions
---------
- `init_logger` : Attach handlers to the package logger
"""
import logging
from enum import Enum
from os import path, makedirs
from typing import Final, Optional



class LogLevel(Enum):
    """Log levels"""
    DEBUG = logging.DEBUG
    INFO = logging.INFO
    WARNING = logging.WARNING
    ERROR = logging.ERROR
MAX_LOG_LEVEL_LENGTH: Final = max(len(s.name) for s in LogLevel)

MAX_STATUS_LENGTH: Final = 10
"""Width of the status column"""

PACKAGE_LOGGER: Final = "ddl_normalizer"
"""Name of the package logger"""

DEFAULT_LOG_PATH: Final = "ddl-normalizer.log"
"""Log file (in the working directory) used when the configured path cannot be opened"""

_HANDLER_MARK: Final = "_ddl_normalizer_handler"
"""Attribute set on handlers attached by `init_logger`"""



class LogFormatter(logging.Formatter):
    """Formatter for `[LEVEL]   YYYY/MM/DD HH:MM:SS, status, message`

    The status column is the `status` attribute of the record
    (`logger.info(..., extra={"status": "merge"})`), or the last part of
    the logger name (e.g. `visitor`).
    """
    def __init__(self):
        super().__init__(datefmt="%Y/%m/%d %H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        status = getattr(record, "status", None) or record.name.rsplit(".", 1)[-1]
        text = (f"[{record.levelname}]".ljust(MAX_LOG_LEVEL_LENGTH+3)
                + f"{self.formatTime(record, self.datefmt)}, "
                + f"{status},".ljust(MAX_STATUS_LENGTH+2)
                + record.getMessage())
        if record.exc_info:
            text += "\n" + self.formatException(record.exc_info)
        return text

def init_logger(log_path: Optional[str], encoding: str = "utf-8",
                init_log: bool = False, logging_to_console: bool = False,
                level: LogLevel = LogLevel.INFO) -> bool:
    """Attach handlers to the package logger

    Handlers attached by an earlier call are removed first.

    Parameters
    ----------
    log_path : str, optional
        Path of the log file; None for no log file
    encoding : str, default "utf-8"
        Encoding of the log file
    init_log : bool, default False
        Truncate the log file
    logging_to_console : bool, default False
        Also write the log to the console (stderr)
    level : LogLevel, default LogLevel.INFO
        Lowest level written

    Returns
    -------
    bool
        True if the log file could be set up at the given path.
        False if `DEFAULT_LOG_PATH` is used instead.
    """
    logger = logging.getLogger(PACKAGE_LOGGER)
    for handler in [h for h in logger.handlers if getattr(h, _HANDLER_MARK, False)]:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(level.value)

    success = True
    handlers: list[logging.Handler] = []
    if log_path is not None:
        mode = "w" if init_log else "a"
        try:
            # create the directory of the log file if it does not exist
            if (directory := path.dirname(log_path)) and not path.exists(directory):
                makedirs(directory)
            handlers.append(logging.FileHandler(log_path, mode=mode, encoding=encoding))
        except OSError:
            # e.g. no permission; fall back to the default log file
            success = False
            handlers.append(logging.FileHandler(DEFAULT_LOG_PATH, mode=mode, encoding=encoding))
    if logging_to_console:
        handlers.append(logging.StreamHandler())

    formatter = LogFormatter()
    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _HANDLER_MARK, True)
        logger.addHandler(handler)

    return success

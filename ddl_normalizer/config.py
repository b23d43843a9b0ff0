"""
This module provides functions such as `parse_config` to obtain
a `NormalizerConfig` from TOML files.

Classes
-------
- `LoggingConfig`: `[logging]` section
- `DialectOverrides`: `[dialects.<name>]` section
- `NormalizerConfig`: Whole configuration

Functions
---------
- parse_config: Parse a TOML file and return a NormalizerConfig object
- parse_config_data: Parse a TOML string and return a NormalizerConfig object

Examples
--------
Every section and key is optional:

```toml
[logging]
path = "logs/ddl-normalizer.log"   # no log file if omitted
encoding = "utf-8"
init_log = false                   # truncate the log file on startup
to_console = false
level = "INFO"                     # DEBUG, INFO, WARNING or ERROR

[dialects.postgres]                # any name accepted by SQLDialect.from_name
default_namespace = "app"          # namespace of unqualified table names
default_string_width = 80          # width of strings without a usable length
```
"""
import logging
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

import tomlkit as toml
import tomlkit.items as toml_items
from tomlkit.exceptions import ParseError

from ._core import SQLDialect
from ._logger import LogLevel


_logger = logging.getLogger(__name__)



@dataclass(frozen=True)
class LoggingConfig:
    """`[logging]` section"""
    path: Optional[str] = None
    """Path of the log file; None for no log file"""
    encoding: str = "utf-8"
    """Encoding of the log file"""
    init_log: bool = False
    """Truncate the log file on startup"""
    to_console: bool = False
    """Also write the log to the console"""
    level: LogLevel = LogLevel.INFO
    """Lowest level written"""

@dataclass(frozen=True)
class DialectOverrides:
    """`[dialects.<name>]` section; None keeps the built-in value"""
    default_namespace: Optional[str] = None
    """Namespace of unqualified table names"""
    default_string_width: Optional[int] = None
    """Width of strings without a usable length"""

@dataclass(frozen=True)
class NormalizerConfig:
    """Whole configuration"""
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    """Log output"""
    dialects: Mapping[SQLDialect, DialectOverrides] = field(default_factory=dict)
    """Per-dialect overrides"""



def parse_config(file_path: str) -> NormalizerConfig:
    """Parse a TOML file and return a NormalizerConfig object

    Parameters
    ----------
    file_path : str
        Path to the TOML file

    Returns
    -------
    NormalizerConfig
        Configuration

    Raises
    ------
    OSError
        If the file cannot be read
    ValueError
        If the configuration is not valid
    """
    with open(file_path, 'r', encoding="utf-8") as f:
        data = f.read()

    return parse_config_data(data)

def parse_config_data(data: str) -> NormalizerConfig:
    """Parse a TOML string and return a NormalizerConfig object

    Parameters
    ----------
    data : str
        TOML data

    Returns
    -------
    NormalizerConfig
        Configuration

    Raises
    ------
    ValueError
        If the data is not valid TOML or the configuration is not valid
    """
    try:
        toml_data = toml.loads(data)
    except ParseError as e:
        raise ValueError(f"Invalid TOML: {e}") from e

    for key in toml_data:
        if key not in ("logging", "dialects"):
            _logger.warning("unknown configuration section '%s' ignored", key)

    if (lg := toml_data.get("logging")) is None:
        logging_config = LoggingConfig()
    elif not _is_table(lg):
        raise ValueError("Logging settings ('logging') is not a table")
    else:
        logging_config = _parse_logging(lg)

    if (dl := toml_data.get("dialects")) is None:
        dialects = {}
    elif not _is_table(dl):
        raise ValueError("Dialect settings ('dialects') is not a table")
    else:
        dialects = _parse_dialects(dl)

    return NormalizerConfig(logging=logging_config, dialects=dialects)

#
# Helpers
#

def _is_table(item: Any) -> bool:
    return isinstance(item, (toml_items.Table, toml_items.InlineTable))

def _get_value(table: Any, key: str, expected: type, key_path: str) -> Any:
    """Get the unwrapped value of `key`, or None if it is missing

    Raises
    ------
    ValueError
        If the value is not of the expected type
    """
    if (item := table.get(key)) is None:
        return None
    value = item.unwrap() if isinstance(item, toml_items.Item) else item

    # bool is a subclass of int
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise ValueError(f"{key_path} > '{key}' must be of type "
                         f"{expected.__name__}, not {type(value).__name__}")
    return value

#
# Parse logging
#

def _parse_logging(table: Any) -> LoggingConfig:
    """Parse the `[logging]` section

    Raises
    ------
    ValueError
        If a value is not valid
    """
    key_path = "'logging'"
    defaults = LoggingConfig()

    level = defaults.level
    if (level_name := _get_value(table, "level", str, key_path)) is not None:
        try:
            level = LogLevel[level_name.upper()]
        except KeyError:
            raise ValueError(f"{key_path} > 'level' must be one of "
                             f"{', '.join(LogLevel.__members__)}, not '{level_name}'") from None

    encoding = _get_value(table, "encoding", str, key_path)
    init_log = _get_value(table, "init_log", bool, key_path)
    to_console = _get_value(table, "to_console", bool, key_path)
    return LoggingConfig(
        path=_get_value(table, "path", str, key_path),
        encoding=encoding if encoding is not None else defaults.encoding,
        init_log=init_log if init_log is not None else defaults.init_log,
        to_console=to_console if to_console is not None else defaults.to_console,
        level=level
    )

#
# Parse dialects
#

def _parse_dialects(table: Any) -> dict[SQLDialect, DialectOverrides]:
    """Parse the `[dialects.<name>]` sections

    Raises
    ------
    ValueError
        If a dialect name is unknown or a value is not valid
    """
    dialects: dict[SQLDialect, DialectOverrides] = {}
    for name, section in table.items():
        key_path = f"'dialects' > '{name}'"
        try:
            dialect = SQLDialect.from_name(name)
        except ValueError as e:
            raise ValueError(f"{key_path}: {e}") from e
        if not _is_table(section):
            raise ValueError(f"{key_path} is not a table")

        width = _get_value(section, "default_string_width", int, key_path)
        if width is not None and width <= 0:
            raise ValueError(f"{key_path} > 'default_string_width' must be positive, not {width}")

        dialects[dialect] = DialectOverrides(
            default_namespace=_get_value(section, "default_namespace", str, key_path),
            default_string_width=width
        )
    return dialects

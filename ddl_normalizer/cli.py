"""
Command line entry point

```
ddl-normalizer [-d DIALECT] [-c CONFIG.toml] [-o OUTPUT] [FILE]
```

Reads a CREATE TABLE script from FILE (stdin if omitted or `-`) and prints
the normalized table structure as JSON.

Exit status: 0 on success, 1 if the script cannot be normalized,
2 on usage, input or configuration errors.
"""
import argparse
import json
import logging
import sys
from typing import Optional, Sequence

from ._core import SQLDialect
from ._logger import DEFAULT_LOG_PATH, init_logger
from .config import NormalizerConfig, parse_config
from .errors import SchemaParseError
from .sql_parser import parse_sql


_logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PARSE_ERROR = 1
EXIT_USAGE_ERROR = 2



def build_parser() -> argparse.ArgumentParser:
    """Argument parser of the command"""
    parser = argparse.ArgumentParser(
        prog="ddl-normalizer",
        description="Normalize a CREATE TABLE script into a dialect-neutral JSON table structure.",
    )
    parser.add_argument("file", nargs="?", default="-",
                        help="SQL script to read ('-' or omitted: stdin)")
    parser.add_argument("-d", "--dialect", default="mysql",
                        help="SQL dialect: " + ", ".join(d.value for d in SQLDialect)
                             + " (aliases: pg, postgresql, plsql, tsql, mssql, sqlite; default: mysql)")
    parser.add_argument("-c", "--config", help="TOML configuration file")
    parser.add_argument("-o", "--output", help="write the JSON to this file instead of stdout")
    parser.add_argument("--encoding", default="utf-8",
                        help="encoding of the input file (default: utf-8)")
    parser.add_argument("--indent", type=int, default=2,
                        help="JSON indentation (default: 2)")
    return parser

def _error(message: str) -> None:
    print(f"ddl-normalizer: error: {message}", file=sys.stderr)

def _read_script(file: str, encoding: str) -> str:
    if file == "-":
        return sys.stdin.read()
    with open(file, "r", encoding=encoding) as f:
        return f.read()

def main(argv: Optional[Sequence[str]] = None) -> int:
    """Run the command

    Parameters
    ----------
    argv : Sequence[str], optional
        Arguments without the program name; `sys.argv[1:]` if None

    Returns
    -------
    int
        Exit status
    """
    args = build_parser().parse_args(argv)

    try:
        dialect = SQLDialect.from_name(args.dialect)
    except ValueError as e:
        _error(str(e))
        return EXIT_USAGE_ERROR

    try:
        config = parse_config(args.config) if args.config else NormalizerConfig()
    except (OSError, ValueError) as e:
        _error(f"configuration '{args.config}': {e}")
        return EXIT_USAGE_ERROR

    lc = config.logging
    if not init_logger(lc.path, lc.encoding, lc.init_log, lc.to_console, lc.level):
        _logger.warning("log file '%s' could not be opened; logging to '%s'",
                        lc.path, DEFAULT_LOG_PATH, extra={"status": "startup"})

    try:
        sql = _read_script(args.file, args.encoding)
    except (OSError, UnicodeDecodeError) as e:
        _error(f"cannot read '{args.file}': {e}")
        return EXIT_USAGE_ERROR

    try:
        table = parse_sql(sql, dialect, config)
    except SchemaParseError as e:
        _logger.error("%s: %s", args.file, e, extra={"status": "failed"})
        _error(str(e))
        return EXIT_PARSE_ERROR
    _logger.info("%s: normalized table %s.%s (%d columns)", args.file,
                 table.database, table.name, len(table.columns), extra={"status": "normalize"})

    text = json.dumps(table.asdict(), ensure_ascii=False, indent=args.indent)
    if args.output:
        try:
            with open(args.output, "w", encoding="utf-8") as f:
                f.write(text + "\n")
        except OSError as e:
            _error(f"cannot write '{args.output}': {e}")
            return EXIT_USAGE_ERROR
    else:
        print(text)
    return EXIT_OK

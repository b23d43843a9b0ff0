"""Package for normalizing CREATE TABLE statements of several SQL dialects
into one dialect-neutral table structure.

Classes
-------
- Enums
  - `SQLDialect`: Supported SQL dialects
  - `CanonicalType`: Canonical column types
- Classes for representing table structures
  - `ColumnStructure`: Column structure
  - `TableStructure`: Table structure
- `NormalizerConfig`: Configuration read from TOML

Functions
---------
- SQL normalization functions
  - `parse_sql`: Normalize a CREATE TABLE script of any supported dialect
  - `parse_mysql_sql`, `parse_pg_sql`, `parse_oracle_sql`, `parse_tsql_sql`,
    `parse_sqlite_sql`, `parse_hive_sql`: Per-dialect entry points
- `normalize_type`: Map a single native column type
- `parse_config`: Read the TOML configuration

Exceptions
----------
Every failure is a `SchemaParseError`; see `ddl_normalizer.errors`.
"""
import logging

from ._core import CanonicalType, ColumnStructure, SQLDialect, TableStructure, TypeDescriptor
from .config import NormalizerConfig, parse_config
from .errors import SchemaParseError
from .sql_parser import (
    parse_hive_sql, parse_mysql_sql, parse_oracle_sql, parse_pg_sql,
    parse_sql, parse_sqlite_sql, parse_tsql_sql
)
from .type_normalizer import normalize_type

logging.getLogger(__name__).addHandler(logging.NullHandler())

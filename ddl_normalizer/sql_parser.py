"""
ddl_normalizer.sql_parser
Normalize CREATE TABLE scripts of each dialect into a `TableStructure`

## Functions

- `parse_sql`: Normalize a script of any supported dialect
- `parse_mysql_sql`, `parse_pg_sql`, `parse_oracle_sql`, `parse_tsql_sql`,
  `parse_sqlite_sql`, `parse_hive_sql`: Per-dialect entry points

## Scripts

MySQL, SQLite and Hive scripts are expected to start with the
`CREATE TABLE` statement; everything after its terminator is ignored and
comments are read from the statement itself.

PostgreSQL, Oracle and SQL Server scripts are split into statements.
The first `CREATE [modifiers] TABLE` statement is normalized and every
other statement is scanned for out-of-band comments:

```sql
CREATE TABLE public.mytable (
    id int8 NOT NULL,
    "name" varchar(50) NULL,
    CONSTRAINT mytable_pk PRIMARY KEY (id)
);

COMMENT ON COLUMN public.mytable."name" IS 'user name';
COMMENT ON TABLE public.mytable IS 'users';
```

gives (PostgreSQL)

```python
TableStructure(
    database='public',
    name='mytable',
    columns=(
        ColumnStructure(name='id', ttype=CanonicalType.INTEGER,
                        max_integer=9223372036854775807,
                        min_integer=-9223372036854775808),
        ColumnStructure(name='name', ttype=CanonicalType.STRING,
                        width=50, comment='user name')
    ),
    comment='users'
)
```

## Notes

- Splitting is lexical: a `;` inside a string literal or a comment ends
  the statement there.
- Every failure is raised as a `SchemaParseError`; unexpected internal
  errors become `SQLSyntaxError("parse sql error: ...")`.
"""
import logging
import re
from typing import TYPE_CHECKING, Final, Optional, Union

from ._core import SQLDialect, TableStructure
from .comment_merger import merge_comments
from .dialects import DialectSpec, get_dialect_spec
from .errors import NoCreateTableFoundError, SchemaParseError, SQLSyntaxError
from .splitter import StatementSplitter, strip_leading_trivia
from .syntax import CREATE_TABLE_MODIFIERS, parse_statement
from .visitor import SchemaVisitor

if TYPE_CHECKING:
    from .config import NormalizerConfig


_logger = logging.getLogger(__name__)

_CREATE_TABLE_PATTERN: Final = re.compile(
    r"CREATE\s+(?:OR\s+REPLACE\s+)?(?:(?:" + "|".join(CREATE_TABLE_MODIFIERS) + r")\s+)*TABLE(?!\w)",
    re.IGNORECASE
)
"""Prefix of CREATE TABLE statements"""



def is_create_table(statement: str) -> bool:
    """True if the statement starts with `CREATE [modifiers] TABLE`

    Examples
    --------
    >>> is_create_table("-- users\\nCREATE GLOBAL TEMPORARY TABLE t (id int)")
    True
    >>> is_create_table("CREATE UNIQUE INDEX i ON t (id)")
    False
    """
    return _CREATE_TABLE_PATTERN.match(strip_leading_trivia(statement)) is not None

def _parse_single(sql: str, spec: DialectSpec) -> TableStructure:
    tree = parse_statement(sql, spec.dialect)
    return SchemaVisitor(spec).visit(tree).build()

def _parse_multi(sql: str, spec: DialectSpec) -> TableStructure:
    statements = list(StatementSplitter(sql, batch_separator=spec.batch_separator))
    index = next((i for i, s in enumerate(statements) if is_create_table(s)), None)
    if index is None:
        raise NoCreateTableFoundError("no CREATE TABLE statement found")

    draft = SchemaVisitor(spec).visit(parse_statement(statements[index], spec.dialect))
    merge_comments(draft, statements[:index] + statements[index + 1:], spec)
    return draft.build()

def parse_sql(sql: str, dialect: Union[SQLDialect, str],
              config: Optional["NormalizerConfig"] = None) -> TableStructure:
    """Normalize a CREATE TABLE script

    Args
    ----
    sql : str
        SQL script
    dialect : SQLDialect | str
        Dialect of the script, or its name (e.g. "pg", "tsql")
    config : NormalizerConfig, optional
        Configuration with per-dialect overrides

    Returns
    -------
    TableStructure
        Normalized table structure

    Raises
    ------
    SchemaParseError
        If the script cannot be normalized (see `ddl_normalizer.errors`)
    ValueError
        If the dialect name is unknown
    """
    spec = get_dialect_spec(dialect, config)
    try:
        if spec.multi_statement:
            table = _parse_multi(sql, spec)
        else:
            table = _parse_single(sql, spec)
    except SchemaParseError:
        raise
    except Exception as e:
        raise SQLSyntaxError(f"parse sql error: {e}") from e

    _logger.debug("normalized table %s.%s (%s, %d columns)",
                  table.database, table.name, spec.dialect.value, len(table.columns))
    return table

def parse_mysql_sql(sql: str, config: Optional["NormalizerConfig"] = None) -> TableStructure:
    """Normalize a MySQL CREATE TABLE statement"""
    return parse_sql(sql, SQLDialect.MYSQL, config)

def parse_pg_sql(sql: str, config: Optional["NormalizerConfig"] = None) -> TableStructure:
    """Normalize a PostgreSQL script (CREATE TABLE and COMMENT ON statements)"""
    return parse_sql(sql, SQLDialect.POSTGRESQL, config)

def parse_oracle_sql(sql: str, config: Optional["NormalizerConfig"] = None) -> TableStructure:
    """Normalize an Oracle script (CREATE TABLE and COMMENT ON statements)"""
    return parse_sql(sql, SQLDialect.ORACLE, config)

def parse_tsql_sql(sql: str, config: Optional["NormalizerConfig"] = None) -> TableStructure:
    """Normalize a SQL Server script (CREATE TABLE and extended property calls)"""
    return parse_sql(sql, SQLDialect.SQLSERVER, config)

def parse_sqlite_sql(sql: str, config: Optional["NormalizerConfig"] = None) -> TableStructure:
    """Normalize a SQLite CREATE TABLE statement"""
    return parse_sql(sql, SQLDialect.SQLITE, config)

def parse_hive_sql(sql: str, config: Optional["NormalizerConfig"] = None) -> TableStructure:
    """Normalize a Hive CREATE TABLE statement"""
    return parse_sql(sql, SQLDialect.HIVE, config)

"""
Core data structures for ddl_normalizer.

This module defines the canonical, dialect-neutral description of a table
produced from a `CREATE TABLE` statement.

Classes
-------
- `SQLDialect`: Supported SQL dialects
- `CanonicalType`: Closed set of canonical column types
- `TypeDescriptor`: Normalized type information of a single column
- `ColumnStructure`: Column structure
- `TableStructure`: Table structure
- `TableDraft`: Mutable table structure used while parsing
"""
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Optional



class SQLDialect(Enum):
    """Supported SQL dialects."""
    MYSQL = "mysql"
    POSTGRESQL = "postgres"
    ORACLE = "oracle"
    SQLSERVER = "sqlserver"
    SQLITE = "sqlite3"
    HIVE = "hive"

    @classmethod
    def from_name(cls, name: str) -> "SQLDialect":
        """Get the dialect from its name or a common alias

        Parameters
        ----------
        name : str
            Dialect name (e.g. "mysql", "pg", "tsql"), case-insensitive

        Returns
        -------
        SQLDialect
            Matching dialect

        Raises
        ------
        ValueError
            If the name is not a known dialect
        """
        key = name.strip().lower()
        for dialect in cls:
            if key in (dialect.value, dialect.name.lower()):
                return dialect
        if key in _DIALECT_ALIASES:
            return cls[_DIALECT_ALIASES[key]]
        raise ValueError(f"Unknown SQL dialect '{name}': "
                         f"choose from {', '.join(d.value for d in cls)}")

_DIALECT_ALIASES = {
    "pg": "POSTGRESQL",
    "postgresql": "POSTGRESQL",
    "plsql": "ORACLE",
    "tsql": "SQLSERVER",
    "mssql": "SQLSERVER",
    "sqlite": "SQLITE",
}
"""Alternative names accepted by `SQLDialect.from_name`"""

class CanonicalType(Enum):
    """Canonical column types. Every native type maps to exactly one of these."""
    STRING = "string"
    INTEGER = "integer"
    NUMERIC = "numeric"
    DATE = "date"
    TIME = "time"
    DATETIME = "datetime"
    BOOLEAN = "boolean"

@dataclass(frozen=True)
class TypeDescriptor:
    """Normalized type information of a column, without the column name

    Attributes:
    -----------
    ttype : CanonicalType
        Canonical column type
    width : int
        String length for `string`, total digit count for `numeric`
    fixed_width : bool
        True for fixed-length string types (e.g. CHAR)
    scale : int
        Digits after the decimal point (`numeric` only)
    max_integer : int
        Upper bound of an `integer` column
    min_integer : int
        Lower bound of an `integer` column
    max_float : float
        Upper bound of a `numeric` column
    auto_increment : bool
        True if the native type implies an auto-increment column (e.g. SERIAL)
    """
    ttype: CanonicalType
    width: int = 0
    fixed_width: bool = False
    scale: int = 0
    max_integer: int = 0
    min_integer: int = 0
    max_float: float = 0.0
    auto_increment: bool = False

@dataclass(frozen=True)
class ColumnStructure:
    """Column structure

    Attributes:
    -----------
    name : str
        Column name, without dialect quoting
    ttype : CanonicalType
        Canonical column type
    width : int
        String length for `string`, total digit count for `numeric`
    fixed_width : bool
        True if the value must have exactly `width` characters
    scale : int
        Digits after the decimal point
    max_integer : int
        Upper bound of an `integer` column (0 if not bounded)
    min_integer : int
        Lower bound of an `integer` column (0 if not bounded)
    max_float : float
        Upper bound of a `numeric` column (0 if not bounded)
    comment : str
        Column comment
    auto_increment : bool
        True if the column is an identity/serial column
    """
    name: str
    """Column name"""
    ttype: CanonicalType
    """Canonical column type"""
    width: int = 0
    """String length or total digit count"""
    fixed_width: bool = False
    """True for fixed-length strings"""
    scale: int = 0
    """Digits after the decimal point"""
    max_integer: int = 0
    """Upper bound of an integer column"""
    min_integer: int = 0
    """Lower bound of an integer column"""
    max_float: float = 0.0
    """Upper bound of a numeric column"""
    comment: str = ""
    """Column comment"""
    auto_increment: bool = False
    """True if the column is an identity/serial column"""

    @classmethod
    def from_type(cls, name: str, descriptor: TypeDescriptor, *,
                  comment: str = "", auto_increment: bool = False) -> "ColumnStructure":
        """Create a column from its name and normalized type

        Parameters
        ----------
        name : str
            Column name
        descriptor : TypeDescriptor
            Normalized type
        comment : str, optional
            Column comment
        auto_increment : bool, optional
            True if an auto-increment clause was declared on the column.
            A type that implies auto-increment (e.g. SERIAL) sets it regardless.

        Returns
        -------
        ColumnStructure
            Column structure
        """
        return cls(
            name=name,
            ttype=descriptor.ttype,
            width=descriptor.width,
            fixed_width=descriptor.fixed_width,
            scale=descriptor.scale,
            max_integer=descriptor.max_integer,
            min_integer=descriptor.min_integer,
            max_float=descriptor.max_float,
            comment=comment,
            auto_increment=auto_increment or descriptor.auto_increment
        )

    def asdict(self) -> dict[str, Any]:
        """Column structure as a dictionary

        Optional fields are omitted when they are zero, empty or False.

        Returns
        -------
        dict[str, Any]
            Column structure
        """
        data: dict[str, Any] = {"name": self.name, "type": self.ttype.value}
        for key in ("width", "fixed_width", "scale", "max_integer",
                    "min_integer", "max_float", "comment", "auto_increment"):
            if value := getattr(self, key):
                data[key] = value
        return data

@dataclass(frozen=True)
class TableStructure:
    """Table structure

    Attributes:
    -----------
    database : str
        Owning namespace (database or schema)
    name : str
        Table name
    columns : tuple[ColumnStructure, ...]
        Columns in declaration order
    comment : str
        Table comment

    Examples
    --------
    ```sql
    CREATE TABLE default.mytable (id bigint, name varchar(20) COMMENT 'name')
    COMMENT 'users'
    ```

    is represented as (Hive):

    ```python
    TableStructure(
        database='default',
        name='mytable',
        columns=(
            ColumnStructure(name='id', ttype=CanonicalType.INTEGER,
                            max_integer=9223372036854775807,
                            min_integer=-9223372036854775808),
            ColumnStructure(name='name', ttype=CanonicalType.STRING,
                            width=20, comment='name')
        ),
        comment='users'
    )
    ```
    """
    database: str
    """Owning namespace"""
    name: str
    """Table name"""
    columns: tuple[ColumnStructure, ...] = ()
    """Columns in declaration order"""
    comment: str = ""
    """Table comment"""

    def column(self, name: str) -> Optional[ColumnStructure]:
        """Return the first column with the given name, or None"""
        return next((c for c in self.columns if c.name == name), None)

    def asdict(self) -> dict[str, Any]:
        """Table structure as a dictionary (JSON-serializable)

        Returns
        -------
        dict[str, Any]
            Table structure
        """
        data: dict[str, Any] = {
            "database": self.database,
            "name": self.name,
            "columns": [c.asdict() for c in self.columns]
        }
        if self.comment:
            data["comment"] = self.comment
        return data

@dataclass
class TableDraft:
    """Table structure while it is being parsed

    Filled by the schema visitor, annotated by the comment merger,
    and turned into a `TableStructure` with `build()`.
    """
    database: str = ""
    """Owning namespace"""
    name: str = ""
    """Table name"""
    columns: list[ColumnStructure] = field(default_factory=list)
    """Columns in declaration order"""
    comment: str = ""
    """Table comment"""

    def add_column(self, column: ColumnStructure) -> None:
        """Append a column"""
        self.columns.append(column)

    def set_comment(self, comment: str) -> None:
        """Set the table comment"""
        self.comment = comment

    def set_column_comment(self, name: str, comment: str, *,
                           case_sensitive: bool = True) -> bool:
        """Set the comment of the first column matching `name`

        Parameters
        ----------
        name : str
            Column name
        comment : str
            Column comment
        case_sensitive : bool, default True
            Compare names case-sensitively

        Returns
        -------
        bool
            True if a column was found. No column is created otherwise.
        """
        key = name if case_sensitive else name.lower()
        for i, column in enumerate(self.columns):
            if (column.name if case_sensitive else column.name.lower()) == key:
                self.columns[i] = replace(column, comment=comment)
                return True
        return False

    def build(self) -> TableStructure:
        """Return the immutable table structure"""
        return TableStructure(
            database=self.database,
            name=self.name,
            columns=tuple(self.columns),
            comment=self.comment
        )

"""
ddl_normalizer.dialects
Capabilities of each SQL dialect

All dialect differences the schema visitor and the comment merger need
are collected in one `DialectSpec` per dialect.

Classes
-------
- `DialectSpec`: Capability record of a dialect

Functions
---------
- `get_dialect_spec`: Capability record with configuration overrides applied

Constants
---------
- `DIALECTS`: Capability records of the supported dialects
"""
from dataclasses import dataclass, replace
from types import MappingProxyType
from typing import TYPE_CHECKING, Final, Mapping, Optional, Union

from ._core import SQLDialect
from .type_normalizer import TYPE_SETTINGS, TypeSettings

if TYPE_CHECKING:
    from .config import NormalizerConfig



@dataclass(frozen=True)
class DialectSpec:
    """Capability record of a dialect

    Attributes
    ----------
    dialect : SQLDialect
        Dialect
    type_settings : TypeSettings
        Type table and type defaults
    default_namespace : str
        Namespace of unqualified table names
    quote_chars : str
        Characters stripped from both ends of identifiers
    multi_statement : bool
        Scripts hold a CREATE TABLE plus separate comment statements
    inline_comments : bool
        Column `COMMENT '...'` and the table option `COMMENT [=] '...'` are honored
    auto_increment_keywords : frozenset[str]
        Auto-increment clauses honored on columns
    comment_on : bool
        `COMMENT ON TABLE|COLUMN` statements are merged
    extended_properties : bool
        `sp_addextendedproperty` / `sp_updateextendedproperty` calls are merged
    case_sensitive_columns : bool
        Out-of-band comments match column names case-sensitively
    batch_separator : str, optional
        Word that ends a statement when alone on a line (T-SQL `GO`)
    """
    dialect: SQLDialect
    type_settings: TypeSettings
    default_namespace: str
    quote_chars: str
    multi_statement: bool = False
    inline_comments: bool = False
    auto_increment_keywords: frozenset[str] = frozenset()
    comment_on: bool = False
    extended_properties: bool = False
    case_sensitive_columns: bool = True
    batch_separator: Optional[str] = None

    def unquote(self, identifier: str) -> str:
        """Strip the dialect quote characters from an identifier"""
        return identifier.strip(self.quote_chars)

DIALECTS: Final[Mapping[SQLDialect, DialectSpec]] = MappingProxyType({
    SQLDialect.MYSQL: DialectSpec(
        SQLDialect.MYSQL, TYPE_SETTINGS[SQLDialect.MYSQL],
        default_namespace="",
        quote_chars='`"',
        inline_comments=True,
        auto_increment_keywords=frozenset({"AUTO_INCREMENT"}),
    ),
    SQLDialect.POSTGRESQL: DialectSpec(
        SQLDialect.POSTGRESQL, TYPE_SETTINGS[SQLDialect.POSTGRESQL],
        default_namespace="public",
        quote_chars='"',
        multi_statement=True,
        auto_increment_keywords=frozenset({"GENERATED"}),
        comment_on=True,
    ),
    SQLDialect.ORACLE: DialectSpec(
        SQLDialect.ORACLE, TYPE_SETTINGS[SQLDialect.ORACLE],
        default_namespace="",
        quote_chars='"',
        multi_statement=True,
        auto_increment_keywords=frozenset({"GENERATED"}),
        comment_on=True,
    ),
    SQLDialect.SQLSERVER: DialectSpec(
        SQLDialect.SQLSERVER, TYPE_SETTINGS[SQLDialect.SQLSERVER],
        default_namespace="dbo",
        quote_chars='[]"',
        multi_statement=True,
        auto_increment_keywords=frozenset({"IDENTITY"}),
        extended_properties=True,
        case_sensitive_columns=False,
        batch_separator="GO",
    ),
    SQLDialect.SQLITE: DialectSpec(
        SQLDialect.SQLITE, TYPE_SETTINGS[SQLDialect.SQLITE],
        default_namespace="main",
        quote_chars='`"[]',
        auto_increment_keywords=frozenset({"AUTOINCREMENT"}),
    ),
    SQLDialect.HIVE: DialectSpec(
        SQLDialect.HIVE, TYPE_SETTINGS[SQLDialect.HIVE],
        default_namespace="default",
        quote_chars="`",
        inline_comments=True,
    ),
})
"""Capability records of the supported dialects"""

def get_dialect_spec(dialect: Union[SQLDialect, str],
                     config: Optional["NormalizerConfig"] = None) -> DialectSpec:
    """Capability record of a dialect with configuration overrides applied

    Args
    ----
    dialect : SQLDialect | str
        Dialect, or its name (see `SQLDialect.from_name`)
    config : NormalizerConfig, optional
        Configuration whose `[dialects.<name>]` section overrides
        the default namespace and the default string width

    Returns
    -------
    DialectSpec
        Capability record

    Raises
    ------
    ValueError
        If the dialect name is unknown
    """
    if not isinstance(dialect, SQLDialect):
        dialect = SQLDialect.from_name(dialect)
    spec = DIALECTS[dialect]
    if config is None or (overrides := config.dialects.get(dialect)) is None:
        return spec

    if overrides.default_namespace is not None:
        spec = replace(spec, default_namespace=overrides.default_namespace)
    if overrides.default_string_width is not None:
        settings = replace(spec.type_settings,
                           default_string_width=overrides.default_string_width)
        spec = replace(spec, type_settings=settings)
    return spec

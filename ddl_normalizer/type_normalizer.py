"""
ddl_normalizer.type_normalizer
Map native column types to canonical types

Native type text (e.g. `varchar(20)`, `NUMBER(9,2)`, `double precision`) is
matched against the type table of its dialect and turned into a
`TypeDescriptor`: canonical type, width, scale and numeric bounds.

Classes
-------
- `TypeFamily`: Rule families that derive width, scale and bounds
- `TypeRule`: Mapping of one native type
- `TypeSettings`: Type table and defaults of one dialect

Functions
---------
- `normalize_type`: Normalize native type text
- `max_float`: Upper bound of a floating/decimal column
- `max_decimal_integer`: Upper bound of a decimal column without scale

Constants
---------
- `TYPE_SETTINGS`: Type settings of each dialect
"""
import logging
import re
import sys
from dataclasses import dataclass
from enum import Enum, auto
from types import MappingProxyType
from typing import Final, Mapping, Optional, Union

from ._core import CanonicalType, SQLDialect, TypeDescriptor
from .errors import (
    CharTypeMustHaveLengthError, InvalidLengthOrScaleLiteralError,
    InvalidTypeFormatError, UnsupportedTypeError
)


_logger = logging.getLogger(__name__)

INT_MAX: Final = {
    8: 127,
    16: 32767,
    24: 8388607,
    32: 2147483647,
    64: 9223372036854775807,
}
"""Upper bound of signed integers by bit width"""

FLOAT_MAX: Final = {
    32: 3.4028234663852886e38,
    64: sys.float_info.max,
}
"""Largest finite float by bit width"""

_DEFAULT_FLOAT_LENGTH: Final = {32: 10, 64: 18}
"""Digit count assumed when a floating/decimal type has no length"""

_DEFAULT_DECIMAL_INTEGER_LENGTH: Final = {32: 10, 64: 19}
"""Digit count assumed when a decimal type without scale has no length"""

_MAX_DIGITS: Final = 400
"""Digit counts beyond this are already above every float bound"""



def max_float(length: int, bits: int) -> float:
    """Upper bound of a floating/decimal column

    Args
    ----
    length : int
        Declared total digit count; 0 for the default of the bit width
        (10 for 32 bits, 18 for 64 bits)
    bits : int
        32 or 64

    Returns
    -------
    float
        `10**length - 1`, capped at the largest finite float of the bit width

    Examples
    --------
    >>> max_float(9, 64)
    999999999.0
    >>> max_float(40, 32)
    3.4028234663852886e+38
    """
    length = min(length or _DEFAULT_FLOAT_LENGTH[bits], _MAX_DIGITS)
    return float(min(10 ** length - 1, FLOAT_MAX[bits]))

def max_decimal_integer(length: int, bits: int) -> int:
    """Upper bound of a decimal column without scale (e.g. Oracle `NUMBER(10)`)

    Args
    ----
    length : int
        Declared total digit count; 0 for the default of the bit width
        (10 for 32 bits, 19 for 64 bits)
    bits : int
        32 or 64

    Returns
    -------
    int
        `10**length - 1`, capped at the signed integer maximum of the bit width

    Examples
    --------
    >>> max_decimal_integer(10, 64)
    9999999999
    >>> max_decimal_integer(0, 64)
    9223372036854775807
    """
    length = min(length or _DEFAULT_DECIMAL_INTEGER_LENGTH[bits], _MAX_DIGITS)
    return min(10 ** length - 1, INT_MAX[bits])

#
# Type tables
#

class TypeFamily(Enum):
    """Rule families that derive width, scale and bounds"""
    PLAIN = auto()
    """Canonical type only"""
    STRING = auto()
    """Variable-length string; width from length or the dialect default"""
    FIXED_STRING = auto()
    """Fixed-length string; length required"""
    BIT_INTEGER = auto()
    """Integer bounded by its bit width"""
    SERIAL = auto()
    """`BIT_INTEGER` with auto-increment"""
    DECIMAL_INTEGER = auto()
    """Integer when scale is 0, otherwise floating/decimal"""
    FLOAT = auto()
    """Floating/decimal bounded by its digit count"""
    MONEY = auto()
    """Fixed-point currency with literal bounds"""

@dataclass(frozen=True)
class TypeRule:
    """Mapping of one native type

    Attributes
    ----------
    ttype : CanonicalType
        Canonical type
    family : TypeFamily
        Rule family
    bits : int
        Bit width for integer, decimal and float families
    min_integer : int, optional
        Lower bound overriding the signed minimum of `bits`
    max_integer : int, optional
        Upper bound overriding the maximum of `bits`
    max_float : float
        Upper bound of `MONEY` types
    width : int
        Width of `MONEY` types
    """
    ttype: CanonicalType
    family: TypeFamily = TypeFamily.PLAIN
    bits: int = 0
    min_integer: Optional[int] = None
    max_integer: Optional[int] = None
    max_float: float = 0.0
    width: int = 0

def _plain(ttype: CanonicalType) -> TypeRule:
    return TypeRule(ttype)

def _string() -> TypeRule:
    return TypeRule(CanonicalType.STRING, TypeFamily.STRING)

def _fixed_string() -> TypeRule:
    return TypeRule(CanonicalType.STRING, TypeFamily.FIXED_STRING)

def _integer(bits: int, min_integer: Optional[int] = None,
             max_integer: Optional[int] = None) -> TypeRule:
    return TypeRule(CanonicalType.INTEGER, TypeFamily.BIT_INTEGER, bits,
                    min_integer=min_integer, max_integer=max_integer)

def _serial(bits: int) -> TypeRule:
    return TypeRule(CanonicalType.INTEGER, TypeFamily.SERIAL, bits)

def _decimal_integer(bits: int) -> TypeRule:
    return TypeRule(CanonicalType.NUMERIC, TypeFamily.DECIMAL_INTEGER, bits)

def _float(bits: int) -> TypeRule:
    return TypeRule(CanonicalType.NUMERIC, TypeFamily.FLOAT, bits)

def _money(bound: float, width: int) -> TypeRule:
    return TypeRule(CanonicalType.NUMERIC, TypeFamily.MONEY, max_float=bound, width=width)

@dataclass(frozen=True)
class TypeSettings:
    """Type table and defaults of one dialect

    Attributes
    ----------
    dialect : SQLDialect
        Dialect the settings belong to
    types : Mapping[str, TypeRule]
        Native type name (case-folded, single spaces) to rule
    upper_case_names : bool
        Fold type names to upper case (Oracle) instead of lower case
    default_string_width : int
        Width of strings without a usable length
    string_width_cap : int, optional
        Lengths at or above this use the default width; None for no cap
    default_scale : int, optional
        Scale of floating/decimal types declared without one;
        None keeps the declared scale (0)
    """
    dialect: SQLDialect
    types: Mapping[str, TypeRule]
    upper_case_names: bool = False
    default_string_width: int = 50
    string_width_cap: Optional[int] = 50
    default_scale: Optional[int] = 2

    def fold(self, name: str) -> str:
        """Case-fold a native type name for lookup"""
        return name.upper() if self.upper_case_names else name.lower()

    def string_width(self, length: int) -> int:
        """Width of a variable-length string declared with `length` (0 if none)"""
        if length > 0 and (self.string_width_cap is None or length < self.string_width_cap):
            return length
        return self.default_string_width

_MYSQL_TYPES: Final = {
    "varchar": _string(),
    "text": _string(),
    "tinytext": _string(),
    "mediumtext": _string(),
    "longtext": _string(),
    "char": _fixed_string(),
    "tinyint": _integer(8),
    "smallint": _integer(16),
    "mediumint": _integer(24),
    "int": _integer(32),
    "integer": _integer(32),
    "bigint": _integer(64),
    "serial": _serial(64),
    "decimal": _float(64),
    "numeric": _float(64),
    "double": _float(64),
    "double precision": _float(64),
    "float": _float(32),
    "real": _float(32),
    "date": _plain(CanonicalType.DATE),
    "time": _plain(CanonicalType.TIME),
    "datetime": _plain(CanonicalType.DATETIME),
    "timestamp": _plain(CanonicalType.DATETIME),
    "bool": _plain(CanonicalType.BOOLEAN),
    "boolean": _plain(CanonicalType.BOOLEAN),
}

_PG_TYPES: Final = {
    "int2": _integer(16),
    "smallint": _integer(16),
    "int4": _integer(32),
    "int": _integer(32),
    "integer": _integer(32),
    "int8": _integer(64),
    "bigint": _integer(64),
    "smallserial": _serial(16),
    "serial2": _serial(16),
    "serial": _serial(32),
    "serial4": _serial(32),
    "bigserial": _serial(64),
    "serial8": _serial(64),
    "varchar": _string(),
    "character varying": _string(),
    "text": _string(),
    "char": _fixed_string(),
    "character": _fixed_string(),
    "numeric": _float(64),
    "decimal": _float(64),
    "double": _float(64),
    "double precision": _float(64),
    "float8": _float(64),
    "real": _float(32),
    "float4": _float(32),
    "date": _plain(CanonicalType.DATE),
    "time": _plain(CanonicalType.TIME),
    "time without time zone": _plain(CanonicalType.TIME),
    "timestamp": _plain(CanonicalType.DATETIME),
    "timestamp without time zone": _plain(CanonicalType.DATETIME),
    "bool": _plain(CanonicalType.BOOLEAN),
    "boolean": _plain(CanonicalType.BOOLEAN),
}

_ORACLE_TYPES: Final = {
    "CHAR": _fixed_string(),
    "NCHAR": _fixed_string(),
    "CHARACTER": _fixed_string(),
    "VARCHAR": _string(),
    "VARCHAR2": _string(),
    "NVARCHAR2": _string(),
    "STRING": _string(),
    "BINARY_INTEGER": _integer(32),
    "PLS_INTEGER": _integer(32),
    "SIMPLE_INTEGER": _integer(32),
    "INT": _integer(32),
    "INTEGER": _integer(32),
    "SMALLINT": _integer(32),
    "NATURAL": _integer(32, min_integer=0),
    "NATURALN": _integer(32, min_integer=0),
    "POSITIVE": _integer(32, min_integer=1),
    "POSITIVEN": _integer(32, min_integer=1),
    "SIGNTYPE": _integer(8, min_integer=-1, max_integer=1),
    "NUMBER": _decimal_integer(64),
    "NUMERIC": _decimal_integer(64),
    "DECIMAL": _decimal_integer(64),
    "DEC": _decimal_integer(64),
    "FLOAT": _decimal_integer(64),
    "DOUBLE PRECISION": _decimal_integer(64),
    "BINARY_DOUBLE": _decimal_integer(64),
    "REAL": _decimal_integer(32),
    "BINARY_FLOAT": _decimal_integer(32),
    "DATE": _plain(CanonicalType.DATETIME),
    "TIMESTAMP": _plain(CanonicalType.DATETIME),
    "BOOLEAN": _plain(CanonicalType.BOOLEAN),
}

_TSQL_TYPES: Final = {
    "tinyint": _integer(8, min_integer=0),
    "smallint": _integer(16),
    "int": _integer(32),
    "bigint": _integer(64),
    "bit": _integer(8, min_integer=0, max_integer=1),
    "decimal": _float(64),
    "numeric": _float(64),
    "float": _float(64),
    "real": _float(32),
    "money": _money(922337203685477.5807, 19),
    "smallmoney": _money(214748.3647, 10),
    "date": _plain(CanonicalType.DATE),
    "time": _plain(CanonicalType.TIME),
    "datetime": _plain(CanonicalType.DATETIME),
    "datetime2": _plain(CanonicalType.DATETIME),
    "smalldatetime": _plain(CanonicalType.DATETIME),
    "char": _fixed_string(),
    "nchar": _fixed_string(),
    "varchar": _string(),
    "nvarchar": _string(),
    "text": _string(),
    "ntext": _string(),
}

_SQLITE_TYPES: Final = {
    "int": _integer(64),
    "integer": _integer(64),
    "tinyint": _integer(8),
    "smallint": _integer(16),
    "mediumint": _integer(24),
    "bigint": _integer(64),
    "unsigned big int": _integer(64),
    "int2": _integer(16),
    "int8": _integer(64),
    "boolean": _integer(8, min_integer=0, max_integer=1),
    "character": _string(),
    "varchar": _string(),
    "varying character": _string(),
    "nchar": _string(),
    "native character": _string(),
    "nvarchar": _string(),
    "text": _string(),
    "clob": _string(),
    "date": _string(),
    "datetime": _string(),
    "real": _float(64),
    "double": _float(64),
    "double precision": _float(64),
    "float": _float(64),
    "numeric": _float(64),
    "decimal": _float(64),
}

_HIVE_TYPES: Final = {
    "tinyint": _integer(8),
    "smallint": _integer(16),
    "int": _integer(32),
    "integer": _integer(32),
    "bigint": _integer(64),
    "boolean": _plain(CanonicalType.BOOLEAN),
    "double": _float(64),
    "double precision": _float(64),
    "decimal": _float(64),
    "numeric": _float(64),
    "float": _float(32),
    "real": _float(32),
    "date": _plain(CanonicalType.DATE),
    "timestamp": _plain(CanonicalType.DATETIME),
    "datetime": _plain(CanonicalType.DATETIME),
    "string": _string(),
    "varchar": _string(),
    "char": _fixed_string(),
}

TYPE_SETTINGS: Final[Mapping[SQLDialect, TypeSettings]] = MappingProxyType({
    SQLDialect.MYSQL: TypeSettings(SQLDialect.MYSQL, MappingProxyType(_MYSQL_TYPES)),
    SQLDialect.POSTGRESQL: TypeSettings(SQLDialect.POSTGRESQL, MappingProxyType(_PG_TYPES)),
    SQLDialect.ORACLE: TypeSettings(SQLDialect.ORACLE, MappingProxyType(_ORACLE_TYPES),
                                    upper_case_names=True, string_width_cap=None),
    SQLDialect.SQLSERVER: TypeSettings(SQLDialect.SQLSERVER, MappingProxyType(_TSQL_TYPES),
                                       default_string_width=60, string_width_cap=None,
                                       default_scale=None),
    SQLDialect.SQLITE: TypeSettings(SQLDialect.SQLITE, MappingProxyType(_SQLITE_TYPES),
                                    default_string_width=60, string_width_cap=None),
    SQLDialect.HIVE: TypeSettings(SQLDialect.HIVE, MappingProxyType(_HIVE_TYPES)),
})
"""Type settings of each dialect"""

#
# Normalization
#

_TYPE_PATTERN: Final = re.compile(
    r"(?P<name>[A-Za-z_]\w*(?: [A-Za-z_]\w*)*)"
    r"(?:\((?P<length>[^(),]+)(?:,(?P<scale>[^(),]+))?\))?"
    r"(?P<suffix>(?: [A-Za-z_]\w*)*)"
)
"""`name[(length[,scale])][ suffix words]`"""

_LITERAL_PATTERN: Final = re.compile(r"(\d+)(?: (?:BYTE|CHAR))?", re.IGNORECASE)
"""Length or scale: digits with an optional length-semantics suffix"""

_TIME_ZONE_PATTERN: Final = re.compile(r"\bWITH (?:LOCAL )?TIME ZONE\b", re.IGNORECASE)

_ARRAY_PATTERN: Final = re.compile(r"\bARRAY\b", re.IGNORECASE)

def _canonical_text(type_text: str) -> str:
    """Collapse whitespace and remove spaces around parentheses and commas

    Examples
    --------
    >>> _canonical_text("  numeric ( 9 , 2 ) ")
    'numeric(9,2)'
    >>> _canonical_text("timestamp (6)  without time zone")
    'timestamp(6) without time zone'
    """
    text = " ".join(type_text.split())
    text = re.sub(r" ?\( ?", "(", text)
    text = re.sub(r" ?\)", ")", text)
    return re.sub(r" ?, ?", ",", text)

def _parse_literal(literal: Optional[str], type_text: str) -> int:
    """Parse a length or scale literal; `MAX`, `*` and missing literals are 0"""
    if literal is None:
        return 0
    literal = literal.strip()
    if literal.upper() in ("MAX", "*"):
        return 0
    if m := _LITERAL_PATTERN.fullmatch(literal):
        return int(m.group(1))
    raise InvalidLengthOrScaleLiteralError(
        f"invalid length or scale '{literal}' in type '{type_text}'", type_text)

def _resolve_settings(dialect_or_settings: Union[SQLDialect, TypeSettings]) -> TypeSettings:
    if isinstance(dialect_or_settings, TypeSettings):
        return dialect_or_settings
    return TYPE_SETTINGS[SQLDialect(dialect_or_settings)]

def normalize_type(type_text: str,
                   dialect_or_settings: Union[SQLDialect, TypeSettings]) -> TypeDescriptor:
    """Normalize native type text

    Args
    ----
    type_text : str
        Native type text without field options (e.g. `varchar(20)`, `NUMBER(9, 2)`)
    dialect_or_settings : SQLDialect | TypeSettings
        Dialect of the type, or type settings to use directly

    Returns
    -------
    TypeDescriptor
        Canonical type with width, scale and bounds

    Raises
    ------
    UnsupportedTypeError
        If the type has no canonical mapping (unknown name, intervals,
        time zone aware, complex and array types)
    InvalidTypeFormatError
        If the text is not `name[(length[,scale])]`
    InvalidLengthOrScaleLiteralError
        If the length or scale is not a non-negative integer
    CharTypeMustHaveLengthError
        If a fixed-length string type has no length

    Examples
    --------
    >>> normalize_type("decimal(9, 2)", SQLDialect.MYSQL)
    TypeDescriptor(ttype=<CanonicalType.NUMERIC: 'numeric'>, width=9, fixed_width=False, \
scale=2, max_integer=0, min_integer=0, max_float=999999999.0, auto_increment=False)
    >>> normalize_type("char(5)", SQLDialect.MYSQL).fixed_width
    True
    """
    settings = _resolve_settings(dialect_or_settings)
    text = _canonical_text(type_text)
    if not text:
        raise InvalidTypeFormatError("empty data type", type_text)

    if re.match(r"interval\b", text, re.IGNORECASE):
        raise UnsupportedTypeError(f"interval types are not supported: '{text}'", type_text)
    if _TIME_ZONE_PATTERN.search(text):
        raise UnsupportedTypeError(f"time zone aware types are not supported: '{text}'", type_text)
    if "<" in text:
        raise UnsupportedTypeError(f"complex types are not supported: '{text}'", type_text)
    if "[" in text or _ARRAY_PATTERN.search(text):
        raise UnsupportedTypeError(f"array types are not supported: '{text}'", type_text)

    if not (m := _TYPE_PATTERN.fullmatch(text)):
        raise InvalidTypeFormatError(f"invalid data type '{text}'", type_text)

    name = settings.fold(m.group("name") + m.group("suffix"))
    if (rule := settings.types.get(name)) is None:
        raise UnsupportedTypeError(f"unsupported data type: {name}", type_text)

    length = _parse_literal(m.group("length"), type_text)
    scale = _parse_literal(m.group("scale"), type_text)
    descriptor = _apply_rule(rule, settings, length, scale, type_text)
    _logger.debug("normalized type '%s' (%s) to %s", text, settings.dialect.value, descriptor)
    return descriptor

def _float_descriptor(rule: TypeRule, settings: TypeSettings,
                      length: int, scale: int) -> TypeDescriptor:
    if scale == 0 and settings.default_scale is not None:
        scale = settings.default_scale
    return TypeDescriptor(
        CanonicalType.NUMERIC,
        width=length or _DEFAULT_FLOAT_LENGTH[rule.bits],
        scale=scale,
        max_float=max_float(length, rule.bits)
    )

def _apply_rule(rule: TypeRule, settings: TypeSettings,
                length: int, scale: int, type_text: str) -> TypeDescriptor:
    """Derive width, scale and bounds from the rule family"""
    family = rule.family

    if family == TypeFamily.STRING:
        return TypeDescriptor(rule.ttype, width=settings.string_width(length))

    if family == TypeFamily.FIXED_STRING:
        if length == 0:
            raise CharTypeMustHaveLengthError(
                f"fixed-length type '{type_text.strip()}' must declare a length", type_text)
        return TypeDescriptor(rule.ttype, width=length, fixed_width=True)

    if family in (TypeFamily.BIT_INTEGER, TypeFamily.SERIAL):
        upper = INT_MAX[rule.bits] if rule.max_integer is None else rule.max_integer
        lower = -INT_MAX[rule.bits] - 1 if rule.min_integer is None else rule.min_integer
        return TypeDescriptor(rule.ttype, max_integer=upper, min_integer=lower,
                              auto_increment=family == TypeFamily.SERIAL)

    if family == TypeFamily.DECIMAL_INTEGER:
        if scale == 0:
            upper = max_decimal_integer(length, rule.bits)
            return TypeDescriptor(CanonicalType.INTEGER, max_integer=upper, min_integer=-upper)
        return _float_descriptor(rule, settings, length, scale)

    if family == TypeFamily.FLOAT:
        return _float_descriptor(rule, settings, length, scale)

    if family == TypeFamily.MONEY:
        return TypeDescriptor(rule.ttype, width=rule.width, scale=4, max_float=rule.max_float)

    return TypeDescriptor(rule.ttype)

"""
Syntax tree nodes produced by `parse_statement`

Only the parts of a statement the normalizer reads are modeled; everything
else (constraints, defaults, storage clauses, ...) is kept as raw text or
dropped.

Classes
-------
- `QualifiedName`: Possibly qualified object name
- `DataTypeNode`: Column data type
- `CommentAttribute`, `AutoIncrementAttribute`: Column attributes
- `ColumnDefinitionNode`, `ConstraintNode`: Table elements
- `CommentOption`: Table option
- `CreateTableNode`: CREATE TABLE statement
- `CommentOnNode`: COMMENT ON statement
- `ProcedureArgument`, `ExecuteNode`: EXEC[UTE] statement
- `OtherStatementNode`: Any other statement
"""
from dataclasses import dataclass
from typing import Optional, Union



@dataclass(frozen=True)
class QualifiedName:
    """Possibly qualified object name

    `text` is the source text with whitespace removed, quotes kept
    (e.g. `"public"."users"`, `[dbo].[users]`, `` `default.mytable` ``).
    """
    text: str

@dataclass(frozen=True)
class DataTypeNode:
    """Column data type

    Attributes
    ----------
    text : str
        Type text, including trailing field options
        (e.g. `int(10) unsigned`, `varchar(20) CHARACTER SET utf8`)
    field_options : str
        Trailing field options only (e.g. `unsigned`); empty if none
    """
    text: str
    field_options: str = ""

@dataclass(frozen=True)
class CommentAttribute:
    """Inline column comment (`COMMENT 'text'`)"""
    text: str

@dataclass(frozen=True)
class AutoIncrementAttribute:
    """Auto-increment clause

    `keyword` is the clause as written (`AUTO_INCREMENT`, `AUTOINCREMENT`,
    `IDENTITY`, `GENERATED`).
    """
    keyword: str

ColumnAttribute = Union[CommentAttribute, AutoIncrementAttribute]

@dataclass(frozen=True)
class ColumnDefinitionNode:
    """Column definition

    Attributes
    ----------
    name : str
        Column name as written (quotes kept); empty if missing
    data_type : DataTypeNode, optional
        Data type; None if missing
    attributes : tuple[ColumnAttribute, ...]
        Recognized column attributes, in source order
    """
    name: str
    data_type: Optional[DataTypeNode]
    attributes: tuple[ColumnAttribute, ...] = ()

@dataclass(frozen=True)
class ConstraintNode:
    """Table-level constraint or index definition (raw text)"""
    text: str

TableElement = Union[ColumnDefinitionNode, ConstraintNode]

@dataclass(frozen=True)
class CommentOption:
    """Table option `COMMENT [=] 'text'`"""
    text: str

@dataclass(frozen=True)
class CreateTableNode:
    """CREATE TABLE statement

    Attributes
    ----------
    table_name : QualifiedName, optional
        Table name; None if missing
    elements : tuple[TableElement, ...]
        Columns and constraints in source order
    options : tuple[CommentOption, ...]
        Recognized table options
    """
    table_name: Optional[QualifiedName]
    elements: tuple[TableElement, ...] = ()
    options: tuple[CommentOption, ...] = ()

@dataclass(frozen=True)
class CommentOnNode:
    """COMMENT ON statement

    Attributes
    ----------
    target : str
        Object kind in upper case (e.g. `TABLE`, `COLUMN`, `INDEX`)
    name : QualifiedName
        Commented object
    text : str, optional
        Comment text; None for `IS NULL`
    """
    target: str
    name: QualifiedName
    text: Optional[str]

@dataclass(frozen=True)
class ProcedureArgument:
    """Argument of a procedure call

    `name` is the parameter name without `@` for named arguments
    (e.g. `@level2name = N'id'`), otherwise None.
    `value` is the unquoted string value or the raw token text.
    """
    name: Optional[str]
    value: str

@dataclass(frozen=True)
class ExecuteNode:
    """EXEC[UTE] statement

    Attributes
    ----------
    procedure : QualifiedName
        Called procedure (e.g. `sys.sp_addextendedproperty`)
    args : tuple[ProcedureArgument, ...]
        Arguments in source order
    """
    procedure: QualifiedName
    args: tuple[ProcedureArgument, ...] = ()

@dataclass(frozen=True)
class OtherStatementNode:
    """Any statement the parser does not model"""
    text: str

StatementNode = Union[CreateTableNode, CommentOnNode, ExecuteNode, OtherStatementNode]

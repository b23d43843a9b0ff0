"""
ddl_normalizer.visitor
Build a draft table structure from a CREATE TABLE syntax tree

One visitor serves every dialect; dialect differences come from the
`DialectSpec` it is created with.

Classes
-------
- `SchemaVisitor`: Walks a `CreateTableNode` into a `TableDraft`
"""
import logging
from typing import Optional

from ._core import ColumnStructure, TableDraft
from .dialects import DialectSpec
from .errors import (
    MissingColumnNameOrTypeError, MissingTableNameError, NoColumnsFoundError,
    NoCreateTableFoundError, TypeMappingError
)
from .syntax import (
    AutoIncrementAttribute, ColumnDefinitionNode, CommentAttribute,
    ConstraintNode, CreateTableNode, QualifiedName
)
from .type_normalizer import normalize_type


_logger = logging.getLogger(__name__)



class SchemaVisitor:
    """Walks a `CreateTableNode` into a `TableDraft`

    Examples
    --------
    >>> from ddl_normalizer import SQLDialect
    >>> from ddl_normalizer.dialects import DIALECTS
    >>> from ddl_normalizer.syntax import parse_statement
    >>> tree = parse_statement("CREATE TABLE t (id int)", SQLDialect.HIVE)
    >>> SchemaVisitor(DIALECTS[SQLDialect.HIVE]).visit(tree).build().database
    'default'
    """
    def __init__(self, spec: DialectSpec):
        self.spec = spec

    def visit(self, tree: object) -> TableDraft:
        """Build the draft table structure

        Args
        ----
        tree : object
            Syntax tree; must be a `CreateTableNode`

        Returns
        -------
        TableDraft
            Draft with table name, columns and inline comments

        Raises
        ------
        NoCreateTableFoundError
            If the tree is not a CREATE TABLE statement
        MissingTableNameError
            If the statement has no table name
        MissingColumnNameOrTypeError
            If a column has no name or no data type
        NoColumnsFoundError
            If the table has no columns
        TypeMappingError
            If a column type cannot be normalized (column name attached)
        """
        if not isinstance(tree, CreateTableNode):
            raise NoCreateTableFoundError(
                f"not a CREATE TABLE statement: {type(tree).__name__}")

        draft = TableDraft()
        self._visit_table_name(tree.table_name, draft)

        for element in tree.elements:
            if isinstance(element, ConstraintNode):
                continue
            if isinstance(element, ColumnDefinitionNode):
                draft.add_column(self._visit_column(element))

        if not draft.columns:
            raise NoColumnsFoundError(f"no column found in table '{draft.name}'")

        # the first COMMENT option wins
        if self.spec.inline_comments and tree.options:
            draft.set_comment(tree.options[0].text)

        _logger.debug("visited table %s.%s with %d columns",
                      draft.database, draft.name, len(draft.columns))
        return draft

    def _visit_table_name(self, table_name: Optional[QualifiedName], draft: TableDraft) -> None:
        """Set `database` and `name` of the draft from a qualified name

        The last part is the table name and the part before it the
        namespace (`db.schema.table` uses `schema`).
        """
        if table_name is None:
            raise MissingTableNameError("table name is missing")

        parts = [self.spec.unquote(part) for part in table_name.text.split(".")]
        if not parts[-1]:
            raise MissingTableNameError(f"table name is missing in '{table_name.text}'")

        draft.name = parts[-1]
        draft.database = parts[-2] if len(parts) > 1 else self.spec.default_namespace

    def _visit_column(self, column: ColumnDefinitionNode) -> ColumnStructure:
        name = self.spec.unquote(column.name)
        if not name or column.data_type is None:
            raise MissingColumnNameOrTypeError(
                f"column name or data type is missing: '{column.name}'")

        type_text = column.data_type.text
        options = column.data_type.field_options
        if options and type_text.endswith(options):
            type_text = type_text[:-len(options)].rstrip()

        try:
            descriptor = normalize_type(type_text, self.spec.type_settings)
        except TypeMappingError as e:
            raise e.with_column(name) from e

        comment = ""
        auto_increment = False
        for attribute in column.attributes:
            if isinstance(attribute, CommentAttribute) and self.spec.inline_comments:
                comment = attribute.text
            elif (isinstance(attribute, AutoIncrementAttribute)
                    and attribute.keyword in self.spec.auto_increment_keywords):
                auto_increment = True

        return ColumnStructure.from_type(name, descriptor, comment=comment,
                                         auto_increment=auto_increment)

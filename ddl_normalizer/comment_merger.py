"""
ddl_normalizer.comment_merger
Merge out-of-band comment statements into a draft table structure

Supported statements:

- `COMMENT ON TABLE <name> IS '<text>' | NULL`
- `COMMENT ON COLUMN <table>.<column> IS '<text>' | NULL`
- `EXEC[UTE] [db.]sys.sp_addextendedproperty | sp_updateextendedproperty ...`
  with the `MS_Description` property

Comments only annotate what the draft already has: a comment on an unknown
column is dropped, and a statement that cannot be parsed is skipped.

Functions
---------
- `merge_comments`: Apply comment statements to a draft
"""
import logging
from typing import Final, Iterable

from ._core import TableDraft
from .dialects import DialectSpec
from .errors import SchemaParseError
from .splitter import starts_with_keywords
from .syntax import CommentOnNode, ExecuteNode, parse_statement


_logger = logging.getLogger(__name__)

EXTENDED_PROPERTY_PROCEDURES: Final = ("sp_addextendedproperty", "sp_updateextendedproperty")
"""Procedures that set extended properties"""

_PROPERTY_ARGUMENTS: Final = ("name", "value", "level0type", "level0name",
                              "level1type", "level1name", "level2type", "level2name")
"""Parameter names of the extended property procedures, in positional order"""

DESCRIPTION_PROPERTY: Final = "ms_description"
"""Extended property holding comments (case-insensitive)"""



def merge_comments(draft: TableDraft, statements: Iterable[str],
                   spec: DialectSpec) -> TableDraft:
    """Apply comment statements to a draft

    Args
    ----
    draft : TableDraft
        Draft table structure; modified in place
    statements : Iterable[str]
        Statements of the script other than the CREATE TABLE statement.
        Statements that are not comment statements of the dialect are ignored.
    spec : DialectSpec
        Dialect of the statements

    Returns
    -------
    TableDraft
        The given draft
    """
    for statement in statements:
        if spec.comment_on and starts_with_keywords(statement, "COMMENT", "ON"):
            handler = _merge_comment_on
        elif (spec.extended_properties
                and (starts_with_keywords(statement, "EXEC")
                     or starts_with_keywords(statement, "EXECUTE"))):
            handler = _merge_extended_property
        else:
            continue

        try:
            node = parse_statement(statement, spec.dialect)
        except SchemaParseError as e:
            _logger.warning("skipped comment statement that could not be parsed: %s", e)
            continue
        handler(draft, node, spec)
    return draft

def _set_column_comment(draft: TableDraft, column: str, comment: str,
                        spec: DialectSpec) -> None:
    if not draft.set_column_comment(column, comment,
                                    case_sensitive=spec.case_sensitive_columns):
        _logger.debug("dropped comment on unknown column '%s' of table '%s'",
                      column, draft.name)

def _merge_comment_on(draft: TableDraft, node: object, spec: DialectSpec) -> None:
    """Apply `COMMENT ON TABLE|COLUMN`; `IS NULL` clears the comment"""
    if not isinstance(node, CommentOnNode):
        return

    text = node.text if node.text is not None else ""
    if node.target == "TABLE":
        draft.set_comment(text)
    elif node.target == "COLUMN":
        column = spec.unquote(node.name.text.split(".")[-1])
        _set_column_comment(draft, column, text, spec)
    else:
        _logger.debug("ignored COMMENT ON %s %s", node.target, node.name.text)

def _merge_extended_property(draft: TableDraft, node: object, spec: DialectSpec) -> None:
    """Apply an `MS_Description` extended property

    Arguments are positional in the procedure's own order or named
    (`@level2name = N'id'`).
    """
    if not isinstance(node, ExecuteNode):
        return
    procedure = spec.unquote(node.procedure.text.split(".")[-1]).lower()
    if procedure not in EXTENDED_PROPERTY_PROCEDURES:
        return

    args: dict[str, str] = {}
    for i, arg in enumerate(node.args):
        if arg.name is not None:
            args[arg.name.lower()] = arg.value
        elif i < len(_PROPERTY_ARGUMENTS):
            args[_PROPERTY_ARGUMENTS[i]] = arg.value

    if args.get("name", "").lower() != DESCRIPTION_PROPERTY:
        _logger.debug("ignored extended property '%s'", args.get("name", ""))
        return

    value = args.get("value", "")
    if args.get("level2type", "").lower() == "column":
        _set_column_comment(draft, spec.unquote(args.get("level2name", "")), value, spec)
    elif args.get("level1type", "").lower() == "table":
        draft.set_comment(value)

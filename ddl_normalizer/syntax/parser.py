"""
Statement parser for the dialect syntax provider

Parses the first statement of a SQL text into one of the node types of
`_nodes`. Only the statements the normalizer needs are modeled:

- `CREATE [modifiers] TABLE [IF NOT EXISTS] name (elements) [options]`
- `COMMENT ON <target> name IS '<text>' | NULL`
- `EXEC[UTE] procedure [arguments]`

Anything else becomes an `OtherStatementNode`.

Functions
---------
- `parse_statement`: Parse the first statement of a SQL text

Constants
---------
- `CREATE_TABLE_MODIFIERS`: Words allowed between CREATE and TABLE
"""
import logging
from typing import Final, Optional

from .._core import SQLDialect
from ..errors import SQLSyntaxError
from ._nodes import (
    AutoIncrementAttribute, ColumnAttribute, ColumnDefinitionNode, CommentAttribute,
    CommentOnNode, CommentOption, ConstraintNode, CreateTableNode, DataTypeNode,
    ExecuteNode, OtherStatementNode, ProcedureArgument, QualifiedName,
    StatementNode, TableElement
)
from ._tokens import LEXICAL_RULES, LexicalRules, Token, TokenType, significant_tokens, unquote_string


_logger = logging.getLogger(__name__)

CREATE_TABLE_MODIFIERS: Final = ("GLOBAL", "LOCAL", "PRIVATE", "TEMP", "TEMPORARY",
                                  "UNLOGGED", "EXTERNAL", "TRANSIENT")
"""Words allowed between CREATE and TABLE"""

_INDEX_WORDS: Final = {
    SQLDialect.MYSQL: ("KEY", "INDEX", "FULLTEXT", "SPATIAL"),
    SQLDialect.SQLSERVER: ("INDEX",),
}
"""Words starting an inline index definition"""

_TYPE_STOP_WORDS: Final = frozenset({
    "NOT", "NULL", "DEFAULT", "PRIMARY", "UNIQUE", "KEY", "CHECK", "REFERENCES",
    "CONSTRAINT", "COMMENT", "AUTO_INCREMENT", "AUTOINCREMENT", "IDENTITY",
    "GENERATED", "AS", "COLLATE", "ON", "ENABLE", "DISABLE", "VISIBLE",
    "INVISIBLE", "SPARSE", "ROWGUIDCOL", "FILESTREAM", "MASKED", "ENCRYPT",
    "SORT", "STORAGE", "COLUMN_FORMAT", "SRID", "CHARSET", "USING"
})
"""Words that end the data type of a column definition"""

_NAME_TOKENS: Final = (TokenType.WORD, TokenType.QUOTED_IDENTIFIER)



#
# Token cursor
#

class _Cursor:
    """Position in a list of significant tokens"""
    def __init__(self, tokens: list[Token]):
        self.tokens = tokens
        self.pos = 0

    def peek(self, offset: int = 0) -> Optional[Token]:
        index = self.pos + offset
        return self.tokens[index] if index < len(self.tokens) else None

    def at_end(self) -> bool:
        return self.pos >= len(self.tokens)

    def advance(self) -> Token:
        token = self.tokens[self.pos]
        self.pos += 1
        return token

    def accept_word(self, *words: str) -> Optional[Token]:
        """Consume and return the next token if it is one of `words`"""
        token = self.peek()
        if token is not None and token.is_word(*words):
            self.pos += 1
            return token
        return None

    def accept_punctuation(self, char: str) -> bool:
        token = self.peek()
        if token is not None and token.is_punctuation(char):
            self.pos += 1
            return True
        return False

    def rest(self) -> list[Token]:
        return self.tokens[self.pos:]

def _first_statement(sql: str, rules: LexicalRules) -> list[Token]:
    """Significant tokens of the first statement (up to the first ';')"""
    tokens = significant_tokens(sql, rules)
    for i, token in enumerate(tokens):
        if token.is_punctuation(";"):
            return tokens[:i]
    return tokens

def _render(tokens: list[Token]) -> str:
    """Render tokens compactly, separating adjacent words with a space

    Examples
    --------
    `( 10 BYTE )` -> `(10 BYTE)`, `( 9 , 2 )` -> `(9,2)`
    """
    text = ""
    previous: Optional[Token] = None
    for token in tokens:
        if (previous is not None
                and previous.type not in (TokenType.PUNCTUATION, TokenType.OTHER)
                and token.type not in (TokenType.PUNCTUATION, TokenType.OTHER)):
            text += " "
        text += token.value
        previous = token
    return text

def _matching_paren(tokens: list[Token], start: int) -> int:
    """Index of the ')' matching the '(' at `start`

    Raises
    ------
    SQLSyntaxError
        If the parenthesis is not closed
    """
    depth = 0
    for i in range(start, len(tokens)):
        if tokens[i].is_punctuation("("):
            depth += 1
        elif tokens[i].is_punctuation(")"):
            depth -= 1
            if depth == 0:
                return i
    raise SQLSyntaxError(f"unbalanced parentheses near position {tokens[start].position}")

def _qualified_name(cursor: _Cursor) -> Optional[QualifiedName]:
    """Parse `part[.part]...`; None if the next token is not a name"""
    token = cursor.peek()
    if token is None or token.type not in _NAME_TOKENS:
        return None
    text = cursor.advance().value
    while (dot := cursor.peek()) is not None and dot.is_punctuation("."):
        part = cursor.peek(1)
        if part is None or part.type not in _NAME_TOKENS:
            break
        cursor.pos += 2
        text += "." + part.value
    return QualifiedName(text)

#
# CREATE TABLE
#

def _split_elements(tokens: list[Token]) -> list[list[Token]]:
    """Split the tokens between the table parentheses on top-level commas

    Commas inside parentheses or angle brackets (`map<string,int>`) do
    not split.
    """
    if not tokens:
        return []

    elements: list[list[Token]] = [[]]
    depth = angle = 0
    for token in tokens:
        if token.is_punctuation("("):
            depth += 1
        elif token.is_punctuation(")"):
            depth -= 1
        elif depth == 0 and token.type == TokenType.OTHER and token.value in "<>":
            angle = max(angle + (1 if token.value == "<" else -1), 0)
        elif depth == 0 and angle == 0 and token.is_punctuation(","):
            elements.append([])
            continue
        elements[-1].append(token)

    for element in elements:
        if not element:
            raise SQLSyntaxError("empty table element")
    return elements

def _data_type(tokens: list[Token], start: int) -> tuple[Optional[DataTypeNode], int]:
    """Parse the data type of a column starting at `start`

    Returns
    -------
    DataTypeNode, optional
        Data type; None if the column has no type words
    int
        Index of the first token after the type and its field options
    """
    parts: list[str] = []
    i = start
    while i < len(tokens):
        token = tokens[i]
        if token.is_punctuation("("):
            if not parts:
                break
            end = _matching_paren(tokens, i)
            parts[-1] += _render(tokens[i:end + 1])
            i = end + 1
            continue
        if token.type == TokenType.OTHER and token.value == "[" and parts:
            # array suffix: int[], int[3][3]
            end = i
            while end < len(tokens) and tokens[end].value != "]":
                end += 1
            if end == len(tokens):
                raise SQLSyntaxError(f"unclosed '[' near position {token.position}")
            parts[-1] += _render(tokens[i:end + 1])
            i = end + 1
            continue
        if token.type == TokenType.OTHER and token.value == "<" and parts:
            depth, end = 0, i
            for end in range(i, len(tokens)):
                if tokens[end].value == "<":
                    depth += 1
                elif tokens[end].value == ">":
                    depth -= 1
                    if depth == 0:
                        break
            parts[-1] += _render(tokens[i:end + 1])
            i = end + 1
            continue
        if token.type == TokenType.QUOTED_IDENTIFIER and token.value.startswith("[") and not parts:
            # bracket-quoted type name: [int], [nvarchar](50)
            parts.append(token.value[1:-1])
            i += 1
            continue
        if token.type != TokenType.WORD:
            break

        word = token.value.upper()
        following = tokens[i + 1] if i + 1 < len(tokens) else None
        if word == "WITH":
            if following is None or not following.is_word("TIME", "LOCAL"):
                break
        elif word in _TYPE_STOP_WORDS:
            break
        elif parts and word in ("UNSIGNED", "SIGNED", "ZEROFILL"):
            break
        elif parts and word == "CHARACTER" and following is not None and following.is_word("SET"):
            break
        parts.append(token.value)
        i += 1

    if not parts:
        return None, start

    options: list[str] = []
    while i < len(tokens):
        token = tokens[i]
        if token.is_word("UNSIGNED", "SIGNED", "ZEROFILL"):
            options.append(token.value)
            i += 1
        elif (token.is_word("CHARACTER") and i + 2 < len(tokens)
                and tokens[i + 1].is_word("SET")):
            options.extend(t.value for t in tokens[i:i + 3])
            i += 3
        elif token.is_word("CHARSET", "COLLATE") and i + 1 < len(tokens):
            options.extend(t.value for t in tokens[i:i + 2])
            i += 2
        else:
            break

    field_options = " ".join(options)
    text = " ".join(parts + options)
    return DataTypeNode(text, field_options), i

def _column_attributes(tokens: list[Token], rules: LexicalRules) -> tuple[ColumnAttribute, ...]:
    """Recognized attributes after the data type of a column"""
    attributes: list[ColumnAttribute] = []
    i = 0
    while i < len(tokens):
        token = tokens[i]
        following = tokens[i + 1] if i + 1 < len(tokens) else None
        if token.is_punctuation("("):
            i = _matching_paren(tokens, i) + 1
            continue

        if token.is_word("COMMENT") and following is not None and following.type == TokenType.STRING:
            attributes.append(CommentAttribute(unquote_string(following.value, rules)))
            i += 2
            continue
        if token.is_word("AUTO_INCREMENT", "AUTOINCREMENT", "IDENTITY"):
            attributes.append(AutoIncrementAttribute(token.value.upper()))
        elif token.is_word("GENERATED"):
            # GENERATED {ALWAYS | BY DEFAULT [ON NULL]} AS IDENTITY [(...)]
            for j in range(i + 1, len(tokens) - 1):
                if tokens[j].is_word("AS"):
                    if tokens[j + 1].is_word("IDENTITY"):
                        attributes.append(AutoIncrementAttribute("GENERATED"))
                        i = j + 1
                    break
        i += 1
    return tuple(attributes)

def _is_constraint(tokens: list[Token], dialect: SQLDialect) -> bool:
    """True if a table element is a constraint, an index or a LIKE clause

    The element must have the shape of one (`PRIMARY KEY`, `CHECK (`,
    `KEY name (` in MySQL, ...); otherwise it is a column, which may be
    named `key`, `index` or `period`.
    """
    if len(tokens) < 2:
        return False
    first, second = tokens[0], tokens[1]
    third = tokens[2] if len(tokens) > 2 else None

    if first.is_word("CONSTRAINT"):
        return second.type in _NAME_TOKENS
    if first.is_word("PRIMARY", "FOREIGN"):
        return second.is_word("KEY")
    if first.is_word("CHECK"):
        return second.is_punctuation("(")
    if first.is_word("UNIQUE"):
        if second.is_punctuation("(") or second.is_word("KEY", "INDEX", "NULLS",
                                                         "CLUSTERED", "NONCLUSTERED"):
            return True
        # UNIQUE name (...)
        return dialect == SQLDialect.MYSQL and third is not None and third.is_punctuation("(")
    if first.is_word("PERIOD"):
        return second.is_word("FOR")
    if first.is_word("EXCLUDE"):
        return dialect == SQLDialect.POSTGRESQL and (second.is_punctuation("(")
                                                     or second.is_word("USING"))
    if first.is_word("LIKE"):
        return second.type in _NAME_TOKENS and (
            third is None or third.is_punctuation(".") or third.is_word("INCLUDING", "EXCLUDING"))
    if first.is_word(*_INDEX_WORDS.get(dialect, ())):
        if first.is_word("FULLTEXT", "SPATIAL"):
            return True
        # KEY|INDEX [name] [USING method] [CLUSTERED|NONCLUSTERED] (...)
        return (second.is_punctuation("(") or second.is_word("USING")
                or (third is not None and (third.is_punctuation("(")
                                           or third.is_word("USING", "CLUSTERED", "NONCLUSTERED"))))
    return False

def _table_element(tokens: list[Token], dialect: SQLDialect, rules: LexicalRules) -> TableElement:
    first = tokens[0]
    if _is_constraint(tokens, dialect):
        return ConstraintNode(_render(tokens))
    if first.type not in _NAME_TOKENS:
        return ColumnDefinitionNode("", None)

    data_type, end = _data_type(tokens, 1)
    return ColumnDefinitionNode(first.value, data_type, _column_attributes(tokens[end:], rules))

def _table_options(tokens: list[Token], rules: LexicalRules) -> tuple[CommentOption, ...]:
    """Table options after the closing parenthesis; only COMMENT is kept"""
    options: list[CommentOption] = []
    depth = 0
    for i, token in enumerate(tokens):
        if token.is_punctuation("("):
            depth += 1
        elif token.is_punctuation(")"):
            depth -= 1
            if depth < 0:
                raise SQLSyntaxError(f"unbalanced parentheses near position {token.position}")
        elif depth == 0 and token.is_word("COMMENT"):
            rest = tokens[i + 1:i + 3]
            if rest and rest[0].is_punctuation("="):
                rest = rest[1:]
            if rest and rest[0].type == TokenType.STRING:
                options.append(CommentOption(unquote_string(rest[0].value, rules)))
    if depth != 0:
        raise SQLSyntaxError("unbalanced parentheses in table options")
    return tuple(options)

def _create_table(cursor: _Cursor, dialect: SQLDialect, rules: LexicalRules) -> StatementNode:
    cursor.advance()  # CREATE
    if cursor.accept_word("OR"):
        cursor.accept_word("REPLACE")
    while cursor.accept_word(*CREATE_TABLE_MODIFIERS):
        pass
    if not cursor.accept_word("TABLE"):
        return OtherStatementNode(_render(cursor.tokens))

    if cursor.accept_word("IF"):
        cursor.accept_word("NOT")
        cursor.accept_word("EXISTS")

    table_name = _qualified_name(cursor)
    tokens = cursor.rest()
    if not tokens or not tokens[0].is_punctuation("("):
        raise SQLSyntaxError("expected '(' after the table name")

    end = _matching_paren(tokens, 0)
    elements = tuple(_table_element(element, dialect, rules)
                     for element in _split_elements(tokens[1:end]))
    options = _table_options(tokens[end + 1:], rules)
    _logger.debug("parsed CREATE TABLE %s with %d elements",
                  table_name.text if table_name else "<none>", len(elements))
    return CreateTableNode(table_name, elements, options)

#
# COMMENT ON
#

def _comment_on(cursor: _Cursor, rules: LexicalRules) -> StatementNode:
    cursor.advance()  # COMMENT
    if not cursor.accept_word("ON"):
        return OtherStatementNode(_render(cursor.tokens))

    target_token = cursor.peek()
    if target_token is None or target_token.type != TokenType.WORD:
        raise SQLSyntaxError("COMMENT ON without an object type")
    target = cursor.advance().value.upper()
    if target in ("MATERIALIZED", "FOREIGN") and cursor.accept_word("VIEW", "TABLE"):
        target += " " + cursor.tokens[cursor.pos - 1].value.upper()

    name = _qualified_name(cursor)
    if name is None:
        raise SQLSyntaxError(f"COMMENT ON {target} without an object name")

    # skip anything between the name and IS (e.g. `ON table`, argument lists)
    while not cursor.at_end() and not cursor.peek().is_word("IS"):
        if cursor.peek().is_punctuation("("):
            cursor.pos = _matching_paren(cursor.tokens, cursor.pos) + 1
        else:
            cursor.advance()
    if not cursor.accept_word("IS"):
        raise SQLSyntaxError(f"COMMENT ON {target} {name.text} without IS")

    value = cursor.peek()
    if value is not None and value.type == TokenType.STRING:
        return CommentOnNode(target, name, unquote_string(value.value, rules))
    if value is not None and value.is_word("NULL"):
        return CommentOnNode(target, name, None)
    raise SQLSyntaxError(f"COMMENT ON {target} {name.text} IS expects a string or NULL")

#
# EXEC[UTE]
#

def _argument(tokens: list[Token], rules: LexicalRules) -> ProcedureArgument:
    name = None
    if (len(tokens) >= 2 and tokens[0].type == TokenType.VARIABLE
            and tokens[1].is_punctuation("=")):
        name = tokens[0].value.lstrip("@")
        tokens = tokens[2:]
    if len(tokens) == 1 and tokens[0].type == TokenType.STRING:
        return ProcedureArgument(name, unquote_string(tokens[0].value, rules))
    return ProcedureArgument(name, _render(tokens))

def _execute(cursor: _Cursor, rules: LexicalRules) -> StatementNode:
    cursor.advance()  # EXEC / EXECUTE
    # EXEC @status = procedure ...
    if (token := cursor.peek()) is not None and token.type == TokenType.VARIABLE:
        following = cursor.peek(1)
        if following is not None and following.is_punctuation("="):
            cursor.pos += 2

    procedure = _qualified_name(cursor)
    if procedure is None:
        return OtherStatementNode(_render(cursor.tokens))

    args: list[ProcedureArgument] = []
    current: list[Token] = []
    for token in cursor.rest():
        if token.is_punctuation(","):
            if not current:
                raise SQLSyntaxError(f"empty argument in call to {procedure.text}")
            args.append(_argument(current, rules))
            current = []
        else:
            current.append(token)
    if current:
        args.append(_argument(current, rules))
    elif args:
        raise SQLSyntaxError(f"trailing comma in call to {procedure.text}")
    return ExecuteNode(procedure, tuple(args))

#
# Entry point
#

def parse_statement(sql: str, dialect: SQLDialect) -> StatementNode:
    """Parse the first statement of a SQL text

    Args
    ----
    sql : str
        SQL text; parsing stops at the first ';'
    dialect : SQLDialect
        SQL dialect of the text

    Returns
    -------
    StatementNode
        `CreateTableNode`, `CommentOnNode`, `ExecuteNode` or `OtherStatementNode`

    Raises
    ------
    SQLSyntaxError
        If the statement is empty or malformed

    Examples
    --------
    >>> parse_statement("CREATE TABLE t (id int COMMENT 'key')", SQLDialect.MYSQL)
    CreateTableNode(table_name=QualifiedName(text='t'), elements=(ColumnDefinitionNode(name='id', \
data_type=DataTypeNode(text='int', field_options=''), attributes=(CommentAttribute(text='key'),)),), options=())
    """
    rules = LEXICAL_RULES[dialect]
    tokens = _first_statement(sql, rules)
    if not tokens:
        raise SQLSyntaxError("empty statement")

    cursor = _Cursor(tokens)
    first = tokens[0]
    if first.is_word("CREATE"):
        return _create_table(cursor, dialect, rules)
    if first.is_word("COMMENT"):
        return _comment_on(cursor, rules)
    if first.is_word("EXEC", "EXECUTE"):
        return _execute(cursor, rules)
    return OtherStatementNode(_render(tokens))

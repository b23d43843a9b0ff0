"""
ddl_normalizer.syntax
Dialect syntax provider: tokenizer and statement parser

Modules
-------
- `_tokens`: Tokenizer and lexical rules of each dialect
- `_nodes`: Syntax tree nodes
- `parser`: Statement parser
"""
from ._nodes import (
    AutoIncrementAttribute,
    ColumnDefinitionNode,
    CommentAttribute,
    CommentOnNode,
    CommentOption,
    ConstraintNode,
    CreateTableNode,
    DataTypeNode,
    ExecuteNode,
    OtherStatementNode,
    ProcedureArgument,
    QualifiedName,
    StatementNode,
)
from ._tokens import LEXICAL_RULES, LexicalRules, Token, TokenType, tokenize, unquote_string
from .parser import CREATE_TABLE_MODIFIERS, parse_statement

"""
Tokenizer for the dialect syntax provider

Classes
-------
- `TokenType`: Types of tokens
- `Token`: A single token
- `LexicalRules`: Lexical differences between dialects

Functions
---------
- `tokenize`: Split SQL text into tokens
- `significant_tokens`: Tokens without whitespace and comments
- `unquote_string`: Value of a string literal token

Constants
---------
- `LEXICAL_RULES`: Lexical rules of each dialect
"""
import re
from dataclasses import dataclass
from enum import Enum, auto
from typing import Final, Iterator

from .._core import SQLDialect



class TokenType(Enum):
    """Types of tokens"""
    COMMENT_LINE = auto()
    COMMENT_BLOCK = auto()
    STRING = auto()
    QUOTED_IDENTIFIER = auto()
    VARIABLE = auto()
    NUMBER = auto()
    WORD = auto()
    PUNCTUATION = auto()
    WHITESPACE = auto()
    OTHER = auto()

_TRIVIA: Final = {TokenType.COMMENT_LINE, TokenType.COMMENT_BLOCK, TokenType.WHITESPACE}
"""Token types that carry no meaning for the parser"""

@dataclass(frozen=True)
class Token:
    """A single token

    Attributes
    ----------
    type : TokenType
        Type of the token
    value : str
        Source text of the token
    position : int
        Offset of the token in the source text
    """
    type: TokenType
    value: str
    position: int

    def is_word(self, *words: str) -> bool:
        """True if the token is an unquoted word, optionally one of `words`
        (case-insensitive)"""
        if self.type != TokenType.WORD:
            return False
        return not words or self.value.upper() in words

    def is_punctuation(self, char: str) -> bool:
        """True if the token is the punctuation character `char`"""
        return self.type == TokenType.PUNCTUATION and self.value == char

@dataclass(frozen=True)
class LexicalRules:
    """Lexical differences between dialects

    Attributes
    ----------
    identifier_quotes : str
        Opening characters of quoted identifiers (any of '`', '"', '[')
    double_quoted_strings : bool
        True if "..." is a string literal rather than an identifier
    backslash_escapes : bool
        True if backslash escapes are recognized in string literals
    national_strings : bool
        True if N'...' string literals are recognized
    hash_comments : bool
        True if '#' starts a line comment
    """
    identifier_quotes: str = '"'
    double_quoted_strings: bool = False
    backslash_escapes: bool = False
    national_strings: bool = False
    hash_comments: bool = False

    def pattern(self) -> "re.Pattern[str]":
        """Compiled token pattern for these rules"""
        return _compile(self)

LEXICAL_RULES: Final[dict[SQLDialect, LexicalRules]] = {
    SQLDialect.MYSQL: LexicalRules(identifier_quotes="`", double_quoted_strings=True,
                                   backslash_escapes=True, hash_comments=True),
    SQLDialect.POSTGRESQL: LexicalRules(identifier_quotes='"'),
    SQLDialect.ORACLE: LexicalRules(identifier_quotes='"', national_strings=True),
    SQLDialect.SQLSERVER: LexicalRules(identifier_quotes='"[', national_strings=True),
    SQLDialect.SQLITE: LexicalRules(identifier_quotes='`"['),
    SQLDialect.HIVE: LexicalRules(identifier_quotes="`", double_quoted_strings=True,
                                  backslash_escapes=True),
}
"""Lexical rules of each dialect"""

_IDENTIFIER_QUOTE_PATTERNS: Final = {
    "`": r"`(?:[^`]|``)*`",
    '"': r'"(?:[^"]|"")*"',
    "[": r"\[[^\]]*\]",
}

_PATTERN_CACHE: dict[LexicalRules, "re.Pattern[str]"] = {}

def _compile(rules: LexicalRules) -> "re.Pattern[str]":
    """Build the token pattern of the given rules (cached)"""
    if (cached := _PATTERN_CACHE.get(rules)) is not None:
        return cached

    line_comment = r"--[^\n]*"
    if rules.hash_comments:
        line_comment += r"|#[^\n]*"

    if rules.backslash_escapes:
        strings = [r"'(?:[^'\\]|\\.|'')*'"]
        if rules.double_quoted_strings:
            strings.append(r'"(?:[^"\\]|\\.|"")*"')
    else:
        strings = [r"'(?:[^']|'')*'"]
        if rules.double_quoted_strings:
            strings.append(r'"(?:[^"]|"")*"')
    string = "|".join(strings)
    if rules.national_strings:
        string = rf"[Nn]?(?:{string})"

    quotes = [_IDENTIFIER_QUOTE_PATTERNS[q] for q in rules.identifier_quotes
              if not (q == '"' and rules.double_quoted_strings)]

    patterns: list[tuple[TokenType, str]] = [
        (TokenType.COMMENT_LINE, line_comment),
        (TokenType.COMMENT_BLOCK, r"/\*[\s\S]*?\*/"),
        (TokenType.STRING, string),
    ]
    if quotes:
        patterns.append((TokenType.QUOTED_IDENTIFIER, "|".join(quotes)))
    patterns.extend([
        (TokenType.VARIABLE, r"@@?[^\W\d]\w*"),
        (TokenType.NUMBER, r"\d+(?:\.\d+)?(?:[eE][-+]?\d+)?"),
        (TokenType.WORD, r"[^\W\d][\w$]*" if rules.hash_comments else r"[^\W\d][\w$#]*"),
        (TokenType.PUNCTUATION, r"[(),.;=]"),
        (TokenType.WHITESPACE, r"\s+"),
        (TokenType.OTHER, r"."),
    ])

    compiled = re.compile("|".join(f"(?P<{t.name}>{p})" for t, p in patterns), re.DOTALL)
    _PATTERN_CACHE[rules] = compiled
    return compiled

def tokenize(sql: str, rules: LexicalRules) -> Iterator[Token]:
    """Split SQL text into tokens

    Args
    ----
    sql : str
        SQL text
    rules : LexicalRules
        Lexical rules of the dialect

    Yields
    ------
    Token
        Tokens in source order, including whitespace and comments.
        An unterminated string literal or quoted identifier yields
        its opening quote as an OTHER token.
    """
    for match in rules.pattern().finditer(sql):
        yield Token(TokenType[match.lastgroup], match.group(), match.start())

def significant_tokens(sql: str, rules: LexicalRules) -> list[Token]:
    """Tokens without whitespace and comments

    Examples
    --------
    >>> [t.value for t in significant_tokens("id INT, -- key\\n name TEXT", LexicalRules())]
    ['id', 'INT', ',', 'name', 'TEXT']
    """
    return [t for t in tokenize(sql, rules) if t.type not in _TRIVIA]

_ESCAPES: Final = {"n": "\n", "t": "\t", "r": "\r", "0": "\0", "b": "\b", "Z": "\x1a"}
"""MySQL-style backslash escape sequences"""

def unquote_string(value: str, rules: LexicalRules) -> str:
    """Value of a string literal token

    Args
    ----
    value : str
        Source text of the string literal (e.g. `N'it''s'`)
    rules : LexicalRules
        Lexical rules of the dialect

    Returns
    -------
    str
        The literal's value (e.g. `it's`)

    Examples
    --------
    >>> unquote_string("'it''s'", LexicalRules())
    "it's"
    >>> unquote_string("N'name'", LexicalRules(national_strings=True))
    'name'
    """
    if rules.national_strings and value[:1] in ("N", "n") and value[1:2] == "'":
        value = value[1:]
    quote, body = value[0], value[1:-1]

    if not rules.backslash_escapes:
        return body.replace(quote * 2, quote)

    def _unescape(match: "re.Match[str]") -> str:
        if (escaped := match.group(1)) is None:
            return quote
        return _ESCAPES.get(escaped, escaped)

    return re.sub(r"\\(.)|" + re.escape(quote * 2), _unescape, body, flags=re.DOTALL)

"""
ddl_normalizer.splitter
Split SQL scripts into statements

Splitting is purely lexical: every terminator character ends a statement,
even one inside a string literal or a comment. Scripts whose comments or
string literals contain the terminator are split at that point.

Classes
-------
- `StatementSplitter`: Restartable iterable over the statements of a script

Functions
---------
- `strip_leading_trivia`: Remove leading whitespace and comments
- `starts_with_keywords`: Check the keyword prefix of a statement
"""
import re
from typing import Iterator, Optional



class StatementSplitter:
    """Restartable iterable over the statements of a script

    Each call to `iter()` starts a new pass over the script and yields
    the stripped, non-empty pieces between terminators.

    Examples
    --------
    >>> list(StatementSplitter("CREATE TABLE t (id int); ; COMMENT ON TABLE t IS 'x';"))
    ['CREATE TABLE t (id int)', "COMMENT ON TABLE t IS 'x'"]
    >>> list(StatementSplitter("SELECT 1\\nGO\\nSELECT 2", batch_separator="GO"))
    ['SELECT 1', 'SELECT 2']
    """
    def __init__(self, script: str, terminator: str = ";",
                 batch_separator: Optional[str] = None):
        """Statement splitter

        Parameters
        ----------
        script : str
            SQL script
        terminator : str, default ";"
            Statement terminator
        batch_separator : str, optional
            Word that ends a statement when it stands alone on a line
            (e.g. "GO" for T-SQL), case-insensitive
        """
        if not terminator:
            raise ValueError("terminator must not be empty")
        self.script = script
        self.terminator = terminator
        self.batch_separator = batch_separator.upper() if batch_separator else None

    def __iter__(self) -> Iterator[str]:
        buffer = ""
        for line in self.script.splitlines(keepends=True):
            if self.batch_separator and line.strip().upper() == self.batch_separator:
                if statement := buffer.strip():
                    yield statement
                buffer = ""
                continue

            *complete, rest = line.split(self.terminator)
            for piece in complete:
                if statement := (buffer + piece).strip():
                    yield statement
                buffer = ""
            buffer += rest

        if statement := buffer.strip():
            yield statement

_LEADING_TRIVIA = re.compile(r"(?:\s+|--[^\n]*(?:\n|$)|/\*.*?\*/)*", re.DOTALL)
"""Whitespace, line comments and block comments at the start of a text"""

def strip_leading_trivia(statement: str) -> str:
    """Remove leading whitespace and comments

    Examples
    --------
    >>> strip_leading_trivia("-- note\\n /* block */ COMMENT ON TABLE t IS 'x'")
    "COMMENT ON TABLE t IS 'x'"
    """
    return statement[_LEADING_TRIVIA.match(statement).end():]

def starts_with_keywords(statement: str, *keywords: str) -> bool:
    """Check if a statement starts with the given keywords

    Leading comments are ignored, keywords are compared case-insensitively
    and may be separated by any whitespace.

    Examples
    --------
    >>> starts_with_keywords("comment  on\\n column t.c IS 'x'", "COMMENT", "ON")
    True
    >>> starts_with_keywords("COMMENTS ON", "COMMENT")
    False
    """
    if not keywords:
        return True
    pattern = r"\s+".join(re.escape(k) for k in keywords) + r"(?!\w)"
    return re.match(pattern, strip_leading_trivia(statement), re.IGNORECASE) is not None

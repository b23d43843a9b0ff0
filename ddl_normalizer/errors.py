"""
ddl_normalizer.errors
Exceptions raised while normalizing CREATE TABLE statements

Every exception derives from `SchemaParseError` (a `ValueError`), so callers
can catch a single type for "this input could not be normalized".

Classes
-------
- `SchemaParseError` : Base class
- `StructuralError` : The statement lacks a required element
  - `MissingTableNameError`
  - `MissingColumnNameOrTypeError`
  - `NoColumnsFoundError`
  - `NoCreateTableFoundError`
- `TypeMappingError` : A column type cannot be normalized
  - `InvalidTypeFormatError`
  - `UnsupportedTypeError`
  - `CharTypeMustHaveLengthError`
  - `InvalidLengthOrScaleLiteralError`
- `SQLSyntaxError` : The statement could not be parsed
"""
from typing import Optional



class SchemaParseError(ValueError):
    """The input could not be normalized into a table structure"""

#
# Structural errors
#

class StructuralError(SchemaParseError):
    """The statement is well-formed but misses a required element"""

class MissingTableNameError(StructuralError):
    """The CREATE TABLE statement has no table name"""

class MissingColumnNameOrTypeError(StructuralError):
    """A column definition has no name or no data type"""

class NoColumnsFoundError(StructuralError):
    """The table has no column definitions"""

class NoCreateTableFoundError(StructuralError):
    """No CREATE TABLE statement was found in the input"""

#
# Type mapping errors
#

class TypeMappingError(SchemaParseError):
    """A column type cannot be normalized"""
    def __init__(self, message: str, type_text: str = "",
                 column: Optional[str] = None):
        """Type mapping error

        Parameters
        ----------
        message : str
            Error message
        type_text : str, optional
            Native type text that failed
        column : str, optional
            Name of the column, if known
        """
        super().__init__(message if column is None else f"column '{column}': {message}")
        self.message = message
        """Error message without the column name"""
        self.type_text = type_text
        """Native type text that failed"""
        self.column = column
        """Name of the column, if known"""

    def with_column(self, column: str) -> "TypeMappingError":
        """Return a copy of the error with the column name attached"""
        return self.__class__(self.message, self.type_text, column)

class InvalidTypeFormatError(TypeMappingError):
    """The type text does not have the form `name[(length[,scale])]`"""

class UnsupportedTypeError(TypeMappingError):
    """The native type has no canonical mapping"""

class CharTypeMustHaveLengthError(TypeMappingError):
    """A fixed-length string type was declared without a length"""

class InvalidLengthOrScaleLiteralError(TypeMappingError):
    """The length or scale of a type is not a non-negative integer"""

#
# Syntax errors
#

class SQLSyntaxError(SchemaParseError):
    """The statement could not be parsed

    Also raised for unexpected internal failures of the parser.
    """

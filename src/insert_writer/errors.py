from __future__ import annotations

from enum import Enum


class WriteErrorCode(str, Enum):
    """Typed failure classifications for a write session."""
    conf_error = "conf_error"                   # column list / record arity mismatch
    unsupported_type = "unsupported_type"       # no rendering rule for a column's SQL type
    conversion_error = "conversion_error"       # value cannot be coerced for its column
    write_data_error = "write_data_error"       # anything unexpected while pulling or flushing


class WriterError(Exception):
    """Base for every error raised by the writer, carrying a `code` and a human `detail`."""
    code: WriteErrorCode = WriteErrorCode.write_data_error

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail

    def __str__(self) -> str:
        return f"{self.code.value}: {self.detail}"


class ConfigurationError(WriterError):
    """Structural mismatch between the configured columns and what actually arrives. Fatal."""
    code = WriteErrorCode.conf_error


class UnsupportedTypeError(WriterError):
    """
    The destination column's SQL type has no rendering rule.

    Carries the column name, type code and (if known) the database type name for diagnostics.
    """
    code = WriteErrorCode.unsupported_type

    def __init__(self, *, column_name: str, type_code: int, type_name: str | None = None) -> None:
        self.column_name = column_name
        self.type_code = type_code
        self.type_name = type_name
        super().__init__(
            f"writing this column type is not supported: column=[{column_name}] "
            f"type_code=[{type_code}] type_name=[{type_name}]. "
            "Change the column's type or stop writing this column."
        )


class ConversionError(WriterError):
    """A value could not be coerced to the type its column demands."""
    code = WriteErrorCode.conversion_error

    def __init__(self, detail: str, *, column_name: str | None = None) -> None:
        self.column_name = column_name
        super().__init__(f"{column_name}: {detail}" if column_name else detail)


class WriteDataError(WriterError):
    """Catch-all for unexpected failures while pulling or flushing records. Fatal."""
    code = WriteErrorCode.write_data_error

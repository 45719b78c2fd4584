"""
Error types raised by the conversion pipelines.
"""

from typing import Iterable


class ConversionError(ValueError):
    """Base class for errors that abort a conversion request."""


class MissingWorksheetError(ConversionError):
    """Raised when the uploaded workbook has no readable first worksheet."""

    def __init__(self, message: str = "워크시트를 찾을 수 없습니다.") -> None:
        super().__init__(message)


class MissingRequiredColumnError(ConversionError):
    """Raised when one or more required header labels are absent."""

    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = list(missing)
        super().__init__(
            f"필수 컬럼({', '.join(self.missing)})을 찾을 수 없습니다."
        )


class UploadTransportError(ConversionError):
    """Raised when the uploaded file cannot be read or parsed as a workbook."""

    def __init__(self, message: str = "엑셀 처리 중 오류가 발생했습니다.") -> None:
        super().__init__(message)

from .errors import (
    ConversionError,
    ConversionFailedError,
    MissingParametersError,
    UnknownFormatError,
    UnsupportedConversionError,
    ValidationFailedError,
)
from .models import ConversionRequest, ConversionResult, FileCategory, FileFormat, FormatInfo

# router and service import the converters package, which imports this one;
# import them from their modules directly.
__all__ = [
    "ConversionError",
    "ConversionFailedError",
    "ConversionRequest",
    "ConversionResult",
    "FileCategory",
    "FileFormat",
    "FormatInfo",
    "MissingParametersError",
    "UnknownFormatError",
    "UnsupportedConversionError",
    "ValidationFailedError",
]

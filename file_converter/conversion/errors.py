"""Exceptions raised while validating, routing and running conversions."""


class ConversionError(Exception):
    """Base exception for conversion requests. Carries the HTTP status to report."""

    status_code = 400


class MissingParametersError(ConversionError):
    """Request lacks the file or one of the format tags."""

    def __init__(self, message: str = "Missing required parameters"):
        super().__init__(message)


class UnknownFormatError(ConversionError):
    """Format tag is not registered."""

    def __init__(self, tag: object):
        self.tag = tag
        super().__init__(f"Unknown format: {tag}")


class UnsupportedConversionError(ConversionError):
    """Source/target pair is not in the conversion graph."""

    def __init__(self, source: str, target: str):
        self.source = source
        self.target = target
        super().__init__(f"Conversion from {source} to {target} is not supported")


class ValidationFailedError(ConversionError):
    """Upload does not match the declared source format's constraints."""

    def __init__(self, message: str, status_code: int = 400):
        super().__init__(message)
        self.status_code = status_code


class ConversionFailedError(ConversionError):
    """A converter collaborator failed. The message is the collaborator's diagnostic."""

    status_code = 422

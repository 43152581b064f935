from share_export.core.exceptions import (
    USER_FACING_FAILURE,
    AllStrategiesFailedError,
    ExportFailedException,
    ExtractionFailedException,
    InvalidResultError,
    InvalidUrlError,
    UnsupportedPlatformError,
)

__all__ = [
    "USER_FACING_FAILURE",
    "AllStrategiesFailedError",
    "ExportFailedException",
    "ExtractionFailedException",
    "InvalidResultError",
    "InvalidUrlError",
    "UnsupportedPlatformError",
]

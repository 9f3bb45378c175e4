"""Middleware package — error hierarchy and exception handlers."""

from acquisition.middleware.error_handler import (
    AcquisitionError,
    StorageError,
    StorageQuotaError,
    UnknownCategoryError,
    register_error_handlers,
)

__all__ = [
    "AcquisitionError",
    "StorageError",
    "StorageQuotaError",
    "UnknownCategoryError",
    "register_error_handlers",
]

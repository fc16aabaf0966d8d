"""
Error taxonomy shared by the gateway, the repositories and the client-side action layer.
"""

from validators import ValidationError


class SiteBookError(Exception):
    """Base exception for SiteBook"""
    def __init__(self, message: str = "An error occurred"):
        self.message = message
        super().__init__(self.message)


class NotFoundError(SiteBookError):
    """Referenced record does not exist"""
    def __init__(self, resource: str = "Resource", resource_id: str = None):
        message = f"{resource} not found"
        if resource_id:
            message = f"{resource} with id '{resource_id}' not found"
        self.resource = resource
        self.resource_id = resource_id
        super().__init__(message)


class SchemaDriftError(SiteBookError):
    """Storage schema is missing an expected column"""
    def __init__(self, table: str, column: str):
        self.table = table
        self.column = column
        super().__init__(f"Column '{column}' is missing from table '{table}'")


class TenantBoundaryError(SiteBookError):
    """A read or write would cross organization scope. Always a programming defect."""


class ConfigurationError(SiteBookError):
    """An action was invoked without an active organization"""
    def __init__(self, message: str = "No active organization; log in first"):
        super().__init__(message)


class PermissionDeniedError(SiteBookError):
    """Caller is not allowed to perform the action"""


class GatewayError(SiteBookError):
    """Structured failure reported by (or while talking to) the sync gateway"""
    def __init__(self, message: str, status_code: int = None, trace: str = None):
        self.status_code = status_code
        self.trace = trace
        super().__init__(message)


__all__ = [
    'SiteBookError',
    'ValidationError',
    'NotFoundError',
    'SchemaDriftError',
    'TenantBoundaryError',
    'ConfigurationError',
    'PermissionDeniedError',
    'GatewayError',
]

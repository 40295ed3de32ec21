import logging
from typing import Optional, Any, Dict
import traceback

from . import config


class WorkspaceError(Exception):
    """Base exception class for workspace errors"""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.details = details or {}


class CredentialError(WorkspaceError):
    """Raised when auth is missing or a placeholder, before any network call"""
    pass


class RemoteRequestError(WorkspaceError):
    """Raised when the remote repository API answers with a non-success response"""
    pass


class DecodeError(WorkspaceError):
    """Raised when an archive or a text payload cannot be decoded"""
    pass


class EmptyResultError(WorkspaceError):
    """Raised when a remote import discovers zero files"""
    pass


class GraphOperationError(WorkspaceError):
    """Raised when a graph operation targets an unknown or wrong kind of node"""
    pass


def setup_logging():
    """Configure logging for the application"""
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.StreamHandler(),
            logging.FileHandler(config.LOG_FILE)
        ]
    )


def log_operation(logger: logging.Logger, operation: str, **kwargs):
    """Log an operation with its parameters"""
    logger.info(f"Operation: {operation}", extra={"parameters": kwargs})


def handle_error(logger: logging.Logger, error: Exception, operation: str) -> Dict[str, Any]:
    """Handle and log an error, return error response"""
    error_details = {
        "type": type(error).__name__,
        "message": str(error),
        "operation": operation,
        "traceback": traceback.format_exc()
    }

    if isinstance(error, WorkspaceError):
        error_details.update(error.details)

    logger.error(
        f"Error during {operation}: {str(error)}",
        extra={"error_details": error_details},
        exc_info=True
    )

    return {
        "type": "error",
        "message": str(error),
        "details": error_details
    }

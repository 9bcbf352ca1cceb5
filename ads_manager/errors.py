"""
Error handling module for ad products, settings and order provisioning.

This module provides the exception hierarchy shared by the whole package:
- Validation and lookup errors raised before anything is persisted
- Remote call errors raised by the ad-server adapter client
- Workflow errors raised by the order provisioning workflow
"""
from typing import Optional, Dict, Any
from enum import Enum
from datetime import datetime, timezone

class ErrorCategory(str, Enum):
    """Categories of errors that can occur."""
    VALIDATION = "validation"
    NOT_FOUND = "not_found"
    REMOTE = "remote"
    WORKFLOW = "workflow"

class AdsError(Exception):
    """Base error class with common attributes."""
    def __init__(
        self,
        message: str,
        operation: str,
        details: Optional[Dict[str, Any]] = None,
        category: ErrorCategory = ErrorCategory.REMOTE
    ):
        super().__init__(message)
        self.message = message
        self.operation = operation
        self.details = details or {}
        self.category = category
        self.timestamp = datetime.now(timezone.utc)

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary format."""
        return {
            "status": "error",
            "message": self.message,
            "operation": self.operation,
            "details": self.details,
            "category": self.category.value,
            "timestamp": self.timestamp.isoformat()
        }

class ValidationError(AdsError):
    """Raised when input does not match the expected configuration."""
    def __init__(
        self,
        message: str,
        operation: str = "validation",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            operation=operation,
            details=details,
            category=ErrorCategory.VALIDATION
        )

class NotFoundError(AdsError):
    """Raised for unknown product, order or bidder ids."""
    def __init__(
        self,
        message: str,
        operation: str = "lookup",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            operation=operation,
            details=details,
            category=ErrorCategory.NOT_FOUND
        )

class RemoteCallError(AdsError):
    """Raised when a call to the remote ad-server adapter fails."""
    def __init__(
        self,
        message: str,
        operation: str,
        details: Optional[Dict[str, Any]] = None,
        status: Optional[int] = None,
        code: Optional[str] = None
    ):
        super().__init__(
            message=message,
            operation=operation,
            details={
                **(details or {}),
                "status": status,
                "code": code
            },
            category=ErrorCategory.REMOTE
        )
        self.status = status
        self.code = code

class WorkflowError(AdsError):
    """Base class for order provisioning workflow errors."""
    def __init__(
        self,
        message: str,
        operation: str = "workflow",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            operation=operation,
            details=details,
            category=ErrorCategory.WORKFLOW
        )

class WorkflowBusyError(WorkflowError):
    """Raised when a workflow run is requested while another is in flight."""
    pass

class UnrecoverableWorkflowError(WorkflowError):
    """Raised when a failed order can no longer be fixed and must be archived."""
    def __init__(self, cause: Exception, order_id: Optional[str] = None):
        super().__init__(
            message=str(cause),
            operation="create_order",
            details={"order_id": order_id}
        )
        self.cause = cause
        self.order_id = order_id

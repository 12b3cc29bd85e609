from fastapi import HTTPException
from typing import Any, Optional
from flatflow.schemas.result import ErrorCategory


class CustomException(HTTPException):
    """Base exception class for all FlatFlow application exceptions"""

    def __init__(
        self,
        message: str,
        status_code: int,
        category: ErrorCategory,
        headers: Optional[dict] = None
    ):
        super().__init__(status_code=status_code, detail=message, headers=headers)
        self.category = category

    def __str__(self) -> str:
        return str(self.detail)


class ResourceNotFoundException(CustomException):
    """Exception raised when a requested resource is not found"""

    def __init__(
        self,
        resource_name: str,
        resource_id: Optional[Any] = None,
        message: Optional[str] = None,
    ):
        if message is None:
            if resource_id:
                message = f"{resource_name} with ID '{resource_id}' was not found."
            else:
                message = f"{resource_name} was not found."

        super().__init__(
            message=message,
            status_code=404,
            category=ErrorCategory.NOT_FOUND
        )


class AuthenticationException(CustomException):
    """Exception raised when there is no valid session"""

    def __init__(self, message: str = "Invalid credentials. Access denied."):
        super().__init__(
            message=message,
            status_code=401,
            category=ErrorCategory.AUTHENTICATION,
            headers={"WWW-Authenticate": "Bearer"}
        )


class AuthorizationException(CustomException):
    """Exception raised when the user lacks the household role an action needs"""

    def __init__(
        self,
        message: Optional[str] = None,
        permission: Optional[str] = None,
        status_code: int = 403
    ):
        if message:
            error_message = message
        elif permission:
            error_message = f"You do not have permission to perform this action. Required role: {permission}"
        else:
            error_message = "You do not have permission to perform this action."

        super().__init__(
            message=error_message,
            status_code=status_code,
            category=ErrorCategory.AUTHORIZATION
        )


class DuplicateResourceException(CustomException):
    """Exception raised for conflicts: duplicate records, existing memberships, pending invitations"""

    def __init__(
        self,
        resource_name: str,
        identifier: Optional[str] = None,
        message: Optional[str] = None,
        status_code: int = 409
    ):
        if message is None:
            if identifier:
                message = f"{resource_name} with identifier '{identifier}' already exists."
            else:
                message = f"{resource_name} already exists."

        super().__init__(
            message=message,
            status_code=status_code,
            category=ErrorCategory.RESOURCE_CONFLICT
        )


class BadRequestException(CustomException):
    """Exception raised for requests that are valid but not allowed in the current state"""

    def __init__(self, message: str = "The request is invalid or malformed."):
        super().__init__(
            message=message,
            status_code=400,
            category=ErrorCategory.BAD_REQUEST
        )


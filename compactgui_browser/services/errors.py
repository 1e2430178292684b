"""Error handling module for the CompactGUI catalog browser.

This module provides:
- Custom exception classes for the failure modes of the browser (network,
  local storage, dataset validation, configuration)
- User-friendly error message generation with suggested actions
- Centralized error handling service with a bounded error history

No error in the browser is fatal: the worst outcome is a stale or empty
catalog with a visible status message.
"""

import json
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any

import httpx
import structlog

log = structlog.stdlib.get_logger()


class ErrorCategory(Enum):
    """Categories of errors for classification and handling."""
    NETWORK = "network"
    STORAGE = "storage"
    VALIDATION = "validation"
    CONFIGURATION = "configuration"
    CACHE = "cache"
    UNEXPECTED = "unexpected"


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass(frozen=True)
class ErrorContext:
    """Context information for an error."""
    operation: str
    component: str
    details: dict[str, Any]


@dataclass(frozen=True)
class UserFriendlyError:
    """User-friendly error representation with suggested actions."""
    message: str
    category: ErrorCategory
    severity: ErrorSeverity
    suggested_actions: list[str]
    technical_details: str | None = None
    recoverable: bool = True


class AppError(Exception):
    """Base exception class for application errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.UNEXPECTED,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        suggested_actions: list[str] | None = None,
        technical_details: str | None = None,
        recoverable: bool = True,
        context: ErrorContext | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.suggested_actions = suggested_actions or []
        self.technical_details = technical_details
        self.recoverable = recoverable
        self.context = context

    def to_user_friendly(self) -> UserFriendlyError:
        """Convert to user-friendly error representation."""
        return UserFriendlyError(
            message=self.message,
            category=self.category,
            severity=self.severity,
            suggested_actions=self.suggested_actions,
            technical_details=self.technical_details,
            recoverable=self.recoverable,
        )


def describe_exception(error: BaseException) -> str:
    """Short `Type: message` description used in technical details."""
    return f"{type(error).__name__}: {error}"


class NetworkError(AppError):
    """Exception for a failed request against one dataset source."""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        url: str | None = None,
        status_code: int | None = None,
    ) -> None:
        suggested_actions = [
            "Check your internet connection",
            "Try refreshing again in a few moments",
        ]

        if status_code:
            if status_code == 404:
                suggested_actions = [
                    "The database mirror may have moved",
                    "Check the source URLs in the configuration file",
                ]
            elif status_code == 429:
                suggested_actions = [
                    "The mirror is rate limiting requests",
                    "Wait a few minutes before refreshing",
                ]
            elif status_code >= 500:
                suggested_actions = [
                    "The mirror is experiencing issues",
                    "Try again later",
                ]

        technical_details = None
        if original_error:
            technical_details = describe_exception(original_error)
        if url:
            technical_details = f"URL: {url}" + (f"\n{technical_details}" if technical_details else "")
        if status_code:
            technical_details = f"Status: {status_code}" + (f"\n{technical_details}" if technical_details else "")

        super().__init__(
            message=message,
            category=ErrorCategory.NETWORK,
            severity=ErrorSeverity.ERROR,
            suggested_actions=suggested_actions,
            technical_details=technical_details,
            recoverable=True,
        )
        self.original_error = original_error
        self.url = url
        self.status_code = status_code


class AggregatedFetchError(NetworkError):
    """Both the primary and the fallback dataset source failed."""

    def __init__(
        self,
        primary_error: Exception,
        fallback_error: Exception,
        primary_url: str | None = None,
        fallback_url: str | None = None,
    ) -> None:
        super().__init__(
            message="Failed to fetch database from both primary and fallback sources.",
        )
        self.primary_error = primary_error
        self.fallback_error = fallback_error
        self.primary_url = primary_url
        self.fallback_url = fallback_url
        self.technical_details = (
            f"Primary ({primary_url or 'unknown'}): {describe_exception(primary_error)}\n"
            f"Fallback ({fallback_url or 'unknown'}): {describe_exception(fallback_error)}"
        )

    def __str__(self) -> str:
        return (
            f"{self.message} "
            f"Primary: {describe_exception(self.primary_error)}; "
            f"fallback: {describe_exception(self.fallback_error)}"
        )


class StorageError(AppError):
    """Exception for local storage read/write failures."""

    def __init__(
        self,
        message: str,
        original_error: Exception | None = None,
        path: str | None = None,
    ) -> None:
        if isinstance(original_error, PermissionError):
            suggested_actions = [
                "Check permissions of the storage directory",
                "Choose a different storage path in the configuration file",
            ]
        else:
            suggested_actions = [
                "Check the storage path and available disk space",
                "Delete the storage file to start with an empty cache",
            ]

        technical_details = None
        if original_error:
            technical_details = describe_exception(original_error)
        if path:
            technical_details = f"Path: {path}" + (f"\n{technical_details}" if technical_details else "")

        super().__init__(
            message=message,
            category=ErrorCategory.STORAGE,
            severity=ErrorSeverity.WARNING,
            suggested_actions=suggested_actions,
            technical_details=technical_details,
            recoverable=True,
        )
        self.original_error = original_error
        self.path = path


class ValidationError(AppError):
    """Exception for validation-related errors."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        value: Any = None,
        constraints: list[str] | None = None,
        category: ErrorCategory = ErrorCategory.VALIDATION,
    ) -> None:
        suggested_actions = ["Review the input requirements"]
        if constraints:
            suggested_actions.extend([f"Ensure: {c}" for c in constraints])

        technical_details = None
        if field:
            technical_details = f"Field: {field}"
        if value is not None:
            value_str = str(value)[:100]
            technical_details = (technical_details or "") + f"\nValue: {value_str}"

        super().__init__(
            message=message,
            category=category,
            severity=ErrorSeverity.WARNING,
            suggested_actions=suggested_actions,
            technical_details=technical_details,
            recoverable=True,
        )
        self.field = field
        self.value = value
        self.constraints = constraints or []


class DatasetFormatError(ValidationError):
    """The downloaded or cached document is not a valid game database."""

    def __init__(
        self,
        message: str,
        source: str | None = None,
        original_error: Exception | None = None,
    ) -> None:
        super().__init__(
            message=message,
            field="dataset",
            value=source,
            constraints=["The database must be a JSON array of game records"],
            category=ErrorCategory.CACHE if source == "cache" else ErrorCategory.VALIDATION,
        )
        self.source = source
        self.original_error = original_error
        if original_error:
            self.technical_details = (self.technical_details or "") + (
                f"\nError: {describe_exception(original_error)}"
            )


class ConfigurationError(AppError):
    """Exception for configuration-related errors."""

    def __init__(
        self,
        message: str,
        setting: str | None = None,
        current_value: Any = None,
        expected: str | None = None,
    ) -> None:
        suggested_actions = [
            "Check the configuration settings",
            "Delete the configuration file to restore defaults",
        ]
        if expected:
            suggested_actions.append(f"Expected: {expected}")

        technical_details = None
        if setting:
            technical_details = f"Setting: {setting}"
        if current_value is not None:
            technical_details = (technical_details or "") + f"\nCurrent: {current_value}"

        super().__init__(
            message=message,
            category=ErrorCategory.CONFIGURATION,
            severity=ErrorSeverity.ERROR,
            suggested_actions=suggested_actions,
            technical_details=technical_details,
            recoverable=True,
        )
        self.setting = setting
        self.current_value = current_value
        self.expected = expected


class ErrorHandlingService:
    """Centralized error handling service.

    This service provides:
    - Error classification and user-friendly message generation
    - Error logging with technical details
    - A bounded history of recent errors
    """

    def __init__(self, max_history_size: int = 100) -> None:
        self._error_history: list[tuple[float, AppError]] = []
        self._max_history_size = max_history_size
        log.debug("Error handling service initialized")

    def handle_error(
        self,
        error: Exception,
        operation: str,
        component: str,
        context: dict[str, Any] | None = None,
    ) -> UserFriendlyError:
        """Handle an error and return a user-friendly representation.

        Args:
            error: The exception that occurred
            operation: The operation being performed
            component: The component where the error occurred
            context: Additional context information

        Returns:
            User-friendly error representation
        """
        app_error = self._convert_to_app_error(error, operation, component, context)

        self._log_error(app_error, operation, component, context)

        self._error_history.append((time.time(), app_error))
        if len(self._error_history) > self._max_history_size:
            self._error_history.pop(0)

        return app_error.to_user_friendly()

    def _convert_to_app_error(
        self,
        error: Exception,
        operation: str,
        component: str,
        context: dict[str, Any] | None,
    ) -> AppError:
        """Convert a standard exception to an AppError."""
        if isinstance(error, AppError):
            return error

        url = context.get("url") if context else None

        if isinstance(error, httpx.HTTPStatusError):
            status_code = error.response.status_code
            return NetworkError(
                message=self._get_http_error_message(status_code),
                original_error=error,
                url=str(error.request.url),
                status_code=status_code,
            )
        elif isinstance(error, httpx.TimeoutException):
            return NetworkError(
                message="The request timed out. The database mirror may be slow or unavailable.",
                original_error=error,
                url=url,
            )
        elif isinstance(error, httpx.ConnectError):
            return NetworkError(
                message="Unable to connect to the database mirror. Please check your internet connection.",
                original_error=error,
                url=url,
            )
        elif isinstance(error, httpx.RequestError):
            return NetworkError(
                message="A network error occurred. Please check your connection.",
                original_error=error,
                url=url,
            )

        # JSONDecodeError is a ValueError, so it must be checked first
        elif isinstance(error, json.JSONDecodeError):
            return DatasetFormatError(
                message="Invalid JSON format. The data could not be parsed.",
                source=context.get("source") if context else None,
                original_error=error,
            )

        elif isinstance(error, OSError):
            return StorageError(
                message=f"A local storage error occurred: {error}",
                original_error=error,
                path=context.get("path") if context else None,
            )

        elif isinstance(error, ValueError):
            return ValidationError(
                message=str(error),
                field=context.get("field") if context else None,
                value=context.get("value") if context else None,
            )
        elif isinstance(error, TypeError):
            return ValidationError(
                message=f"Invalid data type: {error}",
                field=context.get("field") if context else None,
            )

        return AppError(
            message="An unexpected error occurred. Please try again.",
            category=ErrorCategory.UNEXPECTED,
            severity=ErrorSeverity.ERROR,
            technical_details=describe_exception(error),
            recoverable=True,
            context=ErrorContext(
                operation=operation,
                component=component,
                details=context or {},
            ),
        )

    @staticmethod
    def _get_http_error_message(status_code: int) -> str:
        """Get a user-friendly message for HTTP status codes."""
        messages = {
            403: "Access to the database mirror was denied.",
            404: "The database file was not found on the mirror.",
            408: "The request timed out. Please try again.",
            429: "Too many requests. Please wait before refreshing.",
            500: "The database mirror encountered an error. Please try again later.",
            502: "The database mirror is temporarily unavailable. Please try again later.",
            503: "The database mirror is temporarily unavailable. Please try again later.",
            504: "The database mirror took too long to respond. Please try again.",
        }
        return messages.get(status_code, f"HTTP error {status_code} occurred.")

    def _log_error(
        self,
        error: AppError,
        operation: str,
        component: str,
        context: dict[str, Any] | None,
    ) -> None:
        """Log error with full technical details."""
        log_method = log.warning if error.severity == ErrorSeverity.WARNING else log.error

        log_method(
            "Error occurred",
            error_message=error.message,
            category=error.category.value,
            severity=error.severity.value,
            operation=operation,
            component=component,
            technical_details=error.technical_details,
            recoverable=error.recoverable,
            context=context,
        )

    def get_recent_errors(self, count: int = 10) -> list[AppError]:
        """Get recent errors from history.

        Args:
            count: Number of recent errors to return

        Returns:
            List of recent AppError instances, oldest first
        """
        recent = self._error_history[-count:] if self._error_history else []
        return [error for _, error in recent]

    def create_user_message(
        self,
        error: UserFriendlyError,
        include_suggestions: bool = True,
    ) -> str:
        """Create a formatted user message from an error.

        Args:
            error: The user-friendly error
            include_suggestions: Whether to include suggested actions

        Returns:
            Formatted message string
        """
        parts = [error.message]

        if include_suggestions and error.suggested_actions:
            parts.append("\nSuggested actions:")
            for action in error.suggested_actions[:3]:
                parts.append(f"  • {action}")

        return "\n".join(parts)


_error_service: ErrorHandlingService | None = None


def get_error_service() -> ErrorHandlingService:
    """Get the global error handling service instance."""
    global _error_service
    if _error_service is None:
        _error_service = ErrorHandlingService()
    return _error_service


def handle_error(
    error: Exception,
    operation: str,
    component: str,
    context: dict[str, Any] | None = None,
) -> UserFriendlyError:
    """Convenience function to handle errors using the global service.

    Args:
        error: The exception that occurred
        operation: The operation being performed
        component: The component where the error occurred
        context: Additional context information

    Returns:
        User-friendly error representation
    """
    return get_error_service().handle_error(error, operation, component, context)

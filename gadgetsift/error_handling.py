"""
Error handling and reporting for GadgetSift.

This module provides the exception hierarchy raised by the parser and the
filter engine, plus a central handler that owns logger setup for the CLI.
"""

import sys
import traceback
import logging
from enum import Enum
from typing import Optional, Dict, Any
from dataclasses import dataclass


class ErrorSeverity(Enum):
    """Error severity levels."""
    ERROR = "ERROR"
    WARNING = "WARNING"


class ErrorCategory(Enum):
    """Categories of errors that can occur."""
    INPUT_ERROR = "Input Error"
    PARSE_ERROR = "Parse Error"
    FILTER_ERROR = "Filter Error"
    INTERNAL_ERROR = "Internal Error"


@dataclass
class ErrorContext:
    """Context information for an error."""
    source: Optional[str] = None
    line_number: Optional[int] = None
    line: Optional[str] = None
    pattern: Optional[str] = None
    additional_info: Optional[Dict[str, Any]] = None


class GadgetSiftError(Exception):
    """Base exception class for GadgetSift errors."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.INTERNAL_ERROR,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: Optional[ErrorContext] = None,
        suggestion: Optional[str] = None,
        original_exception: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.suggestion = suggestion
        self.original_exception = original_exception

    def __str__(self):
        """Format error message with all context."""
        lines = [
            f"{self.severity.value}: {self.category.value}",
            f"Message: {self.message}",
        ]

        if self.context.source:
            lines.append(f"Source: {self.context.source}")
        if self.context.line_number is not None:
            lines.append(f"Line: {self.context.line_number}")
        if self.context.line is not None:
            lines.append(f"Text: {self.context.line!r}")
        if self.context.pattern is not None:
            lines.append(f"Pattern: {self.context.pattern!r}")
        if self.context.additional_info:
            lines.append("Additional Information:")
            for key, value in self.context.additional_info.items():
                lines.append(f"  {key}: {value}")

        if self.suggestion:
            lines.append(f"Suggestion: {self.suggestion}")

        if self.original_exception:
            lines.append(
                f"Original Exception: {type(self.original_exception).__name__}: "
                f"{self.original_exception}"
            )

        return "\n".join(lines)


class InputError(GadgetSiftError):
    """Error related to unreadable input."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("category", ErrorCategory.INPUT_ERROR)
        super().__init__(message, **kwargs)


class MalformedGadgetError(InputError):
    """A line of gadget text could not be parsed."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("category", ErrorCategory.PARSE_ERROR)
        kwargs.setdefault(
            "suggestion",
            "Expected '0x<hex address> : <insn> ; <insn> ...' as printed by ROPgadget."
        )
        super().__init__(message, **kwargs)


class FilterError(GadgetSiftError):
    """Error building a filter specification."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("category", ErrorCategory.FILTER_ERROR)
        super().__init__(message, **kwargs)


class InvalidPatternError(FilterError):
    """A mnemonic or argument pattern is not a valid regular expression."""


class UnknownFilterError(FilterError):
    """A filter token or mapping key is not recognised."""


def log_error(error: GadgetSiftError, logger: Optional[logging.Logger] = None):
    """Log a GadgetSift error at the level matching its severity."""
    logger = logger or logging.getLogger("gadgetsift")

    if error.severity == ErrorSeverity.WARNING:
        logger.warning(str(error))
    else:
        logger.error(str(error))


class ErrorHandler:
    """Central error handler for GadgetSift."""

    def __init__(self, debug_mode: bool = False):
        self.debug_mode = debug_mode
        self.logger = self._setup_logger()

    def _setup_logger(self) -> logging.Logger:
        """Set up logging configuration."""
        logger = logging.getLogger("gadgetsift")
        logger.setLevel(logging.DEBUG if self.debug_mode else logging.INFO)

        # Avoid stacking handlers when the handler is rebuilt
        for handler in list(logger.handlers):
            if getattr(handler, "_gadgetsift", False):
                logger.removeHandler(handler)

        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(logging.DEBUG if self.debug_mode else logging.INFO)
        console_handler._gadgetsift = True

        formatter = logging.Formatter(
            '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        console_handler.setFormatter(formatter)

        logger.addHandler(console_handler)

        return logger

    def handle_error(self, error: Exception):
        """
        Log an error, wrapping foreign exceptions, and print a traceback in
        debug mode.
        """
        if not isinstance(error, GadgetSiftError):
            error = GadgetSiftError(message=str(error), original_exception=error)

        log_error(error, self.logger)

        if self.debug_mode:
            cause = error.original_exception or error
            traceback.print_exception(type(cause), cause, cause.__traceback__)


# Global error handler instance
_error_handler: Optional[ErrorHandler] = None


def get_error_handler(debug_mode: bool = False) -> ErrorHandler:
    """Get or create the global error handler."""
    global _error_handler
    if _error_handler is None or (debug_mode and not _error_handler.debug_mode):
        _error_handler = ErrorHandler(debug_mode=debug_mode)
    return _error_handler


# Common error messages with suggestions
ERROR_MESSAGES = {
    "file_not_found": {
        "message": "Gadget file not found: {path}",
        "suggestion": "Check that the file path is correct and the file exists."
    },
    "not_a_file": {
        "message": "Not a regular file: {path}",
        "suggestion": "Pass the file holding captured ROPgadget output, or '-' for stdin."
    },
    "unreadable_file": {
        "message": "Cannot read gadget file: {path}",
        "suggestion": "Check file permissions and that the file is UTF-8 text."
    },
    "invalid_pattern": {
        "message": "Invalid {key} pattern: {pattern!r}",
        "suggestion": "Patterns are Python regular expressions; escape literal brackets."
    },
    "unknown_filter": {
        "message": "Unknown filter: {name!r}",
        "suggestion": "Use --ret, --syscall, --jmp, --instruction=<pattern> or --arg=<pattern>."
    },
    "invalid_flag": {
        "message": "Filter flag {key} must be true or false, got {value!r}",
        "suggestion": "Pass a boolean for includeReturn, includeSyscall and includeJump."
    },
}

_ERROR_CLASSES = {
    "file_not_found": InputError,
    "not_a_file": InputError,
    "unreadable_file": InputError,
    "invalid_pattern": InvalidPatternError,
    "unknown_filter": UnknownFilterError,
    "invalid_flag": FilterError,
}


def create_error(
    error_key: str,
    severity: ErrorSeverity = ErrorSeverity.ERROR,
    context: Optional[ErrorContext] = None,
    original_exception: Optional[Exception] = None,
    **format_args
) -> GadgetSiftError:
    """
    Create a GadgetSift error from a predefined error message.

    Args:
        error_key: Key in ERROR_MESSAGES dictionary
        severity: Error severity level
        context: Error context
        original_exception: Exception that triggered this one, if any
        **format_args: Arguments to format the error message

    Returns:
        Configured error instance of the class registered for the key
    """
    if error_key not in ERROR_MESSAGES:
        return GadgetSiftError(
            message=f"Unknown error: {error_key}",
            severity=severity,
            context=context
        )

    error_info = ERROR_MESSAGES[error_key]
    message = error_info["message"].format(**format_args)
    error_class = _ERROR_CLASSES.get(error_key, GadgetSiftError)

    return error_class(
        message,
        severity=severity,
        context=context,
        suggestion=error_info.get("suggestion"),
        original_exception=original_exception
    )

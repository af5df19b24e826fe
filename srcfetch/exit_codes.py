"""
Standard exit codes and error types for srcfetch.

Following Unix/POSIX conventions for command-line tools.
"""
from typing import Optional

# Standard POSIX exit codes
SUCCESS = 0              # Successful termination
GENERAL_ERROR = 1        # General errors
USAGE_ERROR = 2          # Misuse of shell command (wrong arguments, etc.)

# Application-specific exit codes (64-113 are typically available)
NOTHING_FOUND = 64       # No packages in the store matched
API_ERROR = 65           # Registry call failed
CONFIG_ERROR = 66        # Configuration file error
PERMISSION_ERROR = 67    # Insufficient permissions
NETWORK_ERROR = 68       # Network connection failed
DATA_ERROR = 70          # Data format or validation error
PARTIAL_SUCCESS = 71     # Some operations succeeded, some failed
INTERRUPTED = 130        # Terminated by Ctrl+C (SIGINT)

# Exit code mappings for common exceptions
EXCEPTION_EXIT_CODES = {
    'FileNotFoundError': GENERAL_ERROR,
    'PermissionError': PERMISSION_ERROR,
    'ConnectionError': NETWORK_ERROR,
    'TimeoutError': NETWORK_ERROR,
    'ValueError': DATA_ERROR,
    'KeyError': DATA_ERROR,
    'JSONDecodeError': DATA_ERROR,
    'KeyboardInterrupt': INTERRUPTED,
}


def get_exit_code_for_exception(exc: Exception) -> int:
    """
    Get the appropriate exit code for an exception.

    Args:
        exc: The exception that occurred

    Returns:
        Appropriate exit code
    """
    if isinstance(exc, CommandError):
        return exc.exit_code
    exc_name = exc.__class__.__name__
    return EXCEPTION_EXIT_CODES.get(exc_name, GENERAL_ERROR)


class CommandError(Exception):
    """
    Exception that commands can raise to indicate specific exit codes.
    """
    def __init__(self, message: str, exit_code: int = GENERAL_ERROR):
        super().__init__(message)
        self.exit_code = exit_code


class NothingFoundError(CommandError):
    """Raised when no stored packages match the given names."""
    def __init__(self, message: str = "No matching packages found"):
        super().__init__(message, NOTHING_FOUND)


class ResolutionError(CommandError):
    """Registry lookup or metadata extraction failed for a package."""
    def __init__(self, message: str, package: Optional[str] = None):
        super().__init__(message, API_ERROR)
        self.package = package


class TransportError(CommandError):
    """Clone failed: network, authentication or missing repository."""
    def __init__(self, message: str, kind: Optional[str] = None):
        super().__init__(message, NETWORK_ERROR)
        self.kind = kind


class ReferenceNotFoundWarning(UserWarning):
    """The candidate git tag does not exist; the default branch was used."""
    def __init__(self, reference: str):
        super().__init__(f"Could not find tag {reference}, cloned default branch instead")
        self.reference = reference


class PartialSuccessError(CommandError):
    """Raised when some operations succeed and some fail."""
    def __init__(self, message: str, succeeded: int = 0, failed: int = 0):
        super().__init__(message, PARTIAL_SUCCESS)
        self.succeeded = succeeded
        self.failed = failed

"""
Custom exception classes for declarations, validation and synthesis.
"""
from typing import Optional, List, Any


class DeclarationError(Exception):
    """Base exception for errors tied to a declaration address."""

    def __init__(
        self,
        message: str,
        address: Optional[str] = None
    ):
        """
        Initialize declaration error.

        Args:
            message: Error message
            address: Address of the offending declaration if available
        """
        super().__init__(message)
        self.message = message
        self.address = address


class DuplicateDeclarationError(DeclarationError):
    """Exception raised when two declarations share an address."""


class UnresolvedReferenceError(DeclarationError):
    """Exception raised when a reference points at nothing."""

    def __init__(
        self,
        message: str,
        address: Optional[str] = None,
        target: Optional[str] = None
    ):
        """
        Initialize unresolved reference error.

        Args:
            message: Error message
            address: Address of the declaration holding the reference
            target: The expression that failed to resolve
        """
        super().__init__(message, address)
        self.target = target


class DependencyCycleError(DeclarationError):
    """Exception raised when the dependency graph contains a cycle."""

    def __init__(self, message: str, cycle: Optional[List[str]] = None):
        """
        Initialize dependency cycle error.

        Args:
            message: Error message
            cycle: Addresses forming the cycle, first address repeated last
        """
        super().__init__(message, cycle[0] if cycle else None)
        self.cycle = cycle or []


class ConfigurationInvalidError(Exception):
    """Exception raised when a configuration fails structural validation."""

    def __init__(self, message: str, problems: Optional[List[Any]] = None):
        """
        Initialize configuration invalid error.

        Args:
            message: Error message
            problems: Validation problems found
        """
        super().__init__(message)
        self.message = message
        self.problems = problems or []


class PackagingError(Exception):
    """Exception raised when the function archive cannot be built."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.path = path


class RegionLookupError(Exception):
    """Exception raised when the current region cannot be resolved."""

    def __init__(self, message: str, region: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.region = region

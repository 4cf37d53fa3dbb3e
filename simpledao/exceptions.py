"""
SimpleDao Exceptions

Base exception classes shared across the package.
"""


class SimpleDaoException(Exception):
    """Base exception for SimpleDao."""
    pass


class InvalidAddressError(SimpleDaoException, ValueError):
    """Invalid address format."""
    pass


class ConfigurationError(SimpleDaoException):
    """Configuration error."""
    pass


class StateFileError(SimpleDaoException):
    """Persisted chain state is missing or corrupt."""
    pass

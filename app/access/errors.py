"""Access control exceptions."""


class AccessControlError(Exception):
    """Base class for access control failures."""


class StoreError(AccessControlError):
    """Any failure reported by the data store (network, permission, constraint)."""


class OwnerRemovalError(AccessControlError):
    """Raised when removing the organization owner from the roster."""


class AccessControlConfigurationError(RuntimeError):
    """Access control used without an installed provider."""

class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class ConflictError(DomainError):
    """Raised when a write collides with a row created concurrently."""


class DeviceNotFoundError(DomainError):
    """Raised when a device id does not exist in the registry."""


class DeviceInactiveError(DomainError):
    """Raised when a forced sync targets a disabled device."""


class UnsupportedDeviceTypeError(DomainError):
    """Raised when no adapter exists for a device type tag."""


class DeviceConnectionError(DomainError):
    """Raised when a device cannot be reached or was never connected."""


class DeviceSyncTimeoutError(DomainError):
    """Raised when a device does not finish its sync within the deadline."""

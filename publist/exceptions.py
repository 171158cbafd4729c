"""Exception classes for publist."""


class PublistError(Exception):
    """Base exception for publication list errors."""

    pass


class ConfigError(PublistError, ValueError):
    """Raised when render options are invalid."""

    def __init__(self, field: str, message: str):
        """Initialize with field and message."""
        self.field = field
        super().__init__(f"Invalid option {field}: {message}")


class InvalidRecordIdError(PublistError, ValueError):
    """Raised when a post id cannot be split into hash and user name."""

    def __init__(self, post_id: str):
        """Initialize with the offending post id."""
        self.post_id = post_id
        super().__init__(f"Invalid post id: {post_id!r}")


class RecordDecodeError(PublistError, ValueError):
    """Raised when the service returns records that cannot be decoded."""

    def __init__(self, details: str):
        """Initialize with decoder details."""
        super().__init__(f"Could not decode posts: {details}")


class StyleNotFoundError(PublistError, ValueError):
    """Raised when a citation style is not registered."""

    def __init__(self, style: str):
        """Initialize with style name."""
        self.style = style
        super().__init__(f"Unknown citation style: {style}")


class TransportError(PublistError):
    """Raised when talking to the remote service fails."""

    def __init__(self, message: str, status_code: int | None = None):
        """Initialize with message and optional HTTP status."""
        self.status_code = status_code
        super().__init__(message)


class AuthenticationError(TransportError):
    """Raised when the service rejects the credentials."""

    pass

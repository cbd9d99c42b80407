class RemovalError(Exception):
    """Base class for every failure the UI reports to the user."""


class ConfigError(RuntimeError):
    pass


class FormatError(RemovalError):
    """The encoded image is not a `data:<type>;base64,<payload>` string."""


class ContentPolicyError(RemovalError):
    """The model stopped for a reason other than normal completion."""

    def __init__(self, reason):
        self.reason = reason
        super().__init__(
            f"Processing was stopped due to: {reason}. Please try a different image."
        )


class NoOutputError(RemovalError):
    def __init__(self, message="No image data found in the API response."):
        super().__init__(message)


class TransportError(RemovalError):
    """Network or API failure; carries the upstream message."""

    def __init__(self, upstream_message):
        self.upstream_message = upstream_message
        super().__init__(f"API Error: {upstream_message}")

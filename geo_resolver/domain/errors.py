"""Domain errors raised by geocode providers."""


class GeocodeError(Exception):
    """Base class: a provider request produced no usable location."""


class EmptyResultError(GeocodeError):
    """Provider returned zero usable candidates (or an unparsable body)."""


class TransportError(GeocodeError):
    """Network failure, timeout, or non-success response status."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ResolutionAbortedError(GeocodeError):
    """The service was reset or closed before the request completed."""

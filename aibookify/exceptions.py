"""Custom exceptions for AIBookify."""


class BookifyError(Exception):
    """Base exception for AIBookify errors."""

    pass


class LLMError(BookifyError):
    """The language model could not produce a usable answer."""

    pass


class PlacesError(BookifyError):
    """Error talking to the places (geocoding) provider."""

    pass


class PlacesNotConfiguredError(PlacesError):
    """No places API key is configured."""

    pass


class NotFoundError(BookifyError):
    """A requested document does not exist."""

    pass


class ValidationFailedError(BookifyError):
    """Input rejected before it reached the database."""

    pass


class ConflictError(BookifyError):
    """A document with the same unique key already exists."""

    pass

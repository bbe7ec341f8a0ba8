"""Exceptions raised by the results view engine."""


class ResultsError(Exception):
    """Base class for all results view engine errors."""

    pass


class ValidationError(ResultsError):
    """Raised when batch input is malformed.

    Raised before any command is issued, so no partial batch ever reaches
    the store.
    """

    pass


class TransportError(ResultsError):
    """Raised when a bulk command fails as a whole."""

    pass


class ParseError(ResultsError):
    """Raised when one element's attribute payload is not a JSON object."""

    def __init__(self, element: str, message: str):
        super().__init__(f"Invalid attributes for '{element}': {message}")
        self.element = element

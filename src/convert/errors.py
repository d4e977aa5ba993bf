"""Exceptions raised by the conversion core."""


class JsonConversionError(Exception):
    """Exception raised during JSON conversion."""
    pass


class InvalidInput(JsonConversionError):
    """
    Raised when the caller breaks the conversion contract.

    Examples are values that are not representable as JSON, cyclic
    containers, blank table/collection names or an unknown target.
    """
    pass

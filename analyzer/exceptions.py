class InvalidInput(ValueError):
    """Analysis was requested without the parts it needs."""


class ParseError(ValueError):
    """An AI assessment reply did not contain a usable result."""

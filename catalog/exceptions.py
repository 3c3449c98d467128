class LoadError(Exception):
    """A catalog or option source could not be read at all."""


class UnknownCategory(ValueError):
    pass


class UnknownOptionAxis(ValueError):
    pass

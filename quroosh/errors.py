"""Input validation errors shared by the calculator, resolver and routes."""


class InvalidInputError(ValueError):
    """Caller supplied a value that cannot be used in a financial computation.

    Routes map this to HTTP 400.
    """
    pass

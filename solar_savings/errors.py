"""Exceptions raised by the calculation engine."""


class SolarInputError(ValueError):
    """Base class for rejected calculator input."""


class InvalidInputError(SolarInputError):
    """A numeric input is outside the range the formulas can handle."""

    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"{field}: {message}")

from typing import Iterable, List


class InvalidFilterError(ValueError):
    """Raised when a stem filter names stems that are absent from the aggregation tree."""

    def __init__(self, invalid: Iterable[str], available: Iterable[str] = ()):
        self.invalid: List[str] = list(invalid)
        self.available: List[str] = list(available)
        message = f"Invalid stem filter: {', '.join(self.invalid)}"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        super().__init__(message)

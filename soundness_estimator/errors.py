class EstimatorError(Exception):
    """Base class for every failure raised while estimating a protocol."""

    def __init__(self, message: str, round_index: int | None = None, parameter: str | None = None):
        super().__init__(message)
        self.message = message
        self.round_index = round_index
        self.parameter = parameter

    def __str__(self):
        context = []
        if self.round_index is not None:
            context.append(f"round {self.round_index}")
        if self.parameter is not None:
            context.append(f"parameter '{self.parameter}'")
        if not context:
            return self.message
        return f"{self.message} ({', '.join(context)})"


class InvalidParameters(EstimatorError, ValueError):
    """Rate >= 1, a folding schedule the degree cannot support, unsupported batching..."""


class SearchExhausted(EstimatorError):
    """No configuration inside the search bounds reaches the requested security."""


class ArithmeticDomainError(EstimatorError, ArithmeticError):
    """An error probability left (0, 1]. Never expected when the invariants hold."""

"""Exception types raised by the loaders and the engines."""


class ParseError(ValueError):
    """Malformed sectioned file or vector table."""

    def __init__(self, message: str, line_number: int = None):
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)
        self.line_number = line_number


class CircuitError(ValueError):
    """Circuit data that parses but does not describe a valid circuit."""


class EngineError(RuntimeError):
    """Engine used outside of its lifecycle or misconfigured."""

from typing import Optional


class PaymentsEngineError(Exception):
    """Base error for conditions that abort a batch."""


class InvalidAmount(PaymentsEngineError, ValueError):
    """Value cannot be represented as an Amount."""


class InvalidEvent(PaymentsEngineError, ValueError):
    """
    A transaction record is malformed.
    Raised by the reader for bad CSV rows and by the engine for structurally invalid events.
    """

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)

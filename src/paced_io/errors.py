class PacedIOError(Exception):
    """Base class for every failure that ends a run."""


class ConfigurationError(PacedIOError):
    """Invalid or missing command line input, detected before any I/O."""


class TransferError(PacedIOError):
    """
    A failed I/O step.

    The message names the step; the underlying exception is chained as
    ``__cause__`` and appended when the error is rendered.
    """

    def __str__(self):
        message = super().__str__()
        if self.__cause__ is not None:
            return f"{message}: {self.__cause__}"
        return message


class OperationCancelled(TransferError):
    """Cancellation observed while waiting for the next tick."""

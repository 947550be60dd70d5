"""Exception types raised by the ticketfee package."""


class TicketFeeError(Exception):
    """Base class for ticketfee errors."""


class RPCError(TicketFeeError, RuntimeError):
    """Raised when the daemon answers a request with an error object."""
    def __init__(self, method: str, error, code: int = None):
        self.method = method
        self.code = code
        self.error = error
        super().__init__(f"{method}: {error}")


class ChainDataError(TicketFeeError):
    """Raised when a daemon response lacks a field the estimators need."""


class InsufficientDataError(TicketFeeError):
    """Raised when the daemon returns no fee windows to estimate from."""

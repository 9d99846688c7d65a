"""
PactStub Errors

Exceptions raised synchronously by load and start operations. A request that
matches no interaction is not an error; it is reported through a MatchResult.
"""


class PactStubError(Exception):
    """Base class for all PactStub errors."""


class InvalidContract(PactStubError):
    """The contract text is not a well-formed JSON document."""


class FetchError(PactStubError):
    """A contract source could not retrieve the contract text."""

    def __init__(self, message: str, locator: str = ""):
        super().__init__(message)
        self.locator = locator


class PortUnavailable(PactStubError):
    """The listener could not bind the requested port."""

    def __init__(self, port: int, reason: str = ""):
        message = f"Port {port} is unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.port = port
        self.reason = reason

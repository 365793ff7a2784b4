"""Errors raised by the PayPal client, the dispatcher and the configuration service."""


class PayPalError(Exception):
    pass


class PayPalConnectionError(PayPalError):
    """The provider could not be reached or answered with a transport error."""

    def __init__(self, url: str, data: str, message: str):
        super().__init__(message)
        self.url = url
        self.data = data
        self.message = message

    def describe(self) -> str:
        return f"url : {self.url}. data : {self.data}. message : {self.message}"


class DispatchError(Exception):
    """Base class for failures surfaced by PaymentDispatcher.dispatch."""

    def __init__(self, message: str, order_id: int, customer_id: int):
        super().__init__(message)
        self.order_id = order_id
        self.customer_id = customer_id


class ConnectionFailed(DispatchError):
    """Transport-level provider failure; retry only after checking the provider."""

    def __init__(
        self, message: str, order_id: int, customer_id: int, url: str, data: str
    ):
        super().__init__(message, order_id, customer_id)
        self.url = url
        self.data = data


class Refused(DispatchError):
    """The provider declined the charge. Terminal."""

    def __init__(self, message: str, order_id: int, customer_id: int, cancel_url: str):
        super().__init__(message, order_id, customer_id)
        self.cancel_url = cancel_url


class Unexpected(DispatchError):
    """Any other failure during dispatch."""


class ConfigurationError(Exception):
    pass

class StoreUrls:
    """Absolute storefront URLs the customer is sent to."""

    def __init__(self, store_url: str):
        self.base = store_url.rstrip("/")

    def absolute(self, path: str) -> str:
        return f"{self.base}/{path.lstrip('/')}"

    def order_placed(self, order_id: int) -> str:
        return self.absolute(f"/order/placed/{order_id}")

    def payment_ok(self, order_id: int) -> str:
        return self.absolute(f"/module/paypal/ok/{order_id}")

    def payment_cancel(self, order_id: int) -> str:
        return self.absolute(f"/module/paypal/cancel/{order_id}")

    def agreement_ok(self, order_id: int) -> str:
        return self.absolute(f"/module/paypal/agreement/ok/{order_id}")

    def agreement_cancel(self, order_id: int) -> str:
        return self.absolute(f"/module/paypal/agreement/ko/{order_id}")

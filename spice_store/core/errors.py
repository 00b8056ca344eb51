from fastapi import status


class StoreError(Exception):
    """Base for failures that map onto an HTTP response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    public_message: str = "Something went wrong"

    def __init__(self, message: str = None):
        super().__init__(message or self.public_message)
        self.message = message or self.public_message

    @property
    def user_message(self) -> str:
        return self.message


class InvalidOrder(StoreError):
    status_code = status.HTTP_400_BAD_REQUEST
    public_message = "Invalid order"


class ProductNotFound(StoreError):
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, product_id: str):
        super().__init__(f"Product not found: {product_id}")
        self.product_id = product_id


class OrderNotFound(StoreError):
    status_code = status.HTTP_404_NOT_FOUND

    def __init__(self, order_id: str):
        super().__init__(f"Order not found: {order_id}")
        self.order_id = order_id


class InvalidStatusTransition(StoreError):
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot move order from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


class ConfigurationError(StoreError):
    """A required secret or setting is missing. Details are for operators only."""

    public_message = "Service is not configured. Please contact the store."

    @property
    def user_message(self) -> str:
        return self.public_message


class TransientBackendError(StoreError):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    public_message = "Temporary problem reaching the store backend. Please try again."

    @property
    def user_message(self) -> str:
        return self.public_message

from fastapi import status

from .base import InternalServerError, ServiceError


class ResolutionError(ServiceError):
    """
    A supply request line could not be mapped to a catalog item by id or by name.
    """

    type_ = "resolution_error"
    title = "Unresolved inventory item"
    detail = "A requested item could not be found in the catalog."
    status = status.HTTP_409_CONFLICT

    def __init__(self, detail=None, *, reference: str | None = None, **kwargs):
        if reference is not None:
            kwargs["reference"] = reference
        super().__init__(detail=detail, **kwargs)
        self.reference = reference


class StateError(ServiceError):
    """
    An operation was attempted from the wrong workflow state, e.g. approving an approved request.
    """

    type_ = "state_error"
    title = "Invalid request state"
    detail = "The supply request is not in a state that allows this action."
    status = status.HTTP_409_CONFLICT

    def __init__(self, detail=None, *, current_status: str | None = None, **kwargs):
        if current_status is not None:
            kwargs["current_status"] = current_status
        super().__init__(detail=detail, **kwargs)
        self.current_status = current_status


class InsufficientStockError(ServiceError):
    """
    Available stock (on hand minus reserved) is short of the requested quantity.
    """

    type_ = "insufficient_stock_error"
    title = "Insufficient stock"
    detail = "Not enough stock is available."
    status = status.HTTP_409_CONFLICT

    def __init__(self, item_name: str, required: int, available: int, unit: str = "", **kwargs):
        quantity = f"{required} {unit}" if unit else f"{required}"
        super().__init__(
            detail=f"{item_name}: need {quantity}, only {available} available",
            item_name=item_name,
            required=required,
            available=available,
            **kwargs,
        )
        self.item_name = item_name
        self.required = required
        self.available = available


class StockUnderflowError(InternalServerError):
    """
    Dispatch or release would make on-hand or reserved stock negative.

    This can only happen when the reservation invariant was broken elsewhere,
    so it is reported as a server fault rather than a business rejection.
    """

    type_ = "stock_underflow_error"
    title = "Stock underflow"
    detail = "Stock levels are inconsistent with the reservation."

    def __init__(self, detail=None, *, item_name: str | None = None, **kwargs):
        if item_name is not None:
            kwargs["item_name"] = item_name
        super().__init__(detail=detail, **kwargs)
        self.item_name = item_name

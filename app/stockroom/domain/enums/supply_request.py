from enum import StrEnum


class SupplyRequestStatus(StrEnum):
    """
    Enumeration for the status of a supply request.

    Attributes:
        PENDING: Submitted, nothing reserved yet.
        APPROVED: Stock reserved for every line.
        DISPATCHED: Stock handed out, terminal.
        CANCELLED: Withdrawn before approval, terminal.
    """

    PENDING = "pending"
    APPROVED = "approved"
    DISPATCHED = "dispatched"
    CANCELLED = "cancelled"

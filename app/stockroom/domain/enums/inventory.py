from enum import StrEnum


class MovementType(StrEnum):
    """
    Enumeration for the direction of a stock movement.

    Attributes:
        RECEIVE: Stock entered the room (delivery, initial stock).
        ISSUE: Stock left the room (manual issue, dispatch of a request).
    """

    RECEIVE = "receive"
    ISSUE = "issue"


class StockSortOrder(StrEnum):
    """
    Enumeration for the catalog listing orders.

    Attributes:
        MIN_GAP: Items closest to (or furthest below) their minimum first.
        QTY_ASC: Lowest on-hand quantity first.
        QTY_DESC: Highest on-hand quantity first.
        NAME: Alphabetical, case-insensitive.
    """

    MIN_GAP = "min_gap"
    QTY_ASC = "qty_asc"
    QTY_DESC = "qty_desc"
    NAME = "name"

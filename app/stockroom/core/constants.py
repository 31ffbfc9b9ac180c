DEFAULT_UNIT = "pcs"
DEFAULT_CATEGORY = "general"
DEFAULT_CATEGORY_LABEL = "General"

INITIAL_STOCK_REASON = "initial stock"
RECEIVE_REASON = "receive"
ISSUE_REASON = "issue"
DISPATCH_REASON_PREFIX = "dispatch"

# NOTE: An item is critical once on-hand stock falls to half its minimum or below
CRITICAL_STOCK_RATIO = 0.5

CSV_MEDIA_TYPE = "text/csv"

import csv
import io
from collections.abc import Iterable, Sequence
from typing import Any


def normalize_name(value: str | None) -> str:
    """
    Normalize a catalog name for case-insensitive lookups.

    Leading and trailing whitespace is dropped and the result is lower-cased,
    so `" Brake Pads"` and `"brake pads"` map to the same key.
    """

    return (value or "").strip().lower()


def to_csv(header: Sequence[str], rows: Iterable[Sequence[Any]]) -> str:
    """
    Render rows as CSV text.

    Fields containing commas, quotes or newlines are quoted and inner quotes are doubled.
    Lines end with `\\n`.
    """

    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(header)
    writer.writerows(rows)
    return buffer.getvalue()

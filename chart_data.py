"""
Chart data loading and saving.
Reads word records from JSON files and writes the final render attributes.
"""

import json
from typing import Iterable, List, Sequence

from bubble_layout import Item, PlacedCircle


def items_from_records(records) -> List[Item]:
    """
    Build items from decoded JSON records.

    Each record is an object with "word" (or "label"), "score" and optionally
    "group", "x" and "y".

    Raises:
        ValueError: If the data is not a list of valid records
    """
    if not isinstance(records, list):
        raise ValueError("Chart data must be a JSON list of word records")

    items = []
    for index, record in enumerate(records):
        if not isinstance(record, dict):
            raise ValueError(f"Record {index} must be an object, got {record!r}")
        if "score" not in record:
            raise ValueError(f"Record {index} is missing 'score'")

        group = record.get("group")
        if isinstance(group, (list, dict)):
            raise ValueError(f"Record {index} has a non-scalar group: {group!r}")

        try:
            items.append(
                Item(
                    record.get("word", record.get("label")),
                    record["score"],
                    group,
                    record.get("x"),
                    record.get("y"),
                )
            )
        except ValueError as e:
            raise ValueError(f"Record {index}: {e}") from e

    return items


def load_items(filepath: str) -> List[Item]:
    """Load items from a JSON file."""
    with open(filepath, "r", encoding="utf-8") as f:
        try:
            records = json.load(f)
        except json.JSONDecodeError as e:
            raise ValueError(f"Invalid JSON in {filepath}: {e}") from e
    return items_from_records(records)


def layout_records(circles: Iterable[PlacedCircle]) -> List[dict]:
    """Render attributes of every circle, as written to the output JSON."""
    return [circle.to_dict() for circle in circles]


def save_layout_json(circles: Sequence[PlacedCircle], filepath: str) -> None:
    """Save render attributes to a JSON file."""
    with open(filepath, "w", encoding="utf-8") as f:
        json.dump(layout_records(circles), f, ensure_ascii=False, indent=2)

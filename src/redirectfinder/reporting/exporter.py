"""JSON exporter for redirect proposals.

This module writes the redirects stored after a run to a JSON file that
the delivery step and manual review both read.
"""

import json
import math
from collections import Counter
from collections.abc import Iterable
from pathlib import Path

from redirectfinder.core.exceptions import ExportError
from redirectfinder.core.models import RedirectRecord


def percent_bucket(percent: float) -> str:
    """Label the 10-point bucket a similarity falls into.

    Args:
        percent: Similarity between 0 and 100

    Returns:
        Label such as "90-99%"; an exact 100 gets its own "100-109%" bucket
    """
    low = int(math.floor(percent / 10)) * 10
    return f"{low}-{low + 9}%"


def percent_distribution(records: Iterable[RedirectRecord]) -> dict[str, int]:
    """Count redirects per 10-point similarity bucket.

    Args:
        records: Redirect records

    Returns:
        Bucket label to count, ordered by ascending bucket
    """
    counts = Counter(percent_bucket(record.percent) for record in records)
    return dict(sorted(counts.items(), key=lambda item: int(item[0].split("-")[0])))


class RedirectExporter:
    """Export redirect records to a JSON array.

    Each element has the keys "from", "to" and "percent".
    """

    def export(self, records: Iterable[RedirectRecord], output_path: Path) -> int:
        """Write records to a JSON file.

        Args:
            records: Records to export, in the order they should appear
            output_path: Destination file

        Returns:
            Number of records written

        Raises:
            ExportError: If the file cannot be written
        """
        data = [record.to_dict() for record in records]

        try:
            output_path = Path(output_path)
            output_path.parent.mkdir(parents=True, exist_ok=True)
            with output_path.open("w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except (OSError, TypeError, ValueError) as e:
            raise ExportError(f"Failed to export redirects to {output_path}: {e}") from e

        return len(data)

    def load(self, input_path: Path) -> list[RedirectRecord]:
        """Read records back from an exported file.

        Args:
            input_path: File written by export()

        Returns:
            Records in file order

        Raises:
            ExportError: If the file is missing or malformed
        """
        input_path = Path(input_path)
        if not input_path.exists():
            raise ExportError(f"Export file not found: {input_path}")

        try:
            with input_path.open("r", encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise ExportError(f"Invalid JSON in {input_path}: {e}") from e
        except OSError as e:
            raise ExportError(f"Failed to read {input_path}: {e}") from e

        if not isinstance(data, list):
            raise ExportError(f"{input_path} must contain an array of redirects")

        records = []
        for position, item in enumerate(data):
            if not isinstance(item, dict):
                raise ExportError(f"Entry {position} in {input_path} is not an object")
            source, target, percent = item.get("from"), item.get("to"), item.get("percent")
            if not isinstance(source, str) or not isinstance(target, str):
                raise ExportError(f"Entry {position} in {input_path} lacks from/to")
            if isinstance(percent, bool) or not isinstance(percent, (int, float)):
                raise ExportError(f"Entry {position} in {input_path} has no numeric percent")
            records.append(RedirectRecord(source=source, target=target, percent=float(percent)))

        return records

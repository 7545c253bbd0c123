"""Input file loading.

Reads the list of failing URLs and the reference code sets. Both come as
JSON arrays of objects (as produced by a collection export) or as CSV
files with a header row.
"""

import csv
import json
import logging
from pathlib import Path
from typing import Any

from redirectfinder.core.constants import UrlCategory
from redirectfinder.core.exceptions import SourceError
from redirectfinder.storage.database import Database


logger = logging.getLogger(__name__)


def _read_rows(file_path: Path) -> list[Any]:
    """Read a JSON array or a CSV file into a list of rows.

    Raises:
        SourceError: If the file cannot be read or is not an array
    """
    try:
        if file_path.suffix.lower() == ".csv":
            with file_path.open("r", encoding="utf-8", newline="") as f:
                return list(csv.DictReader(f))

        with file_path.open("r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, UnicodeDecodeError, csv.Error) as e:
        raise SourceError(f"Failed to read {file_path}: {e}") from e
    except json.JSONDecodeError as e:
        raise SourceError(f"Invalid JSON in {file_path}: {e}") from e

    if not isinstance(data, list):
        raise SourceError(f"{file_path} must contain an array of objects")
    return data


def _string_field(rows: list[Any], name: str) -> list[str]:
    values = []
    for row in rows:
        if isinstance(row, dict):
            value = row.get(name)
            if isinstance(value, str) and value:
                values.append(value)
    return values


def read_error_urls(file_path: Path | str) -> list[str]:
    """Read failing URLs in file order.

    Args:
        file_path: JSON array of {"url": ...} objects, or CSV with a
            "url" column

    Returns:
        URLs in file order; entries without a URL are dropped

    Raises:
        SourceError: If the file cannot be read or has the wrong shape
    """
    path = Path(file_path)
    rows = _read_rows(path)
    urls = _string_field(rows, "url")
    logger.info(f"Read {len(urls)} URLs from {len(rows)} records in {path.name}")
    return urls


def read_codes(file_path: Path | str) -> list[str]:
    """Read reference codes, deduplicated by value.

    Args:
        file_path: JSON array of {"code": ...} objects, or CSV with a
            "code" column

    Returns:
        Distinct codes in order of first appearance

    Raises:
        SourceError: If the file cannot be read or has the wrong shape
    """
    path = Path(file_path)
    rows = _read_rows(path)
    codes = list(dict.fromkeys(_string_field(rows, "code")))
    logger.info(f"Extracted {len(codes)} codes from {len(rows)} records in {path.name}")
    return codes


def load_references(
    db: Database,
    products_path: Path | str,
    catalog_path: Path | str,
) -> dict[UrlCategory, int]:
    """Load both reference sets into the database.

    Args:
        db: Database to fill
        products_path: File with product codes
        catalog_path: File with catalog codes

    Returns:
        Number of codes read per category

    Raises:
        SourceError: If a file cannot be read
        StorageError: If inserting fails
    """
    counts = {}
    for category, path in (
        (UrlCategory.PRODUCT, products_path),
        (UrlCategory.CATALOG, catalog_path),
    ):
        codes = read_codes(path)
        db.insert_codes(category, codes)
        counts[category] = len(codes)
    return counts

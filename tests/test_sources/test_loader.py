"""Unit tests for input file loading."""

import json
import tempfile
import unittest
from pathlib import Path

from redirectfinder.core.constants import UrlCategory
from redirectfinder.core.exceptions import SourceError
from redirectfinder.core.models import ReferenceCode
from redirectfinder.sources.loader import load_references, read_codes, read_error_urls
from redirectfinder.storage.database import Database


class LoaderTestCase(unittest.TestCase):

    def setUp(self):
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)

    def tearDown(self):
        self.temp_dir.cleanup()

    def write_json(self, name, data):
        path = self.root / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path


class TestReadErrorUrls(LoaderTestCase):
    """Test reading failing URLs."""

    def test_json_array(self):
        path = self.write_json("errors.json", [
            {"url": "https://s/product/a", "status": 404},
            {"url": "https://s/catalog/b"},
            {"url": ""},
            {"other": "x"},
            "not an object",
        ])

        self.assertEqual(read_error_urls(path), ["https://s/product/a", "https://s/catalog/b"])

    def test_keeps_duplicates_and_order(self):
        path = self.write_json("errors.json", [{"url": "b"}, {"url": "a"}, {"url": "b"}])
        self.assertEqual(read_error_urls(path), ["b", "a", "b"])

    def test_csv(self):
        path = self.root / "errors.csv"
        path.write_text("url,status\nhttps://s/product/a,404\nhttps://s/product/b,\n", encoding="utf-8")

        self.assertEqual(read_error_urls(path), ["https://s/product/a", "https://s/product/b"])

    def test_missing_file(self):
        with self.assertRaises(SourceError):
            read_error_urls(self.root / "missing.json")

    def test_invalid_json(self):
        path = self.root / "errors.json"
        path.write_text("[{", encoding="utf-8")
        with self.assertRaises(SourceError):
            read_error_urls(path)

    def test_not_an_array(self):
        path = self.write_json("errors.json", {"url": "https://s/a"})
        with self.assertRaises(SourceError):
            read_error_urls(path)


class TestReadCodes(LoaderTestCase):
    """Test reading reference codes."""

    def test_deduplicates_in_order(self):
        path = self.write_json("products.json", [
            {"code": "B"}, {"code": "A"}, {"code": "B"}, {"code": None}, {"code": 5},
        ])
        self.assertEqual(read_codes(path), ["B", "A"])

    def test_codes_kept_verbatim(self):
        """Test that only empty codes are dropped; others are not trimmed."""
        path = self.write_json("products.json", [
            {"code": " ABC-1 "}, {"code": ""}, {"code": "ABC-1"},
        ])
        self.assertEqual(read_codes(path), [" ABC-1 ", "ABC-1"])

    def test_csv(self):
        path = self.root / "catalog.csv"
        path.write_text("code,name\nshoes,Shoes\nbags,Bags\nshoes,Shoes\n", encoding="utf-8")
        self.assertEqual(read_codes(path), ["shoes", "bags"])


class TestLoadReferences(LoaderTestCase):
    """Test loading both reference sets into the database."""

    def test_loads_both_categories(self):
        products = self.write_json("products.json", [{"code": "p1"}, {"code": "p2"}])
        catalog = self.write_json("catalog.json", [{"code": "c1"}])

        with Database(self.root / "test.db") as db:
            db.init_db()
            counts = load_references(db, products, catalog)

            self.assertEqual(counts, {UrlCategory.PRODUCT: 2, UrlCategory.CATALOG: 1})
            self.assertEqual(
                db.query_all_codes(UrlCategory.PRODUCT),
                [ReferenceCode("p1"), ReferenceCode("p2")],
            )
            self.assertEqual(db.query_all_codes(UrlCategory.CATALOG), [ReferenceCode("c1")])


if __name__ == "__main__":
    unittest.main()

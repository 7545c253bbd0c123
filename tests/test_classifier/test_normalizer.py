"""Unit tests for URL normalizer module.

Tests for URLNormalizer including trailing slash handling, origin and
path extraction, relative path conversion and strict decoding.
"""

import unittest

from redirectfinder.classifier.normalizer import URLNormalizer
from redirectfinder.core.exceptions import CodeDecodeError


class TestURLNormalizer(unittest.TestCase):
    """Test suite for URLNormalizer class."""

    def setUp(self):
        """Set up test fixtures."""
        self.normalizer = URLNormalizer()

    def test_strip_trailing_slash(self):
        self.assertEqual(self.normalizer.strip_trailing_slash("https://s/a/"), "https://s/a")
        self.assertEqual(self.normalizer.strip_trailing_slash("https://s/a"), "https://s/a")

    def test_strip_only_one_slash(self):
        self.assertEqual(self.normalizer.strip_trailing_slash("https://s/a//"), "https://s/a/")

    def test_same_location_ignores_trailing_slash(self):
        self.assertTrue(self.normalizer.same_location("https://s/a/", "https://s/a"))

    def test_same_location_is_exact_otherwise(self):
        """Test that scheme and case differences count as a redirect."""
        self.assertFalse(self.normalizer.same_location("http://s/a", "https://s/a"))
        self.assertFalse(self.normalizer.same_location("https://s/A", "https://s/a"))

    def test_get_origin(self):
        self.assertEqual(
            self.normalizer.get_origin("HTTPS://Shop.Example.com/product/abc"),
            "https://shop.example.com",
        )

    def test_get_origin_keeps_port(self):
        self.assertEqual(
            self.normalizer.get_origin("http://localhost:8080/catalog/x"),
            "http://localhost:8080",
        )

    def test_get_origin_relative_url(self):
        self.assertIsNone(self.normalizer.get_origin("/product/abc"))

    def test_get_path(self):
        self.assertEqual(
            self.normalizer.get_path("https://s/catalog/shoes?page=2"),
            "/catalog/shoes",
        )

    def test_to_relative(self):
        self.assertEqual(
            self.normalizer.to_relative("https://s.example/product/ABC?x=1"),
            "/product/ABC?x=1",
        )

    def test_to_relative_root(self):
        """Test that a bare origin becomes "/"."""
        self.assertEqual(self.normalizer.to_relative("https://s.example"), "/")

    def test_to_relative_keeps_paths(self):
        self.assertEqual(self.normalizer.to_relative("/product/abc"), "/product/abc")

    def test_decode(self):
        self.assertEqual(
            self.normalizer.decode("https://s/product/%D1%85%D0%B0"),
            "https://s/product/ха",
        )

    def test_decode_plain_url_unchanged(self):
        self.assertEqual(self.normalizer.decode("https://s/product/a+b"), "https://s/product/a+b")

    def test_decode_malformed_escape(self):
        """Test that a "%" without two hex digits is rejected."""
        with self.assertRaises(CodeDecodeError):
            self.normalizer.decode("https://s/product/100%")
        with self.assertRaises(CodeDecodeError):
            self.normalizer.decode("https://s/product/%zz")

    def test_decode_invalid_utf8(self):
        with self.assertRaises(CodeDecodeError):
            self.normalizer.decode("https://s/product/%FF")


if __name__ == "__main__":
    unittest.main()

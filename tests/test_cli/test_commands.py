"""Tests for the command line interface."""

import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

import httpx
from typer.testing import CliRunner

from redirectfinder import __version__
from redirectfinder.cli import app
from redirectfinder.core.constants import UrlCategory
from redirectfinder.core.models import RedirectRecord
from redirectfinder.prober.transport import HttpxTransport
from redirectfinder.storage.database import Database


def site_handler(request: httpx.Request) -> httpx.Response:
    if request.url.path == "/product/moved":
        return httpx.Response(301, headers={"Location": "https://shop.example/product/live"})
    if request.url.path == "/product/live":
        return httpx.Response(200)
    return httpx.Response(404)


class TestCommands(unittest.TestCase):
    """Run commands against temporary files."""

    def setUp(self):
        self.runner = CliRunner()
        self.temp_dir = tempfile.TemporaryDirectory()
        self.root = Path(self.temp_dir.name)
        self.db_path = self.root / "redirects.db"
        self.result_path = self.root / "result.json"
        self.errors_path = self.root / "errors.json"
        self.products_path = self.root / "products.json"
        self.catalog_path = self.root / "catalog.json"

        self.config_path = self.root / "settings.yaml"
        self.config_path.write_text(
            "pipeline:\n"
            "  batch_pause: 0\n"
            "data:\n"
            f"  db_path: {self.db_path}\n"
            f"  errors_file: {self.errors_path}\n"
            f"  products_file: {self.products_path}\n"
            f"  catalog_file: {self.catalog_path}\n"
            f"  result_file: {self.result_path}\n"
        )

    def tearDown(self):
        self.temp_dir.cleanup()

    def invoke(self, *args, **kwargs):
        return self.runner.invoke(app, [*args, "--config", str(self.config_path)], **kwargs)

    def seed_redirects(self):
        with Database(self.db_path) as db:
            db.reset()
            db.insert_redirects([
                RedirectRecord("https://s/product/a", "https://s/product/a1", 95.0),
                RedirectRecord("https://s/product/b", "https://s/product/b1", 40.0),
            ])

    def test_version(self):
        result = self.runner.invoke(app, ["version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn(__version__, result.output)

    def test_run(self):
        self.errors_path.write_text(json.dumps([
            {"url": "https://shop.example/product/XYZ99"},
            {"url": "https://shop.example/product/moved"},
        ]))
        self.products_path.write_text(json.dumps([{"code": "XYZ100"}, {"code": "ABC1"}]))
        self.catalog_path.write_text("[]")

        def transport_factory(**kwargs):
            return HttpxTransport(http_transport=httpx.MockTransport(site_handler), **kwargs)

        with patch("redirectfinder.prober.transport.HttpxTransport", side_effect=transport_factory):
            result = self.invoke("run")

        self.assertEqual(result.exit_code, 0, result.output)
        with Database(self.db_path) as db:
            redirects = db.query_redirects_by_min_percent(0)
            self.assertEqual(len(db.query_all_codes(UrlCategory.PRODUCT)), 2)
        self.assertEqual(redirects, [
            RedirectRecord(
                "https://shop.example/product/XYZ99",
                "https://shop.example/product/XYZ100",
                40.0,
            ),
        ])

    def test_run_missing_errors_file(self):
        result = self.invoke("run", "--skip-status-check")
        self.assertEqual(result.exit_code, 1)

    def test_export(self):
        self.seed_redirects()

        result = self.invoke("export", "--min-percent", "50")

        self.assertEqual(result.exit_code, 0, result.output)
        data = json.loads(self.result_path.read_text())
        self.assertEqual(data, [{
            "from": "https://s/product/a",
            "to": "https://s/product/a1",
            "percent": 95.0,
        }])
        self.assertIn("90-99%", result.output)

    def test_export_prompts_for_threshold(self):
        self.seed_redirects()

        result = self.invoke("export", input="0\n")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(len(json.loads(self.result_path.read_text())), 2)

    def test_export_rejects_out_of_range(self):
        self.seed_redirects()
        result = self.invoke("export", "--min-percent", "150")
        self.assertEqual(result.exit_code, 1)
        self.assertFalse(self.result_path.exists())

    def test_export_without_database(self):
        result = self.invoke("export", "--min-percent", "0")
        self.assertEqual(result.exit_code, 1)

    @patch("redirectfinder.core.config.load_dotenv")
    def test_send_without_credentials(self, _load_dotenv):
        self.result_path.write_text(json.dumps([{"from": "a", "to": "b", "percent": 1}]))
        with patch.dict("os.environ", {"API_URL": "", "API_KEY": ""}):
            result = self.invoke("send")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("API_URL", result.output)

    def test_clean(self):
        self.seed_redirects()
        self.result_path.write_text("[]")

        result = self.invoke("clean", "--force")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertFalse(self.db_path.exists())
        self.assertFalse(self.result_path.exists())

    def test_clean_cancelled(self):
        self.result_path.write_text("[]")

        result = self.invoke("clean", input="n\n")

        self.assertEqual(result.exit_code, 0)
        self.assertTrue(self.result_path.exists())

    def test_clean_nothing(self):
        result = self.invoke("clean", "--force")
        self.assertEqual(result.exit_code, 0)
        self.assertIn("Nothing to clean", result.output)


if __name__ == "__main__":
    unittest.main()

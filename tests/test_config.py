# tests/test_config.py
import json
import os
import tempfile
import unittest
from unittest import mock

from destitutes.config import Settings
from destitutes.errors import ConfigError


def settings(**kw):
    # keep a developer's .env out of the tests
    return Settings(_env_file=None, **kw)


class TestSettings(unittest.TestCase):
    def test_defaults(self):
        with mock.patch.dict(os.environ, {}, clear=True):
            s = settings()
        self.assertEqual(s.feed_limit, 50)
        self.assertEqual(s.jpeg_quality, 80)
        self.assertEqual(s.donation_max, 100_000)
        self.assertEqual(s.donation_presets, [100, 250, 500, 1000, 2500, 5000])
        self.assertEqual(s.photos_collection, "photos")

    def test_environment_prefix(self):
        with mock.patch.dict(os.environ, {"DOI_FEED_LIMIT": "20", "DOI_FIREBASE_API_KEY": "abc"}, clear=True):
            s = settings()
        self.assertEqual(s.feed_limit, 20)
        self.assertEqual(s.firebase_api_key, "abc")

    def test_require(self):
        s = settings(firebase_api_key="abc")
        s.require("firebase_api_key")
        with self.assertRaises(ConfigError) as cm:
            s.require("firebase_api_key", "firebase_storage_bucket")
        self.assertIn("DOI_FIREBASE_STORAGE_BUCKET", str(cm.exception))

    def test_inline_service_account(self):
        s = settings(firebase_service_account=json.dumps({"project_id": "doi"}))
        self.assertEqual(s.service_account_info(), {"project_id": "doi"})

    def test_service_account_file(self):
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "sa.json")
            with open(path, "w", encoding="utf-8") as f:
                json.dump({"project_id": "doi"}, f)
            self.assertEqual(settings(firebase_service_account=path).service_account_info(), {"project_id": "doi"})

    def test_bad_service_account(self):
        for value in ("{not json", "/nonexistent/sa.json"):
            with self.subTest(value=value), self.assertRaises(ConfigError):
                settings(firebase_service_account=value).service_account_info()


if __name__ == "__main__":
    unittest.main()

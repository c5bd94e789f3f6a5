# Copyright 2026 Justin Cook
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

import json
import os
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from candidate_report import settings


class TestGetCaBundle(unittest.TestCase):
    """CA bundle resolution priority."""

    def setUp(self):
        settings._ca_bundle_override = None

    def tearDown(self):
        settings._ca_bundle_override = None

    def test_default_returns_true(self):
        with patch.dict(os.environ, {}, clear=True):
            self.assertIs(settings.get_ca_bundle(), True)

    def test_curl_ca_bundle_beats_ssl_cert_file(self):
        with patch.dict(os.environ, {
            "SSL_CERT_FILE": "/path/ssl.pem",
            "CURL_CA_BUNDLE": "/path/curl.pem",
        }, clear=True):
            self.assertEqual(settings.get_ca_bundle(), "/path/curl.pem")

    def test_requests_ca_bundle_beats_all_env(self):
        with patch.dict(os.environ, {
            "SSL_CERT_FILE": "/path/ssl.pem",
            "CURL_CA_BUNDLE": "/path/curl.pem",
            "REQUESTS_CA_BUNDLE": "/path/requests.pem",
        }, clear=True):
            self.assertEqual(settings.get_ca_bundle(), "/path/requests.pem")

    def test_cli_override_beats_everything(self):
        with patch.dict(os.environ, {"REQUESTS_CA_BUNDLE": "/path/requests.pem"}, clear=True):
            settings.set_ca_bundle_override("/path/cli.pem")
            self.assertEqual(settings.get_ca_bundle(), "/path/cli.pem")


class TestConfigureSslEnv(unittest.TestCase):
    def setUp(self):
        settings._ca_bundle_override = None

    def tearDown(self):
        settings._ca_bundle_override = None

    def test_sets_ssl_cert_file_when_custom_bundle(self):
        settings.set_ca_bundle_override("/my/custom.pem")
        with patch.dict(os.environ, {}, clear=True):
            settings.configure_ssl_env()
            self.assertEqual(os.environ.get("SSL_CERT_FILE"), "/my/custom.pem")

    def test_no_op_when_default(self):
        with patch.dict(os.environ, {}, clear=True):
            settings.configure_ssl_env()
            self.assertNotIn("SSL_CERT_FILE", os.environ)


class TestGetSettings(unittest.TestCase):
    def test_defaults(self):
        with patch.dict(os.environ, {}, clear=True):
            s = settings.get_settings()
        self.assertEqual(s.ezekia_base_url, "https://ezekia.com/api")
        self.assertEqual(s.openai_model, "gpt-3.5-turbo")
        self.assertEqual(s.request_timeout, 30.0)
        self.assertEqual(s.output_dir, "user_content/reports")

    def test_environment_overrides(self):
        with patch.dict(os.environ, {
            "EZEKIA_BASE_URL": "https://staging.example.com/api/",
            "OPENAI_MODEL": "gpt-4o-mini",
            "CANDIDATE_REPORT_TIMEOUT": "5",
        }, clear=True):
            s = settings.get_settings()
        self.assertEqual(s.ezekia_base_url, "https://staging.example.com/api")
        self.assertEqual(s.openai_model, "gpt-4o-mini")
        self.assertEqual(s.request_timeout, 5.0)

    def test_invalid_timeout_falls_back(self):
        with patch.dict(os.environ, {"CANDIDATE_REPORT_TIMEOUT": "soon"}, clear=True):
            self.assertEqual(settings.get_settings().request_timeout, 30.0)


class TestCredentialStore(unittest.TestCase):
    def setUp(self):
        self.tmp = tempfile.TemporaryDirectory()
        self.path = Path(self.tmp.name) / "nested" / ".settings.json"
        self.store = settings.CredentialStore(str(self.path))

    def tearDown(self):
        self.tmp.cleanup()

    def test_set_then_get(self):
        with patch.dict(os.environ, {}, clear=True):
            self.store.set(settings.EZEKIA_KEY, "ezk-123")
            self.assertEqual(self.store.get(settings.EZEKIA_KEY), "ezk-123")

    def test_value_is_not_stored_in_plain_text(self):
        self.store.set(settings.OPENAI_KEY, "sk-secret")
        raw = self.path.read_text(encoding="utf-8")
        self.assertNotIn("sk-secret", raw)
        self.assertIn(settings.OPENAI_KEY, json.loads(raw))

    def test_missing_key_returns_default(self):
        with patch.dict(os.environ, {}, clear=True):
            self.assertEqual(self.store.get(settings.OPENAI_KEY), "")
            self.assertEqual(self.store.get(settings.OPENAI_KEY, "fallback"), "fallback")

    def test_environment_fallback_is_persisted(self):
        with patch.dict(os.environ, {"SERVICE_API_KEY": "from-env"}, clear=True):
            self.assertEqual(self.store.get(settings.EZEKIA_KEY), "from-env")

        with patch.dict(os.environ, {}, clear=True):
            self.assertEqual(self.store.get(settings.EZEKIA_KEY), "from-env")

    def test_specific_variable_beats_generic_one(self):
        with patch.dict(os.environ, {
            "OPENAI_API_KEY": "specific",
            "COMPLETION_API_KEY": "generic",
        }, clear=True):
            self.assertEqual(self.store.get(settings.OPENAI_KEY), "specific")

    def test_corrupt_file_is_ignored(self):
        self.path.parent.mkdir(parents=True)
        self.path.write_text("{not json", encoding="utf-8")
        with patch.dict(os.environ, {}, clear=True):
            self.assertEqual(self.store.get(settings.EZEKIA_KEY), "")

    def test_api_keys_never_logged(self):
        with patch.dict(os.environ, {}, clear=True):
            self.store.save_api_keys("ezk-123", "sk-456")
            with self.assertLogs("candidate_report.settings", level="DEBUG") as logs:
                keys = self.store.get_api_keys()
        self.assertEqual(keys, {settings.EZEKIA_KEY: "ezk-123", settings.OPENAI_KEY: "sk-456"})
        output = "\n".join(logs.output)
        self.assertNotIn("ezk-123", output)
        self.assertNotIn("sk-456", output)
        self.assertIn("Found", output)


if __name__ == '__main__':
    unittest.main()

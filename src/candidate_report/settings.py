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

"""
Runtime settings, the local API key store and CA bundle resolution.

Settings are read from the environment once per process. API keys live in a
small JSON file under user_content/ and fall back to environment variables
the first time they are requested.

CA bundle lookup order:
  1. Explicit override via the --ca-bundle CLI arg
  2. REQUESTS_CA_BUNDLE
  3. CURL_CA_BUNDLE
  4. SSL_CERT_FILE
  5. System defaults (True)
"""

import base64
import binascii
import json
import logging
import os
from dataclasses import dataclass
from hashlib import sha256
from pathlib import Path

logger = logging.getLogger(__name__)

EZEKIA_KEY = "ezekia_api_key"
OPENAI_KEY = "openai_api_key"

# Environment variables consulted (in order) when a key is not stored yet
ENV_FALLBACKS = {
    EZEKIA_KEY: ("EZEKIA_API_KEY", "SERVICE_API_KEY"),
    OPENAI_KEY: ("OPENAI_API_KEY", "COMPLETION_API_KEY"),
}

_STORE_SECRET = "candidate-report-settings"

_ca_bundle_override: str | None = None


@dataclass
class Settings:
    ezekia_base_url: str = "https://ezekia.com/api"
    openai_model: str = "gpt-3.5-turbo"
    request_timeout: float = 30.0
    output_dir: str = "user_content/reports"
    settings_file: str = "user_content/.settings.json"


def get_settings() -> Settings:
    """Builds Settings from the environment, falling back to defaults."""
    defaults = Settings()
    timeout = os.environ.get("CANDIDATE_REPORT_TIMEOUT")
    try:
        request_timeout = float(timeout) if timeout else defaults.request_timeout
    except ValueError:
        logger.warning(f"Ignoring invalid CANDIDATE_REPORT_TIMEOUT: {timeout}")
        request_timeout = defaults.request_timeout

    return Settings(
        ezekia_base_url=os.environ.get("EZEKIA_BASE_URL", defaults.ezekia_base_url).rstrip("/"),
        openai_model=os.environ.get("OPENAI_MODEL", defaults.openai_model),
        request_timeout=request_timeout,
        output_dir=os.environ.get("CANDIDATE_REPORT_OUTPUT_DIR", defaults.output_dir),
        settings_file=os.environ.get("CANDIDATE_REPORT_SETTINGS_FILE", defaults.settings_file),
    )


def set_ca_bundle_override(path: str) -> None:
    global _ca_bundle_override
    _ca_bundle_override = path
    logger.info(f"CA bundle override set to: {path}")


def get_ca_bundle() -> str | bool:
    """
    Returns the CA bundle path for outbound HTTPS requests, or True to use
    the default trust store.
    """
    if _ca_bundle_override:
        return _ca_bundle_override

    for var in ("REQUESTS_CA_BUNDLE", "CURL_CA_BUNDLE", "SSL_CERT_FILE"):
        value = os.environ.get(var)
        if value:
            logger.debug(f"Using CA bundle from {var}: {value}")
            return value

    return True


def configure_ssl_env() -> None:
    """
    Exports a custom CA bundle as SSL_CERT_FILE.
    The OpenAI SDK talks through httpx, which only reads SSL_CERT_FILE.
    """
    bundle = get_ca_bundle()
    if isinstance(bundle, str) and os.environ.get("SSL_CERT_FILE") != bundle:
        os.environ["SSL_CERT_FILE"] = bundle
        logger.debug(f"Set SSL_CERT_FILE={bundle} for the OpenAI client")


def _keystream() -> bytes:
    return sha256(_STORE_SECRET.encode("utf-8")).digest()


def _scramble(data: bytes) -> bytes:
    key = _keystream()
    return bytes(b ^ key[i % len(key)] for i, b in enumerate(data))


def _encode(value: str) -> str:
    return base64.urlsafe_b64encode(_scramble(value.encode("utf-8"))).decode("ascii")


def _decode(token: str) -> str:
    return _scramble(base64.urlsafe_b64decode(token.encode("ascii"))).decode("utf-8")


class CredentialStore:
    """
    Persists the two API keys in an obfuscated JSON file.
    Values are never written to the log, only whether they were found.
    """
    def __init__(self, path: str | None = None):
        self.path = Path(path or get_settings().settings_file)

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return data if isinstance(data, dict) else {}
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to read settings file {self.path}: {e}")
            return {}

    def _save(self, data: dict) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    def get(self, key: str, default: str = "") -> str:
        """
        Returns the stored value for `key`.
        When nothing is stored, the environment fallbacks are tried and a
        value found there is persisted for the next run.
        """
        token = self._load().get(key)
        if token:
            try:
                return _decode(token)
            except (binascii.Error, ValueError, UnicodeDecodeError):
                logger.warning(f"Stored value for {key} is corrupt, ignoring it.")

        for var in ENV_FALLBACKS.get(key, ()):
            value = os.environ.get(var, "")
            if value:
                logger.info(f"{key} not stored, found in environment ({var}). Saving.")
                self.set(key, value)
                return value

        return default

    def set(self, key: str, value: str) -> None:
        data = self._load()
        data[key] = _encode(value) if value else ""
        self._save(data)
        logger.debug(f"Saved {key} ({'Provided' if value else 'Cleared'})")

    def get_api_keys(self) -> dict:
        keys = {EZEKIA_KEY: self.get(EZEKIA_KEY), OPENAI_KEY: self.get(OPENAI_KEY)}
        logger.info(
            "API keys: "
            + ", ".join(f"{k}={'Found' if v else 'Not found'}" for k, v in keys.items())
        )
        return keys

    def save_api_keys(self, ezekia_api_key: str, openai_api_key: str) -> None:
        self.set(EZEKIA_KEY, ezekia_api_key)
        self.set(OPENAI_KEY, openai_api_key)

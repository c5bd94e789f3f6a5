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
HTTP relay for the Ezekia REST API.

The gateway never raises for transport problems: it returns either the decoded
JSON body or {"error": True, "message": ...}, and the caller decides what to do.
"""

import logging
from typing import Any, Callable, Dict, Optional
from urllib.parse import quote

import requests

from candidate_report.settings import EZEKIA_KEY, get_ca_bundle, get_settings

logger = logging.getLogger(__name__)


def _format_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def serialize_params(params: Optional[Dict[str, Any]]) -> str:
    """
    Serializes query parameters the way Ezekia expects them.
    List values become repeated `key[]=value` pairs, never a comma-joined
    value or a JSON array.
    """
    if not params:
        return ""

    parts = []
    for key, value in params.items():
        if value is None:
            continue
        if isinstance(value, (list, tuple)):
            name = key if key.endswith("[]") else f"{key}[]"
            for item in value:
                parts.append(f"{quote(name, safe='[]')}={quote(_format_value(item), safe='')}")
        else:
            parts.append(f"{quote(key, safe='[]')}={quote(_format_value(value), safe='')}")
    return "&".join(parts)


def _error_message(response: requests.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {response.status_code}: {response.reason or 'Request failed'}"


class EzekiaGateway:
    """
    Attaches the stored Ezekia key as a bearer token and forwards requests
    to the configured base URL.
    """
    def __init__(self, api_key_provider: Callable[[], str], base_url: str = None,
                 timeout: float = None, session: requests.Session = None):
        settings = get_settings()
        self.api_key_provider = api_key_provider
        self.base_url = (base_url or settings.ezekia_base_url).rstrip("/")
        self.timeout = timeout or settings.request_timeout
        self.session = session or requests.Session()

    @classmethod
    def from_store(cls, store, **kwargs) -> "EzekiaGateway":
        """Builds a gateway reading the key from a CredentialStore on every call."""
        return cls(lambda: store.get(EZEKIA_KEY), **kwargs)

    def invoke(self, method: str, endpoint: str, params: Dict[str, Any] = None,
               body: Any = None) -> Dict[str, Any]:
        api_key = self.api_key_provider()
        if not api_key:
            return {"error": True, "message": "Ezekia API key not configured"}

        url = f"{self.base_url}/{endpoint.lstrip('/')}"
        query = serialize_params(params)
        if query:
            url = f"{url}?{query}"

        headers = {
            "Authorization": f"Bearer {api_key}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        logger.debug(f"Ezekia request: {method} {url}")
        try:
            response = self.session.request(
                method,
                url,
                headers=headers,
                json=body,
                timeout=self.timeout,
                verify=get_ca_bundle(),
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Ezekia request failed ({endpoint}): {e}")
            return {"error": True, "message": str(e) or "Failed to fetch data from Ezekia"}

        if not response.ok:
            message = _error_message(response)
            logger.error(f"Ezekia API error ({endpoint}): {message}")
            return {"error": True, "message": message}

        if not response.content:
            return {}

        try:
            return response.json()
        except ValueError:
            logger.error(f"Ezekia returned a non-JSON body for {endpoint}")
            return {"error": True, "message": f"Invalid JSON response from {endpoint}"}

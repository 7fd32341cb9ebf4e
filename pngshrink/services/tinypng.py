"""TinyPNG shrink API wrapper.

Uploads raw PNG bytes to ``POST https://<api-host>/shrink`` with Basic auth
(``api:<key>``) and downloads the compressed result. Calls are blocking and
carry no timeout; the caller decides what to do with a failed file.
"""
from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Any, Dict, Optional

import httpx
from pydantic import ValidationError

from pngshrink.models import CandidateFile, ShrinkResult

logger = logging.getLogger(__name__)


class TinyPNGAPIError(Exception):
    """Raised when an upload or download fails for a single file."""

    def __init__(self, status: int | None, message: str):
        prefix = f"TinyPNG API error {status}" if status is not None else "TinyPNG request failed"
        super().__init__(f"{prefix}: {message}")
        self.status = status


def _output_url_pattern(prefix: str) -> re.Pattern[str]:
    return re.compile(re.escape(prefix) + r"[^\s\"'<>]*?\.png")


def extract_output_url(resp: httpx.Response, prefix: str) -> str | None:
    """Find the result URL in a successful shrink response.

    The ``Location`` header and the JSON ``output.url`` field are tried first;
    failing both, the first ``<prefix>...png`` substring of the raw body wins.
    """

    location = resp.headers.get("Location")
    if location and location.startswith(prefix):
        return location

    url = _nested(_json_body(resp), "output", "url")
    if isinstance(url, str) and url.startswith(prefix):
        return url

    match = _output_url_pattern(prefix).search(resp.text)
    return match.group(0) if match else None


def _json_body(resp: httpx.Response) -> Dict[str, Any]:
    try:
        data = resp.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def _nested(body: Dict[str, Any], section: str, key: str) -> Any:
    """Return ``body[section][key]``, or ``None`` when either level is not an object."""
    inner = body.get(section)
    return inner.get(key) if isinstance(inner, dict) else None


def _size(body: Dict[str, Any], section: str) -> int | None:
    size = _nested(body, section, "size")
    if isinstance(size, bool) or not isinstance(size, int) or size < 0:
        return None
    return size


class TinyPNGClient:
    """Minimal blocking client for the shrink endpoint."""

    def __init__(
        self,
        *,
        api_key: str,
        host: str = "api.tinypng.com",
        user: str = "api",
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._auth = httpx.BasicAuth(user, api_key)
        self._shrink_url = f"https://{host}/shrink"
        self._output_prefix = f"https://{host}/output/"
        self._client = httpx.Client(timeout=None, transport=transport)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def shrink(self, candidate: CandidateFile) -> ShrinkResult:
        data = candidate.path.read_bytes()
        logger.debug("POST %s (%d bytes from %s)", self._shrink_url, len(data), candidate.path)
        try:
            resp = self._client.post(self._shrink_url, content=data, auth=self._auth)
        except httpx.HTTPError as exc:
            raise TinyPNGAPIError(None, str(exc)) from exc

        if not resp.is_success:
            raise TinyPNGAPIError(resp.status_code, _error_message(resp))

        url = extract_output_url(resp, self._output_prefix)
        if not url:
            raise TinyPNGAPIError(resp.status_code, "No output URL in response")

        body = _json_body(resp)
        try:
            return ShrinkResult(
                source=candidate.path,
                output_name=candidate.output_name,
                url=url,
                input_size=_size(body, "input"),
                output_size=_size(body, "output"),
            )
        except ValidationError as exc:
            raise TinyPNGAPIError(resp.status_code, f"Malformed response: {exc}") from exc

    def download(self, url: str, destination: Path) -> Path:
        """Fetch *url* and write the body to *destination*."""

        logger.debug("GET %s -> %s", url, destination)
        try:
            resp = self._client.get(url)
        except httpx.HTTPError as exc:
            raise TinyPNGAPIError(None, str(exc)) from exc
        if not resp.is_success:
            raise TinyPNGAPIError(resp.status_code, "Failed to download output")
        destination.write_bytes(resp.content)
        return destination

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "TinyPNGClient":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()


def _error_message(resp: httpx.Response) -> str:
    body = _json_body(resp)
    if body.get("message"):
        return str(body["message"])
    return resp.text or resp.reason_phrase

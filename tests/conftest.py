"""Shared fixtures: PNG files on disk, test settings and a fake shrink service."""
from __future__ import annotations

import functools
import json
from pathlib import Path

import httpx
import pytest
from PIL import Image

from pngshrink.config import Settings
from pngshrink.handlers import batch_handler
from pngshrink.services.tinypng import TinyPNGClient

API_HOST = "api.tinypng.com"


class FakeShrinkService:
    """Stands in for the remote API behind ``httpx.MockTransport``."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.fail_bodies: set[bytes] = set()
        self.fail_downloads: set[str] = set()
        self.outputs: dict[str, bytes] = {}

    @property
    def uploads(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "POST"]

    @property
    def downloads(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method == "GET"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.method == "POST" and request.url.path == "/shrink":
            body = request.content
            if body in self.fail_bodies:
                return httpx.Response(401, json={"error": "Unauthorized", "message": "Credentials are invalid"})
            url = f"https://{API_HOST}/output/{len(self.outputs)}.png"
            self.outputs[url] = b"shrunk:" + body[:8]
            return httpx.Response(
                201,
                headers={"Location": url},
                json={
                    "input": {"size": len(body), "type": "image/png"},
                    "output": {"size": len(body) // 2, "type": "image/png", "url": url},
                },
            )
        if request.method == "GET" and str(request.url) in self.outputs:
            if str(request.url) in self.fail_downloads:
                return httpx.Response(500, text="boom")
            return httpx.Response(200, content=self.outputs[str(request.url)])
        return httpx.Response(404, content=json.dumps({"error": "NotFound"}).encode())


@pytest.fixture
def make_png(tmp_path: Path):
    def _make(name: str = "image.png", size=(8, 8), color="red", directory: Path | None = None) -> Path:
        path = (directory or tmp_path) / name
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGB", size, color=color).save(path, format="PNG")
        return path

    return _make


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    home = tmp_path / "home"
    home.mkdir()
    return Settings(api_host=API_HOST, key_file=home / ".tinypng")


@pytest.fixture
def fake_service() -> FakeShrinkService:
    return FakeShrinkService()


@pytest.fixture
def fake_client(fake_service: FakeShrinkService):
    client = TinyPNGClient(api_key="secret", host=API_HOST, transport=httpx.MockTransport(fake_service.handler))
    yield client
    client.close()


@pytest.fixture
def network(monkeypatch: pytest.MonkeyPatch, fake_service: FakeShrinkService) -> FakeShrinkService:
    """Route the workflow's HTTP traffic to the fake service; the host is reachable."""

    transport = httpx.MockTransport(fake_service.handler)
    monkeypatch.setattr(batch_handler, "TinyPNGClient", functools.partial(TinyPNGClient, transport=transport))
    monkeypatch.setattr(batch_handler, "is_reachable", lambda *args, **kwargs: True)
    return fake_service

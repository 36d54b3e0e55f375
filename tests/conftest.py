"""Pytest configuration and fixtures for dropctl tests."""

from __future__ import annotations

import hashlib
import json
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Generator, Optional

import httpx
import pytest

BASE_URL = "http://portal.test"
PORTAL_ID = "p_abc123"
TOKEN = "tok-1"


@dataclass
class FakePortalServer:
    """In-process stand-in for a DropServe server.

    Serves one portal through an ``httpx.MockTransport`` and records every
    request it sees. Failures are injected per relpath.
    """

    portal_id: str = PORTAL_ID
    autorename: bool = False
    reusable: Optional[bool] = True
    existing: set[str] = field(default_factory=set)
    claim_status: int = 200
    preflight_status: int = 200
    close_status: int = 200
    fail_init: set[str] = field(default_factory=set)
    fail_put: set[str] = field(default_factory=set)
    requests: list[tuple[str, str]] = field(default_factory=list)
    init_payloads: list[dict[str, Any]] = field(default_factory=list)
    preflight_payloads: list[dict[str, Any]] = field(default_factory=list)
    received: dict[str, bytes] = field(default_factory=dict)
    put_headers: list[httpx.Headers] = field(default_factory=list)
    closed: bool = False
    _slots: dict[str, tuple[str, str]] = field(default_factory=dict)

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def calls(self, method: str, suffix: str) -> int:
        return sum(1 for m, p in self.requests if m == method and p.endswith(suffix))

    async def handle(self, request: httpx.Request) -> httpx.Response:
        body = await request.aread()
        path = request.url.path
        self.requests.append((request.method, path))
        prefix = f"/api/portals/{self.portal_id}/"

        if request.method == "GET" and path == prefix + "info":
            return httpx.Response(200, json=self._info())

        if request.method == "POST" and path == prefix + "claim":
            if self.claim_status != 200:
                return httpx.Response(self.claim_status, json={"error": "portal not found"})
            return httpx.Response(200, json=self._claim())

        if request.headers.get("X-Client-Token") != TOKEN:
            return httpx.Response(401, json={"error": "invalid token"})

        if request.method == "POST" and path == prefix + "preflight":
            payload = json.loads(body)
            self.preflight_payloads.append(payload)
            if self.preflight_status != 200:
                return httpx.Response(self.preflight_status, json={"error": "preflight unavailable"})
            conflicts = [
                {"relpath": item["relpath"], "reason": "exists"}
                for item in payload["items"]
                if item["relpath"] in self.existing
            ]
            return httpx.Response(
                200,
                json={
                    "total_files": len(payload["items"]),
                    "total_bytes": sum(i["size"] for i in payload["items"]),
                    "conflicts": conflicts,
                },
            )

        if request.method == "POST" and path == prefix + "uploads":
            payload = json.loads(body)
            self.init_payloads.append(payload)
            if payload["relpath"] in self.fail_init:
                return httpx.Response(403, json={"error": "quota exceeded"})
            upload_id = payload["upload_id"]
            self._slots[upload_id] = (payload["relpath"], payload["policy"])
            return httpx.Response(
                200, json={"upload_id": upload_id, "put_url": f"/api/uploads/{upload_id}"}
            )

        if request.method == "PUT" and path.startswith("/api/uploads/"):
            upload_id = path.rsplit("/", 1)[-1]
            relpath, policy = self._slots[upload_id]
            self.put_headers.append(request.headers)
            if relpath in self.fail_put:
                return httpx.Response(500, json={"error": "disk full"})
            self.received[relpath] = body
            final = relpath
            if policy == "autorename" and relpath in self.existing:
                stem, dot, ext = relpath.rpartition(".")
                final = f"{stem} (1).{ext}" if dot else f"{relpath} (1)"
            return httpx.Response(
                200,
                json={
                    "status": "complete",
                    "relpath": relpath,
                    "final_relpath": final,
                    "server_sha256": hashlib.sha256(body).hexdigest(),
                    "bytes_received": len(body),
                },
            )

        if request.method == "POST" and path == prefix + "close":
            if self.close_status != 200:
                return httpx.Response(self.close_status, json={"error": "close refused"})
            self.closed = True
            return httpx.Response(200, json={"status": "closed"})

        return httpx.Response(404, json={"error": "not found"})

    def _policy(self) -> dict[str, bool]:
        return {"overwrite": not self.autorename, "autorename": self.autorename}

    def _info(self) -> dict[str, Any]:
        return {
            "portal_id": self.portal_id,
            "expires_at": "2026-10-18T12:00:00Z",
            "policy": self._policy(),
            "reusable": self.reusable is not False,
        }

    def _claim(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "portal_id": self.portal_id,
            "client_token": TOKEN,
            "expires_at": "2026-10-18T12:00:00Z",
            "policy": self._policy(),
        }
        if self.reusable is not None:
            data["reusable"] = self.reusable
        return data


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def portal_server() -> FakePortalServer:
    """A fake server with one open, reusable, overwrite-policy portal."""
    return FakePortalServer()


@pytest.fixture
def sample_tree(temp_dir: Path) -> Path:
    """Folder ``a`` holding ``b.txt`` and ``c/d.txt``."""
    root = temp_dir / "a"
    (root / "c").mkdir(parents=True)
    (root / "b.txt").write_bytes(b"bee")
    (root / "c" / "d.txt").write_bytes(b"dee!")
    return root


@pytest.fixture
def sample_config_yaml() -> str:
    """Sample config YAML content."""
    return """
timeout: 10
verify_ssl: false
chunk_size: 1024
stop_on_error: false
output_format: json
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional
from urllib.parse import urlencode

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from trafdat.storage.datasets import JSON_EXT
from trafdat.storage.version import archive_version


@dataclass(frozen=True)
class CacheConfig:
    enabled: bool
    ttl_seconds: float
    include_paths: tuple[str, ...]
    base_path: Path
    max_body_bytes: int = 1_000_000


def _matches_prefix(path: str, prefixes: tuple[str, ...]) -> bool:
    return any(path.startswith(prefix) for prefix in prefixes)


def _cache_key(request: Request) -> str:
    # Canonicalize query ordering so semantically-identical requests hit the same cache key.
    base = request.url.path
    items = sorted(request.query_params.multi_items())
    if not items:
        return base
    return f"{base}?{urlencode(items, doseq=True)}"


def request_archive_version(base_path: Path, path: str) -> Optional[str]:
    """Archive fingerprint for `/{district}/{year}[/{date}[/{name}]]` request paths."""

    parts = [p for p in path.split("/") if p]
    if len(parts) < 2 or len(parts) > 4:
        return None
    district, year = parts[0], parts[1]
    date = parts[2] if len(parts) > 2 else None
    name = parts[3] if len(parts) > 3 else None
    if name is not None and name.endswith(JSON_EXT):
        name = name[: -len(JSON_EXT)]
    return archive_version(base_path / district, year, date, name)


class TtlResponseCacheMiddleware(BaseHTTPMiddleware):
    """Cache successful GET responses for archive paths.

    Entries are keyed on the request plus the archive version of the files
    behind it, so a changed container or log is never answered from cache.
    """

    def __init__(self, app, config: CacheConfig) -> None:  # type: ignore[no-untyped-def]
        super().__init__(app)
        self._config = config
        self._store: dict[str, tuple[float, bytes, int, list[tuple[str, str]]]] = {}

    async def dispatch(self, request: Request, call_next):  # type: ignore[no-untyped-def]
        cfg = self._config
        if not cfg.enabled:
            return await call_next(request)

        if request.method != "GET":
            return await call_next(request)

        if request.query_params.get("no_cache") in {"1", "true", "yes"}:
            return await call_next(request)

        path = request.url.path
        if not _matches_prefix(path, cfg.include_paths):
            return await call_next(request)

        version = request_archive_version(cfg.base_path, path)
        if version is None:
            return await call_next(request)

        key = f"{_cache_key(request)}#{version}"
        now = time.time()

        hit = self._store.get(key)
        if hit is not None:
            expires_at, body, status_code, headers = hit
            if now < expires_at:
                out_headers = dict(headers)
                out_headers["X-Cache"] = "HIT"
                out_headers["X-Archive-Version"] = version
                return Response(content=body, status_code=status_code, headers=out_headers, media_type=None)
            self._store.pop(key, None)

        response = await call_next(request)
        if response.status_code != 200:
            return response

        chunks: list[bytes] = []
        async for chunk in response.body_iterator:
            chunks.append(chunk if isinstance(chunk, bytes) else chunk.encode("utf-8"))
        body_bytes = b"".join(chunks)

        headers = [(k, v) for k, v in response.headers.items() if k.lower() != "set-cookie"]
        if len(body_bytes) <= cfg.max_body_bytes:
            self._store[key] = (now + cfg.ttl_seconds, body_bytes, response.status_code, headers)
        out_headers = dict(headers)
        out_headers["X-Cache"] = "MISS"
        out_headers["X-Archive-Version"] = version
        return Response(
            content=body_bytes,
            status_code=response.status_code,
            headers=out_headers,
            media_type=response.media_type,
        )

"""Reference fetch layer.

Turns a ``SourceDescriptor`` into text. The parsing core never imports this
module; it only consumes what a fetcher returns. Any failure is reported as
``None`` so the affected date becomes an empty collection.
"""

from __future__ import annotations

import io
import logging
import time
import zipfile
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import requests

from .source_registry import SourceDescriptor, TransportMedium


LOGGER = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


@dataclass(frozen=True)
class HttpResponse:
    status_code: int
    body: bytes
    headers: Mapping[str, str]


Transport = Callable[[str, float], HttpResponse]


def requests_transport(url: str, timeout_seconds: float) -> HttpResponse:
    response = requests.get(url, timeout=timeout_seconds)
    return HttpResponse(
        status_code=response.status_code,
        body=response.content,
        headers=dict(response.headers.items()),
    )


def _split_entry(location: str) -> tuple[str, Optional[str]]:
    path, hash_sign, entry = location.partition("#")
    return path, (entry if hash_sign and entry else None)


def _read_archive(data: bytes, entry: Optional[str]) -> Optional[str]:
    with zipfile.ZipFile(io.BytesIO(data)) as archive:
        names = [name for name in archive.namelist() if not name.endswith("/")]
        if not names:
            return None
        name = entry if entry is not None else names[0]
        if name not in names:
            LOGGER.warning("archive entry %s not found", name)
            return None
        return archive.read(name).decode("utf-8-sig")


def _decode(path: str, entry: Optional[str], data: bytes) -> Optional[str]:
    if path.lower().endswith(".zip"):
        return _read_archive(data, entry)
    return data.decode("utf-8-sig")


class SourceFetcher:
    def __init__(
        self,
        transport: Optional[Transport] = None,
        max_retries: int = 2,
        timeout_seconds: float = 30.0,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._transport = transport or requests_transport
        self._max_retries = max_retries
        self._timeout_seconds = timeout_seconds
        self._sleep = sleep

    def fetch(self, descriptor: SourceDescriptor) -> Optional[str]:
        path, entry = _split_entry(descriptor.location)
        try:
            if descriptor.transport is TransportMedium.LOCAL_FILE:
                data = self._read_local(path)
            else:
                data = self._request(path)
            if data is None:
                return None
            return _decode(path, entry, data)
        except (OSError, zipfile.BadZipFile, UnicodeDecodeError) as error:
            LOGGER.warning("failed to read %s: %s", descriptor.location, error)
            return None

    def _read_local(self, path: str) -> Optional[bytes]:
        file_path = Path(path)
        if not file_path.is_file():
            LOGGER.debug("no source file at %s", path)
            return None
        return file_path.read_bytes()

    def _request(self, url: str) -> Optional[bytes]:
        attempt = 0
        while True:
            try:
                response = self._transport(url, self._timeout_seconds)
            except (requests.RequestException, OSError) as error:
                if attempt >= self._max_retries:
                    LOGGER.warning("request to %s failed: %s", url, error)
                    return None
                attempt += 1
                self._sleep(float(attempt))
                continue

            if response.status_code == 200:
                return response.body

            if response.status_code in RETRYABLE_STATUS_CODES and attempt < self._max_retries:
                attempt += 1
                self._sleep(float(attempt))
                continue

            LOGGER.warning("request to %s failed with status %s", url, response.status_code)
            return None

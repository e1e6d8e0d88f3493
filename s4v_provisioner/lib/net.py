from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol

import requests

from ..errors import NetworkError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 1024 * 256


class Downloader(Protocol):
    def fetch(self, url: str, dest: Path) -> Path:
        ...


class RequestsDownloader:
    """HTTP(S) GET into a local file. Redirects (e.g. releases/latest) are followed."""

    def __init__(self, *, timeout_s: float = 60.0, session: requests.Session | None = None):
        self.timeout_s = timeout_s
        self.session = session or requests.Session()

    def fetch(self, url: str, dest: Path) -> Path:
        logger.info("Downloading %s -> %s", url, dest)
        dest.parent.mkdir(parents=True, exist_ok=True)
        try:
            with self.session.get(url, stream=True, timeout=self.timeout_s, allow_redirects=True) as r:
                r.raise_for_status()
                with dest.open("wb") as fh:
                    for chunk in r.iter_content(chunk_size=CHUNK_SIZE):
                        if chunk:
                            fh.write(chunk)
        except requests.RequestException as e:
            dest.unlink(missing_ok=True)
            raise NetworkError(f"Download failed for {url}: {e}") from e
        except OSError as e:
            dest.unlink(missing_ok=True)
            raise NetworkError(f"Could not write {dest}: {e}") from e

        logger.info("Download complete (%d bytes)", dest.stat().st_size)
        return dest

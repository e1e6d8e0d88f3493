from __future__ import annotations

import os
import platform
import socket
from pathlib import Path
from typing import Iterable, List, Optional, Protocol

from .command import missing_commands


class HostProbe(Protocol):
    def effective_uid(self) -> int:
        ...

    def read_text(self, path: str) -> Optional[str]:
        ...

    def machine(self) -> str:
        ...

    def missing_commands(self, names: Iterable[str]) -> List[str]:
        ...

    def hostname(self) -> str:
        ...


class LocalHost:
    def effective_uid(self) -> int:
        return os.geteuid()

    def read_text(self, path: str) -> Optional[str]:
        try:
            return Path(path).read_text(encoding="utf-8", errors="ignore")
        except OSError:
            return None

    def machine(self) -> str:
        return platform.machine()

    def missing_commands(self, names: Iterable[str]) -> List[str]:
        return missing_commands(names)

    def hostname(self) -> str:
        return socket.gethostname().split(".")[0]

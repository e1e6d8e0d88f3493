from __future__ import annotations

import logging
from typing import Protocol

from .command import run_cmd

logger = logging.getLogger(__name__)


class ServiceController(Protocol):
    def daemon_reload(self) -> None:
        ...

    def enable(self, unit: str) -> None:
        ...

    def start(self, unit: str) -> None:
        ...

    def restart(self, unit: str) -> None:
        ...

    def is_active(self, unit: str) -> bool:
        ...

    def reboot(self) -> None:
        ...


class SystemctlController:
    def daemon_reload(self) -> None:
        run_cmd(["systemctl", "daemon-reload"])

    def enable(self, unit: str) -> None:
        run_cmd(["systemctl", "enable", unit])

    def start(self, unit: str) -> None:
        run_cmd(["systemctl", "start", unit])

    def restart(self, unit: str) -> None:
        run_cmd(["systemctl", "restart", unit])

    def is_active(self, unit: str) -> bool:
        r = run_cmd(["systemctl", "is-active", "--quiet", unit], check=False)
        return r.returncode == 0

    def reboot(self) -> None:
        run_cmd(["sync"])
        run_cmd(["reboot"])

from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from dataclasses import dataclass
from typing import Iterable, List, Mapping, Sequence

from ..errors import CommandError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CmdResult:
    argv: list[str]
    returncode: int
    stdout: str
    stderr: str


def fmt_argv(argv: Sequence[str]) -> str:
    return " ".join(shlex.quote(a) for a in argv)


def run_cmd(
    argv: Sequence[str],
    *,
    check: bool = True,
    env: Mapping[str, str] | None = None,
    cwd: str | None = None,
    capture: bool = True,
) -> CmdResult:
    """Run a command with consistent logging.

    - Always logs the command.
    - capture=False streams output to the terminal (apt progress, openssl).
    - check=True raises CommandError on a nonzero exit.
    """

    argv_list = list(argv)
    logger.info("CMD %s", fmt_argv(argv_list))

    p = subprocess.run(
        argv_list,
        text=True,
        stdout=subprocess.PIPE if capture else None,
        stderr=subprocess.PIPE if capture else None,
        cwd=cwd,
        env=dict(os.environ, **(env or {})),
    )

    stdout = p.stdout or ""
    stderr = p.stderr or ""
    if stdout:
        logger.debug("STDOUT %s", stdout.strip())
    if stderr:
        logger.debug("STDERR %s", stderr.strip())

    result = CmdResult(argv=argv_list, returncode=p.returncode, stdout=stdout, stderr=stderr)
    if check and p.returncode != 0:
        raise CommandError(f"Command failed ({p.returncode}): {fmt_argv(argv_list)}\n{stderr}", result)

    return result


def missing_commands(names: Iterable[str]) -> List[str]:
    """Return every name that does not resolve on PATH, in input order."""
    return [n for n in names if shutil.which(n) is None]

from __future__ import annotations

from typing import Any, Dict, Optional, Sequence


class ProvisionError(RuntimeError):
    """Fatal provisioning failure. The run stops and exits with status 1.

    When raised out of a pipeline run, step is the id of the step that failed
    and state is the run state up to that point.
    """

    step: Optional[str] = None
    state: Optional[Dict[str, Any]] = None


class PrivilegeError(ProvisionError):
    pass


class PlatformError(ProvisionError):
    pass


class MissingDependencyError(ProvisionError):
    def __init__(self, missing: Sequence[str]):
        self.missing = list(missing)
        super().__init__(
            "Required commands not found: "
            + ", ".join(self.missing)
            + ". Install them (e.g. 'apt install unzip tar coreutils') and try again."
        )


class UserAborted(ProvisionError):
    pass


class NetworkError(ProvisionError):
    pass


class ArchiveError(ProvisionError):
    pass


class ArtifactNotFoundError(ProvisionError):
    pass


class ConfigNotFoundError(ProvisionError):
    pass


class CommandError(ProvisionError):
    def __init__(self, message: str, result):
        super().__init__(message)
        self.result = result

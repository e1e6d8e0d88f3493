from __future__ import annotations

import logging
from typing import Any, Dict

logger = logging.getLogger(__name__)


def new_state() -> Dict[str, Any]:
    """Fresh per-run state. Nothing here outlives the process."""

    return ensure_defaults({})


def ensure_defaults(state: Dict[str, Any]) -> Dict[str, Any]:
    exe = state.setdefault("execution", {})
    exe.setdefault("current_step", None)
    exe.setdefault("ran_steps", [])
    exe.setdefault("warnings", [])
    exe.setdefault("decisions", {})
    exe.setdefault("paths", {})
    return state


def add_warning(state: Dict[str, Any], message: str) -> None:
    logger.warning(message)
    state.setdefault("execution", {}).setdefault("warnings", []).append(message)


def record_decision(state: Dict[str, Any], key: str, value: Any) -> None:
    state.setdefault("execution", {}).setdefault("decisions", {})[key] = value


def record_path(state: Dict[str, Any], key: str, value: Any) -> None:
    state.setdefault("execution", {}).setdefault("paths", {})[key] = str(value)


def get_path(state: Dict[str, Any], key: str) -> str | None:
    return ((state.get("execution") or {}).get("paths") or {}).get(key)


def mark_step_ran(state: Dict[str, Any], step_id: str) -> None:
    ran = state.setdefault("execution", {}).setdefault("ran_steps", [])
    if step_id not in ran:
        ran.append(step_id)

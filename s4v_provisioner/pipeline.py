from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Protocol, Sequence

from .context import ProvisionCtx
from .state import mark_step_ran

logger = logging.getLogger(__name__)


class Step(Protocol):
    """A single idempotent step."""

    step_id: str
    title: str

    def run(self, ctx: ProvisionCtx, state: Dict[str, Any]) -> Dict[str, Any]:
        ...


@dataclass(frozen=True)
class PipelineResult:
    state: Dict[str, Any]
    ran_steps: List[str]


def run_pipeline(
    *,
    ctx: ProvisionCtx,
    state: Dict[str, Any],
    steps: Sequence[Step],
) -> PipelineResult:
    """Run steps strictly in order. The first exception stops the run."""

    ran: List[str] = []

    for step in steps:
        state.setdefault("execution", {})["current_step"] = step.step_id
        logger.info("[STEP] %s (%s)", step.title, step.step_id)
        state = step.run(ctx, state)
        mark_step_ran(state, step.step_id)
        ran.append(step.step_id)

    state.setdefault("execution", {})["current_step"] = None
    return PipelineResult(state=state, ran_steps=ran)

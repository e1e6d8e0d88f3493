from __future__ import annotations

import enum
import logging
import sys
from typing import Callable, Optional, Protocol, TextIO

from ..errors import UserAborted

logger = logging.getLogger(__name__)


class Answer(enum.Enum):
    CONFIRMED = "confirmed"
    DECLINED = "declined"
    INVALID = "invalid"


def parse_answer(text: str) -> Answer:
    """Map a raw reply to an Answer. Only y/Y/n/N are valid; anything else re-prompts."""
    t = text.strip()
    if t in {"y", "Y"}:
        return Answer.CONFIRMED
    if t in {"n", "N"}:
        return Answer.DECLINED
    return Answer.INVALID


class Confirmer(Protocol):
    def confirm(self, question: str) -> bool:
        ...


class TerminalConfirmer:
    """Ask yes/no on the terminal, re-prompting on anything else.

    max_attempts=None re-prompts forever; otherwise exhausting the attempts,
    or reaching end of input, raises UserAborted.
    """

    def __init__(
        self,
        *,
        read: Callable[[str], str] = input,
        out: TextIO | None = None,
        max_attempts: Optional[int] = None,
    ):
        self.read = read
        self.out = out or sys.stdout
        self.max_attempts = max_attempts

    def confirm(self, question: str) -> bool:
        attempts = 0
        while True:
            try:
                reply = self.read(f"{question} (y/n): ")
            except EOFError as e:
                raise UserAborted(f"No answer to '{question}' (end of input)") from e

            answer = parse_answer(reply)
            if answer is Answer.CONFIRMED:
                logger.info("Confirmed: %s", question)
                return True
            if answer is Answer.DECLINED:
                logger.info("Declined: %s", question)
                return False

            attempts += 1
            if self.max_attempts is not None and attempts >= self.max_attempts:
                raise UserAborted(f"No valid answer to '{question}' after {attempts} attempts")
            print("Please answer yes (y) or no (n).", file=self.out)


class AssumeYesConfirmer:
    def confirm(self, question: str) -> bool:
        logger.info("Assuming yes: %s", question)
        return True


def require(confirmer: Confirmer, question: str, abort_message: str) -> None:
    """Ask, and abort the whole run on a decline."""
    if not confirmer.confirm(question):
        raise UserAborted(abort_message)

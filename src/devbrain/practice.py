"""Practice loop: generate a challenge, collect an answer, show the verdict.

States::

    idle -> loading_challenge -> active -> evaluating -> result
                 |                  ^          |          |
                 v                  +----------+          |
                idle            (evaluation failed)       |
                 ^                                        |
                 +---- loading_challenge <--- retry ------+

The current state doubles as the in-flight guard: an operation that is not
allowed in the current state raises ``PracticeStateError``.
"""

import logging
from enum import Enum
from typing import Optional, Protocol

from .entries.schema import EvaluationResult, PracticeChallenge

logger = logging.getLogger(__name__)


class PracticeState(str, Enum):
    IDLE = "idle"
    LOADING_CHALLENGE = "loading_challenge"
    ACTIVE = "active"
    EVALUATING = "evaluating"
    RESULT = "result"


class PracticeStateError(RuntimeError):
    """An operation was requested in a state that does not allow it."""


class PracticeService(Protocol):
    async def generate_challenge(self, context: str) -> PracticeChallenge: ...

    async def evaluate(self, context: str, question: str, answer: str) -> EvaluationResult: ...


class PracticeSession:
    """One practice round bound to a single entry's context."""

    def __init__(self, service: PracticeService, context: str):
        self.service = service
        self.context = context
        self.state = PracticeState.IDLE
        self.challenge: Optional[PracticeChallenge] = None
        self.answer = ""
        self.evaluation: Optional[EvaluationResult] = None
        self.error: Optional[str] = None

    @property
    def answer_editable(self) -> bool:
        return self.state is PracticeState.ACTIVE

    def can_submit(self, answer: Optional[str] = None) -> bool:
        text = self.answer if answer is None else answer
        return self.state is PracticeState.ACTIVE and bool(text.strip())

    def _require(self, *states: PracticeState) -> None:
        if self.state not in states:
            allowed = ", ".join(s.value for s in states)
            raise PracticeStateError(f"Cannot do that while {self.state.value} (needs {allowed})")

    async def start(self) -> PracticeState:
        """Request a new challenge for the entry."""
        self._require(PracticeState.IDLE, PracticeState.RESULT)
        self.challenge = None
        self.answer = ""
        self.evaluation = None
        self.error = None
        self.state = PracticeState.LOADING_CHALLENGE

        try:
            challenge = await self.service.generate_challenge(self.context)
        except Exception as e:
            logger.warning(f"[PRACTICE] Challenge generation failed: {type(e).__name__}: {e}")
            self.error = "Could not generate a challenge. Try again."
            self.state = PracticeState.IDLE
            return self.state

        self.challenge = challenge
        self.state = PracticeState.ACTIVE
        logger.info(f"[PRACTICE] Challenge ready ({challenge.context_type})")
        return self.state

    async def submit(self, answer: str) -> PracticeState:
        """Send the answer for evaluation. Blank answers are ignored."""
        self._require(PracticeState.ACTIVE)
        if not answer.strip():
            logger.debug("[PRACTICE] Ignoring blank answer")
            return self.state

        self.answer = answer
        self.error = None
        self.state = PracticeState.EVALUATING

        try:
            evaluation = await self.service.evaluate(self.context, self.challenge.question, answer)
        except Exception as e:
            logger.warning(f"[PRACTICE] Evaluation failed: {type(e).__name__}: {e}")
            self.error = "Could not evaluate the answer. Try submitting again."
            self.state = PracticeState.ACTIVE
            return self.state

        self.evaluation = evaluation
        self.state = PracticeState.RESULT
        logger.info(f"[PRACTICE] Evaluated: correct={evaluation.is_correct} score={evaluation.score}")
        return self.state

    async def retry(self) -> PracticeState:
        """Drop the finished round and start a new one."""
        self._require(PracticeState.RESULT)
        return await self.start()

"""Client-side strategy workflow as an explicit finite-state machine.

    idle -> encrypting -> submitting -> computing -> completed

Each stage waits for its call to finish before the next starts. Any failure
sends the machine back to idle; there is no partial resume or retry.
"""
import enum
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from fhevault.services.codec import KeyPair, classify, decrypt_score, encrypt_strategy, generate_keypair
from fhevault.services.validation import validate_strategy_input

logger = logging.getLogger(__name__)


class WorkflowState(str, enum.Enum):
    IDLE = 'idle'
    ENCRYPTING = 'encrypting'
    SUBMITTING = 'submitting'
    COMPUTING = 'computing'
    COMPLETED = 'completed'


NEXT_STATE = {
    WorkflowState.IDLE: WorkflowState.ENCRYPTING,
    WorkflowState.ENCRYPTING: WorkflowState.SUBMITTING,
    WorkflowState.SUBMITTING: WorkflowState.COMPUTING,
    WorkflowState.COMPUTING: WorkflowState.COMPLETED,
}


class InvalidTransition(Exception):
    pass


class WorkflowError(Exception):
    """Raised after a stage failure; the message is a short user-facing notice."""

    def __init__(self, notice, stage):
        super().__init__(notice)
        self.notice = notice
        self.stage = stage


@dataclass(frozen=True)
class WorkflowResult:
    strategy_id: str
    hash: str
    encrypted_score: str


@dataclass(frozen=True)
class ScoreReport:
    score: int
    percentile: int
    recommendation: str
    category: str


NOTICES = {
    WorkflowState.IDLE: 'Invalid strategy parameters',
    WorkflowState.ENCRYPTING: 'Encryption failed',
    WorkflowState.SUBMITTING: 'Submission failed',
    WorkflowState.COMPUTING: 'Computation failed',
}


class StrategyWorkflow:
    def __init__(self, api, keypair: Optional[KeyPair] = None,
                 on_change: Optional[Callable[[WorkflowState], None]] = None):
        self.api = api
        self.keypair = keypair or generate_keypair()
        self.on_change = on_change
        self.state = WorkflowState.IDLE
        self.result: Optional[WorkflowResult] = None

    def _enter(self, state: WorkflowState) -> None:
        self.state = state
        if self.on_change:
            self.on_change(state)

    def advance(self) -> WorkflowState:
        nxt = NEXT_STATE.get(self.state)
        if nxt is None:
            raise InvalidTransition(f"No transition out of {self.state.value}")
        self._enter(nxt)
        return nxt

    def reset(self) -> None:
        self.result = None
        if self.state is not WorkflowState.IDLE:
            self._enter(WorkflowState.IDLE)

    def run(self, risk_level: int, allocation: int, timeframe: int) -> WorkflowResult:
        if self.state is not WorkflowState.IDLE:
            self.reset()
        errors = validate_strategy_input({
            'riskLevel': risk_level, 'allocation': allocation, 'timeframe': timeframe,
        })
        if errors:
            raise WorkflowError(NOTICES[WorkflowState.IDLE], WorkflowState.IDLE)
        stage = self.state
        try:
            stage = self.advance()
            encrypted = encrypt_strategy(risk_level, allocation, timeframe, self.keypair.public_key)
            stage = self.advance()
            strategy_id = self.api.submit(risk_level, allocation, timeframe,
                                          encrypted.encrypted_data, encrypted.hash)
            stage = self.advance()
            encrypted_score = self.api.compute(strategy_id)
            self.advance()
        except Exception as exc:
            logger.warning("Workflow failed while %s: %s", stage.value, exc)
            self.reset()
            raise WorkflowError(NOTICES[stage], stage) from exc
        self.result = WorkflowResult(strategy_id=strategy_id, hash=encrypted.hash,
                                     encrypted_score=encrypted_score)
        return self.result

    def decrypt(self) -> ScoreReport:
        if self.state is not WorkflowState.COMPLETED or self.result is None:
            raise InvalidTransition('Nothing to decrypt until the workflow completes')
        score = decrypt_score(self.result.encrypted_score, self.keypair.private_key)
        return ScoreReport(score=score, **classify(score))

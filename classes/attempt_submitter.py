import logging
import threading
import time
from collections import namedtuple
from datetime import datetime
from enum import Enum

from classes.admission import AdmissionController
from classes.errors import AdmissionDenied, NotAuthenticated, QuizEngineError
from classes.scoring import score

logger = logging.getLogger(__name__)


class SubmitterState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    DONE = "done"
    FAILED = "failed"


class SubmissionOutcome(str, Enum):
    SUBMITTED = "submitted"
    LIMIT_REACHED = "limit_reached"
    IGNORED = "ignored"
    FAILED = "failed"


SubmissionResult = namedtuple("SubmissionResult", ["outcome", "attempt", "error"])


class AttemptSubmitter:
    """Writes a finished attempt at most once.

    IDLE -> SUBMITTING -> DONE, or SUBMITTING -> FAILED, from which a retry
    re-enters SUBMITTING and re-runs admission. Requests that arrive while a
    submission is in flight, or after DONE, are ignored.
    """

    def __init__(self, store, quiz, questions, challenger_id, challenger_email=None,
                 started_at=None, clock=time.monotonic):
        self.store = store
        self.quiz = quiz
        self.questions = questions
        self.challenger_id = challenger_id
        self.challenger_email = challenger_email
        self.clock = clock
        self.started_at = clock() if started_at is None else started_at
        self.admission = AdmissionController(store)

        self.state = SubmitterState.IDLE
        self.result = None
        self._lock = threading.Lock()

    def elapsed_seconds(self):
        return int(max(0.0, self.clock() - self.started_at) + 0.5)

    def submit(self, answers, source="manual"):
        if self.challenger_id is None:
            raise NotAuthenticated()

        if not self._lock.acquire(blocking=False):
            logger.debug("Ignoring %s submit for quiz %s: submission in flight", source, self.quiz.id)
            return SubmissionResult(SubmissionOutcome.IGNORED, None, None)

        try:
            if self.state in (SubmitterState.SUBMITTING, SubmitterState.DONE):
                return SubmissionResult(SubmissionOutcome.IGNORED, None, None)

            self.state = SubmitterState.SUBMITTING
            self.result = self._submit(answers, source)
            return self.result
        finally:
            self._lock.release()

    def _submit(self, answers, source):
        try:
            decision = self.admission.check(self.quiz.id, self.challenger_id)
        except AdmissionDenied as e:
            self.state = SubmitterState.DONE
            return SubmissionResult(SubmissionOutcome.LIMIT_REACHED, None, e)
        except QuizEngineError as e:
            logger.error("Admission check failed for quiz %s: %s", self.quiz.id, e.message)
            self.state = SubmitterState.FAILED
            return SubmissionResult(SubmissionOutcome.FAILED, None, e)

        result = score(self.questions, answers, total_points=self.quiz.total_points)
        attempt_data = {
            "quiz_id": self.quiz.id,
            "user_id": self.challenger_id,
            "user_email": self.challenger_email,
            "answers": dict(answers),
            "score": result.score,
            "total_points": result.total_points,
            "percentage": result.percentage,
            "time_taken": self.elapsed_seconds(),
            "activation_cycle": decision.activation_cycle,
            "completed_at": datetime.utcnow(),
        }

        try:
            attempt = self.store.create_attempt(attempt_data)
        except QuizEngineError as e:
            self.state = SubmitterState.FAILED
            return SubmissionResult(SubmissionOutcome.FAILED, None, e)

        logger.info("Quiz %s submitted (%s) by user %s: %s/%s",
                    self.quiz.id, source, self.challenger_id, result.score, result.total_points)
        self.state = SubmitterState.DONE
        return SubmissionResult(SubmissionOutcome.SUBMITTED, attempt, None)

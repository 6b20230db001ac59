"""One challenger's timed run through a quiz.

A session owns its answers, its countdown and its submitter. Every change goes
through ``dispatch`` as an event and is applied in order under the session
lock, so a timer expiry and a manual submit cannot both reach the store.
"""
import logging
import threading
import time
import uuid
from collections import deque
from enum import Enum

from classes.answer_store import AnswerStore
from classes.attempt_submitter import AttemptSubmitter, SubmissionOutcome, SubmissionResult
from classes.countdown import CountdownTimer, format_time
from classes.errors import NotAuthenticated, NotFound, SessionClosed

logger = logging.getLogger(__name__)


class SessionEvent(str, Enum):
    ANSWER_RECORDED = "answer_recorded"
    TICK = "tick"
    SUBMIT_REQUESTED = "submit_requested"
    WRITE_SUCCEEDED = "write_succeeded"
    WRITE_FAILED = "write_failed"
    CANCELLED = "cancelled"


class SessionState(str, Enum):
    ACTIVE = "active"
    SUBMITTING = "submitting"
    COMPLETED = "completed"
    LIMIT_REACHED = "limit_reached"
    FAILED = "failed"
    CANCELLED = "cancelled"


CLOSED_STATES = (SessionState.COMPLETED, SessionState.LIMIT_REACHED, SessionState.CANCELLED)


def start_session(store, quiz, challenger_id, challenger_email=None, clock=time.monotonic):
    """Load the quiz's questions and start its countdown."""
    if challenger_id is None:
        raise NotAuthenticated()
    if quiz is None:
        raise NotFound("Quiz not found")

    questions = store.load_questions(quiz.id)
    if not questions:
        raise NotFound("Quiz has no questions")

    session = QuizSession(store, quiz, questions, challenger_id,
                          challenger_email=challenger_email, clock=clock)
    logger.info("Session %s started for quiz %s by user %s (%s questions, %ss)",
                session.id, quiz.id, challenger_id, len(questions), session.timer.remaining)
    return session


class QuizSession:

    def __init__(self, store, quiz, questions, challenger_id, challenger_email=None,
                 clock=time.monotonic):
        if challenger_id is None:
            raise NotAuthenticated()
        self.id = uuid.uuid4().hex
        self.quiz = quiz
        self.questions = list(questions)
        self.challenger_id = challenger_id
        self.clock = clock
        self.started_at = clock()

        self.answers = AnswerStore(self.questions)
        self.timer = CountdownTimer((quiz.duration_minutes or 0) * 60, self._on_timer_expired)
        self.submitter = AttemptSubmitter(store, quiz, self.questions, challenger_id,
                                          challenger_email=challenger_email,
                                          started_at=self.started_at, clock=clock)

        self.state = SessionState.ACTIVE
        self.attempt = None
        self.error = None
        self.last_result = None
        self._ticks_applied = 0
        self._events = deque()
        self._draining = False
        self._mutex = threading.RLock()

    @property
    def closed(self):
        return self.state in CLOSED_STATES

    # Event queue

    def dispatch(self, event, **payload):
        with self._mutex:
            self._events.append((event, payload))
            if self._draining:
                return
            self._draining = True
            try:
                while self._events:
                    queued, data = self._events.popleft()
                    self._handle(queued, data)
            finally:
                self._draining = False

    def _handle(self, event, data):
        handler = {
            SessionEvent.ANSWER_RECORDED: self._on_answer_recorded,
            SessionEvent.TICK: self._on_tick,
            SessionEvent.SUBMIT_REQUESTED: self._on_submit_requested,
            SessionEvent.WRITE_SUCCEEDED: self._on_write_succeeded,
            SessionEvent.WRITE_FAILED: self._on_write_failed,
            SessionEvent.CANCELLED: self._on_cancelled,
        }[event]
        handler(**data)

    def _on_answer_recorded(self, question_id, value):
        if self.closed or self.state is SessionState.SUBMITTING:
            logger.debug("Session %s dropped answer for question %s (%s)", self.id, question_id, self.state.value)
            return
        self.answers.record(question_id, value)

    def _on_tick(self):
        self.timer.tick()

    def _on_timer_expired(self):
        logger.info("Session %s ran out of time, auto-submitting", self.id)
        self._events.append((SessionEvent.SUBMIT_REQUESTED, {"source": "timer"}))

    def _on_submit_requested(self, source):
        if self.state not in (SessionState.ACTIVE, SessionState.FAILED):
            self.last_result = SubmissionResult(SubmissionOutcome.IGNORED, self.attempt, None)
            return

        previous = self.state
        self.state = SessionState.SUBMITTING
        result = self.submitter.submit(self.answers.snapshot(), source=source)
        self.last_result = result

        if result.outcome is SubmissionOutcome.IGNORED:
            self.state = previous
        elif result.outcome is SubmissionOutcome.SUBMITTED:
            self._events.append((SessionEvent.WRITE_SUCCEEDED, {"attempt": result.attempt}))
        elif result.outcome is SubmissionOutcome.FAILED:
            self._events.append((SessionEvent.WRITE_FAILED, {"error": result.error}))
        elif result.outcome is SubmissionOutcome.LIMIT_REACHED:
            self.timer.cancel()
            self.answers.clear()
            self.error = result.error
            self.state = SessionState.LIMIT_REACHED

    def _on_write_succeeded(self, attempt):
        self.timer.cancel()
        self.attempt = attempt
        self.error = None
        self.state = SessionState.COMPLETED

    def _on_write_failed(self, error):
        self.error = error
        self.state = SessionState.FAILED

    def _on_cancelled(self):
        self.timer.cancel()
        self.answers.clear()
        self.state = SessionState.CANCELLED
        logger.info("Session %s cancelled", self.id)

    # Host operations

    def sync(self):
        """Apply one TICK per whole second elapsed since the session started."""
        with self._mutex:
            elapsed = int(max(0.0, self.clock() - self.started_at))
            while self._ticks_applied < elapsed and self.timer.running:
                self._ticks_applied += 1
                self.dispatch(SessionEvent.TICK)

    def record_answer(self, question_id, value):
        with self._mutex:
            self.sync()
            if self.closed:
                raise SessionClosed("This quiz session has ended")
            if self.state is SessionState.SUBMITTING:
                raise SessionClosed("Submission in progress")
            # unknown questions and unsupported values are rejected here
            self.answers.validate(question_id, value)
            self.dispatch(SessionEvent.ANSWER_RECORDED, question_id=question_id, value=value)

    def submit(self):
        with self._mutex:
            self.sync()
            if self.state is SessionState.CANCELLED:
                raise SessionClosed("This quiz session was cancelled")
            self.dispatch(SessionEvent.SUBMIT_REQUESTED, source="manual")
            return self.last_result

    def cancel(self):
        with self._mutex:
            if self.closed:
                return
            self.dispatch(SessionEvent.CANCELLED)

    def time_remaining(self):
        self.sync()
        return self.timer.remaining

    def answered_count(self):
        return self.answers.answered_count()

    def to_dict(self):
        remaining = self.time_remaining()
        outcome = self.last_result.outcome.value if self.last_result else None
        return {
            "session_id": self.id,
            "quiz_id": self.quiz.id,
            "state": self.state.value,
            "outcome": outcome,
            "time_remaining": remaining,
            "time_remaining_display": format_time(remaining),
            "answered_count": self.answered_count(),
            "total_questions": len(self.questions),
            "answers": self.answers.snapshot(),
            "attempt_id": self.attempt.id if self.attempt is not None else None,
            "error": self.error.to_dict() if self.error is not None else None,
        }

import pytest

from classes.attempt_submitter import SubmissionOutcome
from classes.errors import InvalidAnswer, NotAuthenticated, NotFound, SessionClosed
from classes.quiz_session import QuizSession, SessionState, start_session
from classes.session_registry import SessionRegistry
from conftest import make_question, make_quiz


@pytest.fixture
def session(store, sample_quiz, clock):
    return start_session(store, sample_quiz, 7, clock=clock)


def test_start_loads_questions_and_seeds_timer(session):
    assert len(session.questions) == 2
    assert session.time_remaining() == 600
    assert session.answered_count() == 0
    assert session.state is SessionState.ACTIVE


def test_start_requires_questions_and_user(store, clock):
    empty = store.add_quiz(make_quiz(5), [])
    with pytest.raises(NotFound):
        start_session(store, empty, 7, clock=clock)
    with pytest.raises(NotFound):
        start_session(store, None, 7, clock=clock)
    with pytest.raises(NotAuthenticated):
        start_session(store, empty, None, clock=clock)


def test_time_remaining_follows_the_clock(session, clock):
    clock.advance(61.5)
    assert session.time_remaining() == 539


def test_record_answer_updates_progress(session):
    session.record_answer(1, 1)
    session.record_answer("2", "true")
    assert session.answered_count() == 2

    session.record_answer(2, None)
    assert session.answered_count() == 1


def test_blank_answers_do_not_count_as_answered(store, clock):
    questions = [make_question(1, "identification", correct_answer="x")]
    quiz = store.add_quiz(make_quiz(3, questions=questions), questions)
    session = start_session(store, quiz, 7, clock=clock)
    session.record_answer(1, "   ")
    assert session.answered_count() == 0


def test_record_answer_rejects_unknown_questions_and_values(session):
    with pytest.raises(NotFound):
        session.record_answer(99, 1)
    with pytest.raises(InvalidAnswer):
        session.record_answer(1, [1, 2])


def test_manual_submit_writes_once(store, session):
    session.record_answer(1, 1)
    session.record_answer(2, "true")

    result = session.submit()
    assert result.outcome is SubmissionOutcome.SUBMITTED
    assert session.state is SessionState.COMPLETED
    assert session.attempt.score == 2
    assert not session.timer.running

    assert session.submit().outcome is SubmissionOutcome.IGNORED
    assert len(store.attempts) == 1

    with pytest.raises(SessionClosed):
        session.record_answer(1, 0)


def test_timer_expiry_auto_submits_exactly_once(store, clock):
    questions = [make_question(1, "truefalse", correct_answer=True)]
    quiz = store.add_quiz(make_quiz(4, duration_minutes=0, questions=questions), questions)
    session = start_session(store, quiz, 7, clock=clock)
    session.record_answer(1, True)

    clock.advance(5)
    # the manual click arrives after the timer has already fired
    result = session.submit()

    assert result.outcome is SubmissionOutcome.IGNORED
    assert session.state is SessionState.COMPLETED
    assert len(store.attempts) == 1
    assert store.attempts[0].score == 1


def test_timer_expiry_without_manual_submit(store, sample_quiz, clock):
    session = start_session(store, sample_quiz, 7, clock=clock)
    session.record_answer(1, 1)

    clock.advance(600)
    assert session.time_remaining() == 0
    assert session.state is SessionState.COMPLETED
    assert store.attempts[0].answers == {"1": 1}
    assert store.attempts[0].time_taken == 600

    clock.advance(30)
    session.sync()
    assert len(store.attempts) == 1


def test_limit_reached_discards_session(store, sample_quiz, session):
    sample_quiz.max_attempts = 1
    store.create_attempt({"quiz_id": sample_quiz.id, "user_id": 7, "activation_cycle": 0})
    session.record_answer(1, 1)

    result = session.submit()

    assert result.outcome is SubmissionOutcome.LIMIT_REACHED
    assert session.state is SessionState.LIMIT_REACHED
    assert session.answers.snapshot() == {}
    assert len(store.attempts) == 1


def test_failed_write_then_retry(store, session):
    store.fail_writes = 1
    session.record_answer(1, 1)

    assert session.submit().outcome is SubmissionOutcome.FAILED
    assert session.state is SessionState.FAILED
    assert session.to_dict()["error"] == {"error": "Error submitting quiz"}

    # answers can still change before retrying
    session.record_answer(2, False)
    assert session.submit().outcome is SubmissionOutcome.SUBMITTED
    assert store.attempts[0].answers == {"1": 1, "2": False}


def test_cancel_stops_timer_and_never_writes(store, session, clock):
    session.record_answer(1, 1)
    session.cancel()

    assert session.state is SessionState.CANCELLED
    assert session.answers.snapshot() == {}
    clock.advance(10_000)
    session.sync()
    assert store.attempts == []
    with pytest.raises(SessionClosed):
        session.submit()


def test_sessions_do_not_share_state(store, sample_quiz, clock):
    first = start_session(store, sample_quiz, 7, clock=clock)
    second = start_session(store, sample_quiz, 8, clock=clock)
    first.record_answer(1, 1)
    assert second.answered_count() == 0
    assert first.id != second.id


def test_snapshot_has_no_correct_answers(session):
    snapshot = session.to_dict()
    assert snapshot["time_remaining_display"] == "10:00"
    assert snapshot["total_questions"] == 2
    assert "correct_answer" not in str(snapshot)


def test_session_requires_user(store, sample_quiz):
    with pytest.raises(NotAuthenticated):
        QuizSession(store, sample_quiz, [], None)


def test_sweep_submits_abandoned_sessions(store, sample_quiz, clock):
    longer = [make_question(31, "multiple", correct_answer=0, options=["A", "B"])]
    long_quiz = store.add_quiz(make_quiz(3, duration_minutes=20, questions=longer), longer)

    registry = SessionRegistry()
    abandoned = registry.add(start_session(store, sample_quiz, 7, clock=clock))
    running = registry.add(start_session(store, long_quiz, 8, clock=clock))
    abandoned.record_answer(1, 1)

    # nobody touches either session until long after the short one expired
    clock.advance(15 * 60)
    evicted = registry.sweep()

    assert evicted == [abandoned]
    assert abandoned.state is SessionState.COMPLETED
    assert len(store.attempts) == 1
    assert store.attempts[0].answers == {"1": 1}
    assert len(registry) == 1
    assert running.state is SessionState.ACTIVE

    # sweeping again never submits twice
    assert registry.sweep() == []
    assert len(store.attempts) == 1


def test_sweep_keeps_the_requested_session(store, sample_quiz, clock):
    registry = SessionRegistry()
    session = registry.add(start_session(store, sample_quiz, 7, clock=clock))
    clock.advance(10_000)

    assert registry.sweep(keep=session.id) == []
    assert session.closed
    assert registry.get(session.id, 7) is session
    assert len(store.attempts) == 1

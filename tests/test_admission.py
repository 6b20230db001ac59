import pytest

from classes.admission import AdmissionController
from classes.errors import AdmissionDenied, NotConfigured
from conftest import make_question, make_quiz


@pytest.fixture
def limited_quiz(store):
    questions = [make_question(21, "truefalse", correct_answer=True)]
    return store.add_quiz(make_quiz(2, questions=questions, max_attempts=2), questions)


def record(store, quiz, user_id, cycle):
    store.create_attempt({"quiz_id": quiz.id, "user_id": user_id, "activation_cycle": cycle})


def test_unlimited_when_max_attempts_missing_or_zero(store, sample_quiz):
    controller = AdmissionController(store)
    for _ in range(5):
        record(store, sample_quiz, 7, 0)
    assert controller.check(sample_quiz.id, 7).activation_cycle == 0

    sample_quiz.max_attempts = 0
    assert controller.check(sample_quiz.id, 7).max_attempts == 0


def test_refuses_once_limit_reached_in_current_cycle(store, limited_quiz):
    controller = AdmissionController(store)
    record(store, limited_quiz, 7, 0)
    assert controller.check(limited_quiz.id, 7).attempts_used == 1

    record(store, limited_quiz, 7, 0)
    with pytest.raises(AdmissionDenied) as excinfo:
        controller.check(limited_quiz.id, 7)
    assert excinfo.value.max_attempts == 2
    assert excinfo.value.attempts_used == 2
    assert excinfo.value.status_code == 403


def test_other_users_attempts_do_not_count(store, limited_quiz):
    record(store, limited_quiz, 8, 0)
    record(store, limited_quiz, 8, 0)
    assert AdmissionController(store).check(limited_quiz.id, 7).attempts_used == 0


def test_reactivation_opens_a_new_window(store, limited_quiz):
    controller = AdmissionController(store)
    record(store, limited_quiz, 7, 0)
    record(store, limited_quiz, 7, 0)

    store.reactivate_quiz(limited_quiz.id)

    decision = controller.check(limited_quiz.id, 7)
    assert decision.activation_cycle == 1
    assert decision.attempts_used == 0


def test_store_outage_fails_closed(store, limited_quiz):
    store.unavailable = True
    with pytest.raises(NotConfigured):
        AdmissionController(store).check(limited_quiz.id, 7)


def test_eligibility_reports_attempts_left(store, limited_quiz, sample_quiz):
    controller = AdmissionController(store)
    record(store, limited_quiz, 7, 0)

    eligibility = controller.eligibility(limited_quiz.id, 7)
    assert eligibility["attempts_used"] == 1
    assert eligibility["attempts_left"] == 1
    assert eligibility["can_attempt"] is True

    unlimited = controller.eligibility(sample_quiz.id, 7)
    assert unlimited["attempts_left"] is None
    assert unlimited["can_attempt"] is True


def test_data_store_operations_are_abstract_and_documented():
    from classes.data_store import DataStore

    for name in DataStore.__abstractmethods__:
        assert getattr(DataStore, name).__doc__, name
    assert {"count_attempts", "list_attempts"} <= DataStore.__abstractmethods__

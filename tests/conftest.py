import itertools
from types import SimpleNamespace

import pytest

from app import create_app
from classes.data_store import CycleInfo, DataStore, LoadedAttempt
from classes.errors import NotConfigured, NotFound, StoreWriteFailed
from models import db as _db


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class InMemoryStore(DataStore):
    """DataStore double for engine tests; no database involved."""

    def __init__(self):
        self.quizzes = {}
        self.questions = {}
        self.attempts = []
        self.fail_writes = 0
        self.unavailable = False
        self._ids = itertools.count(1)

    def add_quiz(self, quiz, questions):
        self.quizzes[quiz.id] = quiz
        self.questions[quiz.id] = list(questions)
        return quiz

    def _check(self):
        if self.unavailable:
            raise NotConfigured()

    def load_quiz(self, quiz_id):
        self._check()
        return self.quizzes.get(quiz_id)

    def load_questions(self, quiz_id):
        self._check()
        return list(self.questions.get(quiz_id, []))

    def get_quiz_cycle_info(self, quiz_id):
        self._check()
        quiz = self.quizzes.get(quiz_id)
        if quiz is None:
            raise NotFound("Quiz not found")
        return CycleInfo(quiz.activation_cycle, quiz.max_attempts)

    def count_attempts(self, quiz_id, user_id, activation_cycle):
        self._check()
        return sum(
            1 for a in self.attempts
            if a.quiz_id == quiz_id and a.user_id == user_id and a.activation_cycle == activation_cycle
        )

    def create_attempt(self, attempt_data):
        if self.fail_writes:
            self.fail_writes -= 1
            raise StoreWriteFailed()
        attempt = SimpleNamespace(id=next(self._ids), **attempt_data)
        self.attempts.append(attempt)
        return attempt

    def load_attempt(self, attempt_id):
        self._check()
        for attempt in self.attempts:
            if attempt.id == attempt_id:
                quiz = self.quizzes[attempt.quiz_id]
                return LoadedAttempt(attempt, quiz, self.load_questions(quiz.id))
        raise NotFound("Quiz attempt not found")

    def list_attempts(self, user_id, quiz_id=None):
        return [
            a for a in reversed(self.attempts)
            if a.user_id == user_id and (quiz_id is None or a.quiz_id == quiz_id)
        ]

    def reactivate_quiz(self, quiz_id):
        quiz = self.quizzes[quiz_id]
        quiz.activation_cycle += 1
        quiz.is_active = True
        return quiz


def make_question(id, type="multiple", correct_answer=0, points=1, options=None, question_text=None):
    return SimpleNamespace(
        id=id,
        type=type,
        correct_answer=correct_answer,
        points=points,
        options=options,
        question_text=question_text or f"Question {id}",
    )


def make_quiz(id=1, duration_minutes=10, total_points=None, questions=(), max_attempts=None,
              activation_cycle=0):
    if total_points is None:
        total_points = sum(q.points for q in questions)
    return SimpleNamespace(
        id=id,
        title=f"Quiz {id}",
        duration_minutes=duration_minutes,
        total_points=total_points,
        max_attempts=max_attempts,
        activation_cycle=activation_cycle,
        is_active=True,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return InMemoryStore()


@pytest.fixture
def sample_quiz(store):
    questions = [
        make_question(1, "multiple", correct_answer=1, options=["A", "B"]),
        make_question(2, "truefalse", correct_answer=True),
    ]
    return store.add_quiz(make_quiz(1, questions=questions), questions)


@pytest.fixture
def app(clock):
    app = create_app("testing")
    app.extensions["quiz_clock"] = clock
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db

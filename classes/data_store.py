"""Repository the engine reads and writes quiz data through.

``DataStore`` is the narrow interface the session, admission controller and
review code depend on. ``SqlDataStore`` backs it with Flask-SQLAlchemy.
"""
import abc
import logging
from collections import namedtuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError

from classes.errors import NotConfigured, NotFound, StoreWriteFailed
from models import db
from models.questions import Question
from models.quiz_attempts import QuizAttempt
from models.quizzes import Quiz

logger = logging.getLogger(__name__)

CycleInfo = namedtuple("CycleInfo", ["activation_cycle", "max_attempts"])
LoadedAttempt = namedtuple("LoadedAttempt", ["attempt", "quiz", "questions"])


class DataStore(abc.ABC):

    @abc.abstractmethod
    def load_quiz(self, quiz_id):
        """Quiz or None."""

    @abc.abstractmethod
    def load_questions(self, quiz_id):
        """Questions of a quiz in delivery order."""

    @abc.abstractmethod
    def get_quiz_cycle_info(self, quiz_id):
        """Current ``CycleInfo`` of a quiz; raises NotFound if it is gone."""

    @abc.abstractmethod
    def count_attempts(self, quiz_id, user_id, activation_cycle):
        """Attempts a user has made on a quiz within one activation cycle."""

    @abc.abstractmethod
    def create_attempt(self, attempt_data):
        """Persist one attempt; raises StoreWriteFailed, never writes partially."""

    @abc.abstractmethod
    def load_attempt(self, attempt_id):
        """``LoadedAttempt`` or raises NotFound."""

    @abc.abstractmethod
    def list_attempts(self, user_id, quiz_id=None):
        """A user's attempts, newest first, optionally for one quiz."""

    @abc.abstractmethod
    def reactivate_quiz(self, quiz_id):
        """Bump the quiz's activation cycle and mark it active."""


class SqlDataStore(DataStore):

    def __init__(self, session=None):
        self.session = session or db.session

    def _read(self, query):
        try:
            return query()
        except SQLAlchemyError as e:
            logger.error("Quiz data store read failed: %s", e)
            self.session.rollback()
            raise NotConfigured() from e

    def load_quiz(self, quiz_id):
        return self._read(lambda: self.session.get(Quiz, quiz_id))

    def load_questions(self, quiz_id):
        return self._read(
            lambda: Question.query
            .filter_by(quiz_id=quiz_id)
            .order_by(Question.created_at, Question.id)
            .all()
        )

    def get_quiz_cycle_info(self, quiz_id):
        row = self._read(
            lambda: self.session.query(Quiz.activation_cycle, Quiz.max_attempts)
            .filter(Quiz.id == quiz_id)
            .first()
        )
        if row is None:
            raise NotFound("Quiz not found")
        return CycleInfo(row.activation_cycle or 0, row.max_attempts)

    def count_attempts(self, quiz_id, user_id, activation_cycle):
        return self._read(
            lambda: self.session.query(func.count(QuizAttempt.id))
            .filter(
                QuizAttempt.quiz_id == quiz_id,
                QuizAttempt.user_id == user_id,
                QuizAttempt.activation_cycle == activation_cycle,
            )
            .scalar()
        ) or 0

    def create_attempt(self, attempt_data):
        attempt = QuizAttempt(**attempt_data)
        try:
            self.session.add(attempt)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Failed to record attempt for quiz %s: %s", attempt_data.get("quiz_id"), e)
            raise StoreWriteFailed(cause=e) from e

        logger.info("Recorded attempt %s for quiz %s (user %s, cycle %s)",
                    attempt.id, attempt.quiz_id, attempt.user_id, attempt.activation_cycle)
        return attempt

    def load_attempt(self, attempt_id):
        attempt = self._read(lambda: self.session.get(QuizAttempt, attempt_id))
        if not attempt:
            raise NotFound("Quiz attempt not found")
        quiz = self.load_quiz(attempt.quiz_id)
        if not quiz:
            raise NotFound("Quiz not found")
        return LoadedAttempt(attempt, quiz, self.load_questions(quiz.id))

    def list_attempts(self, user_id, quiz_id=None):
        def query():
            q = QuizAttempt.query.filter_by(user_id=user_id)
            if quiz_id is not None:
                q = q.filter_by(quiz_id=quiz_id)
            return q.order_by(QuizAttempt.completed_at.desc(), QuizAttempt.id.desc()).all()

        return self._read(query)

    def reactivate_quiz(self, quiz_id):
        quiz = self.load_quiz(quiz_id)
        if not quiz:
            raise NotFound("Quiz not found")
        quiz.activation_cycle = (quiz.activation_cycle or 0) + 1
        quiz.is_active = True
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error("Failed to reactivate quiz %s: %s", quiz_id, e)
            raise StoreWriteFailed("Failed to reactivate quiz", cause=e) from e
        logger.info("Quiz %s reactivated, now in cycle %s", quiz.id, quiz.activation_cycle)
        return quiz

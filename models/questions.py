from datetime import datetime
from enum import Enum
from models import db


class QuestionType(str, Enum):
    MULTIPLE = "multiple"
    IDENTIFICATION = "identification"
    TRUE_FALSE = "truefalse"
    NUMERIC = "numeric"  # alias of identification

    @classmethod
    def normalize(cls, raw):
        """Map a stored type string onto the tag the comparator dispatches on."""
        try:
            question_type = cls(raw or cls.MULTIPLE.value)
        except ValueError:
            question_type = cls.MULTIPLE
        if question_type is cls.NUMERIC:
            return cls.IDENTIFICATION
        return question_type


class Question(db.Model):
    __tablename__ = "questions"

    id = db.Column(db.Integer, primary_key=True)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id"), nullable=False)
    question_text = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(20), nullable=False, default=QuestionType.MULTIPLE.value)
    options = db.Column(db.JSON, nullable=True)
    # option index, boolean or string/number depending on type
    correct_answer = db.Column(db.JSON, nullable=False)
    points = db.Column(db.Integer, nullable=False, default=1)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    quiz = db.relationship("Quiz", back_populates="questions")

    def to_dict(self, include_answer=False):
        data = {
            "id": self.id,
            "quiz_id": self.quiz_id,
            "question_text": self.question_text,
            "type": self.type,
            "options": self.options or [],
            "points": self.points,
        }
        if include_answer:
            data["correct_answer"] = self.correct_answer
        return data

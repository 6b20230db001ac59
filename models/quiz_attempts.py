from datetime import datetime
from models import db


class QuizAttempt(db.Model):
    __tablename__ = "quiz_attempts"

    id = db.Column(db.Integer, primary_key=True)
    quiz_id = db.Column(db.Integer, db.ForeignKey("quizzes.id"), nullable=False)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    user_email = db.Column(db.String(100), nullable=True)
    answers = db.Column(db.JSON, nullable=False, default=dict)
    score = db.Column(db.Integer, nullable=False, default=0)
    total_points = db.Column(db.Integer, nullable=False, default=0)
    percentage = db.Column(db.Integer, nullable=False, default=0)
    time_taken = db.Column(db.Integer, nullable=False, default=0)
    # cycle in effect when the attempt was submitted, not when it started
    activation_cycle = db.Column(db.Integer, nullable=False, default=0)
    completed_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    quiz = db.relationship("Quiz", backref=db.backref("attempts", lazy=True))
    user = db.relationship("User", backref=db.backref("quiz_attempts", lazy=True))

    __table_args__ = (
        db.Index("ix_quiz_attempts_quiz_user_cycle", "quiz_id", "user_id", "activation_cycle"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "quiz_id": self.quiz_id,
            "user_id": self.user_id,
            "user_email": self.user_email,
            "answers": self.answers or {},
            "score": self.score,
            "total_points": self.total_points,
            "percentage": self.percentage,
            "time_taken": self.time_taken,
            "activation_cycle": self.activation_cycle,
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
        }

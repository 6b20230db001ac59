from datetime import datetime
from models import db


class Quiz(db.Model):
    __tablename__ = "quizzes"

    id = db.Column(db.Integer, primary_key=True)
    title = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=True)
    duration_minutes = db.Column(db.Integer, nullable=False, default=10)
    total_points = db.Column(db.Integer, nullable=False, default=0)
    # bumped every time an admin reactivates the quiz; scopes attempt counting
    activation_cycle = db.Column(db.Integer, nullable=False, default=0)
    max_attempts = db.Column(db.Integer, nullable=True)  # null or <= 0 means unlimited
    visibility = db.Column(db.String(20), nullable=False, default="public")
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow, nullable=False)

    created_by = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=True)
    creator = db.relationship("User", back_populates="quizzes")

    questions = db.relationship(
        "Question",
        back_populates="quiz",
        cascade="all, delete-orphan",
    )

    @property
    def has_attempt_limit(self):
        return self.max_attempts is not None and self.max_attempts > 0

    def __repr__(self):
        return f"<Quiz {self.title}>"

    def to_dict(self):
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "duration_minutes": self.duration_minutes,
            "total_points": self.total_points,
            "activation_cycle": self.activation_cycle,
            "max_attempts": self.max_attempts,
            "visibility": self.visibility,
            "is_active": self.is_active,
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }

from classes.comparator import has_answer
from classes.errors import InvalidAnswer, NotFound

ANSWER_TYPES = (bool, int, float, str)


class AnswerStore:
    """Current answer per question for one session, keyed by string question id."""

    def __init__(self, questions):
        self._questions = {str(question.id): question for question in questions}
        self._answers = {}

    def validate(self, question_id, value):
        if str(question_id) not in self._questions:
            raise NotFound(f"Question {question_id} is not part of this quiz")
        if value is not None and not isinstance(value, ANSWER_TYPES):
            raise InvalidAnswer("Answers must be a number, string or boolean")

    def record(self, question_id, value):
        """Store an answer; None clears it."""
        self.validate(question_id, value)
        key = str(question_id)
        if value is None:
            self._answers.pop(key, None)
        else:
            self._answers[key] = value

    def answered_count(self):
        return sum(
            1 for key, value in self._answers.items()
            if has_answer(self._questions[key], value)
        )

    def snapshot(self):
        return dict(self._answers)

    def clear(self):
        self._answers.clear()

    def __len__(self):
        return len(self._answers)

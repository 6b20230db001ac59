"""Per-question breakdown of a persisted attempt.

Correctness is re-derived with the comparator used at submission, never read
back from anything stored next to the attempt.
"""
from collections import namedtuple

from classes.comparator import coerce_bool, coerce_index, has_answer, is_correct, parse_number, question_type
from classes.countdown import format_time
from classes.scoring import answer_for, calculate_percentage
from models.questions import QuestionType

NOT_ANSWERED = "Not answered"

ReviewItem = namedtuple("ReviewItem", [
    "number", "question_id", "question_text", "type", "points",
    "is_answered", "is_correct", "status", "submitted_display", "correct_display",
])


def letter_grade(percentage):
    if percentage >= 90:
        return "A"
    if percentage >= 80:
        return "B"
    if percentage >= 70:
        return "C"
    if percentage >= 60:
        return "D"
    return "F"


def _format_multiple(question, value):
    index = coerce_index(value)
    if index is None:
        number = parse_number(value)
        return NOT_ANSWERED if number is None else f"Option {number + 1:g}"
    options = question.options or []
    if 0 <= index < len(options) and options[index]:
        return f"Option {index + 1}: {options[index]}"
    return f"Option {index + 1}"


def _format_truefalse(question, value):
    coerced = coerce_bool(value)
    if coerced is None:
        return NOT_ANSWERED
    return "True" if coerced else "False"


def _format_identification(question, value):
    if isinstance(value, bool):
        return "True" if value else "False"
    if isinstance(value, (int, float)):
        return str(value)
    if isinstance(value, str):
        return value.strip() or NOT_ANSWERED
    return NOT_ANSWERED


_FORMATTERS = {
    QuestionType.MULTIPLE: _format_multiple,
    QuestionType.TRUE_FALSE: _format_truefalse,
    QuestionType.IDENTIFICATION: _format_identification,
}


def format_answer(question, value):
    return _FORMATTERS[question_type(question)](question, value)


def status_label(answered, correct):
    if not answered:
        return "Not Answered"
    return "Correct" if correct else "Incorrect"


def review_item(number, question, value):
    answered = has_answer(question, value)
    correct = is_correct(question, value)
    return ReviewItem(
        number=number,
        question_id=question.id,
        question_text=getattr(question, "question_text", ""),
        type=question_type(question).value,
        points=question.points,
        is_answered=answered,
        is_correct=correct,
        status=status_label(answered, correct),
        submitted_display=format_answer(question, value),
        correct_display=format_answer(question, question.correct_answer),
    )


def build_review(attempt, quiz, questions, passing_percentage=70):
    """Rebuild correctness and display text for every question of an attempt."""
    answers = attempt.answers or {}
    items = [
        review_item(number, question, answer_for(answers, question))
        for number, question in enumerate(questions, start=1)
    ]

    recomputed = sum(item.points for item in items if item.is_correct)
    percentage = attempt.percentage
    if percentage is None:
        percentage = calculate_percentage(attempt.score, attempt.total_points)

    return {
        "attempt_id": attempt.id,
        "quiz_id": quiz.id,
        "quiz_title": getattr(quiz, "title", None),
        "score": attempt.score,
        "recomputed_score": recomputed,
        "total_points": attempt.total_points,
        "percentage": percentage,
        "grade": letter_grade(percentage),
        "passed": percentage >= passing_percentage,
        "time_taken": attempt.time_taken,
        "time_taken_display": format_time(attempt.time_taken),
        "activation_cycle": attempt.activation_cycle,
        "correct_count": sum(1 for item in items if item.is_correct),
        "incorrect_count": sum(1 for item in items if item.is_answered and not item.is_correct),
        "unanswered_count": sum(1 for item in items if not item.is_answered),
        "questions": [item._asdict() for item in items],
    }

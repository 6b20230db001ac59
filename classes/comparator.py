"""Type-specific answer comparison.

``is_correct`` and ``has_answer`` are the only place the engine decides whether a
submitted value matches a question. Scoring at submission time and the review
screen both call these functions, so a stored score can always be re-derived
from the stored answers.
"""
import math
import re

from models.questions import QuestionType

NUMERIC_TOLERANCE = 1e-6

# plain ASCII decimals with an optional exponent; no underscores or other digit sets
NUMBER_PATTERN = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")


def _is_number(value):
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def parse_number(value):
    """Return ``value`` as a finite float, or None when it is not numeric."""
    if _is_number(value):
        number = float(value)
    elif isinstance(value, str) and NUMBER_PATTERN.fullmatch(value.strip()):
        number = float(value.strip())
    else:
        return None
    return number if math.isfinite(number) else None


def coerce_bool(value):
    """Coerce a true/false answer; None when the value cannot be read as one."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        return None
    if _is_number(value):
        if value == 1:
            return True
        if value == 0:
            return False
    return None


def coerce_index(value):
    """Option index for multiple choice answers, or None."""
    number = parse_number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def normalize_text(value):
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if _is_number(value):
        number = float(value)
        return str(int(number)) if number.is_integer() else str(value)
    if isinstance(value, str):
        return value.strip().lower()
    return ""


def _has_multiple(question, value):
    # 1.5 is answered, it just cannot match any option
    return parse_number(value) is not None


def _has_truefalse(question, value):
    return coerce_bool(value) is not None


def _has_identification(question, value):
    if isinstance(value, str):
        return value.strip() != ""
    return _is_number(value)


def _correct_multiple(question, value):
    expected = coerce_index(question.correct_answer)
    return expected is not None and coerce_index(value) == expected


def _correct_truefalse(question, value):
    expected = coerce_bool(question.correct_answer)
    return expected is not None and coerce_bool(value) == expected


def _correct_identification(question, value):
    expected_number = parse_number(question.correct_answer)
    provided_number = parse_number(value)
    if expected_number is not None and provided_number is not None:
        return abs(expected_number - provided_number) < NUMERIC_TOLERANCE

    expected = normalize_text(question.correct_answer)
    return expected != "" and normalize_text(value) == expected


_ANSWERED = {
    QuestionType.MULTIPLE: _has_multiple,
    QuestionType.TRUE_FALSE: _has_truefalse,
    QuestionType.IDENTIFICATION: _has_identification,
}

_CORRECT = {
    QuestionType.MULTIPLE: _correct_multiple,
    QuestionType.TRUE_FALSE: _correct_truefalse,
    QuestionType.IDENTIFICATION: _correct_identification,
}


def question_type(question):
    return QuestionType.normalize(question.type)


def has_answer(question, value):
    """True when ``value`` is a usable answer for ``question`` (blank is not wrong)."""
    if value is None:
        return False
    return _ANSWERED[question_type(question)](question, value)


def is_correct(question, value):
    """True when ``value`` matches the question's correct answer."""
    if not has_answer(question, value):
        return False
    return _CORRECT[question_type(question)](question, value)

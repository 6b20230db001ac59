import math
from collections import namedtuple

from classes.comparator import is_correct

ScoreResult = namedtuple("ScoreResult", ["score", "total_points", "percentage"])


def calculate_percentage(score, total_points):
    """Whole-number percentage, halves rounded up; 0 when there are no points."""
    if not total_points or total_points <= 0:
        return 0
    return int(math.floor(score / total_points * 100 + 0.5))


def answer_for(answers, question):
    """Look up a question's answer; stored answer maps are keyed by string id."""
    answers = answers or {}
    if str(question.id) in answers:
        return answers[str(question.id)]
    return answers.get(question.id)


def score(questions, answers, total_points=None):
    """Sum the points of every question the comparator judges correct."""
    earned = 0
    for question in questions:
        if is_correct(question, answer_for(answers, question)):
            earned += question.points

    if total_points is None:
        total_points = sum(question.points for question in questions)

    return ScoreResult(earned, total_points, calculate_percentage(earned, total_points))

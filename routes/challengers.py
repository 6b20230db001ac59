import logging

from flask import Blueprint, jsonify, g, request, current_app

from classes.admission import AdmissionController
from classes.attempt_submitter import SubmissionOutcome
from classes.errors import InvalidAnswer, NotFound, QuizEngineError, SessionClosed
from classes.quiz_session import start_session
from classes.review import build_review
from utils.helpers import engine_error_response, get_clock, get_data_store, get_session_registry
from utils.utils import current_user_id, login_required

logger = logging.getLogger(__name__)

# Challengers' blueprint
challenger_bp = Blueprint("challenger", __name__)


@challenger_bp.errorhandler(QuizEngineError)
def handle_engine_error(error):
    return engine_error_response(error)


@challenger_bp.after_request
def add_cors_headers(response):
    origin = request.headers.get('Origin')
    if origin in current_app.config.get("CORS_ORIGINS", []):
        response.headers['Access-Control-Allow-Origin'] = origin
        response.headers['Access-Control-Allow-Methods'] = 'GET, POST, OPTIONS'
        response.headers['Access-Control-Allow-Headers'] = 'Content-Type, Authorization'
        response.headers['Access-Control-Allow-Credentials'] = 'true'
    return response


def _load_active_quiz(store, quiz_id):
    quiz = store.load_quiz(quiz_id)
    if not quiz or not quiz.is_active:
        raise NotFound("Quiz not found")
    return quiz


# Attempts left in the quiz's current activation cycle
@challenger_bp.route("/quiz/<int:quiz_id>/eligibility", methods=["GET"])
@login_required
def get_eligibility(quiz_id):
    store = get_data_store()
    return jsonify(AdmissionController(store).eligibility(quiz_id, current_user_id())), 200


# Start a Quiz Session
@challenger_bp.route("/quiz/<int:quiz_id>/start", methods=["POST"])
@login_required
def start_quiz(quiz_id):
    """Loads the questions and starts the countdown. No attempt is written yet."""
    store = get_data_store()
    quiz = _load_active_quiz(store, quiz_id)

    session = start_session(
        store, quiz, current_user_id(),
        challenger_email=g.user.get("email"),
        clock=get_clock(),
    )
    get_session_registry().add(session)

    return jsonify({
        "session": session.to_dict(),
        "quiz": quiz.to_dict(),
        "questions": [question.to_dict() for question in session.questions],
        "eligibility": AdmissionController(store).eligibility(quiz.id, current_user_id()),
    }), 201


@challenger_bp.route("/sessions/<session_id>", methods=["GET"])
@login_required
def get_session(session_id):
    registry = get_session_registry()
    session = registry.get(session_id, current_user_id())
    snapshot = session.to_dict()
    if session.closed:
        registry.discard(session.id)
    return jsonify(snapshot), 200


@challenger_bp.route("/sessions/<session_id>/answers", methods=["POST"])
@login_required
def record_answer(session_id):
    data = request.get_json(silent=True) or {}
    if "question_id" not in data:
        raise InvalidAnswer("question_id is required")

    registry = get_session_registry()
    session = registry.get(session_id, current_user_id())
    try:
        session.record_answer(data["question_id"], data.get("value"))
    except SessionClosed:
        # the countdown may have just run out and submitted the attempt
        if session.closed:
            registry.discard(session.id)
        raise

    return jsonify({
        "answered_count": session.answered_count(),
        "total_questions": len(session.questions),
        "time_remaining": session.time_remaining(),
    }), 200


@challenger_bp.route("/sessions/<session_id>/submit", methods=["POST"])
@login_required
def submit_quiz(session_id):
    """Scores and records the attempt, subject to the attempt limit."""
    registry = get_session_registry()
    session = registry.get(session_id, current_user_id())
    result = session.submit()
    snapshot = session.to_dict()

    if session.closed:
        registry.discard(session.id)

    if result.outcome is SubmissionOutcome.SUBMITTED:
        return jsonify({
            "message": "Quiz submitted",
            "attempt": result.attempt.to_dict(),
            "session": snapshot,
        }), 201

    if result.outcome is SubmissionOutcome.LIMIT_REACHED:
        body = result.error.to_dict()
        body["session"] = snapshot
        return jsonify(body), result.error.status_code

    if result.outcome is SubmissionOutcome.FAILED:
        body = result.error.to_dict()
        body["retryable"] = True
        body["session"] = snapshot
        return jsonify(body), result.error.status_code

    return jsonify({"message": "Submission already handled", "session": snapshot}), 200


@challenger_bp.route("/sessions/<session_id>/cancel", methods=["POST"])
@login_required
def cancel_quiz(session_id):
    registry = get_session_registry()
    session = registry.get(session_id, current_user_id())
    session.cancel()
    registry.discard(session.id)
    return jsonify({"message": "Quiz cancelled", "state": session.state.value}), 200


# Attempt history
@challenger_bp.route("/attempts", methods=["GET"])
@login_required
def get_attempts():
    quiz_id = request.args.get("quiz_id", type=int)
    attempts = get_data_store().list_attempts(current_user_id(), quiz_id=quiz_id)
    return jsonify({"attempts": [attempt.to_dict() for attempt in attempts]}), 200


# Review a finished attempt
@challenger_bp.route("/attempts/<int:attempt_id>/review", methods=["GET"])
@login_required
def review_attempt(attempt_id):
    loaded = get_data_store().load_attempt(attempt_id)
    if loaded.attempt.user_id != current_user_id():
        raise NotFound("Quiz attempt not found")

    review = build_review(
        loaded.attempt, loaded.quiz, loaded.questions,
        passing_percentage=current_app.config.get("QUIZ_PASSING_PERCENTAGE", 70),
    )
    if review["recomputed_score"] != review["score"]:
        logger.warning("Attempt %s: stored score %s differs from re-derived score %s",
                       attempt_id, review["score"], review["recomputed_score"])
    return jsonify(review), 200

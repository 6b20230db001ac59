from flask import Blueprint, jsonify

from classes.errors import QuizEngineError
from utils.helpers import engine_error_response, get_data_store
from utils.utils import admin_required

admin_bp = Blueprint("admin", __name__)


@admin_bp.errorhandler(QuizEngineError)
def handle_engine_error(error):
    return engine_error_response(error)


# Reactivate a quiz: opens a fresh attempt-limit window
@admin_bp.route("/quiz/<int:quiz_id>/reactivate", methods=["POST"])
@admin_required
def reactivate_quiz(quiz_id):
    quiz = get_data_store().reactivate_quiz(quiz_id)
    return jsonify({
        "message": "Quiz reactivated",
        "quiz_id": quiz.id,
        "activation_cycle": quiz.activation_cycle,
    }), 200

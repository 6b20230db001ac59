import logging
from collections import namedtuple

from classes.errors import AdmissionDenied

logger = logging.getLogger(__name__)

AdmissionDecision = namedtuple("AdmissionDecision", ["activation_cycle", "max_attempts", "attempts_used"])


def has_limit(max_attempts):
    return max_attempts is not None and max_attempts > 0


class AdmissionController:
    """Attempt-limit check, scoped to the quiz's current activation cycle.

    The cycle and limit are re-read from the store on every check, so a quiz
    reactivated while a session is open is judged against its new cycle.
    Store failures propagate; the check never fails open.
    """

    def __init__(self, store):
        self.store = store

    def check(self, quiz_id, challenger_id):
        cycle_info = self.store.get_quiz_cycle_info(quiz_id)
        cycle = cycle_info.activation_cycle

        if not has_limit(cycle_info.max_attempts):
            return AdmissionDecision(cycle, cycle_info.max_attempts, None)

        used = self.store.count_attempts(quiz_id, challenger_id, cycle)
        if used >= cycle_info.max_attempts:
            logger.info("Admission refused for user %s on quiz %s: %s/%s attempts in cycle %s",
                        challenger_id, quiz_id, used, cycle_info.max_attempts, cycle)
            raise AdmissionDenied(cycle_info.max_attempts, cycle, used)

        return AdmissionDecision(cycle, cycle_info.max_attempts, used)

    def eligibility(self, quiz_id, challenger_id):
        cycle_info = self.store.get_quiz_cycle_info(quiz_id)
        used = self.store.count_attempts(quiz_id, challenger_id, cycle_info.activation_cycle)
        if has_limit(cycle_info.max_attempts):
            attempts_left = max(0, cycle_info.max_attempts - used)
        else:
            attempts_left = None

        return {
            "quiz_id": quiz_id,
            "activation_cycle": cycle_info.activation_cycle,
            "max_attempts": cycle_info.max_attempts,
            "attempts_used": used,
            "attempts_left": attempts_left,
            "can_attempt": attempts_left is None or attempts_left > 0,
        }

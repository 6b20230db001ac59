class QuizEngineError(Exception):
    """Base error for the attempt engine; carries the HTTP status it maps to."""

    status_code = 400

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self):
        return {"error": self.message}


class NotConfigured(QuizEngineError):
    status_code = 503

    def __init__(self, message="Quiz data store is not configured or unavailable"):
        super().__init__(message)


class NotAuthenticated(QuizEngineError):
    status_code = 401

    def __init__(self, message="Not authenticated"):
        super().__init__(message)


class NotFound(QuizEngineError):
    status_code = 404


class InvalidAnswer(QuizEngineError):
    status_code = 400


class SessionClosed(QuizEngineError):
    status_code = 409


class AdmissionDenied(QuizEngineError):
    status_code = 403

    def __init__(self, max_attempts, activation_cycle, attempts_used):
        super().__init__(
            f"You have reached the maximum number of attempts ({max_attempts}) for this quiz."
        )
        self.max_attempts = max_attempts
        self.activation_cycle = activation_cycle
        self.attempts_used = attempts_used

    def to_dict(self):
        return {
            "error": self.message,
            "max_attempts": self.max_attempts,
            "activation_cycle": self.activation_cycle,
            "attempts_used": self.attempts_used,
        }


class StoreWriteFailed(QuizEngineError):
    status_code = 502

    def __init__(self, message="Error submitting quiz", cause=None):
        super().__init__(message)
        self.cause = cause

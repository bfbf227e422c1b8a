class QuizError(Exception):
    """Base class for errors raised by the quiz engine."""

    detail = "quiz_error"


class EmptyPoolError(QuizError):
    detail = "pool_empty"


class InsufficientPoolError(QuizError):
    detail = "pool_exhausted"

    def __init__(self, requested: int, remaining: int) -> None:
        super().__init__(f"requested {requested} countries but only {remaining} unused remain")
        self.requested = requested
        self.remaining = remaining


class InvalidQuestionCountError(QuizError):
    detail = "invalid_question_count"

    def __init__(self, count: int, minimum: int, maximum: int) -> None:
        super().__init__(f"question count {count} outside [{minimum}, {maximum}]")
        self.count = count
        self.minimum = minimum
        self.maximum = maximum


class SessionStateError(QuizError):
    detail = "invalid_session_state"


class CountrySourceError(QuizError):
    detail = "countries_unavailable"

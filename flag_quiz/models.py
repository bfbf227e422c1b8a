from enum import Enum
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Optional
from .config import settings

class Country(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: str
    name: str
    image_ref: str

class SessionStatus(str, Enum):
    AWAITING_START = "awaiting_start"
    IN_PROGRESS = "in_progress"
    FINISHED = "finished"

class AnswerMode(str, Enum):
    FREE_TEXT = "free-text"
    MULTIPLE_CHOICE = "multiple-choice"

class FeedbackKind(str, Enum):
    NONE = "none"
    CORRECT = "correct"
    INCORRECT = "incorrect"
    FINISHED = "finished"

class Score(BaseModel):
    correct: int = 0
    incorrect: int = 0

class Feedback(BaseModel):
    kind: FeedbackKind = FeedbackKind.NONE
    correct_name: Optional[str] = None
    message: Optional[str] = None

class AnswerOutcome(BaseModel):
    correct: bool
    submitted: str
    correct_name: str
    points_awarded: int
    finished: bool = False

class ViewSnapshot(BaseModel):
    status: str
    image_ref: Optional[str] = None
    question_number: int = 0
    total_questions: int = 0
    remaining: int = 0
    mode: AnswerMode = AnswerMode.FREE_TEXT
    options: List[str] = Field(default_factory=list)
    feedback: Feedback = Field(default_factory=Feedback)
    score: Score = Field(default_factory=Score)
    points: int = 0
    best_score: int = 0
    pool_size: int = 0
    pool_remaining: int = 0
    reveal_pending: bool = False

class StartGameRequest(BaseModel):
    count: int = settings.default_questions

class AnswerTextRequest(BaseModel):
    answer: str

class AnswerChoiceRequest(BaseModel):
    option: str

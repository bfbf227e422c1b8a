import os
from pydantic import BaseModel, Field, field_validator
from dotenv import load_dotenv

load_dotenv()

# fewest questions a game may have, whatever MIN_QUESTIONS says
MIN_QUESTIONS_FLOOR = 5

class Settings(BaseModel):
    countries_url: str = os.getenv("COUNTRIES_URL", "https://flagcdn.com/es/codes.json")
    flag_url_template: str = os.getenv("FLAG_URL_TEMPLATE", "https://flagcdn.com/w640/{code}.webp")
    countries_timeout: float = float(os.getenv("COUNTRIES_TIMEOUT", "10"))
    load_countries_on_start: bool = os.getenv("LOAD_COUNTRIES_ON_START", "true").lower() == "true"
    advance_delay_ms: int = int(os.getenv("ADVANCE_DELAY_MS", "1500"))
    min_questions: int = Field(default=int(os.getenv("MIN_QUESTIONS", "5")), validate_default=True)
    default_questions: int = int(os.getenv("DEFAULT_QUESTIONS", "10"))
    best_score_path: str = os.getenv("BEST_SCORE_PATH", os.path.join("data", "best_score.json"))
    log_level: str = os.getenv("LOG_LEVEL", "INFO").upper()

    @field_validator("min_questions")
    @classmethod
    def clamp_min_questions(cls, value: int) -> int:
        return max(value, MIN_QUESTIONS_FLOOR)

settings = Settings()

import logging
import random
from typing import List, Optional, Sequence
from .config import MIN_QUESTIONS_FLOOR, settings
from .errors import EmptyPoolError, InvalidQuestionCountError, SessionStateError
from .models import AnswerMode, AnswerOutcome, Country, Feedback, FeedbackKind, Score, SessionStatus, ViewSnapshot
from .services.country_pool import CountryPool
from .services.country_source import CountrySource
from .services.normalizer import normalize
from .services.scheduler import Scheduler
from .services.score_record import JsonFileStore, ScoreRecord

logger = logging.getLogger("flag_quiz")

FREE_TEXT_POINTS = 2
MULTIPLE_CHOICE_POINTS = 1
OPTION_COUNT = 4

class QuestionSession:
	"""One run through a fixed list of flags.

	The index and score move together on every submission. What the player
	sees lags behind: the answered flag and its feedback stay on screen until
	the scheduled reveal fires, or until the next action forces it.
	"""

	def __init__(self, scheduler: Scheduler, rng: Optional[random.Random] = None, delay_seconds: float = 1.5, min_questions: int = 5) -> None:
		self.scheduler = scheduler
		self.rng = rng or random.Random()
		self.delay_seconds = delay_seconds
		self.min_questions = max(min_questions, MIN_QUESTIONS_FLOOR)
		self._generation = 0
		self._pending = None
		self._clear()

	def _clear(self) -> None:
		self.status = SessionStatus.AWAITING_START
		self.questions: List[Country] = []
		self.candidate_names: List[str] = []
		self.index = 0
		self.displayed_index = 0
		self.score = Score()
		self.points = 0
		self.mode = AnswerMode.FREE_TEXT
		self.options: List[str] = []
		self.options_requested = False
		self.feedback = Feedback()

	@property
	def total(self) -> int:
		return len(self.questions)

	@property
	def reveal_pending(self) -> bool:
		return self._pending is not None

	def start(self, questions: Sequence[Country], candidate_names: Optional[Sequence[str]] = None) -> None:
		if self.status != SessionStatus.AWAITING_START:
			raise SessionStateError(f"cannot start a session that is {self.status.value}")
		if len(questions) < self.min_questions:
			raise SessionStateError(f"a session needs at least {self.min_questions} questions")
		if len({q.code for q in questions}) != len(questions):
			raise SessionStateError("duplicate countries in question list")
		self._clear()
		self.questions = list(questions)
		self.candidate_names = list(candidate_names) if candidate_names is not None else [q.name for q in questions]
		self.status = SessionStatus.IN_PROGRESS
		logger.debug({"event": "session_started", "total": self.total})

	def current_question(self) -> Country:
		if self.status != SessionStatus.IN_PROGRESS:
			raise SessionStateError(f"no current question while {self.status.value}")
		return self.questions[self.index]

	def displayed_question(self) -> Optional[Country]:
		if self.status != SessionStatus.IN_PROGRESS:
			return None
		return self.questions[self.displayed_index]

	def points_total(self) -> int:
		return self.points

	def submit_free_text(self, text: str) -> AnswerOutcome:
		self._flush_pending()
		question = self.current_question()
		if self.mode != AnswerMode.FREE_TEXT:
			raise SessionStateError("options are already shown for this question")
		is_correct = normalize(text) == normalize(question.name)
		return self._record(question, text, is_correct, FREE_TEXT_POINTS)

	def request_multiple_choice(self) -> List[str]:
		self._flush_pending()
		question = self.current_question()
		if self.options_requested:
			logger.debug({"event": "options_already_requested", "index": self.index})
			return list(self.options)
		target = normalize(question.name)
		distractors = list(dict.fromkeys(n for n in self.candidate_names if normalize(n) != target))
		options = [question.name] + self.rng.sample(distractors, min(OPTION_COUNT - 1, len(distractors)))
		self.rng.shuffle(options)
		self.options = options
		self.options_requested = True
		self.mode = AnswerMode.MULTIPLE_CHOICE
		logger.debug({"event": "options_shown", "index": self.index, "options": options})
		return list(options)

	def submit_choice(self, option: str) -> AnswerOutcome:
		self._flush_pending()
		question = self.current_question()
		if self.mode != AnswerMode.MULTIPLE_CHOICE:
			raise SessionStateError("no options have been requested for this question")
		chosen = normalize(option)
		if chosen not in {normalize(o) for o in self.options}:
			raise SessionStateError(f"{option!r} is not one of the offered options")
		is_correct = chosen == normalize(question.name)
		return self._record(question, option, is_correct, MULTIPLE_CHOICE_POINTS)

	def reset(self) -> None:
		self._cancel_pending()
		self._generation += 1
		self._clear()
		logger.debug({"event": "session_reset"})

	def _record(self, question: Country, submitted: str, is_correct: bool, weight: int) -> AnswerOutcome:
		awarded = weight if is_correct else 0
		score = Score(
			correct=self.score.correct + (1 if is_correct else 0),
			incorrect=self.score.incorrect + (0 if is_correct else 1),
		)
		index = self.index + 1
		points = self.points + awarded
		finished = index == self.total
		if finished:
			feedback = Feedback(
				kind=FeedbackKind.FINISHED,
				correct_name=None if is_correct else question.name,
				message=f"Game over: {score.correct} of {self.total} correct, {points} points",
			)
		elif is_correct:
			feedback = Feedback(kind=FeedbackKind.CORRECT)
		else:
			feedback = Feedback(kind=FeedbackKind.INCORRECT, correct_name=question.name)

		self.score, self.index, self.points, self.feedback = score, index, points, feedback
		if finished:
			self.status = SessionStatus.FINISHED
		else:
			self._schedule_reveal()
		logger.debug({
			"event": "answer_recorded",
			"code": question.code,
			"submitted": submitted,
			"is_correct": is_correct,
			"awarded": awarded,
			"index": index,
			"points": points,
		})
		return AnswerOutcome(correct=is_correct, submitted=submitted, correct_name=question.name, points_awarded=awarded, finished=finished)

	def _schedule_reveal(self) -> None:
		self._generation += 1
		generation = self._generation

		def reveal() -> None:
			# a restart or an earlier flush makes this timer stale
			if generation != self._generation or self._pending is None:
				return
			self._pending = None
			self._reveal()

		self._pending = self.scheduler.schedule(self.delay_seconds, reveal)

	def _flush_pending(self) -> None:
		if self._pending is None:
			return
		self._cancel_pending()
		self._reveal()

	def _cancel_pending(self) -> None:
		if self._pending is not None:
			self._pending.cancel()
			self._pending = None

	def _reveal(self) -> None:
		self.displayed_index = self.index
		self.mode = AnswerMode.FREE_TEXT
		self.options = []
		self.options_requested = False
		self.feedback = Feedback()

class SessionController:
	def __init__(self, pool: CountryPool, session: QuestionSession, score_record: ScoreRecord, source: Optional[CountrySource] = None, min_questions: int = 5) -> None:
		self.pool = pool
		self.session = session
		self.score_record = score_record
		self.source = source
		self.min_questions = max(min_questions, MIN_QUESTIONS_FLOOR)
		self.best_score = score_record.load()

	def load_countries(self, countries: Optional[Sequence[Country]] = None) -> ViewSnapshot:
		if countries is None:
			if self.source is None:
				raise EmptyPoolError("no country source configured")
			countries = self.source.fetch()
		self.pool.load(countries)
		logger.info({"event": "countries_loaded", "size": self.pool.size})
		return self.snapshot()

	def start_game(self, count: int) -> ViewSnapshot:
		if not self.pool.is_loaded:
			raise EmptyPoolError("country list not loaded yet")
		if not self.min_questions <= count <= self.pool.size:
			raise InvalidQuestionCountError(count, self.min_questions, self.pool.size)
		if self.session.status == SessionStatus.IN_PROGRESS:
			raise SessionStateError("a game is already in progress; restart it first")
		questions = self.pool.sample_without_replacement(count)
		if self.session.status == SessionStatus.FINISHED:
			self.session.reset()
		self.session.start(questions, self.pool.names())
		logger.info({"event": "game_started", "count": count, "pool_remaining": self.pool.remaining})
		return self.snapshot()

	def answer_text(self, text: str) -> ViewSnapshot:
		self.session.submit_free_text(text)
		self._record_best()
		return self.snapshot()

	def answer_choice(self, option: str) -> ViewSnapshot:
		self.session.submit_choice(option)
		self._record_best()
		return self.snapshot()

	def request_options(self) -> ViewSnapshot:
		self.session.request_multiple_choice()
		return self.snapshot()

	def restart(self) -> ViewSnapshot:
		self.session.reset()
		logger.info({"event": "game_restarted"})
		return self.snapshot()

	def reset_pool(self) -> ViewSnapshot:
		if self.session.status == SessionStatus.IN_PROGRESS:
			raise SessionStateError("cannot reset the pool during a game")
		self.pool.reset()
		logger.info({"event": "pool_reset", "remaining": self.pool.remaining})
		return self.snapshot()

	def _record_best(self) -> None:
		# persisted by save_best
		self.best_score = max(self.best_score, self.session.points_total())

	def save_best(self) -> bool:
		return self.score_record.record_if_better(self.best_score)

	def snapshot(self) -> ViewSnapshot:
		session = self.session
		if session.status == SessionStatus.AWAITING_START and not self.pool.is_loaded:
			status = "loading"
		else:
			status = session.status.value
		displayed = session.displayed_question()
		return ViewSnapshot(
			status=status,
			image_ref=displayed.image_ref if displayed else None,
			question_number=session.displayed_index + 1 if displayed else 0,
			total_questions=session.total,
			remaining=session.total - session.index,
			mode=session.mode,
			options=list(session.options),
			feedback=session.feedback.model_copy(),
			score=session.score.model_copy(),
			points=session.points_total(),
			best_score=self.best_score,
			pool_size=self.pool.size,
			pool_remaining=self.pool.remaining,
			reveal_pending=session.reveal_pending,
		)

def build_controller() -> SessionController:
	rng = random.Random()
	session = QuestionSession(Scheduler(), rng=rng, delay_seconds=settings.advance_delay_ms / 1000, min_questions=settings.min_questions)
	return SessionController(
		pool=CountryPool(rng=rng),
		session=session,
		score_record=ScoreRecord(JsonFileStore(settings.best_score_path)),
		source=CountrySource(),
		min_questions=settings.min_questions,
	)

controller = build_controller()

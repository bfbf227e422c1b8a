from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import ORJSONResponse
from fastapi.middleware.cors import CORSMiddleware
from fastapi.concurrency import run_in_threadpool
import logging
from time import perf_counter
from .state import controller
from .models import AnswerChoiceRequest, AnswerTextRequest, StartGameRequest, ViewSnapshot
from .errors import CountrySourceError, EmptyPoolError, InsufficientPoolError, InvalidQuestionCountError, QuizError, SessionStateError
from .config import settings

logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
logger = logging.getLogger("flag_quiz")

app = FastAPI(title="flag-quiz", default_response_class=ORJSONResponse)

app.add_middleware(
	CORSMiddleware,
	allow_origins=["*"],
	allow_credentials=True,
	allow_methods=["*"],
	allow_headers=["*"],
)

STATUS_CODES = {
	EmptyPoolError: 409,
	InsufficientPoolError: 409,
	InvalidQuestionCountError: 422,
	SessionStateError: 409,
	CountrySourceError: 503,
}

def to_http_error(exc: QuizError) -> HTTPException:
	status_code = next((code for cls, code in STATUS_CODES.items() if isinstance(exc, cls)), 400)
	logger.info({"event": "action_rejected", "detail": exc.detail, "reason": str(exc)})
	return HTTPException(status_code=status_code, detail=exc.detail)

@app.on_event("startup")
def on_startup() -> None:
	logger.info({
		"event": "api_startup",
		"countries_url": settings.countries_url,
		"advance_delay_ms": settings.advance_delay_ms,
		"best_score": controller.best_score,
	})
	if settings.load_countries_on_start:
		try:
			controller.load_countries()
		except QuizError:
			logger.exception("initial_country_load_failed")

@app.middleware("http")
async def timing_middleware(request: Request, call_next):
	start = perf_counter()
	response = await call_next(request)
	duration_ms = int((perf_counter() - start) * 1000)
	logger.debug({
		"event": "request_timing",
		"method": request.method,
		"path": request.url.path,
		"status_code": response.status_code,
		"duration_ms": duration_ms,
	})
	return response

# Handlers are async and never await mid-action, so actions are serialized on the event loop.
# Only the best-score file write is awaited, after the action has completed.

@app.get("/api/state", response_model=ViewSnapshot)
async def get_state():
	return controller.snapshot()

@app.post("/api/game/start", response_model=ViewSnapshot)
async def start_game(payload: StartGameRequest | None = None):
	payload = payload or StartGameRequest()
	try:
		return controller.start_game(payload.count)
	except QuizError as e:
		raise to_http_error(e)

@app.post("/api/game/answer/text", response_model=ViewSnapshot)
async def answer_text(payload: AnswerTextRequest):
	try:
		snapshot = controller.answer_text(payload.answer)
	except QuizError as e:
		raise to_http_error(e)
	await run_in_threadpool(controller.save_best)
	return snapshot

@app.post("/api/game/answer/choice", response_model=ViewSnapshot)
async def answer_choice(payload: AnswerChoiceRequest):
	try:
		snapshot = controller.answer_choice(payload.option)
	except QuizError as e:
		raise to_http_error(e)
	await run_in_threadpool(controller.save_best)
	return snapshot

@app.post("/api/game/options", response_model=ViewSnapshot)
async def request_options():
	try:
		return controller.request_options()
	except QuizError as e:
		raise to_http_error(e)

@app.post("/api/game/restart", response_model=ViewSnapshot)
async def restart():
	return controller.restart()

@app.post("/api/pool/reset", response_model=ViewSnapshot)
async def reset_pool():
	try:
		return controller.reset_pool()
	except QuizError as e:
		raise to_http_error(e)

@app.post("/api/countries/reload", response_model=ViewSnapshot)
async def reload_countries():
	if controller.source is None:
		raise HTTPException(status_code=503, detail="countries_unavailable")
	try:
		countries = await run_in_threadpool(controller.source.fetch)
		return controller.load_countries(countries)
	except QuizError as e:
		raise to_http_error(e)

if __name__ == "__main__":
	import uvicorn

	uvicorn.run(app, host="0.0.0.0", port=8000)

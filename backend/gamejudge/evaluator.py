from __future__ import annotations
import enum
import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

from .completion_client import CompletionClient, UpstreamError, UpstreamErrorKind
from .models import Task, Verdict
from .settings import Settings

logger = logging.getLogger(__name__)


# Player-facing messages. The game is in Hebrew and every message is spoken by Mr. Pinchas.
SHORT_ANSWER_FEEDBACK = "מר פנחס צריך תשובה יותר מפורטת! נסה שוב."
SHORT_ANSWER_DETAILS = "התשובה קצרה מדי"

FALLBACK_POSITIVE_FEEDBACK = "🎉 מר פנחס: 'התשובה נראית סבירה, אמשיך לחקור את הנושא הזה...'"
FALLBACK_NEGATIVE_FEEDBACK = "🤔 מר פנחס: 'אני צריך יותר פרטים כדי להבין מה אתה מתכוון.'"
FALLBACK_DETAILS = "בדיקה אוטומטית - AI לא זמין"

QUOTA_FEEDBACK = 'מר פנחס: "נגמר לי הקרדיט במחשב! צריך לטעון עוד כסף..."'
QUOTA_DETAILS = "אין מספיק קרדיט ב-OpenAI"
AUTH_FEEDBACK = 'מר פנחס: "המפתח של המחשב לא עובד... מה עשיתם לו?"'
AUTH_DETAILS = "מפתח API לא תקין"
CRASH_FEEDBACK = 'מר פנחס: "המחשב שלי קרס שוב! נסה שוב בעוד רגע."'
CRASH_DETAILS_PREFIX = "שגיאת שרת: "

SYSTEM_INSTRUCTION = (
	"אתה בודק תשובות במשחק חינוכי. "
	'החזר רק JSON תקין בפורמט: {"success": true/false, "feedback": "הודעה", "details": "פרטים"}'
)


class Outcome(str, enum.Enum):
	TOO_SHORT = "too_short"
	STRUCTURED = "structured"
	FALLBACK = "fallback"
	QUOTA = "quota"
	AUTH = "auth"
	UPSTREAM_ERROR = "upstream_error"


@dataclass(frozen=True)
class Evaluation:
	# JSON body sent to the front end: a Verdict we built, or the model's object as parsed
	verdict: Dict[str, Any]
	status_code: int
	outcome: Outcome


@dataclass(frozen=True)
class StructuredResult:
	verdict: Dict[str, Any]


@dataclass(frozen=True)
class FallbackResult:
	verdict: Dict[str, Any]
	reason: str


ParseResult = Union[StructuredResult, FallbackResult]


def make_verdict(success: bool, feedback: str, details: str) -> Dict[str, Any]:
	return Verdict(success=success, feedback=feedback, details=details).model_dump()


def crash_verdict(message: str) -> Dict[str, Any]:
	return make_verdict(False, CRASH_FEEDBACK, f"{CRASH_DETAILS_PREFIX}{message}")


def is_too_short(answer: Optional[str], min_length: int = 5) -> bool:
	return answer is None or len(answer.strip()) < min_length


def heuristic_success(answer: str, min_length: int = 50) -> bool:
	return len(answer) > min_length and " " in answer


def heuristic_verdict(answer: str, min_length: int = 50) -> Dict[str, Any]:
	ok = heuristic_success(answer, min_length)
	return make_verdict(ok, FALLBACK_POSITIVE_FEEDBACK if ok else FALLBACK_NEGATIVE_FEEDBACK, FALLBACK_DETAILS)


def _reject_constant(name: str) -> float:
	raise ValueError(f"{name} is not valid JSON")


def _finite_float(text: str) -> float:
	value = float(text)
	if math.isinf(value):
		raise ValueError(f"number out of range: {text}")
	return value


def _load_json(text: str) -> tuple[bool, Any]:
	# Strict JSON: NaN/Infinity and overflowing numbers cannot be sent back to the client
	try:
		return True, json.loads(text, parse_constant=_reject_constant, parse_float=_finite_float)
	except ValueError:
		return False, None


def _truthy(value: Any) -> bool:
	# Empty containers count as present, like any JSON object or array
	if isinstance(value, (list, dict)):
		return True
	return bool(value)


def _structure_problem(data: Any) -> Optional[str]:
	if not isinstance(data, dict):
		return "response is not a JSON object"
	if "success" not in data:
		return "missing 'success'"
	if not _truthy(data.get("feedback")):
		return "missing or empty 'feedback'"
	return None


def interpret_response(raw: str, answer: str, fallback_min_length: int = 50) -> ParseResult:
	"""Turn the model's raw text into a verdict.

	A JSON object with a ``success`` key and a non-empty ``feedback`` is
	relayed exactly as parsed. Anything else yields the length/space
	heuristic, which only depends on the answer.
	"""
	parsed, data = _load_json(raw or "")
	problem = _structure_problem(data) if parsed else "response is not valid JSON"
	if problem is None:
		return StructuredResult(verdict=data)
	return FallbackResult(verdict=heuristic_verdict(answer, fallback_min_length), reason=problem)


def build_evaluation_prompt(task: Task, answer: str) -> str:
	return (
		'אתה בודק תשובות במשחק חינוכי. המשתמש צריך לעזור לדמות בשם "מר פנחס נחליאלי" - מנהל מיושן שמתנגד לטכנולוגיה.\n\n'
		f"המשימה: {task.description}\n\n"
		f"קריטריונים להצלחה: {task.criteria}\n\n"
		f'תשובת המשתמש: "{answer}"\n\n'
		"בדוק אם התשובה:\n"
		"1. עונה על הדרישות של המשימה\n"
		"2. מכילה את האלמנטים הנדרשים\n"
		"3. מעשית וריאליסטית\n"
		"4. מפורטת מספיק\n\n"
		"אם התשובה טובה - תן משוב חיובי בסגנון של מר פנחס שמתחיל להבין את הערך של AI.\n"
		"אם התשובה לא טובה - תן הסבר בסגנון של מר פנחס שעדיין מבולבל.\n\n"
		"החזר JSON בלבד בפורמט הזה:\n"
		"{\n"
		'  "success": true/false,\n'
		'  "feedback": "הודעה במקסימום 150 מילים",\n'
		'  "details": "הסבר קצר מה עבד או מה לא עבד"\n'
		"}"
	)


def upstream_failure(err: UpstreamError) -> Evaluation:
	if err.kind is UpstreamErrorKind.QUOTA:
		return Evaluation(
			verdict=make_verdict(False, QUOTA_FEEDBACK, QUOTA_DETAILS),
			status_code=402,
			outcome=Outcome.QUOTA,
		)
	if err.kind is UpstreamErrorKind.AUTH:
		return Evaluation(
			verdict=make_verdict(False, AUTH_FEEDBACK, AUTH_DETAILS),
			status_code=401,
			outcome=Outcome.AUTH,
		)
	return Evaluation(
		verdict=crash_verdict(err.message),
		status_code=500,
		outcome=Outcome.UPSTREAM_ERROR,
	)


class AnswerEvaluator:
	"""Judges a player's answer against a task, one upstream call at most."""

	def __init__(self, client: CompletionClient, cfg: Settings) -> None:
		self.client = client
		self.settings = cfg

	async def evaluate(self, task: Task, answer: Optional[str]) -> Evaluation:
		cfg = self.settings
		if is_too_short(answer, cfg.min_answer_length):
			return Evaluation(
				verdict=make_verdict(False, SHORT_ANSWER_FEEDBACK, SHORT_ANSWER_DETAILS),
				status_code=200,
				outcome=Outcome.TOO_SHORT,
			)

		logger.info("Evaluating answer for task: %s", task.title)
		logger.info("Answer length: %d characters", len(answer))

		prompt = build_evaluation_prompt(task, answer[: cfg.max_answer_chars])
		try:
			raw = await self.client.complete(
				SYSTEM_INSTRUCTION,
				prompt,
				temperature=cfg.eval_temperature,
				max_tokens=cfg.eval_max_tokens,
				json_mode=True,
			)
		except UpstreamError as err:
			logger.error("Completion request failed (%s): %s", err.kind.value, err.message)
			return upstream_failure(err)
		except Exception as err:
			logger.exception("Unexpected error while evaluating answer")
			return upstream_failure(UpstreamError(UpstreamErrorKind.OTHER, str(err)))

		logger.debug("Model response: %s", raw)
		result = interpret_response(raw, answer, cfg.fallback_min_length)
		if isinstance(result, FallbackResult):
			logger.warning("Unusable model response (%s), using heuristic verdict. Raw: %r", result.reason, raw)
			return Evaluation(verdict=result.verdict, status_code=200, outcome=Outcome.FALLBACK)
		logger.info("Verdict: success=%s", result.verdict.get("success"))
		return Evaluation(verdict=result.verdict, status_code=200, outcome=Outcome.STRUCTURED)

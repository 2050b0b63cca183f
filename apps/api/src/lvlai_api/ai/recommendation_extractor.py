"""
Extraction of workload recommendations from free-text model replies.

The model is asked for a bare JSON object but often wraps it in prose or a
code fence. Each strategy below looks for the object in a different way and
returns ``None`` when it cannot find a parseable one, so the next strategy
gets a chance. Every entry is then checked against the tasks that were
actually offered to the model, and its "current" values are taken from the
stored task rather than from the model's echo.

Malformed output never raises: the worst case is zero recommendations with
the raw reply returned as the analysis text.
"""

import json
import logging
import re
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from typing import Any

from lvlai_api.ai.models import (
    TaskContext,
    TaskRecommendation,
    WorkloadOptimizationResult,
)
from lvlai_api.ai.task_utils import parse_calendar_date, parse_priority, to_calendar_date

logger = logging.getLogger(__name__)

DEFAULT_REASON = "Balance workload distribution"

_FENCED_BLOCK = re.compile(r"```(?:json|JSON)?\s*(.*?)```", re.DOTALL)
_decoder = json.JSONDecoder()


@dataclass(frozen=True)
class JsonMatch:
    """A JSON object found in a reply, with the span it occupied"""

    data: dict[str, Any]
    start: int
    end: int


def _decode_objects(text: str) -> Iterator[tuple[dict[str, Any], int, int]]:
    """Yield every JSON object that decodes from an opening brace, in text order"""
    position = text.find("{")
    while position != -1:
        try:
            obj, end = _decoder.raw_decode(text, position)
        except json.JSONDecodeError:
            obj, end = None, None
        if isinstance(obj, dict):
            yield obj, position, end
        position = text.find("{", position + 1)


def fenced_code_block(text: str) -> JsonMatch | None:
    """An object inside a ``` or ```json fence; the span covers the whole fence"""
    for match in _FENCED_BLOCK.finditer(text):
        body = match.group(1).strip()
        if not body.startswith("{"):
            continue
        try:
            data = json.loads(body)
        except json.JSONDecodeError:
            logger.debug("Fenced block did not contain valid JSON")
            continue
        if isinstance(data, dict):
            return JsonMatch(data, match.start(), match.end())
    return None


def object_with_recommendations_key(text: str) -> JsonMatch | None:
    """The first decodable object that carries a ``recommendations`` key"""
    if '"recommendations"' not in text:
        return None
    for data, start, end in _decode_objects(text):
        if "recommendations" in data:
            return JsonMatch(data, start, end)
    return None


def first_json_object(text: str) -> JsonMatch | None:
    """The first decodable ``{...}`` span of any shape"""
    for data, start, end in _decode_objects(text):
        return JsonMatch(data, start, end)
    return None


ExtractionStrategy = Callable[[str], JsonMatch | None]

EXTRACTION_STRATEGIES: tuple[ExtractionStrategy, ...] = (
    fenced_code_block,
    object_with_recommendations_key,
    first_json_object,
)


def find_json_object(
    text: str, strategies: tuple[ExtractionStrategy, ...] = EXTRACTION_STRATEGIES
) -> JsonMatch | None:
    """Run the strategies in order and return the first match"""
    for strategy in strategies:
        match = strategy(text)
        if match is not None:
            logger.debug(f"JSON located by {strategy.__name__} at [{match.start}:{match.end}]")
            return match
    return None


def reconcile_recommendation(
    entry: dict[str, Any], task: TaskContext
) -> TaskRecommendation | None:
    """
    Turn one raw model entry into a recommendation for ``task``.

    Current due date and priority come from the stored task. An unparseable
    suggested date or an unknown suggested priority counts as "not suggested".
    Returns None when the entry would change neither field.
    """
    current_due = to_calendar_date(task.due_date)
    current_priority = task.priority

    suggested_due = parse_calendar_date(entry.get("suggestedDueDate"))
    if entry.get("suggestedDueDate") and suggested_due is None:
        logger.warning(
            f"Invalid suggested date for task {task.id}: {entry.get('suggestedDueDate')!r}"
        )

    suggested_priority = parse_priority(entry.get("suggestedPriority"))
    if entry.get("suggestedPriority") and suggested_priority is None:
        logger.warning(
            f"Invalid suggested priority for task {task.id}: "
            f"{entry.get('suggestedPriority')!r}"
        )

    date_changed = suggested_due is not None and suggested_due != current_due
    priority_changed = (
        suggested_priority is not None and suggested_priority != current_priority
    )
    if not date_changed and not priority_changed:
        logger.info(f"Skipping task {task.id} - no changes detected")
        return None

    reason = entry.get("reason")
    return TaskRecommendation(
        task_id=task.id,
        task_title=task.title,
        current_due_date=current_due,
        suggested_due_date=suggested_due,
        current_priority=current_priority,
        suggested_priority=suggested_priority,
        reason=str(reason).strip() if reason else DEFAULT_REASON,
    )


def reconcile_recommendations(
    entries: list[Any], candidates: list[TaskContext]
) -> list[TaskRecommendation]:
    """Keep only entries that target a candidate task and change something"""
    by_id = {task.id: task for task in candidates}
    recommendations: list[TaskRecommendation] = []

    for entry in entries:
        if not isinstance(entry, dict):
            logger.warning(f"Ignoring non-object recommendation entry: {entry!r}")
            continue
        task_id = str(entry.get("taskId") or "")
        task = by_id.get(task_id)
        if task is None:
            logger.warning(
                f"Invalid task ID in recommendation: {task_id!r}. "
                f"Valid IDs: {list(by_id)[:3]}..."
            )
            continue
        recommendation = reconcile_recommendation(entry, task)
        if recommendation is not None:
            recommendations.append(recommendation)

    return recommendations


def extract_recommendations(
    raw_text: str, candidates: list[TaskContext]
) -> WorkloadOptimizationResult:
    """
    Parse a model reply into validated recommendations.

    Text before the JSON becomes ``analysis`` and text after it ``summary``.
    Without a usable ``recommendations`` array the whole reply is returned as
    ``analysis`` with no recommendations.
    """
    text = raw_text or ""
    logger.info(f"AI response length: {len(text)}")

    try:
        match = find_json_object(text)
        if match is None:
            logger.warning(f"No JSON found in AI response: {text[:500]!r}")
            return WorkloadOptimizationResult(analysis=text)

        entries = match.data.get("recommendations")
        if not isinstance(entries, list):
            logger.warning("JSON data does not contain a recommendations array")
            return WorkloadOptimizationResult(analysis=text)

        logger.info(f"Found {len(entries)} recommendations in JSON")
        recommendations = reconcile_recommendations(entries, candidates)
        logger.info(f"After filtering: {len(recommendations)} valid recommendations")

        return WorkloadOptimizationResult(
            analysis=text[: match.start].strip(),
            recommendations=recommendations,
            summary=text[match.end :].strip(),
        )
    except Exception as e:
        # Degrade rather than fail the request on anything unexpected
        logger.error(f"Error parsing AI response for recommendations: {e}")
        return WorkloadOptimizationResult(analysis=text)

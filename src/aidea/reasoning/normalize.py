"""Normalization of model reasoning payloads into step labels.

Completion services attach reasoning in whatever shape they like: a block
of text, a list of strings or objects, or a single mapping. This module
hides that variety behind one list of labels.
"""

import json
import logging
from collections.abc import Mapping
from typing import Any

from .models import ReasoningStep, StepStatus

logger = logging.getLogger(__name__)

PLACEHOLDER_STEP = "Model completed without exposing additional reasoning steps."

# Fields of list elements carrying readable text (OpenRouter reasoning_details)
_TEXT_FIELDS = ("text", "summary", "content")


def _to_json(value: Any) -> str:
    return json.dumps(value, default=str, ensure_ascii=False, separators=(",", ":"))


def _item_label(item: Any) -> str:
    if item is None:
        return ""
    if isinstance(item, str):
        return item
    if isinstance(item, Mapping):
        step = item.get("step")
        thought = item.get("thought")
        if step or thought:
            detail = thought or item.get("content") or ""
            return f"{step or 'Step'}: {detail}".strip()
        for field in _TEXT_FIELDS:
            value = item.get(field)
            if isinstance(value, str) and value.strip():
                return value
        return _to_json(item)
    return str(item)


def _labels(payload: Any) -> list[str]:
    if payload is None:
        return []
    if isinstance(payload, str):
        return [line.strip() for line in payload.split("\n") if line.strip()]
    if isinstance(payload, Mapping):
        return [
            f"{key}: {value if isinstance(value, str) else _to_json(value)}"
            for key, value in payload.items()
        ]
    if isinstance(payload, (list, tuple)):
        return [label for label in (_item_label(item) for item in payload) if label]
    if not payload:
        return []
    return [str(payload)]


def normalize_reasoning(payload: Any) -> list[str]:
    """Turn an arbitrary reasoning payload into ordered step labels.

    - A string is split into non-empty trimmed lines.
    - A list is mapped element-wise: strings verbatim, objects with a
      ``step``/``thought`` field as ``"<step>: <thought or content>"``,
      other objects by their text field or as compact JSON.
    - A mapping yields one ``"key: value"`` label per field.

    Never raises; anything unusable yields an empty list.
    """
    try:
        return _labels(payload)
    except Exception:
        logger.debug("Unusable reasoning payload of type %s", type(payload).__name__, exc_info=True)
        return []


def steps_from_payload(payload: Any) -> list[ReasoningStep]:
    """Build completed steps from a payload, or a single placeholder step."""
    labels = normalize_reasoning(payload) or [PLACEHOLDER_STEP]
    return [ReasoningStep(label=label, status=StepStatus.COMPLETE) for label in labels]

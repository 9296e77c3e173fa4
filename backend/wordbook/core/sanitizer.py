import json
from typing import Any, Dict


class ResponseParseError(ValueError):
    """The model's reply did not contain a usable JSON object."""


def extract_json_text(raw: str) -> str:
    """
    Strip markdown fences and keep the span from the first "{" to the last "}".

    This is a heuristic: prose containing a second brace-delimited span will
    be swallowed into the slice and the parse will fail.
    """
    text = raw.replace("```json", "").replace("```", "").strip()
    first = text.find("{")
    last = text.rfind("}")
    if first != -1 and last != -1 and first < last:
        text = text[first : last + 1]
    return text


def parse_llm_json(raw: str) -> Dict[str, Any]:
    text = extract_json_text(raw)
    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ResponseParseError(f"Invalid JSON in model reply: {text[:200]!r}") from exc

    if not isinstance(data, dict):
        raise ResponseParseError(f"Expected a JSON object, got {type(data).__name__}")
    return data

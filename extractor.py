"""
Recipe extractor.

Pulls the JSON recipe object out of raw generator text. The generator is asked
for bare JSON but sometimes wraps it in a code fence or adds commentary.
"""

import json
import re

from pydantic import ValidationError

from errors import ExtractionFailure
from models import RecipeData

_CODE_FENCE = re.compile(r"```(?:json)?\s*([\s\S]*?)```")


def _json_candidate(text: str) -> str:
    fenced = _CODE_FENCE.search(text)
    if fenced:
        text = fenced.group(1).strip()
    start, end = text.find("{"), text.rfind("}")
    if start != -1 and end > start:
        text = text[start : end + 1]
    return text


def extract_recipe(raw_text) -> RecipeData:
    """
    Parse generator output into a recipe.

    Args:
        raw_text (str): The generator's answer.

    Returns:
        RecipeData: The validated recipe.

    Raises:
        ExtractionFailure: No JSON object, invalid JSON or missing fields.
    """
    if not isinstance(raw_text, str) or not raw_text.strip():
        raise ExtractionFailure("Generator returned an empty answer", str(raw_text or ""))

    text = raw_text.strip()
    candidate = _json_candidate(text)
    try:
        data = json.loads(candidate)
    except json.JSONDecodeError as e:
        raise ExtractionFailure(f"Could not parse recipe JSON: {e}", text) from e

    if not isinstance(data, dict):
        raise ExtractionFailure("Recipe JSON is not an object", text)
    # Generated content is never a placeholder, whatever the model claims
    data.pop("isPlaceholder", None)
    data.pop("is_placeholder", None)

    try:
        return RecipeData.model_validate(data)
    except ValidationError as e:
        fields = ", ".join(".".join(str(p) for p in err["loc"]) for err in e.errors())
        raise ExtractionFailure(f"Recipe JSON is missing or has invalid fields: {fields}", text) from e

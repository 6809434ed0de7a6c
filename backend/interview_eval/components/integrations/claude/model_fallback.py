from __future__ import annotations

from typing import Dict, List, Tuple

# Each family is tried in order when the requested alias is not served.
MODEL_FAMILIES: Dict[str, Tuple[str, ...]] = {
    "haiku": (
        "claude-3-5-haiku-latest",
        "claude-3-5-haiku-20241022",
        "claude-3-haiku-20240307",
    ),
    "sonnet": (
        "claude-sonnet-4-20250514",
        "claude-3-7-sonnet-latest",
        "claude-3-5-sonnet-latest",
    ),
}

DEFAULT_MODEL = MODEL_FAMILIES["haiku"][0]


def fallback_chain(model: str | None) -> List[str]:
    """Requested model first, then the rest of its known family, without duplicates."""
    requested = (model or "").strip() or DEFAULT_MODEL
    chain = [requested]
    for family in MODEL_FAMILIES.values():
        if requested.lower() in family:
            chain.extend(m for m in family if m not in chain)
            break
    return chain


def is_model_not_found_error(exc: Exception) -> bool:
    text = str(exc or "").lower()
    if not text:
        return False
    return "not_found_error" in text or ("model" in text and ("not found" in text or "404" in text))

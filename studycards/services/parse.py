import json, re
from typing import List, Dict
from pydantic import TypeAdapter
from ..schemas import Flashcard

_cards = TypeAdapter(List[Flashcard])

def _clean(s: str) -> str:
    return re.sub(r"```(json|JSON)?|```", "", s or "").strip()

def parse_flashcards(s: str) -> List[Dict[str, str]]:
    """
    Parse a model reply into a list of {question, answer} dicts.
    Takes the first JSON array in the reply so surrounding prose is tolerated.
    Raises ValueError (json or pydantic) on anything else, including an empty list.
    """
    text = _clean(s)
    m = re.search(r"\[[\s\S]*\]", text)
    data = json.loads(m.group(0) if m else text)
    cards = [c.model_dump() for c in _cards.validate_python(data)]
    if not cards:
        raise ValueError("No flashcards generated")
    return cards

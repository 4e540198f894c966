import base64
from typing import Dict, List

from fastapi import HTTPException
from loguru import logger

from .cache import sha256_bytes, read_cards, save_cards
from .llm import llm
from .parse import parse_flashcards
from .pdf import pdf_text_for_prompt

SYSTEM_PROMPT = "You are an expert at creating study flashcards. Return only valid JSON arrays."

CARD_PROMPT = """You are a flashcard creation AI. Analyze the following document and create high-quality study flashcards.

Document: {file_name}

Generate 10-15 flashcards that:
- Focus on key concepts and important information
- Have clear, concise questions
- Have detailed but focused answers
- Cover different topics from the material

Return ONLY a valid JSON array of flashcards with this exact structure:
[
  {{
    "question": "Question text here?",
    "answer": "Answer text here."
  }}
]

Important: Return ONLY the JSON array, no other text or explanation."""

def _user_content(raw: bytes, content_type: str, file_name: str):
    prompt = CARD_PROMPT.format(file_name=file_name)
    if content_type == "application/pdf":
        return f"{prompt}\n\nDocument text:\n{pdf_text_for_prompt(raw)}"
    mime = "image/jpeg" if content_type == "image/jpg" else content_type
    data_url = f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}"
    return [
        {"type": "text", "text": prompt},
        {"type": "image_url", "image_url": {"url": data_url}},
    ]

async def generate_flashcards(raw: bytes, content_type: str, file_name: str) -> List[Dict[str, str]]:
    """Flashcards for a document, from the on-disk cache when this exact file was seen before."""
    doc_hash = sha256_bytes(raw)
    cached = read_cards(doc_hash)
    if cached:
        logger.info(f"[flashcards] cache hit {doc_hash[:12]} ({len(cached)} cards)")
        return cached

    reply = await llm(
        [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": _user_content(raw, content_type, file_name)},
        ],
    )
    try:
        cards = parse_flashcards(reply)
    except ValueError:
        logger.warning(f"[flashcards] unparseable reply for {file_name!r}, asking for a repair")
        repaired = await llm(
            [
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": "Fix to a valid JSON array [{question, answer}] only. No prose.\n" + (reply or "")},
            ],
        )
        try:
            cards = parse_flashcards(repaired)
        except ValueError:
            logger.error(f"[flashcards] repair failed for {file_name!r}: {(repaired or '')[:200]!r}")
            raise HTTPException(502, "Failed to generate flashcards. Please try again.")

    save_cards(doc_hash, cards)
    return cards

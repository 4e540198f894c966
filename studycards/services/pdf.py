import re
import fitz  # PyMuPDF
from fastapi import HTTPException
from ..settings import settings

def extract_pages_text(raw: bytes) -> list[str]:
    try:
        doc = fitz.open(stream=raw, filetype="pdf")
    except Exception as e:
        raise HTTPException(400, f"Could not read PDF: {e}")
    out = []
    with doc:
        for p in doc:
            t = p.get_text() or ""
            t = re.sub(r"[ \t]+", " ", t).strip()
            out.append(t)
    return out

def pdf_text_for_prompt(raw: bytes) -> str:
    pages = extract_pages_text(raw)[:settings.MAX_PAGES]
    if not any(p.strip() for p in pages):
        raise HTTPException(422, "No extractable text found (image-only PDF).")
    joined = "\n\n".join(f"Page {i}:\n{t}" for i, t in enumerate(pages, start=1) if t)
    return joined[:settings.MAX_PROMPT_CHARS]

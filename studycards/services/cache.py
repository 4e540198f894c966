from pathlib import Path
import json, hashlib
from typing import Optional

from ..settings import settings

def _cache_dir() -> Path:
    d = Path(settings.CACHE_DIR)
    d.mkdir(parents=True, exist_ok=True)
    return d

def sha256_bytes(b: bytes) -> str:
    return hashlib.sha256(b).hexdigest()

def _read_json(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))

def _write_json(path: Path, obj):
    path.write_text(json.dumps(obj, ensure_ascii=False), encoding="utf-8")

def read_cards(doc_hash: str) -> Optional[list]:
    p = _cache_dir() / f"{doc_hash}.cards.json"
    return _read_json(p) if p.exists() else None

def save_cards(doc_hash: str, cards: list):
    _write_json(_cache_dir() / f"{doc_hash}.cards.json", cards)

import unicodedata

def normalize(text: str) -> str:
    """Canonical form used to compare answers: lowercase, trimmed, accents dropped."""
    decomposed = unicodedata.normalize("NFD", (text or "").strip().lower())
    return "".join(ch for ch in decomposed if not unicodedata.combining(ch))

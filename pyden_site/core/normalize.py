# pyden_site/core/normalize.py
from __future__ import annotations

# Portuguese accents seen in document-type input; anything else is left as-is.
_ACCENTS = str.maketrans({
    "ç": "c",
    "á": "a", "à": "a", "â": "a", "ã": "a",
    "é": "e", "è": "e", "ê": "e",
    "í": "i", "ì": "i", "î": "i",
    "ó": "o", "ò": "o", "ô": "o", "õ": "o",
    "ú": "u", "ù": "u", "û": "u",
})

ALLOWED_TYPES: frozenset[str] = frozenset({"contratos", "orcamentos", "propostas"})

TYPE_ALIASES: dict[str, str] = {
    "contracts": "contratos",
    "budgets": "orcamentos",
    "proposals": "propostas",
}


def normalize_type(value: object) -> str:
    """Trim, lowercase and strip accents. ``None``/empty input yields ``""``."""
    if value is None:
        return ""
    return str(value).strip().lower().translate(_ACCENTS)


def canonical_type(value: object) -> str | None:
    """Return the canonical document type for ``value`` or ``None`` if it is not allowed."""
    token = normalize_type(value)
    token = TYPE_ALIASES.get(token, token)
    return token if token in ALLOWED_TYPES else None

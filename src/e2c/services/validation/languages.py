"""Language key to Judge0 language id mapping."""

from typing import Dict, Iterable, List, Tuple

from e2c.errors import UnsupportedLanguageError

# Judge0 CE language ids
LANGUAGE_IDS: Dict[str, int] = {
    "PYTHON": 71,
    "JAVASCRIPT": 63,
    "JAVA": 62,
    "CPP": 54,
    "C": 50,
    "GO": 60,
    "RUST": 73,
    "TYPESCRIPT": 74,
}


def resolve(language: str) -> int:
    """Return the judge language id for ``language`` (case-insensitive)."""
    language_id = LANGUAGE_IDS.get(language.strip().upper())
    if language_id is None:
        raise UnsupportedLanguageError(language)
    return language_id


def resolve_all(languages: Iterable[str]) -> List[Tuple[str, int]]:
    """Resolve every key in order, failing on the first unknown one."""
    return [(language, resolve(language)) for language in languages]


def supported_languages() -> List[str]:
    return sorted(LANGUAGE_IDS)

"""Vocabulary ledger merging."""
from datetime import datetime
from typing import Iterable, Tuple

from farsiflow.models.progress_models import VocabularyEntry, VocabularyMetadata


def merge(
    existing: Iterable[VocabularyEntry],
    candidates: Iterable[VocabularyMetadata],
    level_id: int,
    now: datetime,
) -> Tuple[VocabularyEntry, ...]:
    """Merge newly learned words into a vocabulary ledger.

    Words are keyed by their exact text. Existing entries keep their order and
    are never updated; candidates whose word is already known, in the ledger or
    earlier in the same batch, are dropped. New entries are appended in
    candidate order and stamped with ``level_id`` and ``now``.
    """
    merged = list(existing)
    known_words = {entry.word for entry in merged}

    for candidate in candidates:
        if candidate.word in known_words:
            continue
        known_words.add(candidate.word)
        merged.append(
            VocabularyEntry(
                word=candidate.word,
                transliteration=candidate.transliteration,
                meaning=candidate.meaning,
                learned_at_level=level_id,
                learned_at=now,
            )
        )

    return tuple(merged)


def search(entries: Iterable[VocabularyEntry], query: str) -> Tuple[VocabularyEntry, ...]:
    """Search a ledger by word, transliteration or meaning."""
    query = query.strip().lower()
    if not query:
        return tuple(entries)
    return tuple(
        entry
        for entry in entries
        if query in entry.word.lower()
        or query in entry.transliteration.lower()
        or query in entry.meaning.lower()
    )

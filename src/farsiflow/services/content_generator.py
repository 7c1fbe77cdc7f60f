"""Content generation: provider payload parsing and an offline Faker provider."""
import logging
from typing import Any, List, Optional, Protocol

from faker import Faker

from farsiflow.config import STAGES_PER_LEVEL, settings
from farsiflow.models.content_models import (
    ExampleSentence,
    Fact,
    GrammarPoint,
    Handout,
    Language,
    LANGUAGE_NAMES,
    QuizItem,
)
from farsiflow.models.progress_models import VocabularyMetadata

logger = logging.getLogger(__name__)

# Words the offline provider builds quizzes from: (word, transliteration, meaning)
SEED_LEXICON = [
    ("سلام", "salâm", "hello"),
    ("خداحافظ", "khodâhâfez", "goodbye"),
    ("مرسی", "mersi", "thank you"),
    ("لطفاً", "lotfan", "please"),
    ("بله", "bale", "yes"),
    ("نه", "na", "no"),
    ("آب", "âb", "water"),
    ("نان", "nân", "bread"),
    ("چای", "chây", "tea"),
    ("خانه", "khâne", "house"),
    ("کتاب", "ketâb", "book"),
    ("دوست", "dust", "friend"),
    ("مادر", "mâdar", "mother"),
    ("پدر", "pedar", "father"),
    ("برادر", "barâdar", "brother"),
    ("خواهر", "khâhar", "sister"),
    ("یک", "yek", "one"),
    ("دو", "do", "two"),
    ("سه", "se", "three"),
    ("بازار", "bâzâr", "market"),
    ("شهر", "shahr", "city"),
    ("راه", "râh", "road"),
    ("امروز", "emruz", "today"),
    ("فردا", "fardâ", "tomorrow"),
    ("دیروز", "diruz", "yesterday"),
    ("کار", "kâr", "work"),
    ("شعر", "she'r", "poem"),
    ("گل", "gol", "flower"),
    ("ماه", "mâh", "moon"),
    ("دل", "del", "heart"),
]

# (title, content) pairs the offline provider picks facts from
SEED_FACTS = [
    ("Shared roots", "Persian is an Indo-European language, a distant relative of English. Compare 'barâdar' and 'brother', or 'mâdar' and 'mother'."),
    ("No grammatical gender", "Persian nouns have no gender, and the pronoun 'u' means both he and she."),
    ("Four extra letters", "Persian writes with the Arabic script plus four letters of its own: پ, چ, ژ and گ."),
    ("Nowruz", "The Persian new year, Nowruz, starts at the spring equinox and has been celebrated for over 3,000 years."),
    ("Hafez at home", "Many Iranian families keep a copy of Hafez's poems and open it at random for advice, a custom called fâl-e Hâfez."),
    ("Taarof", "Taarof is the etiquette of ritual politeness: a shopkeeper may refuse payment at first, and you are expected to insist."),
    ("Right to left", "Persian is written right to left, but its numbers are written left to right."),
    ("Shâhnâme", "Ferdowsi's Shâhnâme, the Book of Kings, runs to about 50,000 couplets and is one of the longest poems by a single author."),
]


class ContentProvider(Protocol):
    """Source of quiz and handout content for a stage, and of facts for the home screen."""

    def generate_quiz(self, topic: str, difficulty: str, stage: int, language: Language) -> List[QuizItem]:
        ...

    def generate_handout(self, topic: str, difficulty: str, stage: int, language: Language) -> Optional[Handout]:
        ...

    def generate_fact(self, language: Language) -> Optional[Fact]:
        ...


def get_language(code: Optional[str] = None) -> Language:
    """Resolve a language code, falling back to English."""
    code = (code or settings.content.target_language).upper()
    try:
        return Language(code)
    except ValueError:
        logger.warning(f"Unknown language code {code}, using English")
        return Language.EN


def _text(payload: dict, key: str) -> Optional[str]:
    """A non-empty string field, or None when it is absent."""
    value = payload.get(key)
    if isinstance(value, str) and value.strip():
        return value
    return None


def parse_vocabulary(payload: Any) -> Optional[VocabularyMetadata]:
    """Parse a word/transliteration/meaning triple.

    Returns None when the metadata is absent or lacks the word; a missing
    transliteration or meaning is kept as an empty string.
    """
    if not isinstance(payload, dict):
        return None
    word = _text(payload, "word")
    if word is None:
        return None
    return VocabularyMetadata(
        word=word,
        transliteration=_text(payload, "transliteration") or "",
        meaning=_text(payload, "meaning") or "",
    )


def parse_quiz_item(payload: Any) -> Optional[QuizItem]:
    """Parse one quiz item, or None if it is not a usable question."""
    if not isinstance(payload, dict):
        return None
    question = _text(payload, "question")
    options = payload.get("options")
    correct_index = payload.get("correctIndex")
    if (
        question is None
        or not isinstance(options, list)
        or len(options) < 2
        or not isinstance(correct_index, int)
        or not 0 <= correct_index < len(options)
    ):
        return None

    return QuizItem(
        question=question,
        options=[str(option) for option in options],
        correct_index=correct_index,
        explanation=_text(payload, "explanation") or "",
        pronunciation_text=_text(payload, "pronunciationText"),
        vocabulary=parse_vocabulary(payload.get("wordMetadata")),
    )


def parse_quiz_payload(payload: Any) -> List[QuizItem]:
    """Parse a decoded quiz response into quiz items.

    Malformed items are skipped. Items without vocabulary metadata are kept;
    they simply teach no word.
    """
    if not isinstance(payload, list):
        logger.warning("Quiz payload is not a list, no questions generated")
        return []

    items = []
    for index, item_payload in enumerate(payload):
        item = parse_quiz_item(item_payload)
        if item is None:
            logger.warning(f"Skipping malformed quiz item {index}")
            continue
        items.append(item)
    return items


def parse_handout_payload(payload: Any) -> Optional[Handout]:
    """Parse a decoded handout response."""
    if not isinstance(payload, dict):
        return None
    title = _text(payload, "title")
    if title is None:
        logger.warning("Handout payload has no title")
        return None

    vocabulary = [parse_vocabulary(entry) for entry in payload.get("vocabulary") or []]
    grammar = [
        GrammarPoint(title=entry.get("title", ""), content=entry.get("content", ""))
        for entry in payload.get("grammar") or []
        if isinstance(entry, dict)
    ]
    sentences = [
        ExampleSentence(
            persian=entry.get("persian", ""),
            transliteration=entry.get("transliteration", ""),
            translation=entry.get("translation", ""),
        )
        for entry in payload.get("sentences") or []
        if isinstance(entry, dict)
    ]
    return Handout(
        title=title,
        introduction=_text(payload, "introduction") or "",
        vocabulary=[entry for entry in vocabulary if entry is not None],
        grammar=grammar,
        sentences=sentences,
        cultural_note=_text(payload, "culturalNote") or "",
    )


def parse_fact_payload(payload: Any) -> Optional[Fact]:
    """Parse a decoded fact response; both title and content are required."""
    if not isinstance(payload, dict):
        return None
    title = _text(payload, "title")
    content = _text(payload, "content")
    if title is None or content is None:
        logger.warning("Fact payload lacks a title or content")
        return None
    return Fact(title=title, content=content)


class FakerContentProvider:
    """Offline content provider.

    Builds provider-shaped payloads from the seed lexicon, with Faker filling
    in the prose, and parses them like any remote response.
    """

    def __init__(self, seed: Optional[int] = None):
        self.faker = Faker()
        if seed is not None:
            self.faker.seed_instance(seed)

    def _pick_words(self, stage: int, count: int) -> list:
        """Pick lexicon words, shifting the window as stages advance."""
        count = min(count, len(SEED_LEXICON))
        offset = (max(stage, 1) - 1) * len(SEED_LEXICON) // STAGES_PER_LEVEL
        window = SEED_LEXICON[offset:] + SEED_LEXICON[:offset]
        window = window[:max(count, len(SEED_LEXICON) // 2)]
        return self.faker.random_sample(elements=window, length=count)

    def quiz_payload(self, topic: str, difficulty: str, stage: int, language: Language) -> list:
        """Build a quiz payload in the provider's response format."""
        words = self._pick_words(stage, settings.content.questions_per_quiz)
        meanings = [meaning for _, _, meaning in SEED_LEXICON]
        payload = []
        for word, transliteration, meaning in words:
            distractors = self.faker.random_sample(
                elements=[m for m in meanings if m != meaning],
                length=settings.content.options_per_question - 1,
            )
            options = list(distractors)
            correct_index = self.faker.random_int(min=0, max=len(options))
            options.insert(correct_index, meaning)
            payload.append({
                "question": f"What does '{word}' ({transliteration}) mean?",
                "options": options,
                "correctIndex": correct_index,
                "explanation": f"'{word}' means '{meaning}'. {self.faker.sentence()}",
                "pronunciationText": word,
                "wordMetadata": {"word": word, "transliteration": transliteration, "meaning": meaning},
            })
        return payload

    def handout_payload(self, topic: str, difficulty: str, stage: int, language: Language) -> dict:
        """Build a handout payload in the provider's response format."""
        words = self._pick_words(stage, settings.content.handout_vocabulary_size)
        return {
            "title": f"{topic} (stage {stage} of {STAGES_PER_LEVEL})",
            "introduction": (
                f"A {difficulty.lower()} lesson explained in {LANGUAGE_NAMES[language]}. "
                f"{self.faker.paragraph(nb_sentences=2)}"
            ),
            "vocabulary": [
                {"word": word, "transliteration": transliteration, "meaning": meaning}
                for word, transliteration, meaning in words
            ],
            "grammar": [
                {"title": self.faker.catch_phrase(), "content": self.faker.paragraph(nb_sentences=2)}
                for _ in range(2)
            ],
            "sentences": [
                {
                    "persian": f"{word} ...",
                    "transliteration": f"{transliteration} ...",
                    "translation": f"{meaning.capitalize()} ...",
                }
                for word, transliteration, meaning in words[:3]
            ],
            "culturalNote": self.faker.paragraph(nb_sentences=1),
        }

    def fact_payload(self, language: Language) -> dict:
        """Build a fact payload in the provider's response format."""
        title, content = self.faker.random_element(elements=SEED_FACTS)
        return {"title": title, "content": content}

    def generate_quiz(self, topic: str, difficulty: str, stage: int, language: Language) -> List[QuizItem]:
        """Generate the quiz of a stage."""
        items = parse_quiz_payload(self.quiz_payload(topic, difficulty, stage, language))
        logger.info(f"Quiz generated for {topic} stage {stage}: {len(items)} questions")
        return items

    def generate_handout(self, topic: str, difficulty: str, stage: int, language: Language) -> Optional[Handout]:
        """Generate the handout of a stage."""
        handout = parse_handout_payload(self.handout_payload(topic, difficulty, stage, language))
        logger.info(f"Handout generated for {topic} stage {stage}")
        return handout

    def generate_fact(self, language: Language) -> Optional[Fact]:
        """Generate a fact for the home screen."""
        return parse_fact_payload(self.fact_payload(language))

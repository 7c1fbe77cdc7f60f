"""Models for content produced by the content-generation provider."""
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from farsiflow.models.progress_models import VocabularyMetadata


class Language(Enum):
    """Languages the learner can read explanations in."""
    EN = "EN"
    ZH_TW = "ZH_TW"
    JA = "JA"
    KO = "KO"  # mixed script Hanja/Hangul


LANGUAGE_NAMES = {
    Language.EN: "English",
    Language.ZH_TW: "Traditional Chinese",
    Language.JA: "Japanese",
    Language.KO: "Korean (using mixed script Hanja/Hangul)",
}


@dataclass
class QuizItem:
    """One multiple-choice question of a stage quiz."""
    question: str
    options: List[str]
    correct_index: int
    explanation: str = ""
    pronunciation_text: Optional[str] = None
    vocabulary: Optional[VocabularyMetadata] = None  # None when the provider sent no usable metadata

    @property
    def has_vocabulary(self) -> bool:
        """Whether answering this item correctly teaches a word."""
        return self.vocabulary is not None

    def is_correct(self, option_index: int) -> bool:
        """Check an answer."""
        return option_index == self.correct_index


@dataclass
class GrammarPoint:
    """A grammar rule taught in a handout."""
    title: str
    content: str


@dataclass
class ExampleSentence:
    """A sentence showing natural usage."""
    persian: str
    transliteration: str
    translation: str


@dataclass
class Handout:
    """Study guide shown before a stage quiz."""
    title: str
    introduction: str
    vocabulary: List[VocabularyMetadata] = field(default_factory=list)
    grammar: List[GrammarPoint] = field(default_factory=list)
    sentences: List[ExampleSentence] = field(default_factory=list)
    cultural_note: str = ""


@dataclass
class Fact:
    """A short fact about the Persian language or culture."""
    title: str
    content: str

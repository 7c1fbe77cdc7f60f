"""Quiz session state for a stage being played."""
from dataclasses import dataclass, field
from typing import List, Optional

from farsiflow.config import settings
from farsiflow.models.content_models import QuizItem
from farsiflow.models.progress_models import VocabularyMetadata


@dataclass
class QuizSession:
    """Answers given so far in one stage quiz."""
    level_id: int
    stage: int
    items: List[QuizItem]
    current_index: int = 0
    score: int = 0
    collected_words: List[VocabularyMetadata] = field(default_factory=list)

    @property
    def current_item(self) -> Optional[QuizItem]:
        if self.is_finished:
            return None
        return self.items[self.current_index]

    @property
    def is_finished(self) -> bool:
        return self.current_index >= len(self.items)

    def answer(self, option_index: int) -> bool:
        """Answer the current item and move on to the next one.

        A correct answer scores a point and collects the item's word, if it
        teaches one.
        """
        item = self.current_item
        if item is None:
            raise ValueError("Quiz is already finished")

        correct = item.is_correct(option_index)
        if correct:
            self.score += 1
            if item.has_vocabulary and all(w.word != item.vocabulary.word for w in self.collected_words):
                self.collected_words.append(item.vocabulary)

        self.current_index += 1
        return correct

    @property
    def xp_earned(self) -> int:
        return self.score * settings.progression.xp_per_correct_answer

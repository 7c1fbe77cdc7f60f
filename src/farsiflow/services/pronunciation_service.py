"""Pronunciation audio generation."""
import hashlib
import logging
import re
from pathlib import Path
from typing import Optional

from gtts import gTTS

from farsiflow.config import settings

logger = logging.getLogger(__name__)


class PronunciationService:
    """Service for generating pronunciation audio with gTTS."""

    def __init__(self, lang: Optional[str] = None, output_dir: Optional[Path] = None):
        self.lang = lang or settings.audio.lang
        self.output_dir = Path(output_dir or settings.paths.pronunciations_dir)

    def generate_pronunciation(self, text: str) -> str:
        """Generate a pronunciation file for ``text`` and return its path.

        Returns an empty string when nothing could be generated.
        """
        if not text or not text.strip():
            logger.warning("Cannot generate pronunciation: text is empty")
            return ""

        path = self.output_dir / f"{self._sanitize_filename(text)}.mp3"
        if path.exists():
            return str(path)

        try:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            tts = gTTS(text=text, lang=self.lang, slow=settings.audio.slow)
            tts.save(str(path))
            logger.info(f"Pronunciation generated for: {text}, file: {path.name}")
            return str(path)
        except Exception as e:
            logger.error(f"Error generating pronunciation for: {text}, error: {e}")
            return ""

    @staticmethod
    def _sanitize_filename(text: str) -> str:
        """Filename stem for a text in any script."""
        stem = re.sub(r"\W+", "_", text.lower(), flags=re.UNICODE).strip("_")[:40]
        digest = hashlib.sha1(text.encode("utf-8")).hexdigest()[:8]
        return f"{stem}_{digest}" if stem else digest

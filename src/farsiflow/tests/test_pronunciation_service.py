"""Tests for pronunciation audio."""
from pathlib import Path

import pytest

from farsiflow.services.pronunciation_service import PronunciationService


@pytest.fixture
def pronunciation_service(tmp_path: Path) -> PronunciationService:
    """Create a service writing into a temporary directory."""
    return PronunciationService(lang="fa", output_dir=tmp_path / "audio")


def test_generate_pronunciation(pronunciation_service: PronunciationService, mocker) -> None:
    """Test that audio is saved under a file named after the text."""
    mock_gtts = mocker.patch("farsiflow.services.pronunciation_service.gTTS")

    path = pronunciation_service.generate_pronunciation("خداحافظ")

    assert path.endswith(".mp3")
    assert Path(path).parent == pronunciation_service.output_dir
    mock_gtts.assert_called_once_with(text="خداحافظ", lang="fa", slow=False)
    mock_gtts.return_value.save.assert_called_once_with(path)


def test_existing_file_is_reused(pronunciation_service: PronunciationService, mocker) -> None:
    """Test that a cached file is returned without calling gTTS."""
    mock_gtts = mocker.patch("farsiflow.services.pronunciation_service.gTTS")
    pronunciation_service.output_dir.mkdir(parents=True)
    cached = pronunciation_service.output_dir / f"{PronunciationService._sanitize_filename('مرسی')}.mp3"
    cached.write_bytes(b"mp3")

    assert pronunciation_service.generate_pronunciation("مرسی") == str(cached)
    mock_gtts.assert_not_called()


@pytest.mark.parametrize("text", ["", "   "])
def test_empty_text(pronunciation_service: PronunciationService, mocker, text: str) -> None:
    """Test that nothing is generated for empty text."""
    mock_gtts = mocker.patch("farsiflow.services.pronunciation_service.gTTS")

    assert pronunciation_service.generate_pronunciation(text) == ""
    mock_gtts.assert_not_called()


def test_gtts_failure(pronunciation_service: PronunciationService, mocker) -> None:
    """Test that a failed request yields no file."""
    mock_gtts = mocker.patch("farsiflow.services.pronunciation_service.gTTS")
    mock_gtts.return_value.save.side_effect = RuntimeError("connection refused")

    assert pronunciation_service.generate_pronunciation("سلام") == ""


def test_sanitize_filename() -> None:
    """Test filenames for texts in different scripts."""
    latin = PronunciationService._sanitize_filename("Hello, World!")
    persian = PronunciationService._sanitize_filename("سلام دوست")

    assert latin.startswith("hello_world_")
    assert "/" not in persian and " " not in persian
    assert PronunciationService._sanitize_filename("...") != PronunciationService._sanitize_filename("!!!")


if __name__ == "__main__":
    pytest.main([__file__])

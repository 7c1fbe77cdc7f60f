"""Tests for the alphabet reference."""
import pytest

from farsiflow import alphabet


def test_alphabet_has_32_letters() -> None:
    """Test the size and uniqueness of the alphabet."""
    assert len(alphabet.LETTERS) == 32
    assert len({letter.char for letter in alphabet.LETTERS}) == 32


def test_persian_letters_are_included() -> None:
    """Test that the four letters Persian adds to the Arabic script are present."""
    chars = {letter.char for letter in alphabet.LETTERS}
    assert {"پ", "چ", "ژ", "گ"} <= chars


def test_letter_forms() -> None:
    """Test that every form is written with the letter itself."""
    for letter in alphabet.LETTERS:
        assert letter.isolated == letter.char
        for form in (letter.initial, letter.medial, letter.final):
            assert letter.char in form
        assert letter.example_word
        assert letter.example_meaning


def test_non_joining_letters() -> None:
    """Test that non-joining letters have no joined initial form."""
    for letter in alphabet.LETTERS:
        if alphabet.joins_next(letter):
            assert letter.initial.endswith("ـ")
        else:
            assert letter.initial == letter.char
    assert len([letter for letter in alphabet.LETTERS if not alphabet.joins_next(letter)]) == 7


def test_get_letter() -> None:
    """Test looking up letters by position."""
    assert alphabet.get_letter(0).name == "Alef"
    assert alphabet.get_letter(31).name == "Ye"
    assert alphabet.get_letter(32) is None
    assert alphabet.get_letter(-1) is None


@pytest.mark.parametrize("index", [0, 6, 25])
def test_pronunciation_text(index: int) -> None:
    """Test that the spoken text names the letter and its example."""
    letter = alphabet.get_letter(index)

    assert letter.pronunciation_text.startswith(letter.spoken_name)
    assert letter.pronunciation_text.endswith(letter.example_word)


if __name__ == "__main__":
    pytest.main([__file__])

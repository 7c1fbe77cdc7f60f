"""Static reference of the Persian alphabet."""
from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class Letter:
    """A letter with its joining forms and an example word."""
    char: str
    name: str
    spoken_name: str  # name in Persian script, read out by the pronunciation service
    transliteration: str
    isolated: str
    initial: str
    medial: str
    final: str
    example_word: str
    example_transliteration: str
    example_meaning: str

    @property
    def pronunciation_text(self) -> str:
        """Letter name followed by the example word."""
        return f"{self.spoken_name}، {self.example_word}"


LETTERS = (
    Letter("ا", "Alef", "الف", "â / a", "ا", "ا", "ـا", "ـا", "آب", "âb", "water"),
    Letter("ب", "Be", "به", "b", "ب", "بـ", "ـبـ", "ـب", "بابا", "bâbâ", "dad"),
    Letter("پ", "Pe", "په", "p", "پ", "پـ", "ـپـ", "ـپ", "پدر", "pedar", "father"),
    Letter("ت", "Te", "ته", "t", "ت", "تـ", "ـتـ", "ـت", "توت", "tut", "mulberry"),
    Letter("ث", "Se", "ثه", "s", "ث", "ثـ", "ـثـ", "ـث", "ثروت", "servat", "wealth"),
    Letter("ج", "Jim", "جیم", "j", "ج", "جـ", "ـجـ", "ـج", "جنگل", "jangal", "forest"),
    Letter("چ", "Che", "چه", "ch", "چ", "چـ", "ـچـ", "ـچ", "چای", "chây", "tea"),
    Letter("ح", "He-ye jimi", "حه", "h", "ح", "حـ", "ـحـ", "ـح", "حرف", "harf", "letter"),
    Letter("خ", "Khe", "خه", "kh", "خ", "خـ", "ـخـ", "ـخ", "خانه", "khâne", "house"),
    Letter("د", "Dâl", "دال", "d", "د", "د", "ـد", "ـد", "دست", "dast", "hand"),
    Letter("ذ", "Zâl", "ذال", "z", "ذ", "ذ", "ـذ", "ـذ", "ذرت", "zorrat", "corn"),
    Letter("ر", "Re", "ره", "r", "ر", "ر", "ـر", "ـر", "روز", "ruz", "day"),
    Letter("ز", "Ze", "زه", "z", "ز", "ز", "ـز", "ـز", "زبان", "zabân", "language"),
    Letter("ژ", "Zhe", "ژه", "zh", "ژ", "ژ", "ـژ", "ـژ", "ژاکت", "zhâkat", "jacket"),
    Letter("س", "Sin", "سین", "s", "س", "سـ", "ـسـ", "ـس", "سیب", "sib", "apple"),
    Letter("ش", "Shin", "شین", "sh", "ش", "شـ", "ـشـ", "ـش", "شب", "shab", "night"),
    Letter("ص", "Sâd", "صاد", "s", "ص", "صـ", "ـصـ", "ـص", "صبح", "sobh", "morning"),
    Letter("ض", "Zâd", "ضاد", "z", "ض", "ضـ", "ـضـ", "ـض", "ضعیف", "za'if", "weak"),
    Letter("ط", "Tâ", "طا", "t", "ط", "طـ", "ـطـ", "ـط", "طلا", "talâ", "gold"),
    Letter("ظ", "Zâ", "ظا", "z", "ظ", "ظـ", "ـظـ", "ـظ", "ظهر", "zohr", "noon"),
    Letter("ع", "Eyn", "عین", "'", "ع", "عـ", "ـعـ", "ـع", "عشق", "eshgh", "love"),
    Letter("غ", "Gheyn", "غین", "gh", "غ", "غـ", "ـغـ", "ـغ", "غذا", "ghazâ", "food"),
    Letter("ف", "Fe", "فه", "f", "ف", "فـ", "ـفـ", "ـف", "فردا", "fardâ", "tomorrow"),
    Letter("ق", "Ghâf", "قاف", "gh", "ق", "قـ", "ـقـ", "ـق", "قند", "ghand", "sugar"),
    Letter("ک", "Kâf", "کاف", "k", "ک", "کـ", "ـکـ", "ـک", "کتاب", "ketâb", "book"),
    Letter("گ", "Gâf", "گاف", "g", "گ", "گـ", "ـگـ", "ـگ", "گل", "gol", "flower"),
    Letter("ل", "Lâm", "لام", "l", "ل", "لـ", "ـلـ", "ـل", "لب", "lab", "lip"),
    Letter("م", "Mim", "میم", "m", "م", "مـ", "ـمـ", "ـم", "ماه", "mâh", "moon"),
    Letter("ن", "Nun", "نون", "n", "ن", "نـ", "ـنـ", "ـن", "نان", "nân", "bread"),
    Letter("و", "Vâv", "واو", "v / u / o", "و", "و", "ـو", "ـو", "ورزش", "varzesh", "sport"),
    Letter("ه", "He-ye do-cheshm", "هه", "h", "ه", "هـ", "ـهـ", "ـه", "هوا", "havâ", "air"),
    Letter("ی", "Ye", "یه", "y / i", "ی", "یـ", "ـیـ", "ـی", "یخ", "yakh", "ice"),
)

# Letters that never join the letter after them
NON_JOINING = frozenset("ادذرزژو")


def get_letter(index: int) -> Optional[Letter]:
    """Get a letter by its position in the alphabet, or None if out of range."""
    if 0 <= index < len(LETTERS):
        return LETTERS[index]
    return None


def joins_next(letter: Letter) -> bool:
    """Whether the letter connects to the one that follows it."""
    return letter.char not in NON_JOINING

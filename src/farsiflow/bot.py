"""Telegram bot handlers."""
import functools
import logging
from typing import Optional

from telegram import InlineKeyboardButton, InlineKeyboardMarkup, Update
from telegram.ext import CallbackContext

from farsiflow import alphabet, curriculum
from farsiflow.config import STAGES_PER_LEVEL
from farsiflow.models.base import SessionLocal
from farsiflow.models.progress_models import LearnerAccount
from farsiflow.services import vocabulary_service
from farsiflow.services.account_service import AccountService
from farsiflow.services.content_generator import ContentProvider, FakerContentProvider, get_language
from farsiflow.services.progress_store import SqlAlchemyProgressStore, StorageError
from farsiflow.services.progression_service import clamp_stage
from farsiflow.services.pronunciation_service import PronunciationService
from farsiflow.services.quiz_service import QuizSession

# Get logger for this module
logger = logging.getLogger(__name__)

content_provider: ContentProvider = FakerContentProvider()
pronunciation_service = PronunciationService()

# Button texts
MENU = "🏠 Menu"
CONTINUE_JOURNEY = "🗺️ Continue Journey"
VIEW_LEVELS = "📚 Levels"
VIEW_STATISTICS = "📊 Statistics"
VIEW_VOCABULARY = "📖 Vocabulary"
VIEW_LEADERBOARD = "🏆 Leaderboard"
PRONOUNCE = "🔊 Pronounce"
VIEW_ALPHABET = "🔤 Alphabet"

VOCABULARY_PAGE_SIZE = 30
LETTERS_PER_ROW = 4


def msg_back_to(text: str) -> str: return f"🔙 {text}"


ERR_MSG_NOT_REGISTERED = "Please /start first to register"
ERR_MSG_STORAGE = "⚠️ Your progress could not be loaded or saved right now. Please try again later."
ERR_MSG_NO_QUIZ = "There is no quiz in progress."

KB_BACK_TO_MENU = InlineKeyboardMarkup([
    [InlineKeyboardButton(msg_back_to(MENU), callback_data="back_to_menu")],
])


def make_contact_handle(telegram_id: int) -> str:
    """Contact handle of the account that belongs to a Telegram user."""
    return f"telegram:{telegram_id}"


def main_menu_markup() -> InlineKeyboardMarkup:
    """Keyboard of the main menu."""
    return InlineKeyboardMarkup([
        [InlineKeyboardButton(CONTINUE_JOURNEY, callback_data="play_next")],
        [InlineKeyboardButton(VIEW_LEVELS, callback_data="levels"),
         InlineKeyboardButton(VIEW_VOCABULARY, callback_data="vocabulary")],
        [InlineKeyboardButton(VIEW_STATISTICS, callback_data="statistics"),
         InlineKeyboardButton(VIEW_LEADERBOARD, callback_data="leaderboard")],
        [InlineKeyboardButton(VIEW_ALPHABET, callback_data="alphabet")],
    ])


async def log_received(update: Update, context_type: str) -> None:
    """Log message."""
    txt = ""
    if update.callback_query:
        txt = f" {update.callback_query.data}"
    elif update.message:
        txt = f" {update.message.text}"
    logger.info(f"Received @{context_type:8} from user {update.effective_user.username} ({update.effective_user.id}){txt}")


async def reply(update: Update, text: str, reply_markup: Optional[InlineKeyboardMarkup] = None) -> None:
    """Answer a command with a new message or a button press by editing its message."""
    if update.callback_query:
        await update.callback_query.edit_message_text(text, reply_markup=reply_markup)
    else:
        await update.message.reply_text(text, reply_markup=reply_markup)


def reports_storage_errors(handler):
    """Answer with ERR_MSG_STORAGE when a handler cannot reach storage."""
    @functools.wraps(handler)
    async def wrapper(update: Update, context: CallbackContext, *args, **kwargs) -> None:
        try:
            await handler(update, context, *args, **kwargs)
        except StorageError as e:
            logger.warning(f"Storage unavailable for user {update.effective_user.id}: {e}")
            await reply(update, ERR_MSG_STORAGE, KB_BACK_TO_MENU)
    return wrapper


def get_account_from_update(update: Update) -> Optional[LearnerAccount]:
    """Get the learner account of the Telegram user behind an update.

    Raises StorageError when the store cannot be read.
    """
    user = update.effective_user
    if not user:
        return None

    db = SessionLocal()
    try:
        return SqlAlchemyProgressStore(db).find_by_handle(make_contact_handle(user.id))
    finally:
        db.close()


@reports_storage_errors
async def handle_start(update: Update, context: CallbackContext) -> None:
    """Create or resume the learner's account and show the main menu."""
    user = update.effective_user
    await log_received(update, "start")

    db = SessionLocal()
    try:
        account_service = AccountService(SqlAlchemyProgressStore(db))
        account = account_service.get_or_create_account(
            name=user.first_name or user.username or "Learner",
            contact_handle=make_contact_handle(user.id),
        )
    finally:
        db.close()

    progress = account.progress
    message = (
        f"Welcome to FarsiFlow, {account.name}! 👋\n\n"
        f"🔥 Streak: {progress.streak} days\n"
        f"✨ XP: {progress.xp}\n"
        f"🎯 Level: {progress.current_level}\n\n"
    )
    fact = content_provider.generate_fact(get_language())
    if fact:
        message += f"💡 {fact.title}\n{fact.content}\n\n"
    message += "What would you like to do?"
    await reply(update, message, main_menu_markup())


async def handle_callback(update: Update, context: CallbackContext) -> None:
    """Handle callback queries from inline keyboard."""
    query = update.callback_query
    await query.answer()

    await log_received(update, "callback")

    if query.data == "back_to_menu":
        await handle_start(update, context)
    elif query.data.startswith("answer_"):
        await handle_answer(update, context)
    elif query.data == "pronounce":
        await send_pronunciation(update, context)
    elif query.data.startswith("pronounce_letter_"):
        await send_letter_pronunciation(update, context, int(query.data.removeprefix("pronounce_letter_")))
    elif query.data == "play_next":
        await handle_play(update, context)
    elif query.data.startswith("play_level_"):
        await handle_play(update, context, level_id=int(query.data.removeprefix("play_level_")))
    elif query.data.startswith("play_stage_"):
        level_id, stage = query.data.removeprefix("play_stage_").split("_")
        await handle_play(update, context, level_id=int(level_id), stage=int(stage))
    elif query.data == "alphabet":
        await show_alphabet(update, context)
    elif query.data.startswith("letter_"):
        await show_letter(update, context, int(query.data.removeprefix("letter_")))
    elif query.data == "levels":
        await show_levels(update, context)
    elif query.data == "statistics":
        await show_statistics(update, context)
    elif query.data == "vocabulary":
        await show_vocabulary(update, context)
    elif query.data == "leaderboard":
        await show_leaderboard(update, context)


@reports_storage_errors
async def show_statistics(update: Update, context: CallbackContext) -> None:
    """Show learner statistics."""
    account = get_account_from_update(update)
    if not account:
        await reply(update, ERR_MSG_NOT_REGISTERED)
        return

    db = SessionLocal()
    try:
        stats = AccountService(SqlAlchemyProgressStore(db)).get_statistics(account.id)
    finally:
        db.close()

    message = (
        "📊 Your Learning Statistics:\n\n"
        f"🔥 Streak: {stats['streak']} days\n"
        f"✨ Total XP: {stats['xp']}\n"
        f"🎯 Current level: {stats['current_level']}\n"
        f"🏁 Levels completed: {stats['levels_completed']}\n"
        f"🧩 Stages completed: {stats['stages_completed']}\n"
        f"📖 Words learned: {stats['vocabulary_size']}\n\n"
        f"Next rank at {stats['next_milestone_xp']} XP "
        f"({stats['xp_to_next_milestone']} XP to go, {stats['milestone_percent']}%)"
    )
    await reply(update, message, KB_BACK_TO_MENU)


@reports_storage_errors
async def show_levels(update: Update, context: CallbackContext) -> None:
    """Show the level map."""
    account = get_account_from_update(update)
    if not account:
        await reply(update, ERR_MSG_NOT_REGISTERED)
        return

    lines = ["📚 Levels:\n"]
    buttons = []
    for status in curriculum.level_map(account.progress):
        if status.completed:
            icon = "✅"
        elif status.current:
            icon = "▶️"
        elif status.unlocked:
            icon = "🔓"
        else:
            icon = "🔒"
        lines.append(
            f"{icon} {status.level.id}. {status.level.title} "
            f"[{status.level.stage_label}] {status.stages_completed}/{STAGES_PER_LEVEL}"
        )
        if status.unlocked:
            buttons.append([InlineKeyboardButton(
                f"{status.level.id}. {status.level.title}",
                callback_data=f"play_level_{status.level.id}",
            )])

    buttons.append([InlineKeyboardButton(msg_back_to(MENU), callback_data="back_to_menu")])
    await reply(update, "\n".join(lines), InlineKeyboardMarkup(buttons))


@reports_storage_errors
async def show_vocabulary(update: Update, context: CallbackContext) -> None:
    """Show the learner's vocabulary, optionally filtered by /vocab <query>."""
    account = get_account_from_update(update)
    if not account:
        await reply(update, ERR_MSG_NOT_REGISTERED)
        return

    query = " ".join(context.args or []) if not update.callback_query else ""
    entries = vocabulary_service.search(account.progress.vocabulary, query)
    if not entries:
        message = "📖 No words yet. Complete a stage to start your vocabulary!"
        if query:
            message = f"📖 No words matching '{query}'."
    else:
        shown = entries[-VOCABULARY_PAGE_SIZE:]
        lines = [f"📖 Your vocabulary ({len(entries)} words):\n"]
        lines.extend(f"{entry.word} ({entry.transliteration}): {entry.meaning}" for entry in shown)
        if len(entries) > len(shown):
            lines.append(f"\n…and {len(entries) - len(shown)} more. Use /vocab <word> to search.")
        message = "\n".join(lines)

    await reply(update, message, KB_BACK_TO_MENU)


@reports_storage_errors
async def show_leaderboard(update: Update, context: CallbackContext) -> None:
    """Show the leaderboard."""
    account = get_account_from_update(update)
    if not account:
        await reply(update, ERR_MSG_NOT_REGISTERED)
        return

    db = SessionLocal()
    try:
        entries = AccountService(SqlAlchemyProgressStore(db)).get_leaderboard(account.id)
    finally:
        db.close()

    medals = {1: "🥇", 2: "🥈", 3: "🥉"}
    lines = ["🏆 Leaderboard:\n"]
    for entry in entries:
        name = f"{entry.name} (you)" if entry.is_user else entry.name
        lines.append(f"{medals.get(entry.rank, f'{entry.rank}.')} {name}: {entry.xp} XP")
    await reply(update, "\n".join(lines), KB_BACK_TO_MENU)


def parse_level_and_stage(args: list) -> tuple:
    """Parse '<level> [stage]' command arguments."""
    level_id = int(args[0]) if args else None
    stage = int(args[1]) if len(args) > 1 else None
    return level_id, stage


@reports_storage_errors
async def handle_play(
    update: Update,
    context: CallbackContext,
    level_id: Optional[int] = None,
    stage: Optional[int] = None,
) -> None:
    """Start the quiz of a stage: /play [level] [stage]."""
    account = get_account_from_update(update)
    if not account:
        await reply(update, ERR_MSG_NOT_REGISTERED)
        return

    # Starting a stage counts as resuming the session
    db = SessionLocal()
    try:
        account = AccountService(SqlAlchemyProgressStore(db)).resume(account.id)
    finally:
        db.close()

    if level_id is None and not update.callback_query:
        try:
            level_id, stage = parse_level_and_stage(context.args or [])
        except ValueError:
            await reply(update, "Usage: /play <level> [stage]")
            return
    if level_id is None:
        level_id = account.progress.current_level

    level = curriculum.find_level(level_id)
    if level is None:
        await reply(update, f"Level {level_id} does not exist.", KB_BACK_TO_MENU)
        return
    if not curriculum.is_unlocked(account.progress, level_id):
        await reply(update, f"🔒 Level {level_id} is locked. Finish level {account.progress.current_level} first.", KB_BACK_TO_MENU)
        return

    stage = clamp_stage(stage) if stage is not None else curriculum.default_start_stage(account.progress, level_id)
    items = content_provider.generate_quiz(level.topic, level.difficulty, stage, get_language())
    if not items:
        await reply(update, "Sorry, I couldn't prepare this quiz. Please try again later.", KB_BACK_TO_MENU)
        return

    quiz = QuizSession(level_id=level_id, stage=stage, items=items)
    context.user_data["quiz"] = quiz
    await send_question(update, quiz)


async def send_question(update: Update, quiz: QuizSession, feedback: str = "") -> None:
    """Send the current question of a quiz."""
    item = quiz.current_item
    level = curriculum.get_level(quiz.level_id)

    buttons = [
        [InlineKeyboardButton(option, callback_data=f"answer_{index}")]
        for index, option in enumerate(item.options)
    ]
    if item.pronunciation_text:
        buttons.append([InlineKeyboardButton(PRONOUNCE, callback_data="pronounce")])

    message = (
        f"{level.title} · Stage {quiz.stage}/{STAGES_PER_LEVEL}\n"
        f"Question {quiz.current_index + 1}/{len(quiz.items)}\n\n"
        f"{item.question}"
    )
    if feedback:
        message = f"{feedback}\n\n{message}"
    await reply(update, message, InlineKeyboardMarkup(buttons))


@reports_storage_errors
async def handle_answer(update: Update, context: CallbackContext) -> None:
    """Check an answer and move on to the next question."""
    quiz = context.user_data.get("quiz")
    if quiz is None or quiz.is_finished:
        await reply(update, ERR_MSG_NO_QUIZ, KB_BACK_TO_MENU)
        return

    item = quiz.current_item
    option_index = int(update.callback_query.data.removeprefix("answer_"))
    if quiz.answer(option_index):
        feedback = "✅ Correct!"
    else:
        feedback = f"❌ Incorrect. The answer was: {item.options[item.correct_index]}"
    if item.explanation:
        feedback += f"\n{item.explanation}"

    if quiz.is_finished:
        await finish_quiz(update, context, quiz, feedback)
    else:
        await send_question(update, quiz, feedback)


async def finish_quiz(update: Update, context: CallbackContext, quiz: QuizSession, feedback: str = "") -> None:
    """Record the completed stage and report the result."""
    context.user_data.pop("quiz", None)
    account = get_account_from_update(update)
    if not account:
        await reply(update, ERR_MSG_NOT_REGISTERED)
        return

    db = SessionLocal()
    try:
        outcome = AccountService(SqlAlchemyProgressStore(db)).record_stage_completion(
            account.id,
            quiz.level_id,
            quiz.stage,
            quiz.xp_earned,
            quiz.collected_words,
        )
    finally:
        db.close()

    lines = [
        f"🎉 Stage {outcome.stage} complete!",
        f"Score: {quiz.score}/{len(quiz.items)}",
        f"✨ +{outcome.xp_gained} XP (total {outcome.progress.xp})",
        f"📖 {outcome.words_added} new words",
    ]
    if outcome.level_unlocked:
        lines.append(f"🔓 Level {outcome.progress.current_level} unlocked!")
    message = "\n".join(lines)
    if feedback:
        message = f"{feedback}\n\n{message}"

    await reply(update, message, InlineKeyboardMarkup([
        [InlineKeyboardButton(CONTINUE_JOURNEY, callback_data="play_next")],
        [InlineKeyboardButton(msg_back_to(MENU), callback_data="back_to_menu")],
    ]))


@reports_storage_errors
async def handle_lesson(update: Update, context: CallbackContext) -> None:
    """Show the study handout of a stage: /lesson [level] [stage]."""
    account = get_account_from_update(update)
    if not account:
        await reply(update, ERR_MSG_NOT_REGISTERED)
        return

    try:
        level_id, stage = parse_level_and_stage(context.args or [])
    except ValueError:
        await reply(update, "Usage: /lesson <level> [stage]")
        return
    if level_id is None:
        level_id = account.progress.current_level

    level = curriculum.find_level(level_id)
    if level is None or not curriculum.is_unlocked(account.progress, level_id):
        await reply(update, f"Level {level_id} is not available.", KB_BACK_TO_MENU)
        return

    stage = clamp_stage(stage) if stage is not None else curriculum.default_start_stage(account.progress, level_id)
    handout = content_provider.generate_handout(level.topic, level.difficulty, stage, get_language())
    if handout is None:
        await reply(update, "Sorry, I couldn't prepare this lesson. Please try again later.", KB_BACK_TO_MENU)
        return

    lines = [f"📝 {handout.title}", "", handout.introduction, "", "Vocabulary:"]
    lines.extend(f"• {word.word} ({word.transliteration}): {word.meaning}" for word in handout.vocabulary)
    lines.extend(["", "Grammar:"])
    lines.extend(f"• {point.title}: {point.content}" for point in handout.grammar)
    lines.extend(["", "Usage:"])
    lines.extend(f"• {s.persian} ({s.transliteration}): {s.translation}" for s in handout.sentences)
    if handout.cultural_note:
        lines.extend(["", f"🌍 {handout.cultural_note}"])

    await reply(update, "\n".join(lines), InlineKeyboardMarkup([
        [InlineKeyboardButton("▶️ Start quiz", callback_data=f"play_stage_{level_id}_{stage}")],
        [InlineKeyboardButton(msg_back_to(MENU), callback_data="back_to_menu")],
    ]))


async def send_audio_file(update: Update, text: str) -> None:
    """Generate the pronunciation of ``text`` and send it as audio."""
    audio_file_path = pronunciation_service.generate_pronunciation(text)
    if not audio_file_path:
        await update.callback_query.message.reply_text("No pronunciation available")
        return

    try:
        with open(audio_file_path, "rb") as audio:
            await update.callback_query.message.reply_audio(audio)
    except Exception as e:
        logger.error(f"Error sending audio file: {str(e)}")
        await update.callback_query.message.reply_text(
            "Sorry, I couldn't send the audio file. Please try again later."
        )


async def send_pronunciation(update: Update, context: CallbackContext) -> None:
    """Send the pronunciation of the current quiz item as audio."""
    quiz = context.user_data.get("quiz")
    item = quiz.current_item if quiz else None
    if item is None or not item.pronunciation_text:
        await update.callback_query.message.reply_text("No pronunciation available")
        return

    await send_audio_file(update, item.pronunciation_text)


async def show_alphabet(update: Update, context: CallbackContext) -> None:
    """Show the letters of the alphabet: /alphabet."""
    await log_received(update, "alphabet")

    lines = [f"🔤 The Persian alphabet ({len(alphabet.LETTERS)} letters):\n"]
    lines.extend(f"{letter.char}  {letter.name} ({letter.transliteration})" for letter in alphabet.LETTERS)
    lines.append("\nPick a letter to see its forms and hear it.")

    buttons = [
        InlineKeyboardButton(letter.char, callback_data=f"letter_{index}")
        for index, letter in enumerate(alphabet.LETTERS)
    ]
    rows = [buttons[i:i + LETTERS_PER_ROW] for i in range(0, len(buttons), LETTERS_PER_ROW)]
    rows.append([InlineKeyboardButton(msg_back_to(MENU), callback_data="back_to_menu")])
    await reply(update, "\n".join(lines), InlineKeyboardMarkup(rows))


async def show_letter(update: Update, context: CallbackContext, index: int) -> None:
    """Show the card of one letter."""
    letter = alphabet.get_letter(index)
    if letter is None:
        await reply(update, "Unknown letter.", KB_BACK_TO_MENU)
        return

    lines = [
        f"{letter.char}  {letter.name} ({letter.transliteration})",
        "",
        "Forms (isolated, initial, medial, final):",
        f"{letter.isolated}   {letter.initial}   {letter.medial}   {letter.final}",
    ]
    if not alphabet.joins_next(letter):
        lines.append("Never joins the letter after it.")
    lines.extend([
        "",
        f"Example: {letter.example_word} ({letter.example_transliteration}): {letter.example_meaning}",
    ])

    await reply(update, "\n".join(lines), InlineKeyboardMarkup([
        [InlineKeyboardButton(PRONOUNCE, callback_data=f"pronounce_letter_{index}")],
        [InlineKeyboardButton(msg_back_to(VIEW_ALPHABET), callback_data="alphabet")],
        [InlineKeyboardButton(msg_back_to(MENU), callback_data="back_to_menu")],
    ]))


async def send_letter_pronunciation(update: Update, context: CallbackContext, index: int) -> None:
    """Send the spoken name of a letter and its example word."""
    letter = alphabet.get_letter(index)
    if letter is None:
        await update.callback_query.message.reply_text("No pronunciation available")
        return

    await send_audio_file(update, letter.pronunciation_text)


async def handle_error(update: object, context: CallbackContext) -> None:
    """Log errors raised by handlers."""
    logger.error(f"Error while handling an update: {context.error}", exc_info=context.error)

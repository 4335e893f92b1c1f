"""Bot entry point with handlers and commands"""
import asyncio
import logging
from pathlib import Path
from typing import List, Optional, Tuple

from aiogram import Bot, Dispatcher, Router
from aiogram.filters import Command, CommandStart
from aiogram.fsm.context import FSMContext
from aiogram.fsm.storage.memory import MemoryStorage
from aiogram.types import Message, CallbackQuery, FSInputFile, InlineKeyboardMarkup, InlineKeyboardButton
from aiogram.utils.keyboard import InlineKeyboardBuilder

import config
from llm_client import LLMClient
from questions import QUESTIONS, AnswerMode, Question
from session_manager import session_manager
from states import GenerationState, WebsiteWizardStates
from templates import (
    WELCOME_MESSAGE, HELP_MESSAGE, PROMPT_READY_MESSAGE, GENERATING_MESSAGE,
    GENERATION_SUCCEEDED_MESSAGE, GENERATION_FAILED_MESSAGE, ERROR_MESSAGE
)
from utils import (
    create_export_file, format_question, make_callback_data, parse_callback_data,
    render_transcript, split_message
)
from wizard import Session, WizardError

# Logging setup
logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(config.LOG_FILE, encoding='utf-8'),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger(__name__)

# Bot and dispatcher
bot = Bot(token=config.BOT_TOKEN)
storage = MemoryStorage()
dp = Dispatcher(storage=storage)
router = Router()

# Generation client
llm_client = LLMClient()

ALREADY_ANSWERED = "This question has already been answered."
OUTDATED_BUTTON = "This button belongs to an earlier session. Use the latest message."


def create_question_keyboard(
    token: int,
    question_index: int,
    question: Question,
    staging: Optional[List[str]] = None
) -> InlineKeyboardMarkup:
    """Keyboard with the options of a question"""
    builder = InlineKeyboardBuilder()
    selected = staging or []

    for option_index, option in enumerate(question.choices):
        label = f"✅ {option}" if option in selected else option
        builder.add(InlineKeyboardButton(
            text=label, callback_data=make_callback_data("opt", token, question_index, option_index)
        ))

    if question.mode == AnswerMode.MULTI_CHOICE:
        builder.add(InlineKeyboardButton(
            text=f"Continue with Selected ({len(selected)})",
            callback_data=make_callback_data("done", token, question_index)
        ))
    elif question.mode == AnswerMode.FREE_TEXT:
        builder.add(InlineKeyboardButton(
            text="⏭ Skip", callback_data=make_callback_data("skip", token, question_index)
        ))

    builder.adjust(2)
    return builder.as_markup()


def create_prompt_keyboard(token: int) -> InlineKeyboardMarkup:
    """Keyboard for reviewing the synthesized prompt"""
    builder = InlineKeyboardBuilder()
    builder.add(InlineKeyboardButton(
        text="🚀 Generate Website", callback_data=make_callback_data("generate", token)
    ))
    builder.add(InlineKeyboardButton(
        text="🔄 Start Over", callback_data=make_callback_data("restart", token)
    ))
    builder.adjust(1)
    return builder.as_markup()


def create_result_keyboard(token: int) -> InlineKeyboardMarkup:
    """Keyboard shown after a generation attempt"""
    builder = InlineKeyboardBuilder()
    builder.add(InlineKeyboardButton(
        text="✨ Create Another Website", callback_data=make_callback_data("restart", token)
    ))
    return builder.as_markup()


async def current_session_for(callback: CallbackQuery) -> Tuple[Optional[Session], List[int]]:
    """Session the pressed button belongs to, or None if the button is outdated"""
    _, token, args = parse_callback_data(callback.data)
    session = session_manager.get_session(callback.from_user.id)
    if session.token != token:
        logger.warning(f"Outdated button from user {callback.from_user.id} (session {token})")
        await callback.answer(OUTDATED_BUTTON, show_alert=True)
        return None, args
    return session, args


async def send_pending_question(message: Message, state: FSMContext, session: Session):
    """Show the question the session is waiting on"""
    question = session.pending_question()
    if question is None:
        return

    await message.answer(
        format_question(question, session.index + 1, len(QUESTIONS)),
        reply_markup=create_question_keyboard(session.token, session.index, question, session.staging)
    )

    if question.mode == AnswerMode.FREE_TEXT:
        await state.set_state(WebsiteWizardStates.waiting_for_free_text)
    else:
        await state.set_state(WebsiteWizardStates.answering_question)


async def advance(message: Message, state: FSMContext, session: Session):
    """Show the next question, or the synthesized prompt once all are answered"""
    if session.generation_state != GenerationState.COMPOSING:
        await send_pending_question(message, state, session)
        return

    await state.set_state(WebsiteWizardStates.confirming_prompt)
    await message.answer(PROMPT_READY_MESSAGE)

    chunks = split_message(session.request)
    for chunk in chunks[:-1]:
        await message.answer(chunk)
    await message.answer(chunks[-1], reply_markup=create_prompt_keyboard(session.token))


async def start_wizard(message: Message, state: FSMContext, user_id: int, prefix: str = ""):
    """Start a brand-new session and ask the first question"""
    session = session_manager.reset_session(user_id)
    await state.clear()
    await message.answer(prefix + WELCOME_MESSAGE)
    await send_pending_question(message, state, session)


async def close_question_message(callback: CallbackQuery, answer: str):
    """Replace the question's keyboard with the recorded answer"""
    text = callback.message.text or ""
    await callback.message.edit_text(f"{text}\n\n👤 {answer}")


@router.message(CommandStart())
async def cmd_start(message: Message, state: FSMContext):
    """Handler for /start"""
    logger.info(f"User {message.from_user.id} started the bot")
    await start_wizard(message, state, message.from_user.id)


@router.message(Command("help"))
async def cmd_help(message: Message):
    """Handler for /help"""
    await message.answer(HELP_MESSAGE, parse_mode="Markdown")


@router.message(Command("restart"))
async def cmd_restart(message: Message, state: FSMContext):
    """Handler for /restart"""
    logger.info(f"User {message.from_user.id} restarted the wizard")
    await start_wizard(message, state, message.from_user.id, prefix="🔄 Starting over!\n\n")


@router.message(Command("history"))
async def cmd_history(message: Message):
    """Handler for /history - replay the conversation"""
    events = session_manager.get_transcript(message.from_user.id)
    for chunk in split_message(render_transcript(events)):
        await message.answer(chunk)


# Callback handlers
@router.callback_query(lambda c: c.data and c.data.startswith("opt:"))
async def process_option(callback: CallbackQuery, state: FSMContext):
    """Option button: answer a single-choice question or toggle a multi-choice option"""
    user_id = callback.from_user.id
    session, (question_index, option_index) = await current_session_for(callback)
    if session is None:
        return

    question = QUESTIONS[question_index]
    option = question.choices[option_index]

    if session.pending_question() != question:
        await callback.answer(ALREADY_ANSWERED, show_alert=True)
        return

    try:
        if question.mode == AnswerMode.MULTI_CHOICE:
            staging = session_manager.toggle_selection(user_id, option)
            await callback.answer()
            await callback.message.edit_reply_markup(
                reply_markup=create_question_keyboard(session.token, question_index, question, staging)
            )
            return

        session_manager.submit_answer(user_id, question.key, option)
    except WizardError as e:
        logger.warning(f"Rejected option from user {user_id}: {e}")
        await callback.answer(str(e), show_alert=True)
        return

    await callback.answer()
    await close_question_message(callback, option)
    await advance(callback.message, state, session)


@router.callback_query(lambda c: c.data and c.data.startswith("done:"))
async def process_selection_done(callback: CallbackQuery, state: FSMContext):
    """Submit the selected options of a multi-choice question"""
    user_id = callback.from_user.id
    session, (question_index,) = await current_session_for(callback)
    if session is None:
        return

    question = QUESTIONS[question_index]
    if session.pending_question() != question:
        await callback.answer(ALREADY_ANSWERED, show_alert=True)
        return

    try:
        session_manager.submit_selection(user_id)
    except WizardError as e:
        await callback.answer(str(e), show_alert=True)
        return

    await callback.answer()
    await close_question_message(callback, ", ".join(session.answers[question.key]))
    await advance(callback.message, state, session)


@router.callback_query(lambda c: c.data and c.data.startswith("skip:"))
async def process_skip(callback: CallbackQuery, state: FSMContext):
    """Skip a free-text question"""
    user_id = callback.from_user.id
    session, (question_index,) = await current_session_for(callback)
    if session is None:
        return

    try:
        session_manager.submit_answer(user_id, QUESTIONS[question_index].key, "")
    except WizardError:
        await callback.answer(ALREADY_ANSWERED, show_alert=True)
        return

    await callback.answer()
    await close_question_message(callback, "(skipped)")
    await advance(callback.message, state, session)


@router.callback_query(lambda c: c.data and c.data.startswith("generate:"))
async def process_generate(callback: CallbackQuery, state: FSMContext):
    """Send the synthesized prompt to the generation service"""
    user_id = callback.from_user.id
    session, _ = await current_session_for(callback)
    if session is None:
        return

    # Confirm before the first await so a second tap cannot start another request
    try:
        token, request = session_manager.begin_generation(user_id)
    except WizardError as e:
        logger.warning(f"Generation not started for user {user_id}: {e}")
        await callback.answer("Nothing to generate right now.", show_alert=True)
        return

    await callback.answer()
    await callback.message.edit_reply_markup(reply_markup=None)
    await state.set_state(WebsiteWizardStates.generating)
    await callback.message.answer(GENERATING_MESSAGE)

    settled = await session_manager.finish_generation(user_id, token, request, llm_client)
    if settled is None:
        # The user started over while the request was in flight
        return

    await state.set_state(WebsiteWizardStates.finished)

    if settled.generation_state != GenerationState.SUCCEEDED:
        await callback.message.answer(
            GENERATION_FAILED_MESSAGE, reply_markup=create_result_keyboard(settled.token)
        )
        return

    try:
        file_path = create_export_file(settled.artifact, user_id)
        file = FSInputFile(file_path, filename=config.EXPORT_FILENAME)
        await callback.message.answer_document(
            file,
            caption=GENERATION_SUCCEEDED_MESSAGE,
            reply_markup=create_result_keyboard(settled.token)
        )
        logger.info(f"Website sent to user {user_id}")
    except Exception as e:
        logger.error(f"Error while exporting website: {e}")
        await callback.message.answer(ERROR_MESSAGE)


@router.callback_query(lambda c: c.data and c.data.startswith("restart:"))
async def process_restart_callback(callback: CallbackQuery, state: FSMContext):
    """Start over via button"""
    session, _ = await current_session_for(callback)
    if session is None:
        return

    await callback.answer()
    await callback.message.edit_reply_markup(reply_markup=None)
    await start_wizard(callback.message, state, callback.from_user.id, prefix="🔄 Starting over!\n\n")


# Message handlers for FSM states
@router.message(WebsiteWizardStates.waiting_for_free_text)
async def process_free_text(message: Message, state: FSMContext):
    """Typed answer to a free-text question"""
    user_id = message.from_user.id
    session = session_manager.get_session(user_id)
    question = session.pending_question()

    if not message.text:
        await message.answer("❌ Please send your answer as text.")
        return

    if question is None or question.mode != AnswerMode.FREE_TEXT:
        await message.answer("❌ Please use the buttons to answer.")
        return

    try:
        session_manager.submit_answer(user_id, question.key, message.text)
    except WizardError as e:
        logger.error(f"Error while recording answer: {e}")
        await message.answer(ERROR_MESSAGE)
        return

    await advance(message, state, session)


# Handler for all other messages
@router.message()
async def process_other_messages(message: Message):
    """Fallback for unexpected messages"""
    await message.answer(
        "❓ Please use the buttons to answer, /help for help or /start to begin."
    )


async def main():
    """Bot main function"""
    logger.info("Starting bot...")

    dp.include_router(router)

    Path(config.EXPORT_DIR).mkdir(parents=True, exist_ok=True)

    await dp.start_polling(bot, allowed_updates=dp.resolve_used_update_types())


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Bot stopped by user")
    except Exception as e:
        logger.error(f"Critical error: {e}")

import asyncio
import itertools
import logging
from typing import Dict, List, Optional

import requests
from dotenv import load_dotenv
from telegram import Update, InlineKeyboardButton, InlineKeyboardMarkup
from telegram.ext import Application, CommandHandler, CallbackQueryHandler, ContextTypes

from smartquiz import config

logger = logging.getLogger(__name__)

OPTION_LABELS = ["A", "B", "C", "D"]
REQUEST_TIMEOUT = 60

# Quiz progress per Telegram user; lives only as long as the bot process
user_sessions: Dict[int, dict] = {}

# Distinguishes keyboards of an earlier quiz from the current one
_quiz_numbers = itertools.count(1)


class BackendError(Exception):
    """The quiz API could not be reached or answered with an error."""


def _post(path: str, payload: dict) -> dict:
    api_url = f"{config.get_backend_url()}{path}"
    logger.info(f"Calling API: {api_url}")
    try:
        response = requests.post(api_url, json=payload, timeout=REQUEST_TIMEOUT)
    except requests.exceptions.ConnectionError as e:
        logger.error(f"Connection error: {e}")
        raise BackendError(
            f"Cannot connect to backend server at {config.get_backend_url()}.\n"
            "Please make sure the API is running: `uvicorn smartquiz.main:app`"
        ) from e
    except requests.exceptions.Timeout as e:
        logger.error(f"Timeout error: {e}")
        raise BackendError("The backend took too long to respond. Please try again.") from e
    except requests.exceptions.RequestException as e:
        logger.error(f"Request error: {e}")
        raise BackendError(f"Error connecting to backend: {str(e)[:200]}") from e

    logger.info(f"API Response Status: {response.status_code}")
    if response.status_code != 200:
        logger.error(f"API Error: {response.text}")
        try:
            message = response.json().get("error")
        except (ValueError, AttributeError):
            message = None
        raise BackendError(message or f"Backend returned status {response.status_code}.")
    return response.json()


async def request_quiz(topic: str) -> List[dict]:
    data = await asyncio.to_thread(_post, "/api/quiz/generate", {"topic": topic})
    questions = data.get("questions") if isinstance(data, dict) else None
    if not questions:
        raise BackendError("Failed to generate quiz. The data format was incorrect.")
    return questions


async def request_evaluation(questions: List[dict], answers: List[Optional[int]]) -> dict:
    payload = {"quizData": {"questions": questions}, "userAnswers": answers}
    return await asyncio.to_thread(_post, "/api/quiz/evaluate", payload)


def format_question(session: dict) -> str:
    index = session["current_question"]
    total = len(session["questions"])
    question = session["questions"][index]
    return (
        f"📝 Question {index + 1}/{total}\n"
        f"Topic: {session['topic']}\n\n"
        f"{question.get('question', '')}"
    )


def build_keyboard(session: dict, user_id: int) -> InlineKeyboardMarkup:
    position = session["current_question"]
    question = session["questions"][position]
    keyboard = []
    for index, option in enumerate(question.get("options", [])[:len(OPTION_LABELS)]):
        keyboard.append([
            InlineKeyboardButton(
                f"{OPTION_LABELS[index]}: {option}",
                callback_data=f"answer_{session['quiz']}_{position}_{index}_{user_id}"
            )
        ])
    return InlineKeyboardMarkup(keyboard)


def format_results(report: dict) -> str:
    score = report.get("score", 0)
    total = report.get("total", 0)
    percentage = (score / total) * 100 if total else 0.0

    lines = [
        "🎉 Quiz Completed! 🎉",
        "",
        f"📊 Your Score: {score}/{total} ({percentage:.1f}%)",
        "",
    ]
    for number, item in enumerate(report.get("feedback", []), start=1):
        mark = "✅" if item.get("isCorrect") else "❌"
        lines.append(f"{mark} {number}. {item.get('question')}")
        lines.append(f"Your answer: {item.get('userAnswer')}")
        if not item.get("isCorrect"):
            lines.append(f"Correct answer: {item.get('correctAnswer')}")
        lines.append(f"Explanation: {item.get('explanation')}")
        lines.append("")
    lines.append("Start a new quiz with /quiz <topic>")
    return "\n".join(lines)


async def _reply(update: Update, text: str, reply_markup=None):
    message = update.callback_query.message if update.callback_query else update.message
    await message.reply_text(text, reply_markup=reply_markup)


async def start(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Start command handler"""
    logger.info(f"Start command from user {update.effective_user.id}")
    await update.message.reply_text(
        "🎓 Welcome to Smart Quiz! 🤖\n\n"
        f"Send me any topic and I will generate a {config.QUIZ_LENGTH}-question quiz.\n\n"
        "Commands:\n"
        "/quiz <topic> - Start a quiz\n"
        "Example: /quiz Photosynthesis\n\n"
        "/help - Show help message"
    )


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Help command handler"""
    logger.info(f"Help command from user {update.effective_user.id}")
    await update.message.reply_text(
        "📚 How to use Smart Quiz:\n\n"
        "1️⃣ /quiz <topic>, e.g. /quiz World War II\n"
        "2️⃣ Pick A, B, C or D for every question\n"
        "3️⃣ After the last question you get your score\n"
        "   with an explanation for each answer"
    )


async def quiz_command(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Quiz command handler"""
    user_id = update.effective_user.id
    topic = " ".join(context.args).strip()
    logger.info(f"Quiz command from user {user_id} with topic: {topic!r}")

    if not topic:
        await update.message.reply_text(
            "❌ Please enter a topic.\n\n"
            "Usage: /quiz <topic>\n"
            "Example: /quiz Photosynthesis"
        )
        return

    loading_msg = await update.message.reply_text(
        f"🔄 Generating quiz for \"{topic}\"...\n"
        "(This may take a moment)"
    )

    try:
        questions = await request_quiz(topic)
    except BackendError as e:
        await loading_msg.edit_text(f"❌ {e}")
        return

    logger.info(f"Quiz generated with {len(questions)} questions for user {user_id}")
    user_sessions[user_id] = {
        "quiz": next(_quiz_numbers),
        "topic": topic,
        "questions": questions,
        "answers": [None] * len(questions),
        "current_question": 0
    }

    await loading_msg.delete()
    await send_question(update, context, user_id)


async def send_question(update: Update, context: ContextTypes.DEFAULT_TYPE, user_id: int):
    """Send the current question, or submit the quiz once all are answered"""
    session = user_sessions.get(user_id)
    if not session:
        logger.warning(f"No session found for user {user_id}")
        return

    if session["current_question"] >= len(session["questions"]):
        await finish_quiz(update, user_id)
        return

    await _reply(update, format_question(session), reply_markup=build_keyboard(session, user_id))


async def finish_quiz(update: Update, user_id: int):
    """Submit the answers; the session is kept until the API has scored them"""
    session = user_sessions.get(user_id)
    if not session:
        logger.warning(f"No session to submit for user {user_id}")
        return

    try:
        report = await request_evaluation(session["questions"], session["answers"])
    except BackendError as e:
        retry = InlineKeyboardMarkup([[
            InlineKeyboardButton("🔁 Submit again", callback_data=f"submit_{session['quiz']}_{user_id}")
        ]])
        await _reply(update, f"❌ An error occurred while submitting the quiz.\n{e}", reply_markup=retry)
        return

    user_sessions.pop(user_id, None)
    logger.info(f"Quiz finished for user {user_id}. Score: {report.get('score')}/{report.get('total')}")
    await _reply(update, format_results(report))


async def answer_callback(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Handle answer button clicks"""
    query = update.callback_query
    logger.info(f"Answer callback: {query.data}")

    _, quiz, position, selected, user_id_str = query.data.split("_")
    user_id = int(user_id_str)

    if update.effective_user.id != user_id:
        await query.answer("❌ This is not your quiz!", show_alert=True)
        return
    await query.answer()

    session = user_sessions.get(user_id)
    if not session:
        logger.warning(f"No session for user {user_id}")
        await query.edit_message_text("❌ Quiz session expired. Start a new quiz with /quiz")
        return

    index = session["current_question"]
    if int(quiz) != session["quiz"] or int(position) != index:
        # Button from an already answered question or an earlier quiz
        logger.info(f"Ignoring stale answer from user {user_id}: {query.data}")
        return

    question = session["questions"][index]
    selected_index = int(selected)
    session["answers"][index] = selected_index
    session["current_question"] += 1

    options = question.get("options", [])
    chosen_text = options[selected_index] if selected_index < len(options) else ""
    await query.edit_message_text(
        f"📝 Question {index + 1}/{len(session['questions'])}\n"
        f"Topic: {session['topic']}\n\n"
        f"{question.get('question', '')}\n\n"
        f"☑️ Your answer: {OPTION_LABELS[selected_index]}: {chosen_text}"
    )

    await send_question(update, context, user_id)


async def submit_callback(update: Update, context: ContextTypes.DEFAULT_TYPE):
    """Retry submitting a finished quiz"""
    query = update.callback_query
    _, quiz, user_id_str = query.data.split("_")
    user_id = int(user_id_str)

    if update.effective_user.id != user_id:
        await query.answer("❌ This is not your quiz!", show_alert=True)
        return
    await query.answer()

    session = user_sessions.get(user_id)
    if not session or session["quiz"] != int(quiz):
        await query.edit_message_text("❌ Quiz session expired. Start a new quiz with /quiz")
        return

    await query.edit_message_reply_markup(reply_markup=None)
    await finish_quiz(update, user_id)


def main():
    """Start the bot"""
    load_dotenv()
    config.configure_logging()

    token = config.get_telegram_token()
    if not token:
        logger.error("TELEGRAM_BOT_TOKEN not found in environment variables!")
        return

    logger.info(f"Starting bot, backend URL: {config.get_backend_url()}")

    application = Application.builder().token(token).build()

    application.add_handler(CommandHandler("start", start))
    application.add_handler(CommandHandler("help", help_command))
    application.add_handler(CommandHandler("quiz", quiz_command))
    application.add_handler(CallbackQueryHandler(answer_callback, pattern="^answer_"))
    application.add_handler(CallbackQueryHandler(submit_callback, pattern="^submit_"))

    logger.info("Bot started successfully!")
    application.run_polling(allowed_updates=Update.ALL_TYPES)


if __name__ == "__main__":
    main()

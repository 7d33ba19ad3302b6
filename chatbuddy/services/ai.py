from loguru import logger

from ..schemas import QuizQuestion, Flashcard
from .llm import llm, ping, AIServiceError
from .parse import parse_quiz, parse_flashcards, QUIZ_SIZE, DECK_SIZE

EXPLAIN_SYS = (
    "You are an expert educator who explains complex topics in simple, engaging ways. "
    "Use analogies and real-world examples."
)
SUMMARY_SYS = (
    "You are a study skills expert who writes clear, organized summaries "
    "that help students learn and retain information."
)
QUIZ_SYS = (
    "You are an expert quiz creator who writes educational multiple-choice questions "
    "that test understanding rather than memorization."
)
FLASHCARDS_SYS = (
    "You are an expert at creating educational flashcards. "
    "Focus on clarity, accuracy and progressive difficulty."
)
QUESTION_SYS = (
    "You are a helpful AI study assistant. Give clear, accurate, encouraging answers "
    "to student questions about any academic topic."
)


async def explain_topic(topic: str) -> str:
    logger.info(f"[ai] explain topic={topic!r}")
    prompt = (
        f'Explain "{topic}" in simple terms for a student. Include a clear definition, '
        "the key concepts, real-world examples and why it matters. Keep it concise."
    )
    return await llm(
        [{"role": "system", "content": EXPLAIN_SYS}, {"role": "user", "content": prompt}],
        max_tokens=800, temperature=0.7,
    )


async def summarize_notes(notes: str) -> str:
    prompt = (
        "Summarize the following study notes under three headings: Key Points, "
        "Important Details and Study Tips. Use bullet points.\n\n"
        f"Notes to summarize:\n{notes}"
    )
    return await llm(
        [{"role": "system", "content": SUMMARY_SYS}, {"role": "user", "content": prompt}],
        max_tokens=600, temperature=0.5,
    )


async def generate_quiz(topic: str) -> list[QuizQuestion]:
    prompt = (
        f'Create a {QUIZ_SIZE}-question multiple-choice quiz about "{topic}".\n\n'
        "Use exactly this format for each question:\n"
        "Question: <question text>\nA) <option>\nB) <option>\nC) <option>\nD) <option>\n"
        "Correct: <A, B, C or D>\n\n"
        "Separate questions with a line containing only ---"
    )
    raw = await llm(
        [{"role": "system", "content": QUIZ_SYS}, {"role": "user", "content": prompt}],
        max_tokens=800, temperature=0.7,
    )
    return parse_quiz(raw, topic)


async def generate_flashcards(topic: str) -> list[Flashcard]:
    prompt = (
        f'Create exactly {DECK_SIZE} flashcards about "{topic}", from basic to advanced.\n\n'
        "Format each one exactly like this, with a blank line between cards:\n"
        "Front: <question or key concept>\nBack: <concise answer>\n\n"
        'Do not number the cards or write "Card 1:".'
    )
    raw = await llm(
        [{"role": "system", "content": FLASHCARDS_SYS}, {"role": "user", "content": prompt}],
        max_tokens=600, temperature=0.7,
    )
    return parse_flashcards(raw, topic)


async def ask_question(question: str) -> str:
    try:
        return await llm(
            [{"role": "system", "content": QUESTION_SYS}, {"role": "user", "content": question}],
            max_tokens=500, temperature=0.7,
        )
    except AIServiceError as e:
        logger.error(f"[ai] ask_question failed: {e.message}")
        raise AIServiceError("Failed to answer the question. Please try again.", e.status_code) from e


async def check_connection() -> str:
    logger.info("[ai] testing OpenRouter API connection")
    return await ping()

"""
Turn free-text LLM completions into quizzes and flashcard decks.

Completions are untrusted and loosely formatted, so nothing here raises on
bad input: when no structure can be recovered the caller gets deterministic
fallback content templated on the topic.
"""
import re
from loguru import logger
from ..schemas import QuizQuestion, Flashcard

QUIZ_SIZE = 3
NUM_OPTIONS = 4
DECK_SIZE = 4

_OPTION_LINE = re.compile(r"^[A-D](?:\s*\)|\.)")
_OPTION_LABEL = re.compile(r"^[A-D]\s*[.)]\s*")
_QUESTION_LABEL = re.compile(r"Question:?\s*")
_CORRECT_LABEL = re.compile(r"Correct:?\s*")
_LETTER_INDEX = {"A": 0, "B": 1, "C": 2, "D": 3}

_FRONT_BACK = re.compile(r"Front:\s*(.+?)\s*Back:\s*(.+?)(?=Front:|\Z)", re.S)
_NUMBERED = re.compile(r"(\d+)\.\s*(.+?)\s*(?:\n|\Z)(.+?)(?=\d+\.|\Z)", re.S)
_NUMBER_LABEL = re.compile(r"^\d+\.\s*")

# ---------- quiz ----------
def _sections(text: str) -> list[str]:
    sections = [s for s in text.split("---") if s.strip()]
    if len(sections) <= 1:
        sections = [s for s in text.split("\n\n") if s.strip()]
    return sections

def _parse_section(section: str) -> QuizQuestion | None:
    lines = [ln.strip() for ln in section.strip().split("\n") if ln.strip()]

    question = ""
    options: list[str] = []
    correct = 0
    for line in lines:
        if line.startswith("Question:") or line.startswith("Question "):
            question = _QUESTION_LABEL.sub("", line, count=1).strip()
        elif _OPTION_LINE.match(line):
            opt = _OPTION_LABEL.sub("", line, count=1).strip()
            if opt:
                options.append(opt)
        elif line.startswith("Correct:") or line.startswith("Correct "):
            answer = _CORRECT_LABEL.sub("", line, count=1).strip()
            correct = _LETTER_INDEX.get(answer[:1].upper(), 0)

    if not question or len(options) < 2:
        return None

    while len(options) < NUM_OPTIONS:
        options.append(f"Option {chr(ord('A') + len(options))}")
    # correct is not re-checked against the padded/truncated list
    return QuizQuestion(question=question, options=options[:NUM_OPTIONS], correct_index=max(0, correct))

def fallback_quiz(topic: str) -> list[QuizQuestion]:
    return [
        QuizQuestion(
            question=f"What is the fundamental principle of {topic}?",
            options=[
                "Basic understanding of core concepts",
                "Advanced theoretical knowledge",
                "Practical application skills",
                "Memorization of facts",
            ],
            correct_index=0,
        ),
        QuizQuestion(
            question=f"How does {topic} relate to real-world applications?",
            options=[
                "No practical applications",
                "Limited to academic settings",
                "Used in various real-world scenarios",
                "Only theoretical concepts",
            ],
            correct_index=2,
        ),
        QuizQuestion(
            question=f"What are the key components of studying {topic}?",
            options=[
                "Single approach only",
                "Multiple learning methods",
                "No specific components",
                "Random study techniques",
            ],
            correct_index=1,
        ),
    ]

def parse_quiz(text: str, topic: str) -> list[QuizQuestion]:
    questions = []
    for section in _sections(text or "")[:QUIZ_SIZE]:
        q = _parse_section(section)
        if q is not None:
            questions.append(q)

    if not questions:
        logger.info(f"[parse] no quiz questions recovered for topic={topic!r}; using fallback")
        return fallback_quiz(topic)
    return questions

# ---------- flashcards ----------
def _card(front: str, back: str) -> Flashcard | None:
    front, back = front.strip(), back.strip()
    if not front or not back:
        return None
    return Flashcard(front=front, back=back)

def _front_back_cards(text: str) -> list[Flashcard]:
    cards = (_card(m.group(1), m.group(2)) for m in _FRONT_BACK.finditer(text))
    return [c for c in cards if c]

def _numbered_cards(text: str) -> list[Flashcard]:
    cards = []
    for m in _NUMBERED.finditer(text):
        parts = [p.strip() for p in m.group(0).split("\n") if p.strip()]
        if len(parts) < 2:
            continue
        card = _card(_NUMBER_LABEL.sub("", parts[0]), " ".join(parts[1:]))
        if card:
            cards.append(card)
    return cards

def _block_cards(text: str) -> list[Flashcard]:
    cards = []
    for block in text.split("\n\n"):
        if len(block.strip()) <= 10:
            continue
        lines = [ln.strip() for ln in block.split("\n") if ln.strip()]
        if len(lines) < 2:
            continue
        card = _card(lines[0], " ".join(lines[1:]))
        if card:
            cards.append(card)
    return cards

_FLASHCARD_STRATEGIES = (_front_back_cards, _numbered_cards, _block_cards)

def fallback_flashcards(topic: str) -> list[Flashcard]:
    return [
        Flashcard(front=f"What is {topic}?", back=f"{topic} is an important concept in the field of study."),
        Flashcard(front=f"Key aspects of {topic}", back=f"Understanding {topic} involves learning its fundamental principles and applications."),
        Flashcard(front=f"Why study {topic}?", back=f"Studying {topic} helps develop critical thinking and problem-solving skills."),
        Flashcard(front=f"Applications of {topic}", back=f"{topic} has practical applications in various real-world scenarios."),
    ]

def parse_flashcards(text: str, topic: str) -> list[Flashcard]:
    text = text or ""
    for strategy in _FLASHCARD_STRATEGIES:
        cards = strategy(text)
        if cards:
            return cards[:DECK_SIZE]

    logger.info(f"[parse] no flashcards recovered for topic={topic!r}; using fallback")
    return fallback_flashcards(topic)[:DECK_SIZE]

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from ..auth import current_claims
from ..schemas import (
    AnswerResult, ExplainResult, FlashcardResult, NotesRequest, QuestionRequest,
    QuizResult, SummaryResult, TokenClaims, TopicRequest,
)
from ..services import ai
from ..services.llm import AIServiceError
from ..services.stats import record_ai_interaction
from ..services.store import StoreError, UserStore, get_store

router = APIRouter(prefix="/api/ai")

def _required(value: str, detail: str) -> str:
    value = (value or "").strip()
    if not value:
        raise HTTPException(400, detail)
    return value

def _upstream(e: AIServiceError, op: str) -> HTTPException:
    logger.error(f"[ai] {op} failed: {e.status_code} {e.message}")
    return HTTPException(e.status_code, e.message)

async def _record(store: UserStore, claims: TokenClaims, kind: str, topic: Optional[str] = None) -> None:
    # Activity tracking must never break the AI response itself.
    try:
        user = await store.get_by_id(claims.sub)
        if user:
            await store.save(record_ai_interaction(user, kind, topic))
    except StoreError as e:
        logger.warning(f"[ai] could not record {kind} activity for user_id={claims.sub}: {e}")

@router.post("/explain-topic", response_model=ExplainResult)
async def explain_topic(
    body: TopicRequest,
    claims: TokenClaims = Depends(current_claims),
    store: UserStore = Depends(get_store),
):
    topic = _required(body.topic, "Topic is required")
    try:
        result = await ai.explain_topic(topic)
    except AIServiceError as e:
        raise _upstream(e, "explain-topic")
    await _record(store, claims, "explain", topic)
    return ExplainResult(topic=topic, result=result)

@router.post("/summarize-notes", response_model=SummaryResult)
async def summarize_notes(
    body: NotesRequest,
    claims: TokenClaims = Depends(current_claims),
    store: UserStore = Depends(get_store),
):
    notes = _required(body.notes, "Notes are required")
    try:
        result = await ai.summarize_notes(notes)
    except AIServiceError as e:
        raise _upstream(e, "summarize-notes")
    await _record(store, claims, "summarize")
    return SummaryResult(result=result)

@router.post("/generate-quiz", response_model=QuizResult)
async def generate_quiz(
    body: TopicRequest,
    claims: TokenClaims = Depends(current_claims),
    store: UserStore = Depends(get_store),
):
    topic = _required(body.topic, "Topic is required")
    try:
        questions = await ai.generate_quiz(topic)
    except AIServiceError as e:
        raise _upstream(e, "generate-quiz")
    await _record(store, claims, "quiz", topic)
    return QuizResult(topic=topic, questions=questions)

@router.post("/generate-flashcards", response_model=FlashcardResult)
async def generate_flashcards(
    body: TopicRequest,
    claims: TokenClaims = Depends(current_claims),
    store: UserStore = Depends(get_store),
):
    topic = _required(body.topic, "Topic is required")
    try:
        flashcards = await ai.generate_flashcards(topic)
    except AIServiceError as e:
        raise _upstream(e, "generate-flashcards")
    await _record(store, claims, "flashcards", topic)
    return FlashcardResult(topic=topic, flashcards=flashcards)

@router.post("/ask-question", response_model=AnswerResult)
async def ask_question(
    body: QuestionRequest,
    claims: TokenClaims = Depends(current_claims),
    store: UserStore = Depends(get_store),
):
    question = _required(body.question, "Question is required")
    try:
        answer = await ai.ask_question(question)
    except AIServiceError as e:
        raise _upstream(e, "ask-question")
    await _record(store, claims, "question")
    return AnswerResult(question=question, answer=answer)

@router.get("/test-connection")
async def test_connection(claims: TokenClaims = Depends(current_claims)):
    try:
        result = await ai.check_connection()
    except AIServiceError as e:
        raise _upstream(e, "test-connection")
    return {"result": result, "status": "AI service is working"}

from datetime import datetime
from typing import Annotated, Dict, List, Literal, Optional, Union
from pydantic import BaseModel, Field

# ---------- study artifacts ----------
class QuizQuestion(BaseModel):
    question: str = Field(min_length=1)
    options: List[str] = Field(min_length=4, max_length=4)
    correct_index: int = Field(ge=0, le=3)

class Flashcard(BaseModel):
    front: str = Field(min_length=1)
    back: str = Field(min_length=1)

class ExplainResult(BaseModel):
    kind: Literal["explain"] = "explain"
    topic: str
    result: str

class SummaryResult(BaseModel):
    kind: Literal["summary"] = "summary"
    result: str

class QuizResult(BaseModel):
    kind: Literal["quiz"] = "quiz"
    topic: str
    questions: List[QuizQuestion]

class FlashcardResult(BaseModel):
    kind: Literal["flashcards"] = "flashcards"
    topic: str
    flashcards: List[Flashcard]

class AnswerResult(BaseModel):
    kind: Literal["answer"] = "answer"
    question: str
    answer: str

StudyResult = Annotated[
    Union[ExplainResult, SummaryResult, QuizResult, FlashcardResult, AnswerResult],
    Field(discriminator="kind"),
]

# ---------- users ----------
class Activity(BaseModel):
    id: int
    type: str
    title: str
    time: datetime
    icon: str
    color: str

class UserStats(BaseModel):
    study_sessions: int = 0
    ai_interactions: int = 0
    topics_learned: List[str] = Field(default_factory=list)
    daily_activity: Dict[str, int] = Field(default_factory=dict)
    last_activity_date: Optional[str] = None
    recent_activities: List[Activity] = Field(default_factory=list)

class NewUser(BaseModel):
    email: str
    first_name: str
    last_name: str
    name: str
    password_hash: str

class User(NewUser):
    id: str
    created_at: datetime
    last_login: datetime
    stats: UserStats = Field(default_factory=UserStats)

class PublicUser(BaseModel):
    id: str
    email: str
    name: str
    first_name: str
    last_name: str

    @classmethod
    def of(cls, user: User) -> "PublicUser":
        return cls(
            id=user.id, email=user.email, name=user.name,
            first_name=user.first_name, last_name=user.last_name,
        )

class UserProfile(PublicUser):
    created_at: datetime
    last_login: datetime
    stats: UserStats

class TokenClaims(BaseModel):
    sub: str
    email: str
    name: str = ""
    first_name: str = ""
    last_name: str = ""

# ---------- request bodies ----------
# Missing fields arrive as "" and the handlers answer 400.
class RegisterRequest(BaseModel):
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""

class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""

class TopicRequest(BaseModel):
    topic: str = ""

class NotesRequest(BaseModel):
    notes: str = ""

class QuestionRequest(BaseModel):
    question: str = ""

class StatsUpdate(BaseModel):
    study_sessions: Optional[int] = None
    ai_interactions: Optional[int] = None
    topics_learned: Optional[List[str]] = None

class ProfileUpdate(BaseModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    name: Optional[str] = None

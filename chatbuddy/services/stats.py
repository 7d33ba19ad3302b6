from datetime import datetime, timezone
from typing import Optional

from ..schemas import Activity, User

MAX_RECENT = 10

TITLES = {
    "explain": "Explained topic: {topic}",
    "quiz": "Generated quiz for: {topic}",
    "flashcards": "Created flashcards for: {topic}",
    "summarize": "Summarized study notes",
    "question": "Answered study question",
}
ICONS = {"explain": "📚", "quiz": "🧠", "flashcards": "🎴", "summarize": "📝", "question": "❓"}
COLORS = {
    "explain": "bg-blue-500",
    "quiz": "bg-purple-500",
    "flashcards": "bg-green-500",
    "summarize": "bg-yellow-500",
    "question": "bg-red-500",
}

def activity_title(kind: str, topic: Optional[str] = None) -> str:
    tpl = TITLES.get(kind)
    if tpl is None:
        return f"AI interaction: {kind}"
    return tpl.format(topic=topic)

def record_ai_interaction(user: User, kind: str, topic: Optional[str] = None,
                          now: Optional[datetime] = None) -> User:
    """Bump the interaction counters on `user` in place and return it."""
    now = now or datetime.now(timezone.utc)
    today = now.date().isoformat()
    stats = user.stats

    # ids are list keys on the client: keep them strictly increasing
    activity_id = int(now.timestamp() * 1000)
    if stats.recent_activities:
        activity_id = max(activity_id, stats.recent_activities[0].id + 1)

    entry = Activity(
        id=activity_id,
        type=kind,
        title=activity_title(kind, topic),
        time=now,
        icon=ICONS.get(kind, "🤖"),
        color=COLORS.get(kind, "bg-gray-500"),
    )
    stats.ai_interactions += 1
    stats.daily_activity[today] = stats.daily_activity.get(today, 0) + 1
    stats.last_activity_date = today
    stats.recent_activities = [entry, *stats.recent_activities][:MAX_RECENT]
    return user

def add_topic(user: User, topic: str) -> User:
    if topic not in user.stats.topics_learned:
        user.stats.topics_learned.append(topic)
    return user

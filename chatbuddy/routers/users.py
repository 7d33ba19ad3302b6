from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from ..auth import current_claims
from ..schemas import (
    ProfileUpdate, PublicUser, StatsUpdate, TokenClaims, TopicRequest, User, UserProfile,
)
from ..services.stats import add_topic
from ..services.store import StoreError, UserStore, get_store

router = APIRouter(prefix="/api/users")

async def _load(store: UserStore, claims: TokenClaims) -> User:
    try:
        user = await store.get_by_id(claims.sub)
    except StoreError as e:
        logger.error(f"[users] load failed for user_id={claims.sub}: {e}")
        raise HTTPException(500, "Failed to load user")
    if not user:
        raise HTTPException(404, "User not found")
    return user

async def _save(store: UserStore, user: User, what: str) -> None:
    try:
        await store.save(user)
    except StoreError as e:
        logger.error(f"[users] save failed for user_id={user.id}: {e}")
        raise HTTPException(500, f"Failed to update {what}")

@router.get("/stats")
async def get_stats(claims: TokenClaims = Depends(current_claims), store: UserStore = Depends(get_store)):
    user = await _load(store, claims)
    return {"stats": user.stats}

@router.put("/stats")
async def update_stats(
    body: StatsUpdate,
    claims: TokenClaims = Depends(current_claims),
    store: UserStore = Depends(get_store),
):
    user = await _load(store, claims)
    for field in body.model_fields_set:
        value = getattr(body, field)
        if value is not None:
            setattr(user.stats, field, value)
    await _save(store, user, "user stats")
    return {"message": "Stats updated successfully", "stats": user.stats}

@router.post("/topics-learned")
async def topics_learned(
    body: TopicRequest,
    claims: TokenClaims = Depends(current_claims),
    store: UserStore = Depends(get_store),
):
    topic = body.topic.strip()
    if not topic:
        raise HTTPException(400, "Topic is required")
    user = await _load(store, claims)
    add_topic(user, topic)
    await _save(store, user, "learned topics")
    return {"message": "Topic added to learned topics", "topics_learned": user.stats.topics_learned}

@router.get("/profile")
async def get_profile(claims: TokenClaims = Depends(current_claims), store: UserStore = Depends(get_store)):
    user = await _load(store, claims)
    return {
        "user": UserProfile(
            **PublicUser.of(user).model_dump(),
            created_at=user.created_at, last_login=user.last_login, stats=user.stats,
        )
    }

@router.put("/profile")
async def update_profile(
    body: ProfileUpdate,
    claims: TokenClaims = Depends(current_claims),
    store: UserStore = Depends(get_store),
):
    user = await _load(store, claims)
    if body.first_name is not None: user.first_name = body.first_name.strip()
    if body.last_name is not None: user.last_name = body.last_name.strip()
    if body.name is not None: user.name = body.name.strip()
    await _save(store, user, "user profile")
    return {"message": "Profile updated successfully", "user": PublicUser.of(user)}

@router.delete("/account")
async def delete_account(claims: TokenClaims = Depends(current_claims), store: UserStore = Depends(get_store)):
    try:
        deleted = await store.delete(claims.sub)
    except StoreError as e:
        logger.error(f"[users] delete failed for user_id={claims.sub}: {e}")
        raise HTTPException(500, "Failed to delete account")
    if not deleted:
        raise HTTPException(404, "User not found")
    logger.info(f"[users] deleted user_id={claims.sub}")
    return {"message": "Account deleted successfully"}

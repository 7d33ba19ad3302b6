from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from loguru import logger

from ..auth import create_access_token, current_claims, hash_password, verify_password
from ..schemas import LoginRequest, NewUser, PublicUser, RegisterRequest, TokenClaims
from ..services.store import DuplicateUserError, StoreError, UserStore, get_store

router = APIRouter(prefix="/api/auth")

MIN_PASSWORD = 6

@router.post("/register", status_code=201)
async def register(body: RegisterRequest, store: UserStore = Depends(get_store)):
    if not (body.first_name.strip() and body.last_name.strip() and body.email.strip() and body.password):
        raise HTTPException(400, "All fields are required")
    if body.password != body.confirm_password:
        raise HTTPException(400, "Passwords do not match")
    if len(body.password) < MIN_PASSWORD:
        raise HTTPException(400, f"Password must be at least {MIN_PASSWORD} characters long")

    email = body.email.strip().lower()
    first, last = body.first_name.strip(), body.last_name.strip()
    try:
        if await store.get_by_email(email):
            raise HTTPException(400, "An account with this email already exists")
        user = await store.create(NewUser(
            email=email, first_name=first, last_name=last,
            name=f"{first} {last}", password_hash=hash_password(body.password),
        ))
    except DuplicateUserError:
        raise HTTPException(400, "An account with this email already exists")
    except StoreError as e:
        logger.error(f"[auth] registration failed: {e}")
        raise HTTPException(500, "An error occurred during registration")

    logger.info(f"[auth] registered user_id={user.id}")
    return {
        "message": "Account created successfully",
        "token": create_access_token(user),
        "user": PublicUser.of(user),
    }

@router.post("/login")
async def login(body: LoginRequest, store: UserStore = Depends(get_store)):
    if not body.email.strip() or not body.password:
        raise HTTPException(400, "Email and password required")

    try:
        user = await store.get_by_email(body.email.strip().lower())
        if not user or not verify_password(body.password, user.password_hash):
            raise HTTPException(401, "Invalid credentials")
        user.last_login = datetime.now(timezone.utc)
        await store.save(user)
    except StoreError as e:
        logger.error(f"[auth] login failed: {e}")
        raise HTTPException(500, "An error occurred during login")

    return {
        "message": "Login successful",
        "token": create_access_token(user),
        "user": PublicUser.of(user),
    }

@router.get("/profile")
async def profile(claims: TokenClaims = Depends(current_claims), store: UserStore = Depends(get_store)):
    try:
        user = await store.get_by_id(claims.sub)
    except StoreError:
        raise HTTPException(500, "Failed to get user profile")
    if not user:
        raise HTTPException(404, "User not found")
    return {"user": PublicUser.of(user)}

@router.post("/logout")
def logout(claims: TokenClaims = Depends(current_claims)):
    # tokens are stateless; the client just drops it
    logger.info(f"[auth] logout user_id={claims.sub}")
    return {"message": "Logout successful"}

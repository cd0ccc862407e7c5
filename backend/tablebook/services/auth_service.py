"""
Account service: customer and restaurant-owner signup, login and profile.
"""

import dataclasses
from typing import Optional

from tablebook.core.clock import Clock
from tablebook.core.config import get_settings
from tablebook.core.errors import AuthenticationError, ConflictError, NotFoundError, ValidationError
from tablebook.core.ids import IdGenerator
from tablebook.core.logging import get_logger
from tablebook.core.security import create_access_token, hash_password, verify_password
from tablebook.domain.records import Role, User, Venue
from tablebook.services.settings_service import provision_settings
from tablebook.storage.interfaces.storage import Storage

logger = get_logger(__name__)

MIN_PASSWORD_LENGTH = 8
PROFILE_FIELDS = frozenset({"name", "email", "phone"})


def _check_password(password: str) -> None:
    if not password or len(password) < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")


async def _ensure_unique(storage: Storage, login_id: str, email: str) -> None:
    if await storage.users.get_by_login_id(login_id):
        logger.warning("signup_failed", reason="login_id_exists", login_id=login_id)
        raise ConflictError("Login id already taken")
    if await storage.users.get_by_email(email):
        logger.warning("signup_failed", reason="email_exists", email=email)
        raise ConflictError("Email already registered")


async def signup_customer(
    storage: Storage,
    clock: Clock,
    ids: IdGenerator,
    *,
    login_id: str,
    email: str,
    password: str,
    name: str,
    phone: Optional[str] = None,
) -> User:
    """Register a customer. Raises ConflictError on a taken login id or email."""
    _check_password(password)

    async with storage.transaction():
        await _ensure_unique(storage, login_id, email)
        user = User(
            id=ids.user_id(),
            login_id=login_id,
            email=email,
            name=name,
            role=Role.CUSTOMER,
            phone=phone,
            created_at=clock.now(),
            password_hash=hash_password(password),
        )
        await storage.users.add(user)

    logger.info("user_registered", user_id=user.id, role=user.role.value)
    return user


async def signup_restaurant_owner(
    storage: Storage,
    clock: Clock,
    ids: IdGenerator,
    *,
    login_id: str,
    email: str,
    password: str,
    name: str,
    venue_name: str,
    phone: Optional[str] = None,
    capacity: Optional[int] = None,
    address: str = "",
    image_url: Optional[str] = None,
) -> User:
    """
    Register an owner together with their venue and its settings.

    All three records are written in one transaction: if any write fails,
    none of them persist and the caller sees a single error.
    """
    settings = get_settings()
    _check_password(password)
    capacity = settings.DEFAULT_VENUE_CAPACITY if capacity is None else capacity
    if capacity < 0:
        raise ValidationError("Capacity must be zero or greater")
    if not venue_name or not venue_name.strip():
        raise ValidationError("Venue name is required")

    async with storage.transaction():
        await _ensure_unique(storage, login_id, email)

        venue = Venue(
            id=await storage.venues.next_id(),
            name=venue_name.strip(),
            address=address,
            phone=phone,
            capacity=capacity,
            image=image_url or settings.DEFAULT_VENUE_IMAGE,
            rating=settings.DEFAULT_VENUE_RATING,
            reviews=0,
            website=email,
        )
        await storage.venues.add(venue)
        await storage.settings.save(
            provision_settings(venue.id, clock.now().date(), settings.SIGNUP_SLOT_WINDOW_DAYS)
        )

        user = User(
            id=ids.user_id(),
            login_id=login_id,
            email=email,
            name=name,
            role=Role.RESTAURANT_OWNER,
            phone=phone,
            venue_id=venue.id,
            created_at=clock.now(),
            password_hash=hash_password(password),
        )
        await storage.users.add(user)

    logger.info("owner_registered", user_id=user.id, venue_id=venue.id, capacity=capacity)
    return user


async def login(storage: Storage, login_id: str, password: str) -> str:
    """
    Authenticate and return a JWT access token.
    Raises AuthenticationError if credentials are invalid.
    """
    user = await storage.users.get_by_login_id(login_id)
    if not user or not verify_password(password, user.password_hash):
        logger.warning("login_failed", login_id=login_id)
        raise AuthenticationError("Invalid login id or password")

    token = create_access_token(data={"sub": user.id})
    logger.info("user_logged_in", user_id=user.id)
    return token


async def get_user(storage: Storage, user_id: str) -> User:
    user = await storage.users.get(user_id)
    if not user:
        raise NotFoundError("User", user_id)
    return user


async def current_user(storage: Storage, user_id: Optional[str]) -> Optional[User]:
    """The signed-in user, or None for anonymous callers and deleted accounts."""
    if user_id is None:
        return None
    return await storage.users.get(user_id)


async def update_profile(storage: Storage, user_id: str, changes: dict) -> User:
    """Only name, email and phone may change; role and venue are fixed."""
    forbidden = set(changes) - PROFILE_FIELDS
    if forbidden:
        raise ValidationError(f"Cannot update fields: {', '.join(sorted(forbidden))}")

    async with storage.transaction():
        user = await get_user(storage, user_id)
        email = changes.get("email")
        if email and email.lower() != user.email.lower():
            if await storage.users.get_by_email(email):
                raise ConflictError("Email already registered")
        user = dataclasses.replace(user, **changes)
        await storage.users.save(user)

    logger.info("profile_updated", user_id=user_id, fields=sorted(changes))
    return user


async def change_password(
    storage: Storage,
    user_id: str,
    current_password: str,
    new_password: str,
) -> None:
    _check_password(new_password)
    async with storage.transaction():
        user = await get_user(storage, user_id)
        if not verify_password(current_password, user.password_hash):
            logger.warning("password_change_failed", user_id=user_id)
            raise AuthenticationError("Current password is incorrect")
        await storage.users.save(dataclasses.replace(user, password_hash=hash_password(new_password)))

    logger.info("password_changed", user_id=user_id)

"""
Authentication endpoints: signup, login and profile.
"""

from fastapi import APIRouter, Depends, status

from tablebook.api.deps import get_clock, get_current_user, get_id_generator, get_storage
from tablebook.core.clock import Clock
from tablebook.core.ids import IdGenerator
from tablebook.domain.records import User
from tablebook.schemas.user import (
    CustomerSignup,
    OwnerSignup,
    PasswordChange,
    ProfileUpdate,
    Token,
    UserLogin,
    UserResponse,
)
from tablebook.services import auth_service
from tablebook.services.cache_service import invalidate_venue_cache
from tablebook.storage.interfaces.storage import Storage

router = APIRouter(prefix="/auth", tags=["Authentication"])


@router.post("/signup", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def signup(
    data: CustomerSignup,
    storage: Storage = Depends(get_storage),
    clock: Clock = Depends(get_clock),
    ids: IdGenerator = Depends(get_id_generator),
):
    """Register a customer account."""
    return await auth_service.signup_customer(storage, clock, ids, **data.model_dump())


@router.post(
    "/signup/restaurant-owner",
    response_model=UserResponse,
    status_code=status.HTTP_201_CREATED,
)
async def signup_restaurant_owner(
    data: OwnerSignup,
    storage: Storage = Depends(get_storage),
    clock: Clock = Depends(get_clock),
    ids: IdGenerator = Depends(get_id_generator),
):
    """Register an owner along with their venue and its booking settings."""
    user = await auth_service.signup_restaurant_owner(storage, clock, ids, **data.model_dump())
    await invalidate_venue_cache()
    return user


@router.post("/login", response_model=Token)
async def login(data: UserLogin, storage: Storage = Depends(get_storage)):
    """Authenticate and receive a JWT access token."""
    token = await auth_service.login(storage, data.login_id, data.password)
    return Token(access_token=token)


@router.get("/me", response_model=UserResponse)
async def me(user: User = Depends(get_current_user)):
    return user


@router.patch("/profile", response_model=UserResponse)
async def update_profile(
    data: ProfileUpdate,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    changes = data.model_dump(exclude_unset=True, exclude_none=True)
    return await auth_service.update_profile(storage, user.id, changes)


@router.post("/change-password", status_code=status.HTTP_204_NO_CONTENT)
async def change_password(
    data: PasswordChange,
    user: User = Depends(get_current_user),
    storage: Storage = Depends(get_storage),
):
    await auth_service.change_password(storage, user.id, data.current_password, data.new_password)

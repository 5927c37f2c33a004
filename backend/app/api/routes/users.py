"""User Routes — registration, login, profile and user administration.

Invariants:
    - /profile and /change-password are declared before /{user_id} so they are
      never captured as identifiers
    - Responses are built from serializers.user_out: the digest never leaves the service layer
"""

from fastapi import APIRouter, Depends, status

from app.api.dependencies import get_account_service, get_current_user
from app.api.serializers import auth_out, user_out
from app.models.user import User
from app.schemas.envelope import envelope, list_envelope
from app.schemas.user import (
    LoginRequest,
    PasswordChange,
    ProfileUpdate,
    RegisterRequest,
    UserUpdate,
)
from app.services.accounts import AccountService

router = APIRouter(prefix="/api/v1/users", tags=["users"])


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, accounts: AccountService = Depends(get_account_service)):
    result = await accounts.register(
        username=body.username, email=body.email,
        password=body.password, role=body.role,
    )
    return envelope(
        data=auth_out(result.user, result.token),
        message="User registered successfully",
    )


@router.post("/login")
async def login(body: LoginRequest, accounts: AccountService = Depends(get_account_service)):
    result = await accounts.login(body.email, body.password)
    return envelope(
        data=auth_out(result.user, result.token), message="Login successful",
    )


@router.get("")
async def list_users(
    current_user: User = Depends(get_current_user),
    accounts: AccountService = Depends(get_account_service),
):
    """Admin only."""
    users = await accounts.list_users(current_user)
    return list_envelope([user_out(u) for u in users])


@router.get("/profile/{user_id}")
async def get_profile(
    user_id: str,
    current_user: User = Depends(get_current_user),
    accounts: AccountService = Depends(get_account_service),
):
    user = await accounts.get_profile(user_id)
    return envelope(data=user_out(user))


@router.put("/profile")
async def update_profile(
    body: ProfileUpdate,
    current_user: User = Depends(get_current_user),
    accounts: AccountService = Depends(get_account_service),
):
    result = await accounts.update_profile(
        current_user, username=body.username, email=body.email,
    )
    return envelope(
        data=auth_out(result.user, result.token),
        message="Profile updated successfully",
    )


@router.put("/change-password")
async def change_password(
    body: PasswordChange,
    current_user: User = Depends(get_current_user),
    accounts: AccountService = Depends(get_account_service),
):
    await accounts.change_password(
        current_user, body.current_password, body.new_password,
    )
    return envelope(message="Password changed successfully")


@router.put("/{user_id}")
async def update_user(
    user_id: str,
    body: UserUpdate,
    current_user: User = Depends(get_current_user),
    accounts: AccountService = Depends(get_account_service),
):
    """Self or admin; role changes apply for admins only."""
    user = await accounts.update_user(
        current_user, user_id,
        username=body.username, email=body.email, role=body.role,
    )
    return envelope(data=user_out(user), message="User updated successfully")


@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    current_user: User = Depends(get_current_user),
    accounts: AccountService = Depends(get_account_service),
):
    await accounts.delete_user(current_user, user_id)
    return envelope(message="User deleted successfully")

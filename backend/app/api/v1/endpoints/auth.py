from fastapi import APIRouter, Depends

from app.api.deps import get_auth_service, get_user_service
from app.core.security import get_current_user_required
from app.db.models.user import User
from app.schemas import ApiResponse, LoginRequest, MeResponse, SignupRequest, ok
from app.services import AuthService, UserService

router = APIRouter()


@router.post("/signup", response_model=ApiResponse[str])
async def signup(
    data: SignupRequest,
    service: AuthService = Depends(get_auth_service),
):
    """Register a new user and return an access token"""
    return ok(service.signup(data))


@router.post("/login", response_model=ApiResponse[str])
async def login(
    data: LoginRequest,
    service: AuthService = Depends(get_auth_service),
):
    """Login with email or username"""
    return ok(service.login(data))


@router.get("/me", response_model=ApiResponse[MeResponse])
async def me(
    user: User = Depends(get_current_user_required),
    service: UserService = Depends(get_user_service),
):
    """Current user, with the channels they subscribe to"""
    return ok(service.me(user))

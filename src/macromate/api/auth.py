"""Account creation and sign-in endpoints."""

from fastapi import APIRouter, Request, status

from macromate.api.dependencies import get_container
from macromate.api.schemas import LoginRequest, SignUpRequest, TokenResponse

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def sign_up(payload: SignUpRequest, request: Request) -> TokenResponse:
    """Create an account with default goals and sign it in."""
    container = get_container(request)
    session = container.auth_service.sign_up(
        payload.name, payload.username, payload.password
    )
    return TokenResponse.from_session(session)


@router.post("/login")
def login(payload: LoginRequest, request: Request) -> TokenResponse:
    """Exchange a username and password for tokens."""
    container = get_container(request)
    session = container.auth_service.sign_in(payload.username, payload.password)
    return TokenResponse.from_session(session)

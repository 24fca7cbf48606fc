"""
api/routes/v1/auth.py -- Credential endpoints.

Routes:
  POST /api/v1/auth/login     -- password login; returns a bearer token
  POST /api/v1/auth/register  -- create account, log it in, return a token

Security:
  [C1] MessagingService.login() goes through CredentialStore.verify_password(),
       which equalizes timing for unknown usernames. Do not inline a lookup
       plus bcrypt check here.
  Wrong password and unknown username return the same 401 body.
  [M5] Cache-Control: no-store on every response that carries a token.

Both handlers are plain def, not async def: bcrypt is CPU-bound and the stores
are synchronous, so FastAPI runs them in its threadpool.
"""

from __future__ import annotations

from fastapi import APIRouter, Request, Response

from api.models import LoginRequest, RegisterRequest, TokenResponse
from auth.models import User
from messages.service import MessagingService

# Auth policy:
# - POST /api/v1/auth/login:    public -- login endpoint must be unauthenticated
# - POST /api/v1/auth/register: public -- registration creates the identity
router = APIRouter()


@router.post("/auth/login", response_model=TokenResponse)
def login(request: Request, response: Response, body: LoginRequest) -> TokenResponse:
    """Authenticate with username and password and return a token.

    Stamps last_login_at on success. Failures raise InvalidCredentials, which
    the app's exception handler renders as 401.
    """
    service: MessagingService = request.app.state.messaging
    response.headers["Cache-Control"] = "no-store"  # [M5]
    return TokenResponse(token=service.login(body.username, body.password))


@router.post("/auth/register", response_model=TokenResponse, status_code=201)
def register(request: Request, response: Response, body: RegisterRequest) -> TokenResponse:
    """Register a user, log them in, and return a token. 409 if the username is taken."""
    service: MessagingService = request.app.state.messaging
    user = User(
        username=body.username,
        first_name=body.first_name,
        last_name=body.last_name,
        phone=body.phone,
    )
    response.headers["Cache-Control"] = "no-store"  # [M5]
    return TokenResponse(token=service.register(user, body.password))

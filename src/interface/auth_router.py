"""Sign-in, sign-up and sign-out routes plus the session cookie dependency."""

import logging
import secrets
from typing import Any

from fastapi import APIRouter, Form, HTTPException, Request, Response, status
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from src.core.config import constants, settings
from src.core.errors import FormValidationError
from src.domain.user import User
from src.services import auth_service
from src.services.dashboard_service import DashboardSession, session_registry


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

templates = Jinja2Templates(directory=str(constants.TEMPLATES_DIR))

serializer = URLSafeTimedSerializer(str(settings.secret_key), salt="eventdesk-session")
csrf_serializer = URLSafeTimedSerializer(str(settings.secret_key), salt="eventdesk-csrf")


def generate_csrf_token() -> str:
    """Generate a secure CSRF token."""
    return secrets.token_hex(32)


def set_csrf_cookie(response: Response, csrf_token: str) -> None:
    """Set the signed CSRF cookie matching the token rendered into the form."""
    response.set_cookie(
        key=constants.CSRF_COOKIE_NAME,
        value=csrf_serializer.dumps(csrf_token),
        httponly=True,
        secure=settings.is_production,
        samesite="strict",
        max_age=constants.CSRF_MAX_AGE_SECONDS,
    )


def validate_csrf_token(request: Request, token: str | None) -> bool:
    """Validate the submitted CSRF token against the signed cookie value."""
    if not token:
        return False

    expected_token = request.cookies.get(constants.CSRF_COOKIE_NAME)
    if not expected_token:
        return False

    try:
        loaded_token = csrf_serializer.loads(expected_token, max_age=constants.CSRF_MAX_AGE_SECONDS)
        return secrets.compare_digest(loaded_token, token)
    except (BadSignature, SignatureExpired):
        return False


def _require_csrf(request: Request, token: str | None, *, action: str) -> None:
    if not validate_csrf_token(request, token):
        logger.warning("invalid_csrf", extra={"action": action})
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Invalid CSRF token")


def set_session_cookie(response: Response, *, session_id: str, user: User) -> None:
    """Attach the signed session cookie to a response."""
    token = serializer.dumps({"sid": session_id, "user_id": user.id, "email": user.email})
    response.set_cookie(
        key=constants.SESSION_COOKIE_NAME,
        value=token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.session_max_age_seconds,
    )


def read_session_cookie(request: Request) -> dict[str, Any] | None:
    """Return the verified cookie payload, or None if missing, tampered or expired."""
    token = request.cookies.get(constants.SESSION_COOKIE_NAME)
    if not token:
        return None

    try:
        payload = serializer.loads(token, max_age=settings.session_max_age_seconds)
    except (BadSignature, SignatureExpired):
        logger.warning("session_cookie_invalid", extra={"path": request.url.path})
        return None

    if not isinstance(payload, dict) or not {"sid", "user_id", "email"} <= payload.keys():
        return None
    return payload


def find_dashboard_session(request: Request) -> DashboardSession | None:
    """Return the live session behind the request's cookie, or None.

    A correctly signed cookie is not enough: its session must still be open
    (not signed out, not evicted as idle).
    """
    payload = read_session_cookie(request)
    if payload is None:
        return None

    user = User(id=payload["user_id"], email=payload["email"])
    session = session_registry.resolve(payload["sid"], user)
    if session is None:
        logger.info("session_not_open", extra={"path": request.url.path})
    return session


async def get_dashboard_session(request: Request) -> DashboardSession:
    """Resolve the dashboard session for the request, raising 401 without one."""
    session = find_dashboard_session(request)
    if session is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Not signed in")
    return session


async def _start_session(request: Request, user: User) -> Response:
    previous = read_session_cookie(request)
    if previous is not None:
        await session_registry.close(previous["sid"])

    session = await session_registry.open(user)

    response = RedirectResponse(url="/dashboard", status_code=status.HTTP_303_SEE_OTHER)
    set_session_cookie(response, session_id=session.session_id, user=user)
    response.delete_cookie(key=constants.CSRF_COOKIE_NAME, httponly=True, samesite="strict")
    return response


def _render_login(request: Request, *, error: str | None = None, email: str = "") -> Response:
    csrf_token = generate_csrf_token()
    response = templates.TemplateResponse(
        request,
        name="auth/login.html",
        context={"error": error, "email": email, "csrf_token": csrf_token},
        status_code=status.HTTP_400_BAD_REQUEST if error else status.HTTP_200_OK,
    )
    set_csrf_cookie(response, csrf_token)
    return response


@router.get("/login")
async def get_login(request: Request) -> Response:
    """Render the sign-in form with a CSRF token."""
    return _render_login(request)


@router.post("/login")
async def post_login(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    csrf_token: str | None = Form(None),
) -> Response:
    """Sign in and redirect to the dashboard."""
    _require_csrf(request, csrf_token, action="login")
    try:
        user = await auth_service.sign_in(email=email, password=password)
    except FormValidationError as e:
        return _render_login(request, error=e.message, email=email)

    logger.info("login_success", extra={"user_id": user.id})
    return await _start_session(request, user)


@router.post("/signup")
async def post_signup(
    request: Request,
    email: str = Form(...),
    password: str = Form(...),
    csrf_token: str | None = Form(None),
) -> Response:
    """Create an account, sign it in and redirect to the dashboard."""
    _require_csrf(request, csrf_token, action="signup")
    try:
        user = await auth_service.sign_up(email=email, password=password)
    except FormValidationError as e:
        return _render_login(request, error=e.message, email=email)

    return await _start_session(request, user)


@router.post("/logout")
async def logout(request: Request, csrf_token: str | None = Form(None)) -> Response:
    """Sign out, end the server-side session and redirect to the sign-in form."""
    _require_csrf(request, csrf_token, action="logout")
    payload = read_session_cookie(request)
    if payload is not None:
        await session_registry.close(payload["sid"])

    response = RedirectResponse(url="/auth/login", status_code=status.HTTP_303_SEE_OTHER)
    response.delete_cookie(key=constants.SESSION_COOKIE_NAME, httponly=True, samesite="lax")
    logger.info("logout_success")
    return response

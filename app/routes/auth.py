import logging
from typing import Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict

from app.auth_utils import (
    clear_session_cookie,
    get_settings,
    issue_session_token,
    require_account_id,
    set_session_cookie,
)
from app.config import ROUTE_PREFIX, Settings
from core.identity import IdentityService
from core.results import FailureReason, Outcome

log = logging.getLogger(__name__)

router = APIRouter(prefix=ROUTE_PREFIX, tags=["auth"])


# ---------- Schemas ----------
# Fields are optional so a missing value reaches the service and is reported
# with the usual {success, message} envelope.

class SignupIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class VerifyEmailIn(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)
    code: Optional[str] = None


class LoginIn(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class ForgotPasswordIn(BaseModel):
    email: Optional[str] = None


class ResetPasswordIn(BaseModel):
    password: Optional[str] = None


# ---------- Helpers ----------

def get_identity_service(request: Request) -> IdentityService:
    return request.app.state.identity


def _failure(outcome: Outcome, status_code: int = 400) -> JSONResponse:
    return JSONResponse({"success": False, "message": outcome.message}, status_code=status_code)


def _with_user(outcome: Outcome, status_code: int = 200) -> JSONResponse:
    return JSONResponse(
        {"success": True, "message": outcome.message, "user": outcome.account.to_public_dict()},
        status_code=status_code,
    )


def _attach_session(response: JSONResponse, outcome: Outcome, settings: Settings) -> JSONResponse:
    if outcome.session_account_id:
        token = issue_session_token(outcome.session_account_id, settings)
        set_session_cookie(response, token, settings)
    return response


# ---------- Endpoints ----------

@router.post("/signup")
def signup(
    body: Optional[SignupIn] = None,
    service: IdentityService = Depends(get_identity_service),
    settings: Settings = Depends(get_settings),
):
    body = body or SignupIn()
    outcome = service.register(body.email, body.password, body.name)
    if not outcome.ok:
        return _failure(outcome)
    return _attach_session(_with_user(outcome, status_code=201), outcome, settings)


@router.post("/verify-email")
def verify_email(
    body: Optional[VerifyEmailIn] = None,
    service: IdentityService = Depends(get_identity_service),
):
    body = body or VerifyEmailIn()
    outcome = service.verify_email(body.code)
    if not outcome.ok:
        if outcome.reason is FailureReason.UPSTREAM:
            log.error("error in verifyEmail: %s", outcome.message)
            return JSONResponse({"success": False, "message": "Server error"}, status_code=500)
        return _failure(outcome)
    return _with_user(outcome)


@router.post("/login")
def login(
    body: Optional[LoginIn] = None,
    service: IdentityService = Depends(get_identity_service),
    settings: Settings = Depends(get_settings),
):
    body = body or LoginIn()
    outcome = service.login(body.email, body.password)
    if not outcome.ok:
        return _failure(outcome)
    return _attach_session(_with_user(outcome), outcome, settings)


@router.post("/logout")
def logout(service: IdentityService = Depends(get_identity_service)):
    outcome = service.logout()
    response = JSONResponse({"success": True, "message": outcome.message})
    clear_session_cookie(response)
    return response


@router.post("/forgot-password")
def forgot_password(
    body: Optional[ForgotPasswordIn] = None,
    service: IdentityService = Depends(get_identity_service),
):
    body = body or ForgotPasswordIn()
    outcome = service.forgot_password(body.email)
    if not outcome.ok:
        return _failure(outcome)
    return JSONResponse({"success": True, "message": outcome.message})


@router.post("/reset-password/{token}")
def reset_password(
    token: str,
    body: Optional[ResetPasswordIn] = None,
    service: IdentityService = Depends(get_identity_service),
):
    body = body or ResetPasswordIn()
    outcome = service.reset_password(token, body.password)
    if not outcome.ok:
        return _failure(outcome)
    return JSONResponse({"success": True, "message": outcome.message})


@router.get("/check-auth")
def check_auth(
    account_id: str = Depends(require_account_id),
    service: IdentityService = Depends(get_identity_service),
):
    outcome = service.check_auth(account_id)
    if not outcome.ok:
        return _failure(outcome)
    return JSONResponse({"success": True, "user": outcome.account.to_public_dict()})

from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.config import Settings
from app.email_utils import SmtpMailer
from app.routes import auth
from core.db.base import Database
from core.db.schema import init_db
from core.db.users import AccountStore, PostgresAccountStore
from core.emails import Mailer
from core.identity import IdentityService


def create_app(
    settings: Optional[Settings] = None,
    store: Optional[AccountStore] = None,
    mailer: Optional[Mailer] = None,
) -> FastAPI:
    """
    Build the application around explicit collaborators.

    Missing collaborators are built from `settings`: a Postgres store (whose
    schema is created on startup) and an SMTP mailer.
    """
    settings = settings or Settings.from_env()
    database = None
    if store is None:
        database = Database(settings.database_url)
        store = PostgresAccountStore(database)
    mailer = mailer or SmtpMailer(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if database is not None:
            init_db(database)
        yield

    app = FastAPI(title="Identity Service", lifespan=lifespan)
    app.state.settings = settings
    app.state.identity = IdentityService(store, mailer, client_url=settings.client_url)

    app.include_router(auth.router)

    @app.get("/", response_class=PlainTextResponse)
    def index():
        return "hello world"

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            {"success": False, "message": str(exc.detail)},
            status_code=exc.status_code,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def invalid_body(request: Request, exc: RequestValidationError):
        return JSONResponse({"success": False, "message": "Invalid request body"}, status_code=400)

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "SAMEORIGIN")
        return response

    return app

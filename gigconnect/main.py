import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import config
from .api import auth as auth_api
from .api import chat as chat_api
from .api import freelancers as freelancers_api
from .api import gigs as gigs_api
from .database import check_connection, init_db
from .services.realtime import ConnectionManager
from .utils.error_handlers import AppError, create_error_response, get_error_message

logger = logging.getLogger(__name__)


async def app_error_handler(request: Request, exc: AppError):
    """Translate the application's error taxonomy into the JSON envelope."""
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", type(exc).__name__, request.method, request.url.path, exc.message)
    return create_error_response(exc.status_code, exc.message, exc.details or None)


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return create_error_response(exc.status_code, str(exc.detail))


async def request_validation_error_handler(request: Request, exc: RequestValidationError):
    """Schema failures on request bodies surface as 400 like every other validation error."""
    fields = [".".join(str(p) for p in err.get("loc", ()) if p != "body") for err in exc.errors()]
    fields = [f for f in fields if f]
    message = get_error_message("validation_error")
    if fields:
        message = f"Invalid or missing fields: {', '.join(fields)}"
    return create_error_response(400, message)


async def sqlalchemy_operational_error_handler(request: Request, exc: OperationalError):
    logger.exception("Database OperationalError: %s", exc)
    return create_error_response(503, get_error_message("database_error"))


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database SQLAlchemyError: %s", exc)
    return create_error_response(500, get_error_message("database_error"))


async def global_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled exception: %s", exc)
    return create_error_response(500, get_error_message("server_error"))


def create_app() -> FastAPI:
    app = FastAPI(title="GigConnect")

    # Connection registry for the realtime socket; one per application.
    app.state.realtime = ConnectionManager()

    app.include_router(auth_api.router)
    app.include_router(gigs_api.router)
    app.include_router(freelancers_api.router)
    app.include_router(chat_api.router)

    app.add_exception_handler(AppError, app_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(OperationalError, sqlalchemy_operational_error_handler)
    app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
    app.add_exception_handler(Exception, global_exception_handler)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[config.CLIENT_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health_check():
        return {
            "status": "Backend running",
            "service": "GigConnect",
            "online_users": len(app.state.realtime.channels),
        }

    @app.on_event("startup")
    def on_startup() -> None:
        if check_connection():
            logger.info("Database connected successfully")
        else:
            logger.error("Database unreachable; check DATABASE_URL or DB_HOST/DB_NAME")
            return
        init_db()

    return app


app = create_app()

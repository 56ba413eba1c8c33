import logging
import os
import sys
import time
from contextlib import asynccontextmanager
from datetime import datetime, timezone

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse, RedirectResponse
from sqlalchemy.exc import SQLAlchemyError

from tinylink import __version__, codes, crud, schemas
from tinylink.config import Settings, load_settings
from tinylink.database import Store, get_db
from tinylink.errors import LinkError, NotFound
from tinylink.urls import build_short_url

logger = logging.getLogger("tinylink")

router = APIRouter()


def format_uptime(seconds: float) -> str:
    days, rest = divmod(int(seconds), 86400)
    hours, rest = divmod(rest, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{days}d {hours}h {minutes}m {secs}s"


# Health check with system details
@router.get("/healthz", response_model=schemas.HealthOut)
def health(request: Request, db=Depends(get_db)):
    try:
        total = crud.count_links(db)
    except SQLAlchemyError:
        logger.exception("Health check failed")
        return JSONResponse(status_code=500, content={"status": "unhealthy", "error": "Database error"})
    uptime = time.monotonic() - request.app.state.started_at
    return {
        "status": "healthy",
        "version": __version__,
        "uptime_seconds": uptime,
        "uptime_formatted": format_uptime(uptime),
        "total_links": total,
        "server_platform": sys.platform,
        "server_pid": os.getpid(),
        "timestamp": datetime.now(timezone.utc),
    }

# ---------- API ----------
@router.post(
    "/api/links",
    status_code=201,
    response_model=schemas.LinkCreated,
    responses={400: {"model": schemas.ErrorOut}, 409: {"model": schemas.ErrorOut}, 500: {"model": schemas.ErrorOut}},
)
def create_link(link_in: schemas.LinkCreate, request: Request, db=Depends(get_db)):
    link = crud.create_link(db, link_in)
    logger.info("Created link: code=%s target=%s", link.code, link.target_url)
    out = schemas.LinkOut.model_validate(link)
    return schemas.LinkCreated(
        **out.model_dump(),
        short_url=build_short_url(request.app.state.settings.base_url, link.code),
    )

@router.get("/api/links", response_model=list[schemas.LinkOut])
def list_links(db=Depends(get_db)):
    return crud.get_links(db)

@router.get("/api/links/{code}", response_model=schemas.LinkOut, responses={404: {"model": schemas.ErrorOut}})
def get_link(code: str, db=Depends(get_db)):
    return crud.get_link(db, code)

@router.delete("/api/links/{code}", status_code=204, responses={404: {"model": schemas.ErrorOut}})
def delete_link(code: str, db=Depends(get_db)):
    crud.delete_link(db, code)
    logger.info("Deleted link %s", code)
    return Response(status_code=204)

# Redirect /{code}; must stay the last route
@router.get("/{code}", include_in_schema=False)
def redirect(code: str, db=Depends(get_db)):
    if not codes.is_valid_code(code):
        return PlainTextResponse("Not found", status_code=404)
    try:
        target_url = crud.record_click(db, code)
    except NotFound:
        return PlainTextResponse("Not found", status_code=404)
    logger.debug("Redirect %s -> %s", code, target_url)
    return RedirectResponse(url=target_url, status_code=302)


def link_error_handler(request: Request, exc: LinkError):
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})

def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(status_code=400, content={"error": "Invalid request body"})

def store_error_handler(request: Request, exc: SQLAlchemyError):
    # never leak storage details to the client
    logger.exception("Store failure on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(settings: Settings | None = None, store: Store | None = None) -> FastAPI:
    settings = settings or load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s  %(levelname)-8s  %(name)s  %(message)s",
    )

    store = store or Store(settings.database_url)
    store.create_all()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        store.dispose()

    app = FastAPI(
        title="TinyLink",
        description="Shorten URLs and count redirects.",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.settings = settings
    app.state.store = store
    app.state.started_at = time.monotonic()

    # --- CORS (any origin in dev, own base URL in prod) ---
    origins = [settings.base_url] if settings.is_prod else ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.add_exception_handler(LinkError, link_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(SQLAlchemyError, store_error_handler)

    app.include_router(router)
    return app


def run():
    settings = load_settings()
    app = create_app(settings)
    logger.info("TinyLink listening on %s:%s", settings.host, settings.port)
    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()

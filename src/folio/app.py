# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Folio API - FastAPI application.

Account signup/signin, bearer token inspection, and create/list routes for the
caller's holdings, positions and orders. Every resource route goes through
``authenticate``.

Usage:
    python -m folio
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Request, Response
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse

from folio import __version__
from folio.auth.passwords import make_hasher
from folio.auth.sessions import ACCOUNTS, SessionManager, SessionResult
from folio.config import Settings
from folio.core.mapping import meta_for_kind
from folio.errors import FolioError
from folio.infra.store import DocumentStore
from folio.models import (
    AuthResponse,
    Credentials,
    HoldingCreate,
    MessageResponse,
    OrderCreate,
    PositionCreate,
    RecordListResponse,
    RecordResponse,
    TokenStatusResponse,
)
from folio.permissions import CurrentAccount, authenticate, get_sessions
from folio.services.record_service import create_record, list_records

logger = logging.getLogger("folio.app")

TOKEN_COOKIE = "token"

router = APIRouter()


def build_store(settings: Settings) -> DocumentStore:
    return DocumentStore(settings.store_path, unique={ACCOUNTS: ("username",)})


def build_sessions(settings: Settings, store: DocumentStore) -> SessionManager:
    return SessionManager(
        store,
        secret_key=settings.secret_key,
        token_ttl_seconds=settings.token_ttl_seconds,
        token_salt=settings.token_salt,
        hasher=make_hasher(
            time_cost=settings.hash_time_cost,
            memory_cost=settings.hash_memory_cost,
            parallelism=settings.hash_parallelism,
        ),
    )


def get_store(request: Request) -> DocumentStore:
    return request.app.state.store


def _auth_response(message: str, result: SessionResult) -> AuthResponse:
    return AuthResponse(
        message=message,
        user={"id": result.account.id, "username": result.account.username},
        token=result.token,
    )


def _add(store: DocumentStore, kind: str, account: CurrentAccount, body) -> RecordResponse:
    saved = create_record(
        store, kind=kind, owner_id=account.account_id, fields=body.model_dump()
    )
    return RecordResponse(message=f"{meta_for_kind(kind)['label']} added successfully", data=saved)


def _list(store: DocumentStore, kind: str, account: CurrentAccount) -> RecordListResponse:
    records = list_records(store, kind=kind, owner_id=account.account_id)
    return RecordListResponse(message=f"{kind.capitalize()} fetched successfully", data=records)


# ------------------ Routes ------------------


@router.get("/", response_class=PlainTextResponse)
def index():
    return "Server is running fine!"


@router.get("/verifyToken", response_model=TokenStatusResponse, response_model_exclude_none=True)
def verify_token(request: Request, sessions: SessionManager = Depends(get_sessions)):
    status = sessions.verify_token(request.headers.get("authorization"))
    return TokenStatusResponse(valid=status.valid, userId=status.user_id, message=status.message or None)


@router.post("/signup", status_code=201, response_model=AuthResponse)
def signup(body: Credentials, sessions: SessionManager = Depends(get_sessions)):
    return _auth_response("User created successfully", sessions.signup(body.username, body.password))


@router.post("/signin", response_model=AuthResponse)
def signin(body: Credentials, sessions: SessionManager = Depends(get_sessions)):
    return _auth_response("Login successful", sessions.signin(body.username, body.password))


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response, account: CurrentAccount = Depends(authenticate)):
    # Tokens are stateless: the client discards its copy, we only drop the cookie if any.
    response.delete_cookie(TOKEN_COOKIE)
    logger.info("Logout for %s", account.account_id)
    return MessageResponse(message="Logged out successfully")


@router.post("/addHolding", status_code=201, response_model=RecordResponse)
def add_holding(
    body: HoldingCreate,
    account: CurrentAccount = Depends(authenticate),
    store: DocumentStore = Depends(get_store),
):
    return _add(store, "holdings", account, body)


@router.get("/holdings", response_model=RecordListResponse)
def holdings(account: CurrentAccount = Depends(authenticate), store: DocumentStore = Depends(get_store)):
    return _list(store, "holdings", account)


@router.post("/addPosition", status_code=201, response_model=RecordResponse)
def add_position(
    body: PositionCreate,
    account: CurrentAccount = Depends(authenticate),
    store: DocumentStore = Depends(get_store),
):
    return _add(store, "positions", account, body)


@router.get("/positions", response_model=RecordListResponse)
def positions(account: CurrentAccount = Depends(authenticate), store: DocumentStore = Depends(get_store)):
    return _list(store, "positions", account)


@router.post("/addOrder", status_code=201, response_model=RecordResponse)
def add_order(
    body: OrderCreate,
    account: CurrentAccount = Depends(authenticate),
    store: DocumentStore = Depends(get_store),
):
    return _add(store, "orders", account, body)


@router.get("/orders", response_model=RecordListResponse)
def orders(account: CurrentAccount = Depends(authenticate), store: DocumentStore = Depends(get_store)):
    return _list(store, "orders", account)


# ------------------ Error mapping ------------------


async def _folio_error(request: Request, exc: FolioError):
    if exc.status_code >= 500:
        logger.error("Internal error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
        return JSONResponse({"message": "Internal server error"}, status_code=500)
    return JSONResponse({"message": exc.message}, status_code=exc.status_code)


async def _validation_error(request: Request, exc: RequestValidationError):
    return JSONResponse(
        {"message": "Invalid request body", "errors": jsonable_encoder(exc.errors())},
        status_code=400,
    )


async def _unhandled_error(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse({"message": "Internal server error"}, status_code=500)


# ------------------ Application ------------------


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: startup and shutdown hooks."""
    logger.info("Starting Folio API v%s", __version__)
    try:
        app.state.store.ping()
    except Exception as e:
        logger.error("Startup failed: %s", e)
        raise
    logger.info("Store ready at %s", app.state.store.path or "memory")

    yield

    logger.info("Shutting down Folio API")


def create_app(settings: Optional[Settings] = None, *, store: Optional[DocumentStore] = None) -> FastAPI:
    settings = settings or Settings.from_env()
    store = store if store is not None else build_store(settings)

    app = FastAPI(title="Folio API", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.sessions = build_sessions(settings, store)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["Authorization", "Content-Type"],
    )

    app.add_exception_handler(FolioError, _folio_error)
    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(Exception, _unhandled_error)

    app.include_router(router)
    return app

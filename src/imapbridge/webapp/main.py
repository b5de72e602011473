# imapbridge/webapp/main.py
from __future__ import annotations

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, FastAPI, Path, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from loguru import logger

from imapbridge.errors import InvalidRequest, MailBridgeError
from imapbridge.mail_tools import (
    RAW_MAX_BYTES_DEFAULT,
    RAW_MAX_BYTES_MAX,
    RAW_MAX_BYTES_MIN,
    MailTools,
)
from imapbridge.webapp.context import build_tools
from imapbridge.webapp.schemas import (
    ACCOUNT_ID_PATTERN,
    MESSAGE_ID_MAX_LENGTH,
    CopyRequest,
    FlagsRequest,
    MoveRequest,
    SearchRequest,
)

router = APIRouter(prefix="/api")

AccountPath = Annotated[str, Path(pattern=ACCOUNT_ID_PATTERN)]
MessageIdPath = Annotated[str, Path(min_length=1, max_length=MESSAGE_ID_MAX_LENGTH)]


def get_tools(request: Request) -> MailTools:
    return request.app.state.tools


@router.get("/accounts")
def list_accounts(tools: MailTools = Depends(get_tools)) -> dict:
    return tools.list_accounts().to_dict()


@router.get("/accounts/{account}/mailboxes")
def list_mailboxes(account: AccountPath, tools: MailTools = Depends(get_tools)) -> dict:
    return tools.list_mailboxes(account).to_dict()


@router.post("/accounts/{account}/search")
def search_messages(
    account: AccountPath,
    body: SearchRequest,
    tools: MailTools = Depends(get_tools),
) -> dict:
    result = tools.search_messages(
        account,
        body.mailbox,
        query=body.query,
        from_=body.from_,
        to=body.to,
        subject=body.subject,
        unread_only=body.unread_only,
        last_days=body.last_days,
        start_date=body.start_date,
        end_date=body.end_date,
        include_snippet=body.include_snippet,
        snippet_max_chars=body.snippet_max_chars or 200,
        limit=body.limit,
        page_token=body.page_token,
    )
    return result.to_dict()


@router.get("/accounts/{account}/verify")
def verify_account(account: AccountPath, tools: MailTools = Depends(get_tools)) -> dict:
    return tools.verify_account(account).to_dict()


# registered before the catch-all message route, whose path converter would match ".../raw"
@router.get("/accounts/{account}/messages/{message_id:path}/raw")
def get_message_raw(
    account: AccountPath,
    message_id: MessageIdPath,
    max_bytes: int = Query(default=RAW_MAX_BYTES_DEFAULT, ge=RAW_MAX_BYTES_MIN, le=RAW_MAX_BYTES_MAX),
    tools: MailTools = Depends(get_tools),
) -> dict:
    return tools.get_message_raw(account, message_id, max_bytes=max_bytes).to_dict()


@router.get("/accounts/{account}/messages/{message_id:path}")
def get_message(
    account: AccountPath,
    message_id: MessageIdPath,
    body_max_chars: int = Query(default=2000, ge=100, le=20000),
    tools: MailTools = Depends(get_tools),
) -> dict:
    return tools.get_message(account, message_id, body_max_chars=body_max_chars).to_dict()


@router.post("/accounts/{account}/messages/{message_id:path}/flags")
def update_message_flags(
    account: AccountPath,
    message_id: MessageIdPath,
    body: FlagsRequest,
    tools: MailTools = Depends(get_tools),
) -> dict:
    result = tools.update_message_flags(
        account,
        message_id,
        add_flags=body.add_flags,
        remove_flags=body.remove_flags,
    )
    return result.to_dict()


@router.post("/accounts/{account}/messages/{message_id:path}/move")
def move_message(
    account: AccountPath,
    message_id: MessageIdPath,
    body: MoveRequest,
    tools: MailTools = Depends(get_tools),
) -> dict:
    return tools.move_message(account, message_id, body.destination_mailbox).to_dict()


@router.post("/accounts/{account}/messages/{message_id:path}/copy")
def copy_message(
    account: AccountPath,
    message_id: MessageIdPath,
    body: CopyRequest,
    tools: MailTools = Depends(get_tools),
) -> dict:
    result = tools.copy_message(
        account,
        message_id,
        body.destination_mailbox,
        destination_account_id=body.destination_account_id,
    )
    return result.to_dict()


@router.delete("/accounts/{account}/messages/{message_id:path}")
def delete_message(
    account: AccountPath,
    message_id: MessageIdPath,
    confirm: bool = Query(default=False),
    tools: MailTools = Depends(get_tools),
) -> dict:
    return tools.delete_message(account, message_id, confirm=confirm).to_dict()


def _error_response(exc: MailBridgeError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.to_dict()})


def _describe_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        msg = err.get("msg", "invalid value")
        parts.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(parts) or "Invalid request."


def create_app(tools: Optional[MailTools] = None) -> FastAPI:
    app = FastAPI(title="imapbridge")
    app.state.tools = tools if tools is not None else build_tools()

    @app.exception_handler(MailBridgeError)
    async def handle_bridge_error(request: Request, exc: MailBridgeError) -> JSONResponse:
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc.code}: {exc.message}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc.code}")
        return _error_response(exc)

    @app.exception_handler(RequestValidationError)
    async def handle_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        return _error_response(InvalidRequest(_describe_validation_errors(exc)))

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "search_cursors": len(app.state.tools.cursor_store)}

    app.include_router(router)
    return app


app = create_app()

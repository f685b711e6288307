from typing import Any, Dict, Optional

# load environment variables before anything reads them
from pathlib import Path
from dotenv import load_dotenv
load_dotenv(Path(__file__).with_name(".env"), override=False)

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exception_handlers import http_exception_handler
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from pydantic import BaseModel, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from config import CORS_ORIGIN_REGEX
from logic.validation import INVALID_EMAIL_MESSAGE, InvalidInput
from services import server_functions, waitlist_service
from services.d1_client import ConfigurationError, StoreError
from utils.logger import get_logger

log = get_logger("app")

WAITLIST_PATH = "/api/waitlist"


app = FastAPI(
    title="Waitlist API",
    description="Landing page waitlist capture backed by Cloudflare D1.",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origin_regex=CORS_ORIGIN_REGEX,
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


class WaitlistRequest(BaseModel):
    email: Optional[str] = None


# --------------------------------------------------
# Error envelope
# --------------------------------------------------

@app.exception_handler(InvalidInput)
async def _invalid_input(request: Request, exc: InvalidInput) -> JSONResponse:
    return JSONResponse({"error": str(exc)}, status_code=400)


@app.exception_handler(ConfigurationError)
async def _configuration_error(request: Request, exc: ConfigurationError) -> JSONResponse:
    log.error(f"[app] {request.method} {request.url.path}: {exc.message}")
    return JSONResponse({"error": exc.message}, status_code=500)


@app.exception_handler(StoreError)
async def _store_error(request: Request, exc: StoreError) -> JSONResponse:
    log.error(f"[app] {request.method} {request.url.path}: store error {exc.message}")
    return JSONResponse({"error": exc.message or "Server error"}, status_code=500)


@app.exception_handler(StarletteHTTPException)
async def _http_error(request: Request, exc: StarletteHTTPException) -> Response:
    # any method other than GET/POST on the waitlist endpoint
    if exc.status_code == 405 and request.url.path == WAITLIST_PATH:
        return PlainTextResponse("Method Not Allowed", status_code=405, headers=exc.headers)
    return await http_exception_handler(request, exc)


@app.exception_handler(ValidationError)
async def _schema_error(request: Request, exc: ValidationError) -> JSONResponse:
    details = [
        {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")}
        for e in exc.errors()
    ]
    return JSONResponse({"error": "Invalid input", "details": details}, status_code=422)


async def _json_body(request: Request) -> Any:
    # malformed or missing JSON is treated like an empty payload
    try:
        return await request.json()
    except ValueError:
        return {}


# --------------------------------------------------
# Routes
# --------------------------------------------------

@app.get("/health")
def health() -> Dict[str, str]:
    return {"status": "ok"}


@app.get(WAITLIST_PATH)
def waitlist_count() -> Dict[str, int]:
    return waitlist_service.get_count()


@app.post(WAITLIST_PATH)
async def join_waitlist(request: Request) -> Dict[str, Any]:
    raw = await _json_body(request)
    try:
        body = WaitlistRequest.model_validate(raw if isinstance(raw, dict) else {})
    except ValidationError:
        raise InvalidInput(INVALID_EMAIL_MESSAGE) from None

    return await run_in_threadpool(waitlist_service.join, body.email, request.headers)


@app.get("/api/fn/getWaitlistCount")
def fn_get_waitlist_count() -> Dict[str, int]:
    return server_functions.get_waitlist_count()


@app.post("/api/fn/joinWaitlist")
async def fn_join_waitlist(request: Request) -> Dict[str, Any]:
    raw = await _json_body(request)
    data = raw.get("data", raw) if isinstance(raw, dict) else {}
    return await run_in_threadpool(server_functions.join_waitlist, data, request.headers)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run("app:app", host="0.0.0.0", port=8000, reload=True)

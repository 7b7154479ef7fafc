import logging

from fastapi import FastAPI
from fastapi.concurrency import run_in_threadpool
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from auth import make_authenticator
from config import Settings, configure_logging
from errors import PronoteError
from session import DEMO_CREDENTIALS, Credentials


settings = Settings.from_env()
configure_logging(settings)
logger = logging.getLogger(__name__)

app = FastAPI(title="Pronote Login Proxy")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


class CredentialPayload(BaseModel):
    username: str | None = None
    password: str | None = None


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/login")
async def login(payload: CredentialPayload | None = None):
    username = ((payload and payload.username) or "").strip()
    password = (payload and payload.password) or ""
    if username and not password:
        return {"success": False, "errKind": "ValueError", "errMsg": "请填写密码"}

    credentials = (
        Credentials(username=username, password=password)
        if username
        else DEMO_CREDENTIALS
    )
    authenticator = make_authenticator(settings)
    try:
        result = await run_in_threadpool(authenticator.authenticate, credentials)
    except PronoteError as exc:
        return {"success": False, "errKind": exc.kind, "errMsg": exc.message}
    except Exception as exc:  # noqa: BLE001
        logger.exception("login failed")
        message = str(exc) or "登录失败"
        return {"success": False, "errKind": type(exc).__name__, "errMsg": message}
    return {
        "success": True,
        "mode": result.mode,
        "sessionId": result.session_id,
        "state": result.state,
    }

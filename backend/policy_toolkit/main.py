import logging

from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse

from .credentials import CredentialStore, DatabaseCredentialStore
from .db import Base, SessionLocal, engine
from .deps import get_gemini_client
from .gemini_client import GeminiClient
from .errors import MalformedResponseError, MissingCredentialError, SchemaError, TransportError
from .logging_setup import setup_logging
from .settings import settings
from .routers import credentials
from .routers import gemini
from .routers import tools

setup_logging(settings.log_level)
LOGGER = logging.getLogger("policy_toolkit.app")

app = FastAPI(title="Tech Policy Toolkit API")
app.include_router(credentials.router)
app.include_router(gemini.router)
app.include_router(tools.router)


def _error(status_code: int, exc: Exception) -> JSONResponse:
	return JSONResponse(status_code=status_code, content={"detail": str(exc)})


@app.exception_handler(MissingCredentialError)
async def missing_credential_handler(request: Request, exc: MissingCredentialError):
	return _error(400, exc)


@app.exception_handler(TransportError)
async def transport_error_handler(request: Request, exc: TransportError):
	return _error(502, exc)


@app.exception_handler(MalformedResponseError)
async def malformed_response_handler(request: Request, exc: MalformedResponseError):
	return _error(502, exc)


@app.exception_handler(SchemaError)
async def schema_error_handler(request: Request, exc: SchemaError):
	return _error(422, exc)


@app.get("/info")
def root(client: GeminiClient = Depends(get_gemini_client)):
	return {"status": "ok", "gemini_configured": client.has_credential()}


def seed_credential(store: CredentialStore) -> bool:
	"""Copy GEMINI_API_KEY into an empty store. Returns True if it did."""
	if settings.gemini_api_key and not store.get():
		store.set(settings.gemini_api_key)
		LOGGER.info("Seeded Gemini credential from environment")
		return True
	return False


@app.on_event("startup")
async def startup_event():
	# Initialize DB schema
	Base.metadata.create_all(bind=engine)
	seed_credential(DatabaseCredentialStore(SessionLocal))


def run() -> None:
	import uvicorn

	uvicorn.run("policy_toolkit.main:app", host="127.0.0.1", port=8000)

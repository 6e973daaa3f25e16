from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ..credentials import CredentialStore
from ..deps import get_credential_store

router = APIRouter(prefix="/settings", tags=["settings"])


class CredentialRequest(BaseModel):
	api_key: str


@router.get("/credential")
def credential_status(store: CredentialStore = Depends(get_credential_store)):
	# Never echo the key back
	return {"configured": bool(store.get())}


@router.put("/credential")
def save_credential(req: CredentialRequest, store: CredentialStore = Depends(get_credential_store)):
	api_key = (req.api_key or "").strip()
	if not api_key:
		raise HTTPException(status_code=400, detail="api_key is required")
	store.set(api_key)
	return {"ok": True}


@router.delete("/credential")
def clear_credential(store: CredentialStore = Depends(get_credential_store)):
	store.set("")
	return {"ok": True}

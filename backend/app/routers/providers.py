"""Provider API routes."""
import logging
from fastapi import APIRouter, Depends, status

from app.dependencies import get_admin_user, get_current_user, get_store
from app.exceptions import NotFoundError, ValidationError
from app.schemas.common import MessageOut
from app.schemas.provider import ProviderCreate, ProviderDetailOut, ProviderListOut, ProviderOut, ProviderUpdate
from app.services.store import Store

logger = logging.getLogger(__name__)
router = APIRouter()


@router.get("/", response_model=list[ProviderListOut])
def list_providers(user: dict = Depends(get_current_user), store: Store = Depends(get_store)):
    """List providers with the number of events each is associated with."""
    return store.list_providers()


@router.get("/{provider_id}", response_model=ProviderDetailOut)
def get_provider(provider_id: str, user: dict = Depends(get_current_user), store: Store = Depends(get_store)):
    """Fetch a provider with its associated events."""
    provider = store.get_provider_detail(provider_id)
    if not provider:
        raise NotFoundError("Provider", provider_id)
    return provider


@router.post("/", response_model=ProviderOut, status_code=status.HTTP_201_CREATED)
def create_provider(
    payload: ProviderCreate,
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store),
):
    if not payload.name:
        raise ValidationError("Provider name is required")
    return store.create_provider(
        name=payload.name,
        email=payload.email,
        phone=payload.phone,
        dynamic_fields=payload.dynamic_fields,
    )


@router.put("/{provider_id}", response_model=ProviderOut)
def update_provider(
    provider_id: str,
    payload: ProviderUpdate,
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store),
):
    provider = store.update_provider(provider_id, payload.model_dump(exclude_unset=True))
    if not provider:
        raise NotFoundError("Provider", provider_id)
    return provider


@router.delete("/{provider_id}", response_model=MessageOut)
def delete_provider(provider_id: str, admin: dict = Depends(get_admin_user), store: Store = Depends(get_store)):
    """Delete a provider and its event associations."""
    if not store.delete_provider(provider_id):
        raise NotFoundError("Provider", provider_id)
    return {"message": "Provider deleted"}

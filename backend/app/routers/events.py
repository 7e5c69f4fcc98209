"""Event API routes, including attributes and provider associations."""
import logging
from fastapi import APIRouter, Depends, status

from app.dependencies import get_admin_user, get_current_user, get_image_storage, get_store
from app.exceptions import NotFoundError, ValidationError
from app.schemas.common import MessageOut
from app.schemas.event import (
    AttributeCreate,
    AttributeOut,
    AttributeUpdate,
    EventCreate,
    EventDetailOut,
    EventOut,
    EventUpdate,
)
from app.schemas.provider import EventProviderAdd, EventProviderOut
from app.services.event_data_service import release_images
from app.services.image_storage import LocalImageStorage
from app.services.store import Store

logger = logging.getLogger(__name__)
router = APIRouter()


def _attribute_of_event(store: Store, event_id: str, attribute_id: str) -> dict:
    attribute = store.get_attribute(attribute_id)
    if not attribute or attribute["event_id"] != event_id:
        raise NotFoundError("Event attribute", attribute_id)
    return attribute


@router.get("/", response_model=list[EventDetailOut])
def list_events(user: dict = Depends(get_current_user), store: Store = Depends(get_store)):
    """List events with attributes, providers and submitted-data counts."""
    return store.list_events()


@router.post("/", response_model=EventOut, status_code=status.HTTP_201_CREATED)
def create_event(payload: EventCreate, admin: dict = Depends(get_admin_user), store: Store = Depends(get_store)):
    """Create an event (admin only)."""
    if not payload.name:
        raise ValidationError("Event name is required")
    return store.create_event(
        name=payload.name,
        description=payload.description,
        start_date=payload.start_date,
        end_date=payload.end_date,
        dynamic_fields=payload.dynamic_fields,
    )


@router.get("/{event_id}", response_model=EventDetailOut)
def get_event(event_id: str, user: dict = Depends(get_current_user), store: Store = Depends(get_store)):
    """Fetch a single event with its attributes and providers."""
    event = store.get_event_detail(event_id)
    if not event:
        raise NotFoundError("Event", event_id)
    return event


@router.put("/{event_id}", response_model=EventOut)
def update_event(
    event_id: str,
    payload: EventUpdate,
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store),
):
    """Update an event (partial update, admin only)."""
    event = store.update_event(event_id, payload.model_dump(exclude_unset=True))
    if not event:
        raise NotFoundError("Event", event_id)
    return event


@router.delete("/{event_id}", response_model=MessageOut)
def delete_event(
    event_id: str,
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store),
    images: LocalImageStorage = Depends(get_image_storage),
):
    """Delete an event and everything that hangs off it (admin only)."""
    purged = store.delete_event(event_id)
    if purged is None:
        raise NotFoundError("Event", event_id)
    release_images(images, purged)
    return {"message": "Event deleted"}


# ── Attributes ──────────────────────────────────────────────────────


@router.get("/{event_id}/attributes", response_model=list[AttributeOut])
def list_attributes(event_id: str, user: dict = Depends(get_current_user), store: Store = Depends(get_store)):
    """List the attributes defined on an event."""
    if not store.get_event(event_id):
        raise NotFoundError("Event", event_id)
    return store.list_attributes(event_id)


@router.post("/{event_id}/attributes", response_model=AttributeOut, status_code=status.HTTP_201_CREATED)
def create_attribute(
    event_id: str,
    payload: AttributeCreate,
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store),
):
    """Add an attribute to an event. Names are unique per event."""
    if not payload.name or not payload.data_type:
        raise ValidationError("Name and data type are required")
    if not store.get_event(event_id):
        raise NotFoundError("Event", event_id)
    return store.create_attribute(
        event_id=event_id,
        name=payload.name,
        data_type=payload.data_type,
        allow_image=payload.allow_image,
        description=payload.description,
    )


@router.put("/{event_id}/attributes/{attribute_id}", response_model=AttributeOut)
def update_attribute(
    event_id: str,
    attribute_id: str,
    payload: AttributeUpdate,
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store),
):
    """Update an attribute of an event (partial update)."""
    _attribute_of_event(store, event_id, attribute_id)
    attribute = store.update_attribute(attribute_id, payload.model_dump(exclude_unset=True))
    if not attribute:
        raise NotFoundError("Event attribute", attribute_id)
    return attribute


@router.delete("/{event_id}/attributes/{attribute_id}", response_model=MessageOut)
def delete_attribute(
    event_id: str,
    attribute_id: str,
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store),
    images: LocalImageStorage = Depends(get_image_storage),
):
    """Delete an attribute together with its data and permissions."""
    _attribute_of_event(store, event_id, attribute_id)
    release_images(images, store.delete_attribute(attribute_id))
    return {"message": "Attribute deleted"}


# ── Providers ───────────────────────────────────────────────────────


@router.post("/{event_id}/providers", response_model=EventProviderOut, status_code=status.HTTP_201_CREATED)
def add_provider(
    event_id: str,
    payload: EventProviderAdd,
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store),
):
    """Associate a provider with an event."""
    if not payload.provider_id:
        raise ValidationError("Provider ID is required")
    if not store.get_event(event_id):
        raise NotFoundError("Event", event_id)
    if not store.get_provider(payload.provider_id):
        raise NotFoundError("Provider", payload.provider_id)
    return store.add_event_provider(event_id, payload.provider_id)


@router.delete("/{event_id}/providers/{provider_id}", response_model=MessageOut)
def remove_provider(
    event_id: str,
    provider_id: str,
    admin: dict = Depends(get_admin_user),
    store: Store = Depends(get_store),
):
    """Remove a provider from an event."""
    if not store.remove_event_provider(event_id, provider_id):
        raise NotFoundError("Event provider association")
    return {"message": "Provider removed from event"}

"""Event data service — submission workflow for attribute values.

Responsibilities:
- Access control through the evaluator (create / read / update / delete)
- Ownership: non-admins may only edit or delete their own submissions
- Image constraint: attributes without ``allow_image`` reject any image
- Image files are stored only after every check passes, and removed again
  if the write fails or the row is replaced / deleted
- Stored-image URLs cannot be set by clients; they only come from an
  upload, so a row never points at a file another row owns
"""
import logging
from dataclasses import dataclass
from typing import Any, Optional

from app.exceptions import NotFoundError, ValidationError
from app.services.access_control import Operation, check_access, check_image_allowed
from app.services.image_storage import PUBLIC_PREFIX, LocalImageStorage
from app.services.store import Store

logger = logging.getLogger(__name__)


@dataclass
class ImageUpload:
    """An uploaded image file, read into memory."""

    filename: str
    content_type: Optional[str]
    content: bytes


def _check_client_image_url(image_url: Optional[str], current_url: Optional[str] = None) -> None:
    """Reject a body-supplied URL into the upload directory unless it is the row's own."""
    if image_url and image_url.startswith(PUBLIC_PREFIX) and image_url != current_url:
        raise ValidationError("Stored images can only be attached by uploading a file")


def release_images(images: LocalImageStorage, urls: Optional[list[str]]) -> None:
    """Delete the files behind image URLs of rows that no longer exist."""
    for url in urls or ():
        images.delete(url)


def list_for_attribute(store: Store, user: dict, attribute_id: str) -> list[dict]:
    """Submissions for one attribute, newest first. Requires read access."""
    check_access(store, user, attribute_id, Operation.read)
    if not store.get_attribute(attribute_id):
        raise NotFoundError("Event attribute", attribute_id)
    return store.list_event_data_for_attribute(attribute_id)


def list_for_event(store: Store, event_id: str) -> list[dict]:
    """Submissions for a whole event, newest first. No read check is applied here."""
    if not store.get_event(event_id):
        raise NotFoundError("Event", event_id)
    return store.list_event_data_for_event(event_id)


def submit(
    store: Store,
    images: LocalImageStorage,
    user: dict,
    event_id: Optional[str],
    event_attribute_id: Optional[str],
    data: Any,
    comment: Optional[str] = None,
    image_url: Optional[str] = None,
    image: Optional[ImageUpload] = None,
) -> dict:
    """Create a submission after required-field, permission and image checks."""
    if not event_id or not event_attribute_id or data is None:
        raise ValidationError("Event, attribute and data are required")

    check_access(store, user, event_attribute_id, Operation.create)

    attribute = store.get_attribute(event_attribute_id)
    if not attribute:
        raise NotFoundError("Event attribute", event_attribute_id)
    if attribute["event_id"] != event_id:
        raise ValidationError("The attribute does not belong to this event")

    check_image_allowed(attribute, image is not None or bool(image_url))
    if image is None:
        _check_client_image_url(image_url)

    stored_url = None
    if image is not None:
        stored_url = images.store(image.content, image.filename, image.content_type)
        image_url = stored_url

    try:
        return store.create_event_data(
            event_id=event_id,
            event_attribute_id=event_attribute_id,
            user_id=user["id"],
            data=data,
            comment=comment,
            image_url=image_url,
        )
    except Exception:
        if stored_url:
            images.delete(stored_url)
        raise


def edit(
    store: Store,
    images: LocalImageStorage,
    user: dict,
    event_data_id: str,
    updates: dict[str, Any],
    image: Optional[ImageUpload] = None,
) -> dict:
    """Apply a partial update to a submission (author with can_update, or admin)."""
    existing = store.get_event_data(event_data_id)
    if not existing:
        raise NotFoundError("Event data", event_data_id)

    check_access(
        store, user, existing["event_attribute_id"], Operation.update, owner_id=existing["user_id"]
    )

    attribute = store.get_attribute(existing["event_attribute_id"])
    if not attribute:
        raise NotFoundError("Event attribute", existing["event_attribute_id"])
    check_image_allowed(attribute, image is not None or bool(updates.get("image_url")))
    if image is None:
        _check_client_image_url(updates.get("image_url"), existing.get("image_url"))

    updates = {k: v for k, v in updates.items() if k in ("data", "comment", "image_url")}
    stored_url = None
    if image is not None:
        stored_url = images.store(image.content, image.filename, image.content_type)
        updates["image_url"] = stored_url

    try:
        updated = store.update_event_data(event_data_id, updates)
    except Exception:
        if stored_url:
            images.delete(stored_url)
        raise
    if updated is None:
        raise NotFoundError("Event data", event_data_id)

    previous_url = existing.get("image_url")
    if "image_url" in updates and previous_url and previous_url != updated.get("image_url"):
        images.delete(previous_url)
    return updated


def remove(store: Store, images: LocalImageStorage, user: dict, event_data_id: str) -> None:
    """Delete a submission (author with can_delete, or admin) and its image."""
    existing = store.get_event_data(event_data_id)
    if not existing:
        raise NotFoundError("Event data", event_data_id)

    check_access(
        store, user, existing["event_attribute_id"], Operation.delete, owner_id=existing["user_id"]
    )

    store.delete_event_data(event_data_id)
    images.delete(existing.get("image_url"))

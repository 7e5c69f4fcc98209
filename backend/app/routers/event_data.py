"""Event data API routes — submissions against event attributes.

POST and PUT accept either a JSON body or multipart form data. In form
data the ``data`` field is JSON-encoded and an optional ``image`` file may
be attached. Bodies are read by async dependencies; the handlers
themselves are sync so file writes and store calls run in the threadpool.
"""
import json
import logging
from typing import Any, Optional

import pydantic
from fastapi import APIRouter, Depends, Request, status
from starlette.datastructures import UploadFile

from app.dependencies import get_current_user, get_image_storage, get_store
from app.exceptions import ValidationError
from app.schemas.common import MessageOut
from app.schemas.event_data import EventDataCreate, EventDataOut, EventDataUpdate
from app.services import event_data_service
from app.services.event_data_service import ImageUpload
from app.services.image_storage import LocalImageStorage
from app.services.store import Store

logger = logging.getLogger(__name__)
router = APIRouter()

_FORM_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


def _decode_form_data(raw: str) -> Any:
    """Form fields are strings; ``data`` carries JSON but plain text is kept as-is."""
    try:
        return json.loads(raw)
    except ValueError:
        return raw


async def _read_submission(request: Request, schema: type[pydantic.BaseModel]):
    """Parse a JSON or form body into ``schema``, plus any uploaded image."""
    content_type = request.headers.get("content-type", "")
    image: Optional[ImageUpload] = None

    if content_type.startswith(_FORM_TYPES):
        form = await request.form()
        fields: dict[str, Any] = {}
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if key == "image" and value.filename:
                    image = ImageUpload(
                        filename=value.filename,
                        content_type=value.content_type,
                        content=await value.read(),
                    )
            else:
                fields[key] = value
        if isinstance(fields.get("data"), str):
            fields["data"] = _decode_form_data(fields["data"])
    else:
        try:
            fields = await request.json()
        except ValueError:
            raise ValidationError("Request body must be valid JSON")
        if not isinstance(fields, dict):
            raise ValidationError("Request body must be a JSON object")

    try:
        payload = schema.model_validate(fields)
    except pydantic.ValidationError as e:
        first = e.errors()[0]
        field = ".".join(str(part) for part in first.get("loc", ()))
        raise ValidationError(f"{field}: {first.get('msg', 'invalid value')}")
    return payload, image


async def read_create_submission(request: Request) -> tuple[EventDataCreate, Optional[ImageUpload]]:
    return await _read_submission(request, EventDataCreate)


async def read_update_submission(request: Request) -> tuple[EventDataUpdate, Optional[ImageUpload]]:
    return await _read_submission(request, EventDataUpdate)


@router.get("/attribute/{attribute_id}", response_model=list[EventDataOut])
def list_by_attribute(
    attribute_id: str,
    user: dict = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    """Submissions for an attribute, newest first (requires read permission)."""
    return event_data_service.list_for_attribute(store, user, attribute_id)


@router.get("/event/{event_id}", response_model=list[EventDataOut])
def list_by_event(
    event_id: str,
    user: dict = Depends(get_current_user),
    store: Store = Depends(get_store),
):
    """Submissions for every attribute of an event, newest first."""
    return event_data_service.list_for_event(store, event_id)


@router.post("/", response_model=EventDataOut, status_code=status.HTTP_201_CREATED)
def create_event_data(
    user: dict = Depends(get_current_user),
    submission: tuple = Depends(read_create_submission),
    store: Store = Depends(get_store),
    images: LocalImageStorage = Depends(get_image_storage),
):
    """Submit a value (optionally with an image) against an attribute."""
    payload, image = submission
    return event_data_service.submit(
        store,
        images,
        user,
        event_id=payload.event_id,
        event_attribute_id=payload.event_attribute_id,
        data=payload.data,
        comment=payload.comment,
        image_url=payload.image_url,
        image=image,
    )


@router.put("/{event_data_id}", response_model=EventDataOut)
def update_event_data(
    event_data_id: str,
    user: dict = Depends(get_current_user),
    submission: tuple = Depends(read_update_submission),
    store: Store = Depends(get_store),
    images: LocalImageStorage = Depends(get_image_storage),
):
    """Edit a submission. Non-admins may only edit their own."""
    payload, image = submission
    return event_data_service.edit(
        store, images, user, event_data_id, payload.model_dump(exclude_unset=True), image=image
    )


@router.delete("/{event_data_id}", response_model=MessageOut)
def delete_event_data(
    event_data_id: str,
    user: dict = Depends(get_current_user),
    store: Store = Depends(get_store),
    images: LocalImageStorage = Depends(get_image_storage),
):
    """Delete a submission. Non-admins may only delete their own."""
    event_data_service.remove(store, images, user, event_data_id)
    return {"message": "Data deleted"}

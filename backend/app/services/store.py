"""Data store — authoritative collection of all entities plus relational integrity.

One ``Store`` is constructed per application and handed to every handler.
Each public method runs in its own session under a single re-entrant lock,
so reads and writes are serialized. Rows leave the store as plain dicts
keyed by column name; denormalized views nest related rows the same way.

Not-found is signalled with ``None`` (lookups, updates, cascading deletes)
or ``False`` (plain deletes). Only uniqueness violations raise.
"""
import logging
import threading
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone
from typing import Any, Iterator, Optional

from sqlalchemy.orm import Session, sessionmaker

from app.database import Base, build_engine
from app.exceptions import DuplicateAssociationError, DuplicateAttributeError, DuplicateEmailError
from app.models.event import DataType, Event, EventAttribute
from app.models.event_data import EventData
from app.models.permission import Permission
from app.models.provider import EventProvider, Provider
from app.models.user import User, UserRole

logger = logging.getLogger(__name__)

# Fields that ignore an explicit null in a partial update.
_USER_FIELDS = {"email", "name", "role", "password_hash"}
_EVENT_FIELDS = {"name", "description", "start_date", "end_date", "dynamic_fields"}
_EVENT_REQUIRED = {"name", "dynamic_fields"}
_ATTRIBUTE_FIELDS = {"name", "data_type", "allow_image", "description"}
_ATTRIBUTE_REQUIRED = {"name", "data_type", "allow_image"}
_PROVIDER_FIELDS = {"name", "email", "phone", "dynamic_fields"}
_PROVIDER_REQUIRED = {"name", "dynamic_fields"}
_PERMISSION_FLAGS = ("can_create", "can_read", "can_update", "can_delete")
_EVENT_DATA_FIELDS = {"data", "comment", "image_url"}
_EVENT_DATA_REQUIRED = {"data"}


def _naive_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def _row_dict(row, exclude: tuple[str, ...] = ()) -> dict[str, Any]:
    """Serialize an ORM row's columns to a dict."""
    return {
        column.name: getattr(row, column.name)
        for column in row.__table__.columns
        if column.name not in exclude
    }


def _user_dict(user: User) -> dict[str, Any]:
    return _row_dict(user, exclude=("password_hash",))


def _author_dict(user: Optional[User]) -> Optional[dict[str, Any]]:
    if user is None:
        return None
    return {"id": user.id, "name": user.name, "email": user.email}


def _apply_updates(row, updates: dict[str, Any], allowed: set[str], required: set[str]) -> None:
    for field, value in updates.items():
        if field not in allowed:
            continue
        if value is None and field in required:
            continue
        setattr(row, field, value)


def _purge_event_data(db: Session, criterion) -> list[str]:
    """Delete the EventData rows matching ``criterion``; return their image URLs."""
    images = [
        row.image_url
        for row in db.query(EventData.image_url).filter(criterion, EventData.image_url.isnot(None))
    ]
    db.query(EventData).filter(criterion).delete(synchronize_session=False)
    return images


class Store:
    """In-process entity store backed by SQLAlchemy (in-memory SQLite by default)."""

    def __init__(self, database_url: str = "sqlite://"):
        self.engine = build_engine(database_url)
        Base.metadata.create_all(bind=self.engine)
        self._session_factory = sessionmaker(
            bind=self.engine, autocommit=False, autoflush=False, expire_on_commit=False
        )
        self._lock = threading.RLock()
        self._last_timestamp: Optional[datetime] = None

    def close(self) -> None:
        self.engine.dispose()

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Yield a session that commits on success and rolls back on error."""
        with self._lock:
            db = self._session_factory()
            try:
                yield db
                db.commit()
            except Exception:
                db.rollback()
                raise
            finally:
                db.close()

    def _now(self) -> datetime:
        """Strictly increasing UTC timestamp, so creation order is total."""
        with self._lock:
            now = datetime.now(timezone.utc).replace(tzinfo=None)
            if self._last_timestamp is not None and now <= self._last_timestamp:
                now = self._last_timestamp + timedelta(microseconds=1)
            self._last_timestamp = now
            return now

    # ── Users ───────────────────────────────────────────────────────

    def create_user(self, email: str, password_hash: str, name: str, role: UserRole = UserRole.employee) -> dict:
        with self.session() as db:
            if db.query(User).filter(User.email == email).first():
                raise DuplicateEmailError(email)
            now = self._now()
            user = User(
                email=email,
                password_hash=password_hash,
                name=name,
                role=UserRole(role),
                created_at=now,
                updated_at=now,
            )
            db.add(user)
            db.flush()
            logger.info("Created user %s (%s)", user.id, user.email)
            return _user_dict(user)

    def get_user(self, user_id: str) -> Optional[dict]:
        with self.session() as db:
            user = db.get(User, user_id)
            return _user_dict(user) if user else None

    def get_user_by_email(self, email: str) -> Optional[dict]:
        """Exact-match lookup that includes the password digest (login only)."""
        with self.session() as db:
            user = db.query(User).filter(User.email == email).first()
            return _row_dict(user) if user else None

    def list_users(self) -> list[dict]:
        with self.session() as db:
            return [_user_dict(u) for u in db.query(User).order_by(User.created_at).all()]

    def count_users(self) -> int:
        with self.session() as db:
            return db.query(User).count()

    def update_user(self, user_id: str, updates: dict[str, Any]) -> Optional[dict]:
        with self.session() as db:
            user = db.get(User, user_id)
            if not user:
                return None
            new_email = updates.get("email")
            if new_email and new_email != user.email:
                if db.query(User).filter(User.email == new_email).first():
                    raise DuplicateEmailError(new_email)
            if updates.get("role") is not None:
                updates = {**updates, "role": UserRole(updates["role"])}
            _apply_updates(user, updates, _USER_FIELDS, _USER_FIELDS)
            user.updated_at = self._now()
            logger.info("Updated user %s", user_id)
            return _user_dict(user)

    def delete_user(self, user_id: str) -> Optional[list[str]]:
        """Delete a user together with their permissions and authored data.

        Returns the image URLs of the purged data rows, or ``None`` if the
        user does not exist.
        """
        with self.session() as db:
            user = db.get(User, user_id)
            if not user:
                return None
            permissions = db.query(Permission).filter(Permission.user_id == user_id).delete()
            images = _purge_event_data(db, EventData.user_id == user_id)
            db.delete(user)
            logger.info(
                "Deleted user %s (%d permissions, %d images released)", user_id, permissions, len(images)
            )
            return images

    # ── Events ──────────────────────────────────────────────────────

    def create_event(
        self,
        name: str,
        description: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        dynamic_fields: Optional[dict[str, Any]] = None,
    ) -> dict:
        with self.session() as db:
            now = self._now()
            event = Event(
                name=name,
                description=description,
                start_date=_naive_utc(start_date),
                end_date=_naive_utc(end_date),
                dynamic_fields=dynamic_fields or {},
                created_at=now,
                updated_at=now,
            )
            db.add(event)
            db.flush()
            logger.info("Created event '%s' (%s)", event.name, event.id)
            return _row_dict(event)

    def get_event(self, event_id: str) -> Optional[dict]:
        with self.session() as db:
            event = db.get(Event, event_id)
            return _row_dict(event) if event else None

    def _event_view(self, db: Session, event: Event) -> dict:
        attributes = (
            db.query(EventAttribute)
            .filter(EventAttribute.event_id == event.id)
            .order_by(EventAttribute.created_at)
            .all()
        )
        providers = (
            db.query(Provider)
            .join(EventProvider, EventProvider.provider_id == Provider.id)
            .filter(EventProvider.event_id == event.id)
            .order_by(EventProvider.created_at)
            .all()
        )
        data_count = db.query(EventData).filter(EventData.event_id == event.id).count()
        view = _row_dict(event)
        view["attributes"] = [_row_dict(a) for a in attributes]
        view["providers"] = [{"provider": _row_dict(p)} for p in providers]
        view["_count"] = {"event_data": data_count}
        return view

    def get_event_detail(self, event_id: str) -> Optional[dict]:
        """Event with its attributes, providers and data count."""
        with self.session() as db:
            event = db.get(Event, event_id)
            return self._event_view(db, event) if event else None

    def list_events(self) -> list[dict]:
        with self.session() as db:
            events = db.query(Event).order_by(Event.created_at).all()
            return [self._event_view(db, e) for e in events]

    def update_event(self, event_id: str, updates: dict[str, Any]) -> Optional[dict]:
        with self.session() as db:
            event = db.get(Event, event_id)
            if not event:
                return None
            updates = {
                k: _naive_utc(v) if k in ("start_date", "end_date") else v
                for k, v in updates.items()
            }
            _apply_updates(event, updates, _EVENT_FIELDS, _EVENT_REQUIRED)
            event.updated_at = self._now()
            logger.info("Updated event %s", event_id)
            return _row_dict(event)

    def delete_event(self, event_id: str) -> Optional[list[str]]:
        """Delete an event with its associations, attributes, data and the
        permissions that referenced those attributes. Returns the purged
        image URLs, or ``None`` if the event does not exist."""
        with self.session() as db:
            event = db.get(Event, event_id)
            if not event:
                return None
            attribute_ids = [
                row.id for row in db.query(EventAttribute.id).filter(EventAttribute.event_id == event_id)
            ]
            if attribute_ids:
                db.query(Permission).filter(
                    Permission.event_attribute_id.in_(attribute_ids)
                ).delete(synchronize_session=False)
            images = _purge_event_data(db, EventData.event_id == event_id)
            db.query(EventAttribute).filter(EventAttribute.event_id == event_id).delete()
            db.query(EventProvider).filter(EventProvider.event_id == event_id).delete()
            db.delete(event)
            logger.info("Deleted event %s (%d attributes)", event_id, len(attribute_ids))
            return images

    # ── Event attributes ────────────────────────────────────────────

    def create_attribute(
        self,
        event_id: str,
        name: str,
        data_type: DataType = DataType.text,
        allow_image: bool = False,
        description: Optional[str] = None,
    ) -> dict:
        with self.session() as db:
            exists = (
                db.query(EventAttribute)
                .filter(EventAttribute.event_id == event_id, EventAttribute.name == name)
                .first()
            )
            if exists:
                raise DuplicateAttributeError(event_id, name)
            now = self._now()
            attribute = EventAttribute(
                event_id=event_id,
                name=name,
                data_type=DataType(data_type),
                allow_image=bool(allow_image),
                description=description,
                created_at=now,
                updated_at=now,
            )
            db.add(attribute)
            db.flush()
            logger.info("Created attribute '%s' (%s) on event %s", name, attribute.id, event_id)
            return _row_dict(attribute)

    def get_attribute(self, attribute_id: str) -> Optional[dict]:
        with self.session() as db:
            attribute = db.get(EventAttribute, attribute_id)
            return _row_dict(attribute) if attribute else None

    def list_attributes(self, event_id: str) -> list[dict]:
        with self.session() as db:
            rows = (
                db.query(EventAttribute)
                .filter(EventAttribute.event_id == event_id)
                .order_by(EventAttribute.created_at)
                .all()
            )
            return [_row_dict(a) for a in rows]

    def update_attribute(self, attribute_id: str, updates: dict[str, Any]) -> Optional[dict]:
        with self.session() as db:
            attribute = db.get(EventAttribute, attribute_id)
            if not attribute:
                return None
            new_name = updates.get("name")
            if new_name and new_name != attribute.name:
                clash = (
                    db.query(EventAttribute)
                    .filter(EventAttribute.event_id == attribute.event_id, EventAttribute.name == new_name)
                    .first()
                )
                if clash:
                    raise DuplicateAttributeError(attribute.event_id, new_name)
            if updates.get("data_type") is not None:
                updates = {**updates, "data_type": DataType(updates["data_type"])}
            _apply_updates(attribute, updates, _ATTRIBUTE_FIELDS, _ATTRIBUTE_REQUIRED)
            attribute.updated_at = self._now()
            logger.info("Updated attribute %s", attribute_id)
            return _row_dict(attribute)

    def delete_attribute(self, attribute_id: str) -> Optional[list[str]]:
        """Delete an attribute with its data and permissions. Returns the
        purged image URLs, or ``None`` if the attribute does not exist."""
        with self.session() as db:
            attribute = db.get(EventAttribute, attribute_id)
            if not attribute:
                return None
            images = _purge_event_data(db, EventData.event_attribute_id == attribute_id)
            db.query(Permission).filter(Permission.event_attribute_id == attribute_id).delete()
            db.delete(attribute)
            logger.info("Deleted attribute %s", attribute_id)
            return images

    # ── Providers ───────────────────────────────────────────────────

    def create_provider(
        self,
        name: str,
        email: Optional[str] = None,
        phone: Optional[str] = None,
        dynamic_fields: Optional[dict[str, Any]] = None,
    ) -> dict:
        with self.session() as db:
            now = self._now()
            provider = Provider(
                name=name,
                email=email,
                phone=phone,
                dynamic_fields=dynamic_fields or {},
                created_at=now,
                updated_at=now,
            )
            db.add(provider)
            db.flush()
            logger.info("Created provider '%s' (%s)", provider.name, provider.id)
            return _row_dict(provider)

    def get_provider(self, provider_id: str) -> Optional[dict]:
        with self.session() as db:
            provider = db.get(Provider, provider_id)
            return _row_dict(provider) if provider else None

    def get_provider_detail(self, provider_id: str) -> Optional[dict]:
        """Provider with the events it is associated with."""
        with self.session() as db:
            provider = db.get(Provider, provider_id)
            if not provider:
                return None
            events = (
                db.query(Event)
                .join(EventProvider, EventProvider.event_id == Event.id)
                .filter(EventProvider.provider_id == provider_id)
                .order_by(EventProvider.created_at)
                .all()
            )
            view = _row_dict(provider)
            view["events"] = [{"event": {"id": e.id, "name": e.name}} for e in events]
            return view

    def list_providers(self) -> list[dict]:
        with self.session() as db:
            views = []
            for provider in db.query(Provider).order_by(Provider.created_at).all():
                view = _row_dict(provider)
                view["_count"] = {
                    "events": db.query(EventProvider).filter(EventProvider.provider_id == provider.id).count()
                }
                views.append(view)
            return views

    def update_provider(self, provider_id: str, updates: dict[str, Any]) -> Optional[dict]:
        with self.session() as db:
            provider = db.get(Provider, provider_id)
            if not provider:
                return None
            _apply_updates(provider, updates, _PROVIDER_FIELDS, _PROVIDER_REQUIRED)
            provider.updated_at = self._now()
            logger.info("Updated provider %s", provider_id)
            return _row_dict(provider)

    def delete_provider(self, provider_id: str) -> bool:
        with self.session() as db:
            provider = db.get(Provider, provider_id)
            if not provider:
                return False
            db.query(EventProvider).filter(EventProvider.provider_id == provider_id).delete()
            db.delete(provider)
            logger.info("Deleted provider %s", provider_id)
            return True

    # ── Event ↔ provider associations ───────────────────────────────

    def add_event_provider(self, event_id: str, provider_id: str) -> dict:
        with self.session() as db:
            exists = (
                db.query(EventProvider)
                .filter(EventProvider.event_id == event_id, EventProvider.provider_id == provider_id)
                .first()
            )
            if exists:
                raise DuplicateAssociationError(event_id, provider_id)
            link = EventProvider(event_id=event_id, provider_id=provider_id, created_at=self._now())
            db.add(link)
            db.flush()
            provider = db.get(Provider, provider_id)
            logger.info("Associated provider %s with event %s", provider_id, event_id)
            view = _row_dict(link)
            view["provider"] = _row_dict(provider) if provider else None
            return view

    def remove_event_provider(self, event_id: str, provider_id: str) -> bool:
        with self.session() as db:
            removed = (
                db.query(EventProvider)
                .filter(EventProvider.event_id == event_id, EventProvider.provider_id == provider_id)
                .delete()
            )
            if removed:
                logger.info("Removed provider %s from event %s", provider_id, event_id)
            return bool(removed)

    # ── Permissions ─────────────────────────────────────────────────

    def _permission_view(self, db: Session, permission: Permission, with_user: bool = True) -> dict:
        view = _row_dict(permission)
        if with_user:
            view["user"] = _author_dict(db.get(User, permission.user_id))
        attribute = db.get(EventAttribute, permission.event_attribute_id)
        if attribute:
            event = db.get(Event, attribute.event_id)
            view["event_attribute"] = {
                **_row_dict(attribute),
                "event": {"id": event.id, "name": event.name} if event else None,
            }
        return view

    def upsert_permission(self, user_id: str, event_attribute_id: str, **flags: Optional[bool]) -> dict:
        """Create the (user, attribute) permission row, or merge the supplied
        flags into the existing one. Flags passed as ``None`` are left alone;
        on first creation ``can_read`` defaults to true and the rest to false.
        """
        supplied = {k: v for k, v in flags.items() if k in _PERMISSION_FLAGS and v is not None}
        with self.session() as db:
            permission = (
                db.query(Permission)
                .filter(Permission.user_id == user_id, Permission.event_attribute_id == event_attribute_id)
                .first()
            )
            now = self._now()
            if permission:
                for flag, value in supplied.items():
                    setattr(permission, flag, bool(value))
                permission.updated_at = now
                logger.info("Updated permission %s for user %s", permission.id, user_id)
            else:
                permission = Permission(
                    user_id=user_id,
                    event_attribute_id=event_attribute_id,
                    can_create=bool(supplied.get("can_create", False)),
                    can_read=bool(supplied.get("can_read", True)),
                    can_update=bool(supplied.get("can_update", False)),
                    can_delete=bool(supplied.get("can_delete", False)),
                    created_at=now,
                    updated_at=now,
                )
                db.add(permission)
                db.flush()
                logger.info(
                    "Created permission %s for user %s on attribute %s",
                    permission.id, user_id, event_attribute_id,
                )
            return self._permission_view(db, permission)

    def get_permission(self, permission_id: str) -> Optional[dict]:
        with self.session() as db:
            permission = db.get(Permission, permission_id)
            return _row_dict(permission) if permission else None

    def find_permission(self, user_id: str, event_attribute_id: str) -> Optional[dict]:
        with self.session() as db:
            permission = (
                db.query(Permission)
                .filter(Permission.user_id == user_id, Permission.event_attribute_id == event_attribute_id)
                .first()
            )
            return _row_dict(permission) if permission else None

    def list_permissions_for_user(self, user_id: str) -> list[dict]:
        with self.session() as db:
            rows = db.query(Permission).filter(Permission.user_id == user_id).order_by(Permission.created_at).all()
            return [self._permission_view(db, p, with_user=False) for p in rows]

    def list_permissions_for_attribute(self, event_attribute_id: str) -> list[dict]:
        with self.session() as db:
            rows = (
                db.query(Permission)
                .filter(Permission.event_attribute_id == event_attribute_id)
                .order_by(Permission.created_at)
                .all()
            )
            return [self._permission_view(db, p) for p in rows]

    def update_permission(self, permission_id: str, updates: dict[str, Any]) -> Optional[dict]:
        with self.session() as db:
            permission = db.get(Permission, permission_id)
            if not permission:
                return None
            _apply_updates(permission, updates, set(_PERMISSION_FLAGS), set(_PERMISSION_FLAGS))
            permission.updated_at = self._now()
            logger.info("Updated permission %s", permission_id)
            return self._permission_view(db, permission)

    def delete_permission(self, permission_id: str) -> bool:
        with self.session() as db:
            permission = db.get(Permission, permission_id)
            if not permission:
                return False
            db.delete(permission)
            logger.info("Deleted permission %s", permission_id)
            return True

    # ── Event data ──────────────────────────────────────────────────

    def _event_data_view(self, db: Session, row: EventData) -> dict:
        view = _row_dict(row)
        view["user"] = _author_dict(db.get(User, row.user_id))
        attribute = db.get(EventAttribute, row.event_attribute_id)
        view["event_attribute"] = _row_dict(attribute) if attribute else None
        return view

    def create_event_data(
        self,
        event_id: str,
        event_attribute_id: str,
        user_id: str,
        data: Any,
        comment: Optional[str] = None,
        image_url: Optional[str] = None,
    ) -> dict:
        with self.session() as db:
            now = self._now()
            row = EventData(
                event_id=event_id,
                event_attribute_id=event_attribute_id,
                user_id=user_id,
                data=data,
                comment=comment,
                image_url=image_url,
                created_at=now,
                updated_at=now,
            )
            db.add(row)
            db.flush()
            logger.info("User %s submitted data %s on attribute %s", user_id, row.id, event_attribute_id)
            return self._event_data_view(db, row)

    def get_event_data(self, event_data_id: str) -> Optional[dict]:
        with self.session() as db:
            row = db.get(EventData, event_data_id)
            return _row_dict(row) if row else None

    def list_event_data_for_attribute(self, event_attribute_id: str) -> list[dict]:
        """Submissions for one attribute, newest first."""
        with self.session() as db:
            rows = (
                db.query(EventData)
                .filter(EventData.event_attribute_id == event_attribute_id)
                .order_by(EventData.created_at.desc())
                .all()
            )
            return [self._event_data_view(db, r) for r in rows]

    def list_event_data_for_event(self, event_id: str) -> list[dict]:
        """Submissions for every attribute of one event, newest first."""
        with self.session() as db:
            rows = (
                db.query(EventData)
                .filter(EventData.event_id == event_id)
                .order_by(EventData.created_at.desc())
                .all()
            )
            return [self._event_data_view(db, r) for r in rows]

    def update_event_data(self, event_data_id: str, updates: dict[str, Any]) -> Optional[dict]:
        with self.session() as db:
            row = db.get(EventData, event_data_id)
            if not row:
                return None
            _apply_updates(row, updates, _EVENT_DATA_FIELDS, _EVENT_DATA_REQUIRED)
            row.updated_at = self._now()
            logger.info("Updated data %s", event_data_id)
            return self._event_data_view(db, row)

    def delete_event_data(self, event_data_id: str) -> bool:
        with self.session() as db:
            row = db.get(EventData, event_data_id)
            if not row:
                return False
            db.delete(row)
            logger.info("Deleted data %s", event_data_id)
            return True

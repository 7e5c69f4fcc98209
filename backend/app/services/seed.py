"""Initial demo data: one admin, two employees, one event with attributes,
scoped permissions and a provider. A no-op once any user exists."""
import logging
from datetime import datetime
from typing import Callable

from app.models.event import DataType
from app.models.user import UserRole
from app.services.store import Store

logger = logging.getLogger(__name__)

ADMIN_EMAIL = "admin@respect.com"
ADMIN_PASSWORD = "admin123"
EMPLOYEE_PASSWORD = "empleado123"


def seed_store(store: Store, hash_password: Callable[[str], str]) -> bool:
    """Populate an empty store. Returns True if data was created."""
    if store.count_users() > 0:
        logger.debug("Store already has users; skipping seed")
        return False

    store.create_user(ADMIN_EMAIL, hash_password(ADMIN_PASSWORD), "Administrador", UserRole.admin)
    employee_hash = hash_password(EMPLOYEE_PASSWORD)
    maria = store.create_user("maria@respect.com", employee_hash, "María González", UserRole.employee)
    juan = store.create_user("juan@respect.com", employee_hash, "Juan Pérez", UserRole.employee)

    event = store.create_event(
        name="EtMday",
        description="Evento de ejemplo para demostración",
        start_date=datetime(2024, 6, 1),
        end_date=datetime(2024, 6, 3),
        dynamic_fields={
            "ubicacion": "Centro de Convenciones",
            "capacidad": 5000,
            "tipo": "Conferencia",
        },
    )

    generadores = store.create_attribute(
        event["id"], "generadores", DataType.text, allow_image=True,
        description="Generadores de energía del evento",
    )
    store.create_attribute(
        event["id"], "camiones", DataType.text, allow_image=True,
        description="Camiones utilizados en el evento",
    )
    banos = store.create_attribute(
        event["id"], "baños", DataType.number, allow_image=False,
        description="Cantidad de baños portátiles",
    )

    store.upsert_permission(
        maria["id"], generadores["id"],
        can_create=True, can_read=True, can_update=False, can_delete=False,
    )
    for attribute in (generadores, banos):
        store.upsert_permission(
            juan["id"], attribute["id"],
            can_create=True, can_read=True, can_update=True, can_delete=False,
        )

    provider = store.create_provider(
        name="Proveedor de Energía Sostenible",
        email="contacto@energia-sostenible.com",
        phone="+34 123 456 789",
        dynamic_fields={
            "especialidad": "Energía solar",
            "añosExperiencia": 10,
            "certificaciones": ["ISO 14001", "ISO 50001"],
        },
    )
    store.add_event_provider(event["id"], provider["id"])

    logger.info("Seeded store with demo users, event '%s' and provider", event["name"])
    return True

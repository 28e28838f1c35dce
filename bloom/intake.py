from __future__ import annotations

import logging

from .models import Collection
from .schemas import ContactMessageCreate, ContactMessageRecord, ReservationCreate, ReservationRecord
from .store import Store

logger = logging.getLogger(__name__)

RESERVATION_CONFIRMED = "confirmed"


async def place_reservation(store: Store, payload: ReservationCreate) -> ReservationRecord:
    data = payload.model_dump()
    data["status"] = RESERVATION_CONFIRMED
    reservation = await store.create(Collection.RESERVATIONS, data)
    logger.info("Reservation %s for %s guests on %s", reservation.id, reservation.guests, reservation.date)
    return reservation


async def send_contact_message(store: Store, payload: ContactMessageCreate) -> ContactMessageRecord:
    data = payload.model_dump()
    data["is_read"] = False
    message = await store.create(Collection.CONTACT_MESSAGES, data)
    logger.info("Contact message %s received", message.id)
    return message

"""Client identity resolution.

A client is looked up in the business's pool by phone first, then by email,
and only created when neither matches. Phone numbers and emails are
normalized before both lookup and storage so formatting differences do not
produce duplicate identities.
"""

from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.errors import IdentityResolutionError, ValidationError
from app.models import ClientProfile
from app.services.db_service import DBService

logger = logging.getLogger(__name__)


class IdentityRace(Exception):
    """Another request created the same client between our lookup and insert.

    The transaction is unusable after the failed insert; callers roll back
    and run the whole attempt again, at which point the lookup succeeds.
    """


@dataclass
class ClientInfo:
    name: str
    email: str
    phone: Optional[str] = None


def normalize_phone(value: Optional[str]) -> Optional[str]:
    """Keep digits and a leading ``+``; blank input becomes None.

    >>> normalize_phone("+55 (11) 99999-0000")
    '+5511999990000'
    """
    if value is None:
        return None
    value = value.strip()
    if not value:
        return None
    if value.startswith("+"):
        digits = re.sub(r"[^\d]", "", value[1:])
        return "+" + digits if digits else None
    digits = re.sub(r"[^\d]", "", value)
    return digits or None


def normalize_email(value: Optional[str]) -> str:
    return (value or "").strip().lower()


async def resolve_client_identity(
    db: DBService,
    business_id: uuid.UUID,
    info: ClientInfo,
) -> ClientProfile:
    """Return the existing client for this phone/email, or create one.

    Does not commit. Raises ``IdentityRace`` when a concurrent insert wins,
    ``IdentityResolutionError`` when storage fails for any other reason.
    """
    name = (info.name or "").strip()
    email = normalize_email(info.email)
    phone = normalize_phone(info.phone)
    if not name:
        raise ValidationError("Name is required")
    if not email:
        raise ValidationError("Email is required")

    try:
        client = None
        if phone:
            client = await db.get_client_by_phone(business_id, phone)
        if client is None:
            client = await db.get_client_by_email(business_id, email)

        if client is not None:
            if phone and not client.phone:
                client.phone = phone
                await db.session.flush()
            logger.info(f"Reusing client {client.id} for business {business_id}")
            return client

        client = await db.create_client(
            {
                "business_id": business_id,
                "name": name,
                "email": email,
                "phone": phone,
            }
        )
    except IntegrityError as exc:
        raise IdentityRace(str(exc.orig)) from exc
    except SQLAlchemyError as exc:
        logger.error(f"Client identity resolution failed for business {business_id}: {exc}")
        raise IdentityResolutionError() from exc

    logger.info(f"Created client {client.id} for business {business_id}")
    return client

"""Shop domain service."""

import logging
from typing import Iterable, Optional

from flowertrack.domain.entities import Shop, ShopContact
from flowertrack.domain.errors import (
    NotFoundError,
    ValidationError,
    missing_shop_fields,
    shop_not_found,
)
from flowertrack.domain.store import EntityStore

logger = logging.getLogger(__name__)

_UNSET = object()


class ShopService:
    """Service for managing shops."""

    def __init__(self, store: EntityStore):
        """Initialize shop service.

        Args:
            store: Entity store holding the shops
        """
        self.store = store

    def add_shop(
        self,
        name: str,
        owner: str,
        phone: str,
        address: str,
        alternate_contacts: Iterable[ShopContact | tuple[str, str]] = (),
        location: Optional[str] = None,
    ) -> Shop:
        """Create a new shop.

        Args:
            name: Shop name
            owner: Owner name
            phone: Primary phone number
            address: Street address
            alternate_contacts: Extra (label, phone) contacts
            location: Optional geocoordinate string

        Returns:
            The created shop

        Raises:
            ValidationError: If a required field is blank
        """
        with self.store.lock:
            fields = self._shop_fields(
                name=name,
                owner=owner,
                phone=phone,
                address=address,
                alternate_contacts=alternate_contacts,
                location=location,
            )
            shop = Shop(id=self.store.new_id(), **fields)
            self.store.add_shop(shop)
        logger.info("Added shop %s (%s)", shop.id, shop.name)
        return shop

    def edit_shop(
        self,
        shop_id: str,
        name: Optional[str] = None,
        owner: Optional[str] = None,
        phone: Optional[str] = None,
        address: Optional[str] = None,
        alternate_contacts: Optional[Iterable[ShopContact | tuple[str, str]]] = None,
        location: object = _UNSET,
    ) -> Shop:
        """Update shop fields.

        Only the fields that are provided change. Pass ``location=None`` to
        clear the location.

        Raises:
            NotFoundError: If the shop doesn't exist
            ValidationError: If a required field would become blank
        """
        with self.store.lock:
            current = self.require_shop(shop_id)
            fields = self._shop_fields(
                name=current.name if name is None else name,
                owner=current.owner if owner is None else owner,
                phone=current.phone if phone is None else phone,
                address=current.address if address is None else address,
                alternate_contacts=(
                    current.alternate_contacts
                    if alternate_contacts is None
                    else alternate_contacts
                ),
                location=current.location if location is _UNSET else location,
            )
            shop = Shop(id=current.id, **fields)
            self.store.replace_shop(shop)
        logger.info("Updated shop %s", shop_id)
        return shop

    def get_shop(self, shop_id: str) -> Optional[Shop]:
        """Get shop by ID, or None if not found."""
        return self.store.get_shop(shop_id)

    def require_shop(self, shop_id: str) -> Shop:
        """Get shop by ID.

        Raises:
            NotFoundError: If the shop doesn't exist
        """
        shop = self.store.get_shop(shop_id)
        if shop is None:
            raise NotFoundError(shop_not_found(shop_id))
        return shop

    def list_shops(self) -> list[Shop]:
        """List all shops sorted by name."""
        return sorted(self.store.list_shops(), key=lambda s: s.name.casefold())

    def search_shops(self, query: str) -> list[Shop]:
        """Find shops whose name contains ``query``, ignoring case."""
        needle = query.strip().casefold()
        return [s for s in self.list_shops() if needle in s.name.casefold()]

    def _shop_fields(
        self,
        name: str,
        owner: str,
        phone: str,
        address: str,
        alternate_contacts: Iterable[ShopContact | tuple[str, str]],
        location: Optional[str],
    ) -> dict:
        """Validate and normalize the fields of a shop."""
        values = {
            "name": (name or "").strip(),
            "owner": (owner or "").strip(),
            "phone": (phone or "").strip(),
            "address": (address or "").strip(),
        }
        missing = [field for field, value in values.items() if not value]
        if missing:
            raise ValidationError(missing_shop_fields(missing))

        values["alternate_contacts"] = normalize_contacts(alternate_contacts)
        values["location"] = (location or "").strip() or None
        return values


def normalize_contacts(
    contacts: Iterable[ShopContact | tuple[str, str]],
) -> tuple[ShopContact, ...]:
    """Trim contacts and drop empty rows.

    Raises:
        ValidationError: If a contact has a label without a phone or the reverse
    """
    result = []
    for contact in contacts:
        if isinstance(contact, ShopContact):
            label, phone = contact.label, contact.phone
        else:
            label, phone = contact
        label = (label or "").strip()
        phone = (phone or "").strip()
        if not label and not phone:
            continue
        if not label or not phone:
            raise ValidationError(
                "Alternate contacts need both a label and a phone number"
            )
        result.append(ShopContact(label=label, phone=phone))
    return tuple(result)

from datetime import datetime, timedelta
from sqlalchemy.orm import Session
from typing import List
import logging

from ..core.config import settings
from ..core.exceptions import NotFoundError, parse_identifier
from ..models.inventory import InventoryItem
from ..schemas.inventory import InventoryItemCreate, InventoryItemUpdate
from .access_policy import Action, Caller, ResourceKind, ResourceRef, Verb, enforce

logger = logging.getLogger(__name__)

# Always offered in the category picker, whether stocked or not
PREDEFINED_CATEGORIES = [
    "Pain Relief", "Analgesics", "Antibiotics", "Antivirals", "Cardiovascular",
    "Respiratory", "Gastrointestinal", "Dermatological", "Supplements", "Hormones",
    "Vaccines", "Antifungals", "Antiparasitics", "Ophthalmics", "Anesthetics",
    "Antidepressants", "Antipsychotics", "Antihistamines",
]

class InventoryService:
    def __init__(self, db: Session):
        self.db = db

    def create_item(self, caller: Caller, data: InventoryItemCreate) -> InventoryItem:
        enforce(caller, ResourceRef(ResourceKind.INVENTORY), Action(Verb.CREATE))

        item = InventoryItem(
            **data.model_dump(),
            updated_by_id=caller.id,
            last_updated=datetime.utcnow(),
        )
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)

        logger.info(f"Inventory item {item.id} ({item.name}) added by {caller.id}")
        return item

    def list_items(self, caller: Caller) -> List[InventoryItem]:
        enforce(caller, ResourceRef(ResourceKind.INVENTORY), Action(Verb.LIST))
        return self.db.query(InventoryItem).order_by(InventoryItem.name).all()

    def get_item(self, caller: Caller, raw_id) -> InventoryItem:
        item = self._load(raw_id)
        enforce(caller, ResourceRef(ResourceKind.INVENTORY, item.id), Action(Verb.READ))
        return item

    def update_item(self, caller: Caller, raw_id, data: InventoryItemUpdate) -> InventoryItem:
        item = self._load(raw_id)
        enforce(caller, ResourceRef(ResourceKind.INVENTORY, item.id), Action(Verb.UPDATE))

        changes = data.model_dump(exclude_unset=True)
        for field, value in changes.items():
            setattr(item, field, value)
        item.updated_by_id = caller.id
        item.last_updated = datetime.utcnow()

        self.db.commit()
        self.db.refresh(item)
        logger.info(f"Inventory item {item.id} updated by {caller.id}: {sorted(changes)}")
        return item

    def delete_item(self, caller: Caller, raw_id) -> None:
        item = self._load(raw_id)
        enforce(caller, ResourceRef(ResourceKind.INVENTORY, item.id), Action(Verb.DELETE))

        self.db.delete(item)
        self.db.commit()
        logger.info(f"Inventory item {item.id} removed by {caller.id}")

    def low_stock(self, caller: Caller) -> List[InventoryItem]:
        enforce(caller, ResourceRef(ResourceKind.INVENTORY), Action(Verb.LIST))
        return self.db.query(InventoryItem).filter(
            InventoryItem.quantity <= InventoryItem.threshold
        ).order_by(InventoryItem.quantity).all()

    def expiring(self, caller: Caller, now: datetime = None) -> List[InventoryItem]:
        enforce(caller, ResourceRef(ResourceKind.INVENTORY), Action(Verb.LIST))
        now = now or datetime.utcnow()
        horizon = now + timedelta(days=settings.EXPIRY_WINDOW_DAYS)
        return self.db.query(InventoryItem).filter(
            InventoryItem.expiry_date >= now,
            InventoryItem.expiry_date <= horizon
        ).order_by(InventoryItem.expiry_date).all()

    def by_category(self, caller: Caller, category: str) -> List[InventoryItem]:
        enforce(caller, ResourceRef(ResourceKind.INVENTORY), Action(Verb.LIST))
        return self.db.query(InventoryItem).filter(
            InventoryItem.category == category
        ).order_by(InventoryItem.name).all()

    def categories(self, caller: Caller) -> List[str]:
        enforce(caller, ResourceRef(ResourceKind.INVENTORY), Action(Verb.LIST))
        stocked = [row.category for row in self.db.query(InventoryItem.category).distinct()]
        # Stocked categories first, then the predefined ones, without duplicates
        return list(dict.fromkeys(stocked + PREDEFINED_CATEGORIES))

    def _load(self, raw_id) -> InventoryItem:
        item_id = parse_identifier(raw_id, "inventory ID")
        item = self.db.query(InventoryItem).filter(InventoryItem.id == item_id).first()
        if not item:
            raise NotFoundError("Inventory item not found")
        return item

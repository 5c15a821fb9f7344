from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from ...core.database import get_db
from ...api.deps import get_admin_user, get_current_caller
from ...services.access_policy import Caller
from ...services.inventory_service import InventoryService
from ...schemas.common import MessageResponse
from ...schemas.inventory import (
    InventoryItemCreate, InventoryItemResponse, InventoryItemUpdate
)

router = APIRouter(prefix="/inventory", tags=["Inventory"])

@router.post(
    "",
    response_model=InventoryItemResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_admin_user)]
)
def create_inventory_item(
    item_data: InventoryItemCreate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return InventoryService(db).create_item(caller, item_data)

@router.get("", response_model=List[InventoryItemResponse])
def list_inventory(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return InventoryService(db).list_items(caller)

@router.get("/low-stock", response_model=List[InventoryItemResponse])
def list_low_stock(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    """Items at or below their restock threshold, lowest quantity first."""
    return InventoryService(db).low_stock(caller)

@router.get("/expiring", response_model=List[InventoryItemResponse])
def list_expiring(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return InventoryService(db).expiring(caller)

@router.get("/categories", response_model=List[str])
def list_categories(
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return InventoryService(db).categories(caller)

@router.get("/category/{category}", response_model=List[InventoryItemResponse])
def list_by_category(
    category: str,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return InventoryService(db).by_category(caller, category)

@router.get("/{item_id}", response_model=InventoryItemResponse)
def get_inventory_item(
    item_id: str,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return InventoryService(db).get_item(caller, item_id)

@router.put("/{item_id}", response_model=InventoryItemResponse, dependencies=[Depends(get_admin_user)])
def update_inventory_item(
    item_id: str,
    item_data: InventoryItemUpdate,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    return InventoryService(db).update_item(caller, item_id, item_data)

@router.delete("/{item_id}", response_model=MessageResponse, dependencies=[Depends(get_admin_user)])
def delete_inventory_item(
    item_id: str,
    caller: Caller = Depends(get_current_caller),
    db: Session = Depends(get_db)
):
    InventoryService(db).delete_item(caller, item_id)
    return {"message": "Inventory item removed"}

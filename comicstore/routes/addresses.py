from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends

from comicstore import addresses
from comicstore.database import Database
from comicstore.models import User
from comicstore.routes.deps import CamelModel, current_user, get_db, ok

router = APIRouter(prefix="/addresses", tags=["addresses"])


class AddressRequest(CamelModel):
    address: Optional[str] = None
    recipient_name: Optional[str] = None
    phone: Optional[str] = None


@router.get("")
def list_addresses(db: Database = Depends(get_db), user: User = Depends(current_user)):
    return ok(addresses.list_addresses(db, user))


@router.get("/{address_id}")
def get_address(address_id: int, db: Database = Depends(get_db),
                user: User = Depends(current_user)):
    return ok(addresses.require_address(db, user, address_id))


@router.post("", status_code=201)
def create_address(req: AddressRequest, db: Database = Depends(get_db),
                   user: User = Depends(current_user)):
    address = addresses.create_address(db, user, req.address, req.recipient_name, req.phone)
    return ok(address, "Address created")


@router.put("/{address_id}")
def update_address(address_id: int, req: AddressRequest, db: Database = Depends(get_db),
                   user: User = Depends(current_user)):
    address = addresses.update_address(
        db, user, address_id, req.address, req.recipient_name, req.phone
    )
    return ok(address, "Address updated")


@router.delete("/{address_id}")
def delete_address(address_id: int, db: Database = Depends(get_db),
                   user: User = Depends(current_user)):
    addresses.delete_address(db, user, address_id)
    return ok(message="Address deleted")

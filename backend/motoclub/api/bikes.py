from __future__ import annotations

from typing import Any

from fastapi import APIRouter

from motoclub.deps import CurrentIdentity, DbSession
from motoclub.policies import bikes
from motoclub.schemas import BikeCreateIn, BikePhotoIn, BikeUpdateIn, MaintenanceIn
from motoclub.serializers import bike_out, maintenance_out, photo_out


router = APIRouter()


@router.get("")
def list_bikes(identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    return {"bikes": [bike_out(b) for b in bikes.owned_bikes(db, identity)]}


# Declared before "/{bike_id}" routes so "maintenance" is never parsed as a bike id.
@router.put("/maintenance/{record_id:int}/complete")
def complete_maintenance(record_id: int, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    return {"maintenance": maintenance_out(bikes.complete_maintenance(db, identity, record_id))}


@router.get("/{bike_id:int}")
def get_bike(bike_id: int, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    return {"bike": bike_out(bikes.owned_bike(db, identity, bike_id))}


@router.post("", status_code=201)
def create_bike(data: BikeCreateIn, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    bike = bikes.create_bike(db, identity, data.model_dump())
    return {"bike": bike_out(bike)}


@router.put("/{bike_id:int}")
def update_bike(bike_id: int, data: BikeUpdateIn, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    bike = bikes.update_bike(db, identity, bike_id, data.model_dump(exclude_none=True))
    return {"bike": bike_out(bike)}


@router.delete("/{bike_id:int}")
def delete_bike(bike_id: int, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    bikes.delete_bike(db, identity, bike_id)
    return {"message": "Bike deleted successfully"}


@router.post("/{bike_id:int}/photos", status_code=201)
def add_photo(bike_id: int, data: BikePhotoIn, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    photo = bikes.add_photo(db, identity, bike_id, photo_url=data.photo_url, is_primary=data.is_primary)
    return {"photo": photo_out(photo)}


@router.put("/{bike_id:int}/photos/{photo_id:int}/primary")
def make_primary(bike_id: int, photo_id: int, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    return {"photo": photo_out(bikes.make_primary(db, identity, bike_id, photo_id))}


@router.delete("/{bike_id:int}/photos/{photo_id:int}")
def delete_photo(bike_id: int, photo_id: int, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    bikes.delete_photo(db, identity, bike_id, photo_id)
    return {"message": "Photo deleted"}


@router.post("/{bike_id:int}/maintenance", status_code=201)
def add_maintenance(bike_id: int, data: MaintenanceIn, identity: CurrentIdentity, db: DbSession) -> dict[str, Any]:
    rec = bikes.add_maintenance(db, identity, bike_id, data.model_dump())
    return {"maintenance": maintenance_out(rec)}

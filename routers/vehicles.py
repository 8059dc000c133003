# routers/vehicles.py
"""
Vehicle API routes: fleet records and reads, manual status changes and
maintenance.

Bodies and path ids are handed to the workflows unparsed; each workflow
checks the caller before it validates the payload.
"""
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Query, status as http_status
from sqlalchemy.orm import Session

from database import get_session
from dependencies import get_session_resolver
from models.vehicle import VehicleStatus
from services import maintenance_service, vehicle_service
from .responses import unwrap, with_fields

router = APIRouter(prefix="/api/vehicles", tags=["vehicles"])


@router.get("", summary="List vehicles")
def list_vehicles(
     page: int = Query(1, ge=1),
     page_size: int = Query(20, ge=1, le=100),
     status: Optional[VehicleStatus] = Query(None, description="Filter by status"),
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     params = {"page": page, "page_size": page_size, "status": status}
     return unwrap(vehicle_service.list_vehicles(db, resolve_user, params))


@router.post("", status_code=http_status.HTTP_201_CREATED, summary="Add a vehicle")
def create_vehicle(
     body: Any = Body(None, description="VehicleCreate"),
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     return unwrap(vehicle_service.create_vehicle(db, resolve_user, body))


@router.post("/status", summary="Change a vehicle status")
def change_vehicle_status(
     body: Any = Body(None, description="VehicleStatusChangeRequest"),
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     """
     Move a vehicle between available, maintenance and out_of_service.

     - **create_maintenance_record**: also open a maintenance record (needs description and type)
     """
     return unwrap(vehicle_service.change_vehicle_status(db, resolve_user, body))


@router.post("/maintenance", summary="Open a maintenance record")
def create_maintenance_record(
     body: Any = Body(None, description="MaintenanceCreate"),
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     return unwrap(maintenance_service.create_maintenance_record(db, resolve_user, body))


@router.post("/maintenance/close", summary="Close a maintenance record")
def close_maintenance_record(
     body: Any = Body(None, description="MaintenanceClose"),
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     return unwrap(maintenance_service.close_maintenance_record(db, resolve_user, body))


@router.get("/{vehicle_id}", summary="Get a vehicle")
def get_vehicle(
     vehicle_id: str,
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     return unwrap(vehicle_service.get_vehicle(db, resolve_user, vehicle_id))


@router.put("/{vehicle_id}", summary="Update a vehicle")
def update_vehicle(
     vehicle_id: str,
     body: Any = Body(None, description="VehicleUpdate without vehicle_id"),
     db: Session = Depends(get_session),
     resolve_user=Depends(get_session_resolver),
):
     payload = with_fields(body, vehicle_id=vehicle_id)
     return unwrap(vehicle_service.update_vehicle(db, resolve_user, payload))

"""Machines API router: list, register, bulk import, start of day."""

from dataclasses import asdict
from typing import Annotated, List

from fastapi import APIRouter, Depends

from scan_engine.api.dependencies import get_fleet_service, get_operator
from scan_engine.application.fleet_service import FleetService
from scan_engine.domain.models.session import Operator
from scan_engine.domain.schemas.scan import (
    MachineCreateRequest,
    MachineImportRequest,
    MachineResponse,
)

router = APIRouter()


@router.get("/", response_model=List[MachineResponse])
async def list_machines(
    fleet: Annotated[FleetService, Depends(get_fleet_service)],
):
    return [MachineResponse.from_domain(m) for m in await fleet.list_machines()]


@router.post("/", response_model=MachineResponse, status_code=201)
async def create_machine(
    body: MachineCreateRequest,
    operator: Annotated[Operator, Depends(get_operator)],
    fleet: Annotated[FleetService, Depends(get_fleet_service)],
):
    machine = await fleet.add_machine(
        section=body.section,
        machine_type=body.machine_type,
        name=body.name,
        operator=operator,
        model_no=body.model_no,
        location=body.location,
        notes=body.notes,
    )
    return MachineResponse.from_domain(machine)


@router.post("/import")
async def import_machines(
    body: MachineImportRequest,
    fleet: Annotated[FleetService, Depends(get_fleet_service)],
):
    return asdict(await fleet.import_machines(body.rows))


@router.post("/start-day")
async def start_day(
    operator: Annotated[Operator, Depends(get_operator)],
    fleet: Annotated[FleetService, Depends(get_fleet_service)],
):
    """Clear all scan slots and reset activity to IDLE (NOT_WORKING machines stay put)."""
    return asdict(await fleet.start_day(operator=operator))

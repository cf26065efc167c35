"""Schémas Véhicule / Vehicle schemas."""

from pydantic import BaseModel, ConfigDict, Field

from install_tracker.models.vehicle import VehicleStatus


class VehicleBase(BaseModel):
    type: str
    location: str
    day: int = Field(ge=1)
    time_slot: str
    gps_required: int = Field(default=0, ge=0)
    fuel_sensors: int = Field(default=0, ge=0)
    fuel_tanks: int = Field(default=0, ge=0)


class VehicleCreate(VehicleBase):
    id: str = Field(min_length=1, max_length=20)


class VehicleUpdate(BaseModel):
    type: str | None = None
    location: str | None = None
    day: int | None = Field(default=None, ge=1)
    time_slot: str | None = None
    status: VehicleStatus | None = None
    gps_required: int | None = Field(default=None, ge=0)
    fuel_sensors: int | None = Field(default=None, ge=0)
    fuel_tanks: int | None = Field(default=None, ge=0)


class VehicleRead(VehicleBase):
    model_config = ConfigDict(from_attributes=True)
    id: str
    status: VehicleStatus
    created_at: str | None = None
    updated_at: str | None = None


class VehicleStatusUpdate(BaseModel):
    status: VehicleStatus


class VehicleBulkStatusUpdate(BaseModel):
    vehicle_ids: list[str]
    status: VehicleStatus


class LocationBreakdown(BaseModel):
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    pending: int = 0
    blocked: int = 0


class VehicleStats(BaseModel):
    total: int
    completed: int
    in_progress: int
    pending: int
    blocked: int
    total_gps_devices: int
    total_fuel_sensors: int
    total_fuel_tanks: int
    location_breakdown: dict[str, LocationBreakdown]

"""Schémas Site / Location schemas."""

from pydantic import BaseModel, ConfigDict, Field


class LocationBase(BaseModel):
    vehicles: int = Field(default=0, ge=0)
    gps_devices: int = Field(default=0, ge=0)
    fuel_sensors: int = Field(default=0, ge=0)
    address: str | None = None
    contact_person: str | None = None
    contact_phone: str | None = None
    installation_days: str | None = None


class LocationCreate(LocationBase):
    name: str = Field(min_length=1, max_length=100)


class LocationUpdate(BaseModel):
    vehicles: int | None = Field(default=None, ge=0)
    gps_devices: int | None = Field(default=None, ge=0)
    fuel_sensors: int | None = Field(default=None, ge=0)
    address: str | None = None
    contact_person: str | None = None
    contact_phone: str | None = None
    installation_days: str | None = None


class LocationRead(LocationBase):
    model_config = ConfigDict(from_attributes=True)
    name: str
    created_at: str | None = None


class LocationStats(BaseModel):
    name: str
    planned_vehicles: int
    actual_vehicles: int
    completed: int
    in_progress: int
    pending: int
    progress: int
    gps_devices: int
    fuel_sensors: int

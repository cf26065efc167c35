"""Schémas Admin / Admin schemas."""

from pydantic import BaseModel, ConfigDict, Field


class AdminRequest(BaseModel):
    """Corps commun aux routes admin / Common admin route body."""
    model_config = ConfigDict(populate_by_name=True)
    admin_token: str = Field(default="", alias="adminToken")


class ResetSeedRequest(AdminRequest):
    sql: str = ""


class VehicleStatusTestRequest(AdminRequest):
    vehicle_id: str = Field(alias="vehicleId")
    status: str = "In Progress"


class CleanupTaskNamesRequest(AdminRequest):
    dry_run: bool = Field(default=False, alias="dryRun")

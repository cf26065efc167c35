"""Modele Vehicule / Vehicle model.

Vehicule a equiper (GPS, capteurs carburant), planifie sur un site, un jour et un creneau.
Vehicle to be fitted (GPS, fuel sensors), scheduled to a location, a day and a time slot.
"""

import enum

from sqlalchemy import Enum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from install_tracker.database import Base


class VehicleStatus(str, enum.Enum):
    """Statut d'installation / Installation status."""
    PENDING = "Pending"
    IN_PROGRESS = "In Progress"
    COMPLETED = "Completed"
    BLOCKED = "Blocked"


def enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    """Stocker les valeurs et non les noms / Persist values rather than member names."""
    return [member.value for member in enum_cls]


class Vehicle(Base):
    """Vehicule du projet / Project vehicle."""
    __tablename__ = "vehicles"

    id: Mapped[str] = mapped_column(String(20), primary_key=True)  # ex: V001
    type: Mapped[str] = mapped_column(String(100), nullable=False)
    location: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    day: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    time_slot: Mapped[str] = mapped_column(String(50), nullable=False)  # ex: 8:30-11:30 AM
    status: Mapped[VehicleStatus] = mapped_column(
        Enum(VehicleStatus, values_callable=enum_values, native_enum=False, length=20),
        default=VehicleStatus.PENDING,
    )

    # --- Equipements / Equipment ---
    gps_required: Mapped[int] = mapped_column(Integer, default=0)
    fuel_sensors: Mapped[int] = mapped_column(Integer, default=0)
    fuel_tanks: Mapped[int] = mapped_column(Integer, default=0)

    created_at: Mapped[str | None] = mapped_column(String(32))  # ISO 8601
    updated_at: Mapped[str | None] = mapped_column(String(32))

    def __repr__(self) -> str:
        return f"<Vehicle {self.id} - {self.type} @ {self.location}>"

"""Modele Site / Location model.

Les compteurs sont un agregat des vehicules, resynchronise a la demande.
Counters are an aggregate of vehicle rows, re-synced on demand.
"""

from sqlalchemy import Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from install_tracker.database import Base


class Location(Base):
    """Site d'installation / Installation site."""
    __tablename__ = "locations"

    name: Mapped[str] = mapped_column(String(100), primary_key=True)
    vehicles: Mapped[int] = mapped_column(Integer, default=0)
    gps_devices: Mapped[int] = mapped_column(Integer, default=0)
    fuel_sensors: Mapped[int] = mapped_column(Integer, default=0)
    address: Mapped[str | None] = mapped_column(Text)
    contact_person: Mapped[str | None] = mapped_column(String(100))
    contact_phone: Mapped[str | None] = mapped_column(String(30))
    installation_days: Mapped[str | None] = mapped_column(String(50))  # ex: Days 1-8
    created_at: Mapped[str | None] = mapped_column(String(32))

    def __repr__(self) -> str:
        return f"<Location {self.name} ({self.vehicles} vehicles)>"

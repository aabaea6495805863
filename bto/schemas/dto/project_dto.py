from datetime import date
from decimal import Decimal
from typing import List, Optional

from bto.models.project import Project, ProjectFlat
from bto.schemas.dto.base_dto import BaseDTO


class FlatInventoryDTO(BaseDTO):
    flat_type: str
    initial_units: int
    remaining_units: int
    unit_price: Decimal

    @classmethod
    def from_orm_model(cls, flat: ProjectFlat) -> "FlatInventoryDTO":
        return cls(
            flat_type=flat.flat_type.value,
            initial_units=flat.initial_units,
            remaining_units=flat.remaining_units,
            unit_price=flat.unit_price,
        )


class ProjectDTO(BaseDTO):
    name: str
    neighbourhood: str
    open_date: date
    close_date: date
    visible: bool
    manager_nric: str
    manager_name: Optional[str]
    officer_nrics: List[str] = []
    available_officer_slots: int
    flats: List[FlatInventoryDTO] = []

    @classmethod
    def from_orm_model(cls, project: Project) -> "ProjectDTO":
        return cls(
            name=project.name,
            neighbourhood=project.neighbourhood,
            open_date=project.open_date,
            close_date=project.close_date,
            visible=project.visible,
            manager_nric=project.manager_nric,
            manager_name=project.manager.name if project.manager else None,
            officer_nrics=project.assigned_officer_nrics,
            available_officer_slots=project.available_officer_slots,
            flats=[FlatInventoryDTO.from_orm_model(flat) for flat in project.flats],
        )

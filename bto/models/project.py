# bto/models/project.py
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, List, Optional, Set

from sqlalchemy import Boolean, Date, DateTime, Enum, ForeignKey, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bto.db.base import Base
from bto.db.enums import FlatType
from bto.models.user import User

MAX_OFFICER_SLOTS = 10


class ProjectFlat(Base):
    """
    Inventory line of one flat type inside a project.

    Invariant: 0 <= remaining_units <= initial_units
    """

    __tablename__ = "project_flats"

    project_name: Mapped[str] = mapped_column(
        String(100), ForeignKey("projects.name", ondelete="CASCADE"), primary_key=True
    )
    flat_type: Mapped[FlatType] = mapped_column(
        Enum(FlatType, name="flat_type"), primary_key=True
    )
    initial_units: Mapped[int] = mapped_column(Integer, nullable=False, comment="Units put up for sale")
    remaining_units: Mapped[int] = mapped_column(Integer, nullable=False, comment="Units not yet booked")
    unit_price: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False, default=Decimal("0"))

    @property
    def booked_units(self) -> int:
        return self.initial_units - self.remaining_units

    def __repr__(self) -> str:
        return (
            f"<ProjectFlat {self.project_name} {self.flat_type.name} "
            f"{self.remaining_units}/{self.initial_units}>"
        )


class ProjectOfficer(Base):
    """One occupied officer slot of a project."""

    __tablename__ = "project_officers"

    project_name: Mapped[str] = mapped_column(
        String(100), ForeignKey("projects.name", ondelete="CASCADE"), primary_key=True
    )
    officer_nric: Mapped[str] = mapped_column(String(9), ForeignKey("users.nric"), primary_key=True)
    slot: Mapped[int] = mapped_column(Integer, nullable=False, comment="0-based slot index, kept compact")

    officer: Mapped[User] = relationship(User, lazy="joined")


class Project(Base):
    __tablename__ = "projects"

    # =========
    # 🔒 Immutable facts
    # =========
    name: Mapped[str] = mapped_column(String(100), primary_key=True, comment="Project name (identity)")
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    # =========
    # ✍️ Manager editable
    # =========
    neighbourhood: Mapped[str] = mapped_column(String(100), nullable=False)
    open_date: Mapped[date] = mapped_column(Date, nullable=False, comment="Application opening date")
    close_date: Mapped[date] = mapped_column(Date, nullable=False, comment="Application closing date")
    visible: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    manager_nric: Mapped[str] = mapped_column(String(9), ForeignKey("users.nric"), nullable=False)
    manager: Mapped[User] = relationship(User, lazy="joined")

    # =========
    # 🏠 Inventory & officer slots
    # =========
    flats: Mapped[List[ProjectFlat]] = relationship(
        ProjectFlat,
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by=ProjectFlat.flat_type,
    )
    officer_slots: Mapped[List[ProjectOfficer]] = relationship(
        ProjectOfficer,
        cascade="all, delete-orphan",
        lazy="selectin",
        order_by=ProjectOfficer.slot,
    )

    # ------------------------------------------------------------------
    # Inventory
    # ------------------------------------------------------------------

    def _flat(self, flat_type: FlatType) -> Optional[ProjectFlat]:
        for flat in self.flats:
            if flat.flat_type == flat_type:
                return flat
        return None

    @property
    def offered_flat_types(self) -> Set[FlatType]:
        return {flat.flat_type for flat in self.flats if flat.initial_units > 0}

    def initial_units(self, flat_type: FlatType) -> int:
        flat = self._flat(flat_type)
        return flat.initial_units if flat else 0

    def remaining_units(self, flat_type: FlatType) -> int:
        flat = self._flat(flat_type)
        return flat.remaining_units if flat else 0

    def unit_price(self, flat_type: FlatType) -> Optional[Decimal]:
        flat = self._flat(flat_type)
        return flat.unit_price if flat else None

    def unit_summary(self) -> Dict[str, Dict[str, object]]:
        return {
            flat.flat_type.value: {
                "initial": flat.initial_units,
                "remaining": flat.remaining_units,
                "price": str(flat.unit_price),
            }
            for flat in self.flats
        }

    def decrement_remaining_unit(self, flat_type: FlatType) -> bool:
        '''
        Take one unit of flat_type out of the remaining stock.
        Returns False and changes nothing when no unit is left.
        '''
        flat = self._flat(flat_type)
        if flat is None or flat.remaining_units <= 0:
            return False
        flat.remaining_units -= 1
        return True

    def increment_remaining_unit(self, flat_type: FlatType) -> bool:
        '''
        Put one unit of flat_type back into stock.
        Returns False and changes nothing when remaining is already at the initial count.
        '''
        flat = self._flat(flat_type)
        if flat is None or flat.remaining_units >= flat.initial_units:
            return False
        flat.remaining_units += 1
        return True

    def set_initial_units(self, flat_type: FlatType, count: int) -> bool:
        '''
        Change the number of units offered for flat_type.
        Units already booked stay booked, so count may not drop below them.
        A flat type not offered before is added with all units remaining.
        '''
        if count < 0:
            return False
        flat = self._flat(flat_type)
        if flat is None:
            self.flats.append(ProjectFlat(
                flat_type=flat_type,
                initial_units=count,
                remaining_units=count,
                unit_price=Decimal("0"),
            ))
            return True
        booked = flat.booked_units
        if count < booked:
            return False
        flat.initial_units = count
        flat.remaining_units = count - booked
        return True

    def set_unit_price(self, flat_type: FlatType, price: Decimal) -> bool:
        if price < 0:
            return False
        flat = self._flat(flat_type)
        if flat is None:
            self.flats.append(ProjectFlat(
                flat_type=flat_type,
                initial_units=0,
                remaining_units=0,
                unit_price=price,
            ))
            return True
        flat.unit_price = price
        return True

    # ------------------------------------------------------------------
    # Officer slots
    # ------------------------------------------------------------------

    @property
    def assigned_officer_nrics(self) -> List[str]:
        return [slot.officer_nric for slot in self.officer_slots]

    @property
    def available_officer_slots(self) -> int:
        return MAX_OFFICER_SLOTS - len(self.officer_slots)

    def is_officer_assigned(self, officer_nric: str) -> bool:
        return officer_nric.upper() in (nric.upper() for nric in self.assigned_officer_nrics)

    def add_officer(self, officer: User) -> bool:
        if self.available_officer_slots <= 0 or self.is_officer_assigned(officer.nric):
            return False
        self.officer_slots.append(ProjectOfficer(
            officer_nric=officer.nric,
            officer=officer,
            slot=len(self.officer_slots),
        ))
        return True

    def remove_officer(self, officer: User) -> bool:
        for slot in list(self.officer_slots):
            if slot.officer_nric == officer.nric:
                self.officer_slots.remove(slot)
                # compact
                for index, remaining in enumerate(self.officer_slots):
                    remaining.slot = index
                return True
        return False

    # ------------------------------------------------------------------
    # Visibility
    # ------------------------------------------------------------------

    def set_visibility(self, visible: bool) -> None:
        self.visible = bool(visible)

    def __repr__(self) -> str:
        return f"<Project name={self.name} manager={self.manager_nric} visible={self.visible}>"

from datetime import time
from sqlalchemy import Boolean, ForeignKey, Integer, Time, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from vetcare.database import Base


class VetAvailability(Base):
    """Recurring weekly working hours of a veterinarian at one clinic."""

    __tablename__ = "vet_availability"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    vet_id: Mapped[int] = mapped_column(
        ForeignKey("veterinarians.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    clinic_id: Mapped[int] = mapped_column(
        ForeignKey("clinics.id", ondelete="CASCADE"),
        nullable=False,
    )
    day_of_week: Mapped[int] = mapped_column(Integer, nullable=False)  # 0 = Sunday
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, default=True)

    __table_args__ = (
        UniqueConstraint(
            "vet_id",
            "clinic_id",
            "day_of_week",
            name="unique_vet_clinic_weekday",
        ),
    )

    def __repr__(self) -> str:
        return f"<VetAvailability vet={self.vet_id} day={self.day_of_week} {self.start_time}-{self.end_time}>"

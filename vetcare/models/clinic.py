import uuid
from datetime import datetime
from sqlalchemy import String, DateTime, ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship
from vetcare.database import Base


class Clinic(Base):
    """Clinic model."""

    __tablename__ = "clinics"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    clinic_uuid: Mapped[str] = mapped_column(
        String(36),
        unique=True,
        nullable=False,
        default=lambda: str(uuid.uuid4()),
    )
    name: Mapped[str] = mapped_column(String(150), nullable=False)
    address: Mapped[str | None] = mapped_column(String(255), nullable=True)
    city: Mapped[str | None] = mapped_column(String(100), nullable=True)
    state: Mapped[str | None] = mapped_column(String(100), nullable=True)
    postal_code: Mapped[str | None] = mapped_column(String(20), nullable=True)
    phone_number: Mapped[str | None] = mapped_column(String(20), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
    )

    veterinarians: Mapped[list["Veterinarian"]] = relationship(
        "Veterinarian",
        back_populates="clinic",
    )

    @property
    def location(self) -> str:
        locality = " ".join(part for part in (self.state, self.postal_code) if part)
        parts = [part for part in (self.name, self.address, self.city, locality) if part]
        return ", ".join(parts)

    def __repr__(self) -> str:
        return f"<Clinic {self.name}>"


class Veterinarian(Base):
    """Veterinarian model - a user working at a clinic."""

    __tablename__ = "veterinarians"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    vet_uuid: Mapped[str] = mapped_column(
        String(36),
        unique=True,
        nullable=False,
        default=lambda: str(uuid.uuid4()),
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    clinic_id: Mapped[int | None] = mapped_column(
        ForeignKey("clinics.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    specialization: Mapped[str | None] = mapped_column(String(100), nullable=True)
    license_number: Mapped[str | None] = mapped_column(String(50), nullable=True)

    user: Mapped["User"] = relationship("User")
    clinic: Mapped["Clinic | None"] = relationship("Clinic", back_populates="veterinarians")

    def __repr__(self) -> str:
        return f"<Veterinarian {self.vet_uuid}>"

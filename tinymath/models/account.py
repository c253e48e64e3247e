import uuid
from datetime import date, datetime

from sqlalchemy import Boolean, CheckConstraint, Date, DateTime, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from tinymath.database import Base


class Account(Base):
    """A parent/guardian account."""

    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint(
            "(verification_code IS NULL) = (verification_code_expires_at IS NULL)",
            name="ck_accounts_code_pair",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid, primary_key=True, default=uuid.uuid4,
    )
    full_name: Mapped[str] = mapped_column(String(100), nullable=False)
    # Always stored lower-cased, so the unique constraint is case-insensitive
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    gender: Mapped[str] = mapped_column(String(10), nullable=False)  # male | female | other
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    is_verified: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Pending one-time code: both set or both NULL
    verification_code: Mapped[str | None] = mapped_column(String(6), nullable=True)
    verification_code_expires_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    # Optional profile
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    nationality: Mapped[str | None] = mapped_column(String(64), nullable=True)
    state: Mapped[str | None] = mapped_column(String(64), nullable=True)
    date_of_birth: Mapped[date | None] = mapped_column(Date, nullable=True)

    # Game progress
    current_level: Mapped[int] = mapped_column(Integer, default=1, nullable=False)
    stars: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )

    # Relationships
    children: Mapped[list["ChildProfile"]] = relationship(back_populates="parent")  # noqa: F821

    def __repr__(self) -> str:
        return f"<Account(id={self.id}, email={self.email!r}, verified={self.is_verified})>"

"""SQLAlchemy ORM model for nwc_credential.

Maps to the customer_nwc table created by Alembic migration 001.
DO NOT add/remove columns here without a corresponding migration.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, Integer, String, Text, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from src.nwc_common.database import Base


class CustomerNwcORM(Base):
    __tablename__ = "customer_nwc"
    __table_args__ = (
        UniqueConstraint("customer_id", "app_service", name="uq_customer_nwc_customer_app_service"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    customer_id: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    server_key: Mapped[str] = mapped_column(String(128), nullable=False)
    user_key: Mapped[str] = mapped_column(String(128), nullable=False)
    uri: Mapped[str] = mapped_column(Text, nullable=False)
    app_service: Mapped[str] = mapped_column(String(255), nullable=False)
    budget: Mapped[int] = mapped_column(BigInteger, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

"""
Database schema and connection management.

Uses SQLite with SQLAlchemy for the referee registry, confirmed mappings,
payroll settings and saved payroll batches.
"""

from datetime import datetime
from pathlib import Path

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker

Base = declarative_base()


class Referee(Base):
    """Registry entry."""

    __tablename__ = "referees"

    employee_number = Column(String, primary_key=True)
    full_name = Column(String, nullable=False)
    created_at = Column(DateTime, nullable=False, default=datetime.now)
    updated_at = Column(DateTime, nullable=False, default=datetime.now, onupdate=datetime.now)


class MatchMappingRow(Base):
    """Confirmed schedule name -> referee link."""

    __tablename__ = "match_mappings"

    normalized_name = Column(String, primary_key=True)  # normalize_name(schedule_name)
    schedule_name = Column(String, nullable=False)
    employee_number = Column(String, nullable=False)
    confirmed_at = Column(Float, nullable=False)  # epoch seconds
    date_processed = Column(String, nullable=False, default="")
    is_manual = Column(Boolean, nullable=False, default=False)


class RefereeSettingsRow(Base):
    """Per-referee payroll settings."""

    __tablename__ = "referee_settings"

    employee_number = Column(String, primary_key=True)
    has_fixed_rate = Column(Boolean, nullable=False, default=False)
    fixed_rate = Column(Float, nullable=False, default=0.0)
    has_admin_fee = Column(Boolean, nullable=False, default=True)


class GlobalSettingsRow(Base):
    """Single-row global payroll settings."""

    __tablename__ = "global_settings"

    id = Column(Integer, primary_key=True)
    hacienda_tax_rate = Column(Float, nullable=False)
    deposit_fee = Column(Float, nullable=False)
    admin_fee_per_game = Column(Float, nullable=False)


class CategoryRate(Base):
    """Per-game rate for a game category."""

    __tablename__ = "category_rates"

    category = Column(String, primary_key=True)
    rate = Column(Float, nullable=False)


class PayrollBatch(Base):
    """Saved payroll batch."""

    __tablename__ = "payroll_batches"

    id = Column(String, primary_key=True)  # batch_<epoch ms>
    timestamp = Column(Float, nullable=False)
    name = Column(String, nullable=True)
    date_start = Column(String, nullable=False, default="")
    date_end = Column(String, nullable=False, default="")
    files = Column(JSON, nullable=False, default=list)
    totals = Column(JSON, nullable=False, default=dict)

    lines = relationship(
        "PayrollLine",
        back_populates="batch",
        cascade="all, delete-orphan",
        order_by="PayrollLine.position",
    )


class PayrollLine(Base):
    """Per-referee result within a saved batch."""

    __tablename__ = "payroll_referee_lines"

    id = Column(Integer, primary_key=True, autoincrement=True)
    batch_id = Column(String, ForeignKey("payroll_batches.id", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False, default=0)
    employee_number = Column(String, nullable=False, index=True)
    referee_name = Column(String, nullable=False)
    schedule_name = Column(String, nullable=False)
    games = Column(Integer, nullable=False)
    gross_pay = Column(Float, nullable=False)
    extra_pay = Column(Float, nullable=False)
    admin_fee = Column(Float, nullable=False)
    fines = Column(Float, nullable=False, default=0.0)
    taxable_income = Column(Float, nullable=False)
    hacienda_tax = Column(Float, nullable=False)
    deposit_fee = Column(Float, nullable=False)
    net_pay = Column(Float, nullable=False)
    used_fixed_rate = Column(Boolean, nullable=False, default=False)
    fixed_rate = Column(Float, nullable=True)
    categories = Column(JSON, nullable=False, default=dict)
    category_rates = Column(JSON, nullable=False, default=dict)

    batch = relationship("PayrollBatch", back_populates="lines")


def init_database(db_path: Path) -> None:
    """
    Initialize database and create tables.

    Args:
        db_path: Path to SQLite database file
    """
    db_path.parent.mkdir(parents=True, exist_ok=True)
    engine = create_engine(f"sqlite:///{db_path}")
    Base.metadata.create_all(engine)


def get_session(db_path: Path):
    """
    Get database session.

    Args:
        db_path: Path to SQLite database file

    Returns:
        SQLAlchemy session
    """
    engine = create_engine(f"sqlite:///{db_path}")
    Session = sessionmaker(bind=engine)
    return Session()

"""
SQLAlchemy ORM models (scenarios, configuration, entries, exchange rates)
"""
from datetime import datetime

from sqlalchemy import String, Integer, Text, TIMESTAMP, Float, Boolean, func, UniqueConstraint, Index
from sqlalchemy.orm import Mapped, mapped_column

from groupbudget.infrastructure.db.session import Base


# ============================================================================
# Scenarios
# ============================================================================


class BudgetVersionModel(Base):
    """Scenario (version): an isolated copy of every entry and rate"""
    __tablename__ = "budget_versions"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )


# ============================================================================
# Configuration: companies, concepts, assignments
# ============================================================================


class CompanyModel(Base):
    __tablename__ = "companies"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)  # business key
    currency: Mapped[str] = mapped_column(String(3), nullable=False)  # USD, ARS, MXN
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")


class ConceptModel(Base):
    """Budget line within a category type (Income / Direct Costs / Indirect Costs)"""
    __tablename__ = "concepts"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    category_type: Mapped[str] = mapped_column(String(32), nullable=False)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    # False: available to every company; True: only to rows in concept_assignments
    is_restricted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default="false")

    __table_args__ = (
        UniqueConstraint('category_type', 'name', name='uq_concept'),
    )


class ConceptAssignmentModel(Base):
    """Join table: company x concept. Only consulted for restricted concepts."""
    __tablename__ = "concept_assignments"

    company_name: Mapped[str] = mapped_column(String(255), primary_key=True)
    category_type: Mapped[str] = mapped_column(String(32), primary_key=True)
    concept_name: Mapped[str] = mapped_column(String(255), primary_key=True)

    __table_args__ = (
        Index('ix_concept_assignment_concept', 'category_type', 'concept_name'),
    )


# ============================================================================
# Budget data
# ============================================================================


class BudgetEntryModel(Base):
    """Plan/real units and totals for one company, concept and month"""
    __tablename__ = "budget_entries"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    version_id: Mapped[str] = mapped_column(String(64), nullable=False)  # -> budget_versions
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    category_type: Mapped[str] = mapped_column(String(32), nullable=False)
    concept: Mapped[str] = mapped_column(String(255), nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)  # 1..12
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    # company-local currency, unrounded
    plan_units: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    plan_value: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    real_units: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    real_value: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint(
            'version_id', 'company_name', 'category_type', 'concept', 'month', 'year',
            name='uq_budget_entry',
        ),
        Index('ix_budget_entry_version', 'version_id'),
    )


class ExchangeRateModel(Base):
    """Local currency units per 1 reporting currency unit; 0 = not set"""
    __tablename__ = "exchange_rates"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    version_id: Mapped[str] = mapped_column(String(64), nullable=False)
    company_name: Mapped[str] = mapped_column(String(255), nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    year: Mapped[int] = mapped_column(Integer, nullable=False)

    plan_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")
    real_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.0, server_default="0")

    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    __table_args__ = (
        UniqueConstraint('version_id', 'company_name', 'month', 'year', name='uq_exchange_rate'),
        Index('ix_exchange_rate_version', 'version_id'),
    )

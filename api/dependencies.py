"""
FastAPI dependencies wiring the ledger services to a request-scoped session.
"""

from fastapi import Depends
from sqlalchemy.orm import Session

from api.config import settings
from api.database import get_db
from api.repositories import SqlAlchemyUnitOfWork
from src.compliance import BankingEngine, ComplianceLedger, PoolingEngine


def get_unit_of_work(db: Session = Depends(get_db)) -> SqlAlchemyUnitOfWork:
    return SqlAlchemyUnitOfWork(db)


def get_ledger(uow: SqlAlchemyUnitOfWork = Depends(get_unit_of_work)) -> ComplianceLedger:
    return ComplianceLedger(
        uow,
        target_policy=settings.target_policy(),
        conversion_mj_per_t=settings.energy_conversion_mj_per_t,
    )


def get_banking_engine(uow: SqlAlchemyUnitOfWork = Depends(get_unit_of_work)) -> BankingEngine:
    return BankingEngine(uow)


def get_pooling_engine(uow: SqlAlchemyUnitOfWork = Depends(get_unit_of_work)) -> PoolingEngine:
    return PoolingEngine(uow)

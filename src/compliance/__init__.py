"""FuelEU compliance ledger: CB calculation, banking and pooling."""

from .banking import BankingEngine
from .ledger import ComplianceLedger
from .pooling import PoolingEngine, equal_distribution

__all__ = ["BankingEngine", "ComplianceLedger", "PoolingEngine", "equal_distribution"]

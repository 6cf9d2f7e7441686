"""
Storage capability interfaces for the compliance ledger.

One abstract repository per entity (routes, compliance records, bank
entries, pools) plus a ``UnitOfWork`` that groups them behind a single
transaction. Engines depend only on these interfaces; concrete adapters
(see ``api/repositories.py``) bind them to a database.

Adapters must honour ``for_update=True`` by locking the returned rows until
the surrounding transaction ends, where the backend supports it.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, List, Optional

from src.compliance.models import (
    BankEntry,
    Pool,
    PoolMember,
    RouteRecord,
    ShipCompliance,
)


class RouteRepository(ABC):
    """Read access to route physical data (plus creation for seeding/API)."""

    @abstractmethod
    def find_by_route_id(self, route_id: str) -> Optional[RouteRecord]:
        ...

    @abstractmethod
    def find_all(
        self,
        vessel_type: Optional[str] = None,
        fuel_type: Optional[str] = None,
        year: Optional[int] = None,
    ) -> List[RouteRecord]:
        ...

    @abstractmethod
    def find_by_year(self, year: int) -> List[RouteRecord]:
        ...

    @abstractmethod
    def create(self, route: RouteRecord) -> RouteRecord:
        ...

    @abstractmethod
    def set_baseline(self, route_id: str) -> None:
        """Flag ``route_id`` as baseline and clear the flag everywhere else."""


class ComplianceRepository(ABC):

    @abstractmethod
    def find_by_ship_and_year(
        self, ship_id: str, year: int, for_update: bool = False
    ) -> Optional[ShipCompliance]:
        ...

    @abstractmethod
    def create(self, record: ShipCompliance) -> ShipCompliance:
        """Raises DuplicateRecordError if (ship, year) is already stored."""

    @abstractmethod
    def update(self, record_id: str, cb_gco2eq: float) -> ShipCompliance:
        """Partial update: only the running balance ever changes."""


class BankingRepository(ABC):

    @abstractmethod
    def find_by_ship(self, ship_id: str, year: Optional[int] = None) -> List[BankEntry]:
        """
        Entries for a ship, newest first.

        With ``year``, only entries whose origin year or applied year matches.
        """

    @abstractmethod
    def find_unapplied(self, ship_id: str, for_update: bool = False) -> List[BankEntry]:
        """Unapplied entries ordered by creation, oldest first."""

    @abstractmethod
    def sum_unapplied(self, ship_id: str) -> float:
        ...

    @abstractmethod
    def create(self, entry: BankEntry) -> BankEntry:
        ...

    @abstractmethod
    def update(self, entry: BankEntry) -> BankEntry:
        ...


class PoolingRepository(ABC):

    @abstractmethod
    def create_with_members(
        self, year: int, total_cb: float, members: List[PoolMember]
    ) -> Pool:
        ...

    @abstractmethod
    def find_by_id(self, pool_id: str) -> Optional[Pool]:
        ...

    @abstractmethod
    def find_by_year(self, year: int) -> List[Pool]:
        ...


class UnitOfWork(ABC):
    """Groups the repositories behind one atomic transaction."""

    routes: RouteRepository
    compliance: ComplianceRepository
    banking: BankingRepository
    pooling: PoolingRepository

    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator["UnitOfWork"]:
        """Commit on normal exit, roll back and re-raise on any exception."""

#!/usr/bin/env python3
"""
FuelEU Ledger CLI Tool.

Command-line interface for administrative tasks:
- Database setup and reference data
- Compliance Balance computation
- Health checks

Usage:
    python -m api.cli init-db
    python -m api.cli seed
    python -m api.cli compute-cb --ship-id ROUTE-002 --year 2024
    python -m api.cli check-health
"""
import argparse
import sys


def init_db() -> None:
    """Initialize the database."""
    from api.database import init_db as do_init

    print("Initializing database...")
    do_init()
    print("Database initialized successfully.")


def seed() -> None:
    """Load the reference routes and compute their balances."""
    from api.database import get_db_context, init_db as do_init
    from api.seed import seed_database

    do_init()
    with get_db_context() as db:
        balances = seed_database(db)

    print("\n" + "=" * 72)
    print("SEEDED COMPLIANCE BALANCES")
    print("=" * 72)
    print(f"{'Ship':<12} {'Year':<6} {'Actual':>10} {'Target':>10} {'CB (gCO2eq)':>20}")
    print("-" * 72)
    for cb in balances:
        print(f"{cb.ship_id:<12} {cb.year:<6} {cb.actual:>10.4f} {cb.target:>10.4f} {cb.cb:>20,.2f}")
    print("=" * 72)
    print(f"Total: {len(balances)} ship(s)\n")


def compute_cb(ship_id: str, year: int) -> None:
    """Print a ship's Compliance Balance, computing it on first access."""
    from api.config import settings
    from api.database import get_db_context
    from api.repositories import SqlAlchemyUnitOfWork
    from src.compliance import ComplianceLedger
    from src.compliance.errors import NotFoundError

    try:
        with get_db_context() as db:
            ledger = ComplianceLedger(
                SqlAlchemyUnitOfWork(db),
                target_policy=settings.target_policy(),
                conversion_mj_per_t=settings.energy_conversion_mj_per_t,
            )
            cb = ledger.get_compliance_balance(ship_id, year)
    except NotFoundError as e:
        print(f"\nError: {e}")
        sys.exit(1)

    status = "SURPLUS" if cb.cb > 0 else "DEFICIT" if cb.cb < 0 else "BALANCED"
    print(f"\nShip: {cb.ship_id}")
    print(f"Year: {cb.year}")
    print(f"Energy: {cb.energy:,.0f} MJ")
    print(f"GHG intensity: {cb.actual:.4f} gCO2eq/MJ (target {cb.target:.4f})")
    print(f"Compliance Balance: {cb.cb:,.2f} gCO2eq [{status}]\n")


def check_health() -> None:
    """Check database connectivity."""
    from api.health import HealthStatus, check_database_health

    health = check_database_health()
    print(f"\nDatabase: {health.status.value}")
    if health.message:
        print(f"Message: {health.message}")
    if health.latency_ms is not None:
        print(f"Latency: {health.latency_ms} ms")

    if health.status != HealthStatus.HEALTHY:
        sys.exit(1)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="FuelEU Ledger CLI Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Initialize database:
    python -m api.cli init-db

  Load the 2024 reference routes:
    python -m api.cli seed

  Show a ship's Compliance Balance:
    python -m api.cli compute-cb --ship-id ROUTE-002 --year 2024

  Check database connectivity:
    python -m api.cli check-health
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    subparsers.add_parser("init-db", help="Initialize the database")
    subparsers.add_parser("seed", help="Replace ledger contents with the reference routes")

    cb_parser = subparsers.add_parser("compute-cb", help="Compute or show a ship's CB")
    cb_parser.add_argument("--ship-id", required=True, help="Ship (route) id")
    cb_parser.add_argument("--year", type=int, required=True, help="Reporting year")

    subparsers.add_parser("check-health", help="Check database connectivity")

    args = parser.parse_args(argv)

    if args.command == "init-db":
        init_db()
    elif args.command == "seed":
        seed()
    elif args.command == "compute-cb":
        compute_cb(args.ship_id, args.year)
    elif args.command == "check-health":
        check_health()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()

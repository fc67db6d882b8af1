"""CLI entry point for the overdue payment sweep.

Marks unpaid every active contract whose paid-through date has passed.
Meant to run daily from cron.

Usage:
    python -m rental_ledger.cli.expire_overdue [--date YYYY-MM-DD]

Exit Codes:
    0 - Success
    1 - Failure: Error encountered; nothing was changed
"""

import argparse
import logging
import sys
from datetime import date

from rental_ledger.services.config import load_config
from rental_ledger.services.logging import setup_server_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Mark overdue rental contracts as unpaid")
    parser.add_argument(
        "--date",
        type=date.fromisoformat,
        default=None,
        help="Reference date (default: today)",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    """
    Run the overdue payment sweep.

    Returns:
        Exit code: 0 for success, 1 for failure
    """
    args = parse_args(argv)
    config = load_config()
    setup_server_logging(config.log_file, config.log_level)
    logger = logging.getLogger(__name__)

    from rental_ledger.services import SessionLocal
    from rental_ledger.services.contract_service import ContractService

    db = SessionLocal()
    try:
        count = ContractService(db).expire_overdue_payments(args.date)
        logger.info("Overdue sweep complete: %d contracts marked unpaid", count)
        return 0
    except KeyboardInterrupt:
        logger.warning("Sweep interrupted by user")
        db.rollback()
        return 1
    except Exception as e:
        logger.error(f"Sweep failed: {e}", exc_info=True)
        db.rollback()
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())

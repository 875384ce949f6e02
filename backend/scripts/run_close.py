from __future__ import annotations

import argparse
import logging
import sys
import uuid
from datetime import date
from typing import List, Optional

from backend.app.api.config import configure_logging
from backend.app.db import session_scope
from backend.app.services import account_mapping_service, aggregation_service, projection_service
from backend.app.services.errors import DomainError
from backend.app.services.periods import iter_months, parse_month

logger = logging.getLogger("run_close")


def _parse_args(argv: Optional[List[str]]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Map accounts, aggregate monthly statements and refresh projections for one company."
    )
    parser.add_argument("--company-id", required=True, help="Company to process.")
    parser.add_argument("--start", required=True, help="First month to aggregate (YYYY-MM).")
    parser.add_argument("--end", help="Last month to aggregate (YYYY-MM). Defaults to --start.")
    parser.add_argument("--run-id", help="Source run identifier. Generated when omitted.")
    parser.add_argument("--skip-mapping", action="store_true", help="Do not re-resolve account categories.")
    parser.add_argument("--skip-projection", action="store_true", help="Do not regenerate projections.")
    parser.add_argument("--as-of", help="Projection snapshot date (YYYY-MM-DD). Defaults to today (UTC).")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    configure_logging()
    args = _parse_args(argv)

    try:
        start = parse_month(args.start)
        end = parse_month(args.end) if args.end else start
        as_of = date.fromisoformat(args.as_of) if args.as_of else None
    except ValueError as exc:
        print(f"Invalid date argument: {exc}")
        return 1
    if start > end:
        print("--start must not be after --end")
        return 1

    run_id = args.run_id or f"close-{uuid.uuid4()}"

    try:
        with session_scope() as db:
            if not args.skip_mapping:
                mapped = account_mapping_service.map_company_accounts(db, args.company_id)
                print(f"Mapped {len(mapped)} accounts")

            for month in iter_months(start, end):
                result = aggregation_service.generate_monthly_statements(db, args.company_id, month, run_id)
                print(f"Aggregated {result.period_start:%Y-%m}: pl={result.pl_id} cash_flow={result.cash_flow_id}")

            if not args.skip_projection:
                written = projection_service.generate_projection(db, args.company_id, as_of=as_of)
                print(f"Projection rows written: {written}")
    except DomainError as exc:
        logger.error("Close failed for company %s: %s", args.company_id, exc.message)
        print(f"ERROR: {exc.message}")
        return 1

    print("DONE")
    print(f"Run id: {run_id}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

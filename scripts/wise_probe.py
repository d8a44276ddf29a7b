# flake8: noqa E402
# Read-only look at the booked transfer, its quote and the live rate, e.g.:
# python scripts/wise_probe.py
from __future__ import annotations

import argparse
import json
import sys
from decimal import Decimal
from pathlib import Path
from typing import Any

# Ensure the src directory is importable when the script is invoked directly.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from config import ERR_ENV_VAR_MISSING_OR_INVALID, config
from main import build_client
from services.rate_comparator import RateComparator, should_rebook


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Show the booked Wise transfer next to the current live rate.")
    parser.add_argument("--margin", default=None, help="Override MARGIN for the printed decision.")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    settings = config()
    if not settings.is_operational:
        sys.exit(ERR_ENV_VAR_MISSING_OR_INVALID)

    client = build_client(settings)
    comparator = RateComparator(client, margin=settings.margin)
    transfer = comparator.get_booked_transfer()
    quote = client.get_quote(transfer.quote_uuid)
    live_rate = comparator.get_live_rate(transfer.source_currency, transfer.target_currency)
    margin = comparator.margin if args.margin is None else Decimal(args.margin)

    payload: dict[str, Any] = {
        "transfer_id": transfer.id,
        "pair": f"{transfer.source_currency}-{transfer.target_currency}",
        "booked_rate": str(transfer.rate),
        "source_amount": str(transfer.source_amount),
        "quote_id": quote.id,
        "quote_expires_at": quote.rate_expiration_time,
        "live_rate": str(live_rate),
        "margin": str(margin),
        "would_rebook": should_rebook(booked_rate=transfer.rate, live_rate=live_rate, margin=margin),
    }
    print(json.dumps(payload, indent=2))


if __name__ == "__main__":
    main()

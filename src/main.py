from __future__ import annotations

import argparse
import logging
import time
from typing import Sequence

from pydantic import ValidationError

from clients.mailer import Mailer
from clients.wise import WiseAPIError, WiseClient
from config import ERR_ENV_VAR_MISSING_OR_INVALID, AppSettings, config
from domain.transfers import RebookingResult
from services.expiry_notifier import ExpiryNotifier
from services.rate_comparator import InvalidLiveRateError, NoBookedTransferError, RateComparator
from services.rebooking import TransferRebooker

logger = logging.getLogger(__name__)

SECONDS_PER_HOUR = 3600


def build_client(settings: AppSettings) -> WiseClient:
    base_url = settings.base_url
    if base_url is None:
        raise ValueError(f"Unknown ENV {settings.env!r}")
    return WiseClient(api_token=settings.api_token, base_url=base_url)


def check_and_rebook(comparator: RateComparator, rebooker: TransferRebooker, *, dry_run: bool = False) -> None:
    try:
        decision = comparator.compare_rates()
    except (WiseAPIError, NoBookedTransferError, InvalidLiveRateError) as exc:
        logger.error("compare rates: %s", exc)
        return

    transfer = decision.transfer
    if not decision.rebook:
        logger.info(
            "|| NO ACTION NEEDED, Live Rate: %s || Transfer ID: %s | {%s} --> {%s} | Booked Rate: %s | Amount: %s ||",
            decision.live_rate,
            transfer.id,
            transfer.source_currency,
            transfer.target_currency,
            transfer.rate,
            transfer.source_amount,
        )
        return

    if dry_run:
        logger.info("Dry run: transfer %s would be rebooked", transfer.id)
        return

    try:
        result = rebooker.create_transfer(transfer)
    except WiseAPIError as exc:
        logger.error("create transfer: %s", exc)
        return

    log_rebooking(result)


def log_rebooking(result: RebookingResult) -> None:
    new_transfer = result.new_transfer
    logger.info(
        "|| NEW TRANSFER BOOKED || Transfer ID: %s | {%s} --> {%s} | Rate: %s |  Amount: %s ||",
        new_transfer.id,
        new_transfer.source_currency,
        new_transfer.target_currency,
        new_transfer.rate,
        new_transfer.source_amount,
    )
    if result.partial:
        logger.warning(
            "Transfer %s is still open next to its replacement %s; cancel it manually",
            result.cancelled_transfer_id,
            new_transfer.id,
        )


def run(
    settings: AppSettings,
    *,
    dry_run: bool = False,
    send_reminder: bool = True,
    client: WiseClient | None = None,
    mailer: Mailer | None = None,
) -> None:
    if not settings.is_operational:
        logger.error(ERR_ENV_VAR_MISSING_OR_INVALID)
        return

    client = client or build_client(settings)
    comparator = RateComparator(client, margin=settings.margin)
    check_and_rebook(comparator, TransferRebooker(client), dry_run=dry_run)

    if send_reminder:
        notifier = ExpiryNotifier(
            client,
            comparator,
            mailer or Mailer.from_settings(settings),
            threshold=settings.expiry_threshold,
        )
        notifier.check_and_notify()


def watch(settings: AppSettings, *, interval_hours: float, dry_run: bool, send_reminder: bool) -> None:
    logger.info("Checking rates every %s hour(s)", interval_hours)
    while True:
        run(settings, dry_run=dry_run, send_reminder=send_reminder)
        time.sleep(interval_hours * SECONDS_PER_HOUR)


def main(argv: Sequence[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        description="Rebook a pending Wise transfer when the live rate beats the booked one."
    )
    parser.add_argument("--dry-run", action="store_true", help="Log the decision without rebooking.")
    parser.add_argument("--watch", action="store_true", help="Repeat every INTERVAL hours until interrupted.")
    parser.add_argument("--skip-reminder", action="store_true", help="Do not check the quote expiry.")
    args = parser.parse_args(argv)

    try:
        settings = config()
    except ValidationError as exc:
        logger.error("Invalid configuration: %s", exc)
        return

    if not args.watch:
        run(settings, dry_run=args.dry_run, send_reminder=not args.skip_reminder)
        return

    try:
        interval_hours = settings.watch_interval_hours()
    except ValueError as exc:
        logger.error("Invalid configuration: %s", exc)
        return

    try:
        watch(settings, interval_hours=interval_hours, dry_run=args.dry_run, send_reminder=not args.skip_reminder)
    except KeyboardInterrupt:
        logger.info("Stopped")


def cli() -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    main()


if __name__ == "__main__":
    cli()

"""Indicator collection command.

Runs one aggregation cycle over FRED, BEA, BLS and World Bank indicators and
logs a summary of the resulting catalog.

Usage:
    # Every named indicator of every provider
    macrodash

    # Selected indicators
    macrodash --keys fred:unemployment bls:cpi worldbank:gdp

    # Custom window, CSV export, 6-step forecasts and the heat-map matrix
    macrodash --start 2020-01-01 --end 2024-12-31 --export --forecast 6 --correlation

    # Health check only
    macrodash --health-check

Example:
    $ macrodash --keys fred:unemployment bls:payroll
    [INFO] Fetching 2 indicators from 2 providers
    [INFO] Successfully fetched 2/2 indicators
    [INFO]   fred:unemployment  Unemployment Rate  4.1%  (+0.10)
    [INFO]   bls:payroll        Nonfarm Payroll    159,000  (+151)
"""

import argparse
import sys
from datetime import datetime

from macrodash.analytics import correlation_matrix, forecast, format_value
from macrodash.ingestion.adapters import ADAPTER_CLASSES
from macrodash.ingestion.aggregator import Aggregator, default_keys, resolve_key
from macrodash.shared.config import Config
from macrodash.shared.exceptions import NoDataAvailableError
from macrodash.shared.utils import setup_logger


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Fetch US macroeconomic indicators from FRED, BEA, BLS and the World Bank",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    parser.add_argument(
        "--keys",
        nargs="+",
        metavar="KEY",
        help="Indicator keys '<provider>:<series>'. Default: every named series",
    )

    parser.add_argument(
        "--start",
        type=str,
        help="Start date (YYYY-MM-DD). Default: provider-specific window",
        metavar="DATE",
    )

    parser.add_argument(
        "--end",
        type=str,
        help="End date (YYYY-MM-DD). Default: today",
        metavar="DATE",
    )

    parser.add_argument(
        "--export",
        action="store_true",
        help="Export each indicator to CSV under data/exports/",
    )

    parser.add_argument(
        "--forecast",
        type=int,
        default=0,
        metavar="N",
        help="Log an N-period naive forecast for each indicator",
    )

    parser.add_argument(
        "--correlation",
        action="store_true",
        help="Log the direction-matching correlation matrix",
    )

    parser.add_argument(
        "--health-check",
        action="store_true",
        help="Run provider health checks only and exit",
    )

    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args(argv)


def _parse_date(value: str | None) -> datetime | None:
    if not value:
        return None
    return datetime.strptime(value, "%Y-%m-%d")


def main(argv: list[str] | None = None, aggregator: Aggregator | None = None) -> int:
    """Main collection command."""
    args = parse_args(argv)

    logger = setup_logger(
        "macrodash",
        level="DEBUG" if args.verbose else Config.LOG_LEVEL,
    )

    for name in Config.missing_api_keys():
        logger.warning("%s is not set; that provider will likely reject requests", name)

    aggregator = aggregator or Aggregator()

    if args.health_check:
        failed = 0
        for provider in ADAPTER_CLASSES:
            ok = aggregator.adapter_for(provider).health_check()
            logger.info("Health check %s: %s", provider.value, "PASSED" if ok else "FAILED")
            failed += not ok
        return 1 if failed else 0

    try:
        start_date = _parse_date(args.start)
        end_date = _parse_date(args.end)
    except ValueError:
        logger.error("Invalid date format. Use YYYY-MM-DD")
        return 1

    if start_date and end_date and start_date > end_date:
        logger.error("Start date must be before end date")
        return 1

    keys = args.keys or default_keys()

    try:
        catalog = aggregator.collect(keys, start_date=start_date, end_date=end_date)
    except ValueError as e:
        logger.error("Invalid request: %s", e)
        return 1
    except NoDataAvailableError as e:
        logger.error("%s", e)
        for key, error in e.errors.items():
            logger.error("  - %s: %s", key, error)
        return 1
    except KeyboardInterrupt:
        logger.warning("Collection interrupted by user")
        return 130

    width = max(len(key) for key in catalog)
    for key, record in catalog.items():
        logger.info(
            "  %-*s  %s  %s  (%+.2f)",
            width,
            key,
            record.title,
            format_value(record.current_value, record.unit),
            record.change,
        )

    for key, error in aggregator.last_errors.items():
        logger.warning("  skipped %s: %s", key, error)

    if args.export:
        for key, record in catalog.items():
            provider, name = resolve_key(key)
            aggregator.adapter_for(provider).export_csv(record, name)

    if args.forecast > 0:
        for key, record in catalog.items():
            result = forecast(record, args.forecast)
            if result.is_empty:
                continue
            logger.info(
                "Forecast %s: %s",
                key,
                ", ".join(f"{label}={value:.2f}" for label, value in zip(result.labels, result.data)),
            )

    if args.correlation:
        matrix = correlation_matrix(catalog)
        logger.info("Correlation matrix:\n%s", matrix.round(2).to_string())

    return 0


if __name__ == "__main__":
    sys.exit(main())

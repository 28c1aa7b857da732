"""Command-line interface for running and maintaining the fleet service.

Provides subcommands to serve the API, create and seed the database,
draft an order from a scanned document, and recalculate a trip.
"""

import argparse
import json
import sys
from datetime import timedelta
from decimal import Decimal
from pathlib import Path

import uvicorn
from sqlalchemy import delete
from sqlalchemy.orm import Session

from fleetops.api.app import create_app
from fleetops.costing import calc_cost
from fleetops.db.models import Driver, Event, Order, Rate, Trip, Unit, utcnow
from fleetops.db.session import Database
from fleetops.dto import camel_alias, map_totals_to_dto
from fleetops.ocr.recognizer import OrderRecognizer, RecognitionError
from fleetops.parsing.order_parser import (
    confidence_to_badge,
    format_confidence,
    parse_ocr_to_order,
)
from fleetops.services.trips import recalc_trip_totals, week_start_for
from fleetops.utils.config import AppConfig, load_config
from fleetops.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)


def seed_demo_data(session: Session) -> dict[str, int]:
    """Replace all records with a small demo fleet.

    Args:
        session: Open database session. The caller owns the commit.

    Returns:
        Count of records created per table.
    """
    for model in (Event, Trip, Order, Rate, Driver, Unit):
        session.execute(delete(model))

    alex = Driver(name="Alex Johnson", home_base="Chicago", active=True)
    taylor = Driver(name="Taylor Smith", home_base="Cincinnati", active=True)
    tractor = Unit(code="TRK-012", type="Tractor", home_base="Chicago", active=True)
    reefer = Unit(
        code="TRL-009", type="Reefer", home_base="Indianapolis", active=True
    )
    linehaul = Rate(
        type="Linehaul",
        zone="East",
        fixed_cpm=Decimal("0.45"),
        wage_cpm=Decimal("0.32"),
        add_ons_cpm=Decimal("0.06"),
        rolling_cpm=Decimal("0.08"),
    )
    dedicated = Rate(
        type="Dedicated",
        zone="Midwest",
        fixed_cpm=Decimal("0.40"),
        wage_cpm=Decimal("0.28"),
        add_ons_cpm=Decimal("0.05"),
        rolling_cpm=Decimal("0.07"),
    )
    fallback = Rate(
        fixed_cpm=Decimal("0.50"),
        wage_cpm=Decimal("0.35"),
        add_ons_cpm=Decimal("0.05"),
        rolling_cpm=Decimal("0.10"),
    )
    session.add_all([alex, taylor, tractor, reefer, linehaul, dedicated, fallback])
    session.flush()

    now = utcnow()
    order = Order(
        customer="Acme Industrial",
        origin="Chicago, IL",
        destination="Atlanta, GA",
        pu_window_start=now,
        pu_window_end=now + timedelta(hours=2),
        del_window_start=now + timedelta(hours=24),
        del_window_end=now + timedelta(hours=26),
        required_truck="53' Reefer",
        notes="Keep temp at 34F",
    )
    session.add(order)
    session.flush()

    trips = [
        _seed_trip(order, alex, tractor, linehaul, Decimal("620"), Decimal("2400")),
        _seed_trip(None, taylor, reefer, dedicated, Decimal("410"), Decimal("1500")),
    ]
    session.add_all(trips)
    session.flush()

    session.add_all(
        [
            Event(
                trip_id=trips[0].id,
                type="TripStarted",
                at=now,
                location="Chicago, IL",
            ),
            Event(
                trip_id=trips[0].id,
                type="ArrivedPU",
                at=now + timedelta(minutes=45),
                location="Chicago, IL",
            ),
        ]
    )
    session.flush()
    counts = {
        "drivers": 2,
        "units": 2,
        "rates": 3,
        "orders": 1,
        "trips": 2,
        "events": 2,
    }
    logger.info("Seeded demo data: %s", counts)
    return counts


def _seed_trip(
    order: Order | None,
    driver: Driver,
    unit: Unit,
    rate: Rate,
    miles: Decimal,
    revenue: Decimal,
) -> Trip:
    cost = calc_cost(
        miles,
        fixed_cpm=rate.fixed_cpm,
        wage_cpm=rate.wage_cpm,
        add_ons_cpm=rate.add_ons_cpm,
        rolling_cpm=rate.rolling_cpm,
        revenue=revenue,
    )
    return Trip(
        order_id=order.id if order else None,
        driver=driver.name,
        driver_id=driver.id,
        unit=unit.code,
        unit_id=unit.id,
        rate_id=rate.id,
        type=rate.type,
        zone=rate.zone,
        status="Dispatched",
        week_start=week_start_for(utcnow()),
        miles=miles,
        revenue=revenue,
        fixed_cpm=rate.fixed_cpm,
        wage_cpm=rate.wage_cpm,
        add_ons_cpm=rate.add_ons_cpm,
        rolling_cpm=rate.rolling_cpm,
        total_cpm=cost.total_cpm,
        total_cost=cost.total_cost,
        profit=cost.profit,
        margin_pct=cost.margin_pct,
    )


def parse_document(file_path: Path, config: AppConfig) -> dict[str, object]:
    """Recognise a scanned document and draft an order from it.

    Args:
        file_path: Image or PDF to read.
        config: Application configuration.

    Returns:
        Dictionary with the file name, confidence, raw text, and draft.
    """
    recognizer = OrderRecognizer(config)
    result = recognizer.recognize(file_path.read_bytes())
    draft = parse_ocr_to_order(result.text)
    return {
        "filename": file_path.name,
        "ocrConfidence": result.confidence,
        "confidence": format_confidence(result.confidence),
        "confidenceBadge": confidence_to_badge(result.confidence),
        "pageCount": result.page_count,
        "text": result.text,
        "parsed": {camel_alias(key): value for key, value in draft.fields().items()},
        "warnings": draft.warnings,
    }


def _emit(payload: object, output: Path | None) -> None:
    output_str = json.dumps(payload, indent=2)
    if output:
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(output_str)
        print(f"Output written to {output}")
    else:
        print(output_str)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fleetops",
        description="Fleet operations service",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="YAML config file (default: configs/config.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP API")
    serve_parser.add_argument("--host", help="Bind address (default from config)")
    serve_parser.add_argument("--port", type=int, help="Port (default from config)")

    subparsers.add_parser("init-db", help="Create missing database tables")

    subparsers.add_parser("seed", help="Replace all data with a demo fleet")

    parse_parser = subparsers.add_parser(
        "parse", help="Draft an order from a scanned document"
    )
    parse_parser.add_argument("file", type=Path, help="Image or PDF to read")
    parse_parser.add_argument("-o", "--output", type=Path, help="Output JSON file")

    recalc_parser = subparsers.add_parser("recalc", help="Recalculate trip totals")
    recalc_parser.add_argument("trip_id", help="Trip identifier")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and dispatch to the appropriate command.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    config = load_config(args.config)
    setup_logging(config.log_level, sql_echo=config.database.echo)

    if args.command == "serve":
        app = create_app(config)
        app.state.database.create_all()
        uvicorn.run(
            app,
            host=args.host or config.api.host,
            port=args.port or config.api.port,
        )
    elif args.command == "init-db":
        Database(config.database).create_all()
        print(f"Database ready: {config.database.url}")
    elif args.command == "seed":
        database = Database(config.database)
        database.create_all()
        with database.session() as session:
            counts = seed_demo_data(session)
        print(json.dumps(counts, indent=2))
    elif args.command == "parse":
        if not args.file.exists():
            print(f"Error: {args.file} does not exist", file=sys.stderr)
            sys.exit(1)
        try:
            result = parse_document(args.file, config)
        except RecognitionError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            sys.exit(1)
        _emit(result, args.output)
    elif args.command == "recalc":
        database = Database(config.database)
        with database.session() as session:
            totals = recalc_trip_totals(session, args.trip_id)
            payload = map_totals_to_dto(totals).to_json() if totals else None
        if payload is None:
            print(f"Error: trip {args.trip_id} not found", file=sys.stderr)
            sys.exit(1)
        _emit(payload, None)
    else:
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()

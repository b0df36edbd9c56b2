from __future__ import annotations

import argparse
import asyncio
import json
from datetime import date

from app.core.config import parse_clock, settings
from app.core.database import AsyncSessionLocal, engine
from app.core.errors import BookingError
from app.services.availability_service import AvailabilityService
from app.services.booking_service import BookingRequest, BookingService


async def run_smoke(
    business_id: str,
    professional_id: str,
    service_id: str,
    day: date,
    book_as: dict | None,
) -> None:
    output: dict = {"date": day.isoformat()}

    async with AsyncSessionLocal() as session:
        availability = AvailabilityService(session, settings.booking)
        try:
            slots = await availability.get_available_slots(
                business_id, professional_id, service_id, day
            )
        except BookingError as exc:
            slots = []
            output["availability_error"] = exc.message
        output["slots"] = slots

        if book_as and slots:
            booking = BookingService(session, settings.booking)
            try:
                result = await booking.book(
                    BookingRequest(
                        business_id=business_id,
                        professional_id=professional_id,
                        service_id=service_id,
                        date=day,
                        time=parse_clock(slots[0]),
                        name=book_as["name"],
                        email=book_as["email"],
                        phone=book_as.get("phone"),
                        notes="smoke test booking",
                    )
                )
                output["booking"] = {
                    "reservationId": str(result.reservation_id),
                    "time": slots[0],
                }
            except BookingError as exc:
                output["booking_error"] = exc.message

    await engine.dispose()
    print(json.dumps(output, indent=2))


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Smoke test availability and booking against the DB.")
    parser.add_argument("--business-id", required=True, help="Business UUID")
    parser.add_argument("--professional-id", required=True, help="Professional UUID")
    parser.add_argument("--service-id", required=True, help="Service UUID")
    parser.add_argument("--date", required=True, type=date.fromisoformat, help="Date, YYYY-MM-DD")
    parser.add_argument("--book", action="store_true", help="Book the first open slot")
    parser.add_argument("--name", default="Smoke Test", help="Client name used with --book")
    parser.add_argument("--email", default="smoke@example.com", help="Client email used with --book")
    parser.add_argument("--phone", default=None, help="Client phone used with --book")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    book_as = None
    if args.book:
        book_as = {"name": args.name, "email": args.email, "phone": args.phone}
    asyncio.run(
        run_smoke(args.business_id, args.professional_id, args.service_id, args.date, book_as)
    )


if __name__ == "__main__":
    main()

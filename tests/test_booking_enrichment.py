from hoardingadmin_firestoredb.schemas.booking import NOT_AVAILABLE, UNKNOWN_HOARDING, UNKNOWN_USER, Booking
from hoardingadmin_firestoredb.schemas.user import User
from hoardingadmin_firestoredb.utils.booking_enrichment import enrich_booking, enrich_bookings

from .conftest import utc


def make_booking(booking_id="b1", **data):
    return Booking.from_document(booking_id, {"userId": "u1", "hoardingId": "h1", "amount": 1000, **data})


def test_enrich_booking_copies_display_fields():
    booking = make_booking(status="approved", startDate=utc(2026, 10, 1))
    user = {"name": "Asha Rao", "email": "asha@example.com", "phone": "9000000001"}
    hoarding = {"title": "NH48 Mega Board", "location": "Bangalore", "categoryName": "Highway"}

    enriched = enrich_booking(booking, user, hoarding)

    assert enriched.id == "b1"
    assert enriched.status == "Approved"
    assert enriched.customer_name == "Asha Rao"
    assert enriched.customer_email == "asha@example.com"
    assert enriched.customer_phone == "9000000001"
    assert enriched.hoarding_title == "NH48 Mega Board"
    assert enriched.hoarding_address == "Bangalore"
    assert enriched.category_name == "Highway"
    assert enriched.start_date == utc(2026, 10, 1)


def test_enrich_booking_uses_alternate_field_names():
    user = {"displayName": "Ravi Kumar", "phoneNumber": "9000000002"}
    hoarding = {"title": "MG Road Unipole", "address": "Mumbai"}

    enriched = enrich_booking(make_booking(), user, hoarding)

    assert enriched.customer_name == "Ravi Kumar"
    assert enriched.customer_phone == "9000000002"
    assert enriched.customer_email == NOT_AVAILABLE
    assert enriched.hoarding_address == "Mumbai"


def test_unresolved_references_fall_back_to_placeholders():
    enriched = enrich_booking(make_booking(), None, None)

    assert enriched.customer_name == UNKNOWN_USER
    assert enriched.customer_email == NOT_AVAILABLE
    assert enriched.customer_phone == NOT_AVAILABLE
    assert enriched.hoarding_title == UNKNOWN_HOARDING
    assert enriched.hoarding_address == NOT_AVAILABLE
    assert enriched.category_name is None


def test_blank_values_count_as_missing():
    enriched = enrich_booking(make_booking(), {"name": "  ", "email": ""}, {"title": ""})

    assert enriched.customer_name == UNKNOWN_USER
    assert enriched.customer_email == NOT_AVAILABLE
    assert enriched.hoarding_title == UNKNOWN_HOARDING


def test_enrich_booking_accepts_models():
    user = User.from_document("u1", {"name": "Asha Rao", "email": "asha@example.com"})

    enriched = enrich_booking(make_booking(), user, None)

    assert enriched.customer_name == "Asha Rao"
    assert enriched.customer_email == "asha@example.com"


def test_total_price_takes_precedence_over_amount():
    booking = make_booking(amount=100, totalPrice=1500)
    assert booking.amount == 1500

    assert make_booking(amount="abc").amount == 0
    assert make_booking(amount=None).amount == 0


def test_blank_references_are_none():
    booking = make_booking(userId="", hoardingId="  ")
    assert booking.user_id is None
    assert booking.hoarding_id is None


async def test_enrich_bookings_resolves_each_reference_once():
    bookings = [make_booking("b1"), make_booking("b2"), make_booking("b3", userId="u2", hoardingId="h2")]
    calls = []

    async def resolve_user(user_id):
        calls.append(("user", user_id))
        return {"name": f"User {user_id}"}

    async def resolve_hoarding(hoarding_id):
        calls.append(("hoarding", hoarding_id))
        return {"title": f"Board {hoarding_id}"}

    enriched = await enrich_bookings(bookings, resolve_user, resolve_hoarding)

    assert [booking.id for booking in enriched] == ["b1", "b2", "b3"]
    assert [booking.customer_name for booking in enriched] == ["User u1", "User u1", "User u2"]
    assert [booking.hoarding_title for booking in enriched] == ["Board h1", "Board h1", "Board h2"]
    assert sorted(calls) == [("hoarding", "h1"), ("hoarding", "h2"), ("user", "u1"), ("user", "u2")]


async def test_enrich_bookings_survives_failed_lookups():
    async def resolve_user(user_id):
        if user_id == "broken":
            raise RuntimeError("lookup failed")
        return {"name": "Asha Rao"}

    async def resolve_hoarding(hoarding_id):
        return None

    bookings = [make_booking("b1", userId="broken"), make_booking("b2")]
    enriched = await enrich_bookings(bookings, resolve_user, resolve_hoarding)

    assert enriched[0].customer_name == UNKNOWN_USER
    assert enriched[1].customer_name == "Asha Rao"
    assert all(booking.hoarding_title == UNKNOWN_HOARDING for booking in enriched)


async def test_bookings_without_references_skip_lookups():
    async def fail(_):
        raise AssertionError("resolver should not be called")

    enriched = await enrich_bookings([make_booking(userId=None, hoardingId=None)], fail, fail)

    assert enriched[0].customer_name == UNKNOWN_USER
    assert enriched[0].hoarding_title == UNKNOWN_HOARDING


async def test_enrich_empty_list():
    async def resolve(_):
        return None

    assert await enrich_bookings([], resolve, resolve) == []

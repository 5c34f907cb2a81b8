from hoardingadmin_firestoredb.firestore.bookings import BookingsState
from hoardingadmin_firestoredb.utils.booking_filters import BookingFilterCriteria
from hoardingadmin_firestoredb.utils.error_codes import ErrorCodes
from hoardingadmin_firestoredb.utils.status_policy import TransitionPolicy

from .conftest import utc


async def test_get_all_bookings_newest_first(context, seeded):
    response = await context.bookings.get_all_bookings()

    assert response.status
    assert [booking.id for booking in response.data] == ["b2", "b1", "b3"]
    b1 = response.data[1]
    assert b1.amount == 1000
    assert b1.status == "Approved"
    assert b1.payment_status == "Paid"


async def test_get_bookings_by_status_and_user(context, seeded):
    pending = await context.bookings.get_bookings_by_status("pending")
    by_user = await context.bookings.get_bookings_by_user("u1")

    assert [booking.id for booking in pending.data] == ["b2"]
    assert [booking.id for booking in by_user.data] == ["b2", "b1"]
    assert (await context.bookings.get_bookings_by_status("")).code == ErrorCodes.BAD_REQUEST


async def test_get_booking(context, seeded):
    found = await context.bookings.get_booking("b3")
    missing = await context.bookings.get_booking("nope")

    assert found.data.user_id == "u2"
    assert missing.code == ErrorCodes.NOT_FOUND


async def test_enriched_bookings_carry_display_fields(context, seeded):
    seeded.seed("bookings/b4", {"userId": "ghost", "hoardingId": "legacy1", "amount": 50, "createdAt": utc(2026, 1, 1)})

    response = await context.bookings.get_enriched_bookings()
    by_id = {booking.id: booking for booking in response.data}

    assert by_id["b1"].customer_name == "Asha Rao"
    assert by_id["b1"].hoarding_title == "NH48 Mega Board"
    assert by_id["b1"].hoarding_address == "Bangalore"
    assert by_id["b1"].category_name == "Highway"
    assert by_id["b2"].hoarding_address == "Mumbai"
    assert by_id["b3"].customer_name == "Ravi Kumar"
    assert by_id["b3"].customer_phone == "9000000002"
    # unresolved user, and a hoarding that only exists in the legacy flat collection
    assert by_id["b4"].customer_name == "Unknown User"
    assert by_id["b4"].hoarding_title == "Unknown Hoarding"


async def test_enriched_bookings_with_criteria(context, seeded):
    response = await context.bookings.get_enriched_bookings(BookingFilterCriteria(status="Pending"))
    assert [booking.id for booking in response.data] == ["b2"]

    response = await context.bookings.get_enriched_bookings(BookingFilterCriteria(search="mega"))
    assert [booking.id for booking in response.data] == ["b1", "b3"]


async def test_update_status_persists_and_stamps(context, seeded):
    response = await context.bookings.update_status("b2", "approved")

    assert response.status
    assert response.data.status == "Approved"
    stored = seeded.data("bookings/b2")
    assert stored["status"] == "Approved"
    assert stored["updatedAt"] is not None
    assert stored["amount"] == 500


async def test_update_status_to_current_value_keeps_status(context, seeded):
    response = await context.bookings.update_status("b3", "Approved")

    assert response.status
    assert seeded.data("bookings/b3")["status"] == "Approved"


async def test_permissive_policy_allows_reassignment(context, seeded):
    response = await context.bookings.update_status("b1", "Rejected")

    assert response.status
    assert seeded.data("bookings/b1")["status"] == "Rejected"


async def test_strict_policy_refuses_decided_bookings(context, seeded):
    context.bookings.policy = TransitionPolicy.STRICT

    refused = await context.bookings.update_status("b1", "Rejected")
    allowed = await context.bookings.update_status("b2", "Rejected")

    assert refused.code == ErrorCodes.CONFLICT
    assert seeded.data("bookings/b1")["status"] == "approved"
    assert allowed.status
    assert seeded.data("bookings/b2")["status"] == "Rejected"


async def test_update_status_errors(context, seeded):
    assert (await context.bookings.update_status("nope", "Approved")).code == ErrorCodes.NOT_FOUND
    assert (await context.bookings.update_status("b2", "Cancelled")).code == ErrorCodes.BAD_REQUEST
    assert seeded.data("bookings/b2")["status"] == "Pending"


async def test_update_payment_status(context, seeded):
    response = await context.bookings.update_payment_status("b2", "paid")

    assert response.data.payment_status == "Paid"
    assert seeded.data("bookings/b2")["paymentStatus"] == "Paid"
    assert (await context.bookings.update_payment_status("b2", "refunded")).code == ErrorCodes.BAD_REQUEST
    assert (await context.bookings.update_payment_status("nope", "Paid")).code == ErrorCodes.NOT_FOUND


async def test_store_failure_becomes_failure_response(context, seeded):
    seeded.fail_with = RuntimeError("backend unavailable")

    response = await context.bookings.update_status("b2", "Approved")

    assert not response.status
    assert response.code == ErrorCodes.INTERNAL_SERVER_ERROR
    assert "backend unavailable" in response.error_message


async def test_bookings_state_applies_status_change(context, seeded):
    state = BookingsState(context.bookings)
    await state.refetch()
    assert [booking.id for booking in state.data] == ["b2", "b1", "b3"]
    assert state.loading is False

    response = await state.change_status("b2", "Approved")

    assert response.status
    assert state.data[0].status == "Approved"
    assert state.data[0].customer_name == "Asha Rao"


async def test_bookings_state_reverts_failed_write(context, seeded):
    state = BookingsState(context.bookings)
    await state.refetch()
    seeded.fail_with = RuntimeError("write rejected")

    response = await state.change_status("b2", "Rejected")

    assert not response.status
    assert state.data[0].id == "b2"
    assert state.data[0].status == "Pending"


async def test_bookings_state_reverts_refused_payment_change(context, seeded):
    state = BookingsState(context.bookings)
    await state.refetch()

    response = await state.change_payment_status("b2", "refunded")

    assert response.code == ErrorCodes.BAD_REQUEST
    assert state.data[0].payment_status == "Pending"


async def test_bookings_state_derived_views(context, seeded):
    state = BookingsState(context.bookings)
    await state.refetch()

    assert [b.id for b in state.filtered(BookingFilterCriteria(search="ravi"))] == ["b3"]
    customers = state.customers()
    assert [customer.customer_id for customer in customers] == ["u1", "u2"]
    assert customers[0].total_spend == 1500


async def test_customer_aggregates(context, seeded):
    response = await context.customers.get_customer_aggregates()

    u1, u2 = response.data
    assert (u1.customer_id, u1.total_spend, u1.status_counts) == ("u1", 1500, {"Pending": 1, "Approved": 1})
    assert (u2.customer_id, u2.total_spend, u2.status_counts) == ("u2", 2000, {"Approved": 1})
    assert u1.email == "asha@example.com"


async def test_customer_aggregates_with_directory_and_criteria(context, seeded):
    everyone = await context.customers.get_customer_aggregates(include_without_bookings=True)
    pending = await context.customers.get_customer_aggregates(BookingFilterCriteria(status="Pending"))

    assert [customer.customer_id for customer in everyone.data] == ["u1", "u2", "u3"]
    assert everyone.data[2].total_bookings == 0
    assert [customer.customer_id for customer in pending.data] == ["u1"]


async def test_get_customer_and_history(context, seeded):
    customer = await context.customers.get_customer("u2")
    missing = await context.customers.get_customer("nobody")
    history = await context.customers.get_booking_history("u1")

    assert customer.data.name == "Ravi Kumar"
    assert missing.code == ErrorCodes.NOT_FOUND
    # dated bookings by start date, then the undated one
    assert [booking.id for booking in history.data] == ["b1", "b2"]
    assert history.data[0].hoarding_title == "NH48 Mega Board"
    assert (await context.customers.get_booking_history("")).code == ErrorCodes.BAD_REQUEST


async def test_get_customer_without_bookings(context, seeded):
    meera = await context.customers.get_customer("u3")
    admin = await context.customers.get_customer("admin1")

    assert meera.status
    assert (meera.data.name, meera.data.email) == ("Meera Shah", "meera@example.com")
    assert (meera.data.total_bookings, meera.data.total_spend) == (0, 0)
    assert admin.code == ErrorCodes.NOT_FOUND

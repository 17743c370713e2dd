from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from app.schemas.order_hours import DAY_NAMES, DayHours, OrderHoursConfig
from app.services.business import OrderHoursService, save_order_hours

# 2026-10-19 is a Monday
MONDAY = datetime(2026, 10, 19)


def service(**overrides):
    return OrderHoursService(OrderHoursConfig(**overrides))


def all_closed():
    return {day: {"closed": True} for day in DAY_NAMES}


def test_within_order_hours():
    info = service().evaluate(MONDAY.replace(hour=12))

    assert info.is_within_order_hours is True
    assert info.is_delivery_open is True
    assert info.start_time == "08:00"
    assert info.end_time == "20:00"


@pytest.mark.parametrize("hour,minute,expected", [
    (7, 59, False),
    (8, 0, True),
    (19, 59, True),
    (20, 0, False),
    (23, 30, False),
])
def test_window_boundaries(hour, minute, expected):
    info = service().evaluate(MONDAY.replace(hour=hour, minute=minute))
    assert info.is_within_order_hours is expected
    assert info.start_time == "08:00"


def test_closed_day_has_no_times():
    sunday = datetime(2026, 10, 25, 12, 0)
    info = service().evaluate(sunday)

    assert info.is_within_order_hours is False
    assert info.is_delivery_open is True
    assert info.start_time is None
    assert info.end_time is None


def test_paused_ordering_closes_delivery():
    info = service(ordering_paused=True).evaluate(MONDAY.replace(hour=12))

    assert info.is_within_order_hours is False
    assert info.is_delivery_open is False
    assert info.start_time == "08:00"


def test_aware_datetimes_are_converted_to_shop_timezone():
    # 06:30 UTC is 08:30 in Berlin (CEST) on that day
    at = datetime(2026, 10, 19, 6, 30, tzinfo=timezone.utc)
    assert service().evaluate(at).is_within_order_hours is True


def test_unconfigured_day_is_closed():
    svc = service(days={"monday": {"start": "09:00"}})
    info = svc.evaluate(MONDAY.replace(hour=12))

    assert info.is_within_order_hours is False
    assert info.start_time is None


def test_times_are_normalized_to_hhmm():
    svc = service(days={"monday": {"start": "9:05", "end": "17:00"}})
    assert svc.evaluate(MONDAY.replace(hour=12)).start_time == "09:05"


def test_weekly_hours():
    weekly = service().get_weekly_hours()

    assert list(weekly) == DAY_NAMES
    assert weekly["sunday"] == {"closed": True, "start": None, "end": None}
    assert weekly["monday"]["start"] == "08:00"


def test_day_window_must_be_ordered():
    with pytest.raises(ValidationError):
        DayHours(start="18:00", end="10:00")


def test_invalid_time_format():
    with pytest.raises(ValidationError):
        DayHours(start="25:00", end="26:00")


def test_unknown_day_name_rejected():
    with pytest.raises(ValidationError):
        OrderHoursConfig(days={"funday": {"start": "08:00", "end": "09:00"}})


def test_unknown_timezone_rejected():
    with pytest.raises(ValidationError):
        OrderHoursConfig(timezone="Mars/Olympus")


def test_status_endpoint_defaults(client):
    response = client.get("/api/v1/order-hours")

    assert response.status_code == 200
    body = response.json()
    assert set(body["info"]) == {"isWithinOrderHours", "isDeliveryOpen", "startTime", "endTime"}


def test_status_endpoint_renders_notice_when_closed(client, db):
    save_order_hours(db, config=OrderHoursConfig(days=all_closed()))

    body = client.get("/api/v1/order-hours").json()

    assert body["info"]["isWithinOrderHours"] is False
    assert body["notice"]["title"] == "Wir befinden uns gerade außerhalb unserer Bestellzeiten"
    assert body["notice"]["description"] == "Unsere Bestellzeiten werden in Kürze veröffentlicht."


def test_admin_update_and_pause(client, admin_headers):
    payload = {
        "config": {"timezone": "Europe/Berlin", "days": all_closed()},
        "notice": {"title": "Geschlossen, wieder ab {{startTime}}"},
    }
    response = client.put("/api/v1/admin/order-hours", json=payload, headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["notice"]["title"] == "Geschlossen, wieder ab {{startTime}}"

    response = client.post("/api/v1/admin/order-hours/pause", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["current"]["isDeliveryOpen"] is False

    body = client.get("/api/v1/order-hours").json()
    assert body["notice"]["title"] == "Geschlossen, wieder ab "

    response = client.post("/api/v1/admin/order-hours/resume", headers=admin_headers)
    assert response.json()["config"]["ordering_paused"] is False


def test_admin_update_rejects_unknown_tokens(client, admin_headers):
    payload = {"notice": {"footer": "Bis {{endtime}}"}}
    response = client.put("/api/v1/admin/order-hours", json=payload, headers=admin_headers)
    assert response.status_code == 422


def test_admin_update_requires_superadmin(client, regular_admin, make_auth_headers):
    response = client.put("/api/v1/admin/order-hours", json={}, headers=make_auth_headers(regular_admin))
    assert response.status_code == 403


def test_admin_routes_require_token(client):
    assert client.get("/api/v1/admin/order-hours").status_code == 401

import pytest
from pydantic import ValidationError

from app.schemas.order_hours import NoticeSettings, find_unknown_tokens
from app.services.business import OrderHoursInfo, apply_tokens, render_notice
from app.services.business.notice import (
    DEFAULT_FOOTER,
    DEFAULT_TITLE_CLOSED,
    DEFAULT_TITLE_DELIVERY_OPEN,
)


def closed_info(start="10:00", end="18:00", delivery_open=True):
    return OrderHoursInfo(
        is_within_order_hours=False,
        is_delivery_open=delivery_open,
        start_time=start,
        end_time=end,
    )


def test_nothing_rendered_without_info():
    assert render_notice(None, None) is None


@pytest.mark.parametrize("delivery_open", [True, False])
@pytest.mark.parametrize("templates", [None, {"title": "Zu {{startTime}}"}])
def test_nothing_rendered_within_order_hours(delivery_open, templates):
    info = OrderHoursInfo(is_within_order_hours=True, is_delivery_open=delivery_open,
                          start_time="08:00", end_time="20:00")
    assert render_notice(info, templates) is None


def test_default_copy_with_both_times():
    notice = render_notice(closed_info(), None)

    assert notice.title == DEFAULT_TITLE_DELIVERY_OPEN
    assert notice.description == "Unsere Bestellzeiten sind von 10:00 bis 18:00."
    assert notice.footer == DEFAULT_FOOTER


def test_default_title_when_delivery_closed():
    notice = render_notice(closed_info(delivery_open=False), None)
    assert notice.title == DEFAULT_TITLE_CLOSED


@pytest.mark.parametrize("start,end", [(None, "18:00"), ("10:00", None), (None, None)])
def test_default_description_without_times(start, end):
    notice = render_notice(closed_info(start, end), None)
    assert notice.description == "Unsere Bestellzeiten werden in Kürze veröffentlicht."


def test_title_template_is_rendered():
    notice = render_notice(closed_info("09:00", "17:00"), {"title": "Open {{startTime}}-{{endTime}}"})

    assert notice.title == "Open 09:00-17:00"
    # untouched fields keep their defaults
    assert notice.description == "Unsere Bestellzeiten sind von 09:00 bis 17:00."
    assert notice.footer == DEFAULT_FOOTER


def test_empty_template_fields_fall_back_to_defaults():
    notice = render_notice(closed_info(), {"title": "", "description": None, "footer": "Bis bald"})

    assert notice.title == DEFAULT_TITLE_DELIVERY_OPEN
    assert notice.footer == "Bis bald"


def test_tokens_tolerate_whitespace_inside_braces():
    assert apply_tokens("ab {{ startTime }} bis {{endTime  }}", {"startTime": "07:30", "endTime": "12:00"}) == "ab 07:30 bis 12:00"


def test_missing_values_become_empty():
    notice = render_notice(closed_info(start=None, end="18:00"), {"description": "[{{startTime}}] [{{endTime}}]"})
    assert notice.description == "[] [18:00]"


def test_token_names_are_case_sensitive_and_whitelisted():
    text = "{{StartTime}} {{date}} {{endTime}}"
    assert apply_tokens(text, {"startTime": "09:00", "endTime": "17:00"}) == "{{StartTime}} {{date}} 17:00"


def test_substitution_is_idempotent():
    values = {"startTime": "09:00", "endTime": "17:00"}
    template = "Von {{startTime}} bis {{ endTime }} ({{other}})"

    once = apply_tokens(template, values)
    assert apply_tokens(once, values) == once


def test_find_unknown_tokens():
    assert find_unknown_tokens("{{startTime}} {{ starttime }} {{foo}}") == ["starttime", "foo"]
    assert find_unknown_tokens(None) == []


def test_notice_settings_accept_known_tokens():
    settings = NoticeSettings(title="Ab {{ startTime }}", footer="Bis {{endTime}}")
    assert settings.title == "Ab {{ startTime }}"


def test_notice_settings_reject_typos():
    with pytest.raises(ValidationError) as exc:
        NoticeSettings(description="Von {{startTme}} bis {{endTime}}")
    assert "startTme" in str(exc.value)

"""PII redaction: phones and emails never leave the process."""

import pytest

from honeyguard.models import Message
from honeyguard.patterns import EMAIL_ADDRESS, PHONE_NUMBER
from honeyguard.redactor import contains_pii, redact, redact_history, safe_preview


SAMPLES = [
    "call me at 9876543210",
    "my number is +91 9876543210 and mail me at john.doe@gmail.com",
    "+91-8765432109 urgent",
    "09876543210 or 919876543210",
    "pay 9876543210@paytm and confirm at help@secure-bank.co.in",
    "98765432109876543210",
    "account 123456789012 ifsc HDFC0001234",
    "9876543210a@b.com",
    "a@b.com@c.com",
    "hello, how are you",
    "",
]


def test_phone_is_replaced():
    assert redact("call me at 9876543210") == "call me at [PHONE_REDACTED]"


def test_prefixed_phone_is_replaced_whole():
    assert redact("+91 9876543210 now") == "[PHONE_REDACTED] now"
    assert redact("+91-8765432109") == "[PHONE_REDACTED]"


@pytest.mark.parametrize(
    "text",
    [
        "call 09876543210 now",
        "call 919876543210 now",
        "call +919876543210 now",
        "call 91-9876543210 now",
    ],
)
def test_trunk_and_country_prefixed_phones_are_replaced_whole(text):
    assert redact(text) == "call [PHONE_REDACTED] now"


def test_email_is_replaced():
    assert redact("write to john.doe@gmail.com today") == "write to [EMAIL_REDACTED] today"


def test_phone_inside_upi_handle_is_redacted():
    out = redact("send to 9876543210@paytm")
    assert "9876543210" not in out
    assert out == "send to [PHONE_REDACTED]@paytm"


def test_text_without_pii_is_unchanged():
    text = "Your account is blocked, verify KYC now or it will expire"
    assert redact(text) == text


def test_non_mobile_digit_runs_are_unchanged():
    assert redact("order 12345 of 2024") == "order 12345 of 2024"
    assert redact("5876543210") == "5876543210"


@pytest.mark.parametrize("text", [None, ""])
def test_empty_input(text):
    assert redact(text) == ""


@pytest.mark.parametrize("text", SAMPLES)
def test_redact_is_idempotent(text):
    once = redact(text)
    assert redact(once) == once


@pytest.mark.parametrize("text", SAMPLES)
def test_no_pii_survives(text):
    out = redact(text)
    assert PHONE_NUMBER.search(out) is None
    assert EMAIL_ADDRESS.search(out) is None


def test_history_is_redacted_without_mutating_input():
    history = [
        Message(sender="scammer", text="call 9876543210", timestamp=1700000000),
        Message(sender="user", text="who is this?"),
    ]
    out = redact_history(history)
    assert out[0].text == "call [PHONE_REDACTED]"
    assert out[0].timestamp == "1700000000"
    assert out[1].text == "who is this?"
    assert history[0].text == "call 9876543210"


def test_contains_pii():
    assert contains_pii("mail a@b.com")
    assert not contains_pii("nothing here")
    assert not contains_pii(None)


def test_safe_preview_is_redacted_and_short():
    preview = safe_preview("call 9876543210 " + "x" * 100)
    assert "9876543210" not in preview
    assert len(preview) <= 40
    assert preview.endswith("...")

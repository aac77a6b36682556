import json

import httpx
import pytest
from pydantic import TypeAdapter

from bakery.core.config import get_settings
from bakery.services.payment_verification import (
    PaymentVerifier,
    _shared_verifier,
    get_payment_verifier,
    parse_verification_text,
    verification_summary,
)
from bakery.schemas.verification import (
    VerificationFailure,
    VerificationOutcome,
    VerificationSuccess,
)

GOOD_ANSWER = {
    "isValid": True,
    "isPaymentProof": True,
    "detectedAmount": 150.0,
    "amountMatches": True,
    "detectedReference": "Thandi Mokoena",
    "referenceMatches": True,
    "recipient": "Sourdough Bakery",
    "confidence": 92,
    "issues": [],
    "bankName": "FNB",
    "transactionDate": "2024-01-11",
    "documentType": "proof of payment",
}


def gemini_response(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def make_verifier(handler) -> PaymentVerifier:
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return PaymentVerifier(api_key="test-key", min_confidence=70, client=client)


def test_parse_answer_wrapped_in_code_fence():
    text = "Here you go:\n```json\n" + json.dumps(GOOD_ANSWER) + "\n```"

    outcome = parse_verification_text(text)

    assert isinstance(outcome, VerificationSuccess)
    assert outcome.detected_amount == 150.0
    assert outcome.bank_name == "FNB"
    assert outcome.confidence == 92


@pytest.mark.parametrize(
    "text, reason",
    [
        ("I cannot read this document.", "No JSON found in AI response"),
        ("{not json at all}", "Failed to parse AI verification response"),
        ('{"isValid": true, "confidence": 80}', "AI response missing required fields"),
    ],
)
def test_unusable_answers_become_failures(text, reason):
    outcome = parse_verification_text(text)

    assert isinstance(outcome, VerificationFailure)
    assert outcome.reason == reason
    assert outcome.raw_response == text


def test_out_of_range_confidence_is_a_failure():
    answer = dict(GOOD_ANSWER, confidence=250)
    outcome = parse_verification_text(json.dumps(answer))
    assert isinstance(outcome, VerificationFailure)


def test_outcome_round_trips_through_stored_json():
    outcome = parse_verification_text(json.dumps(GOOD_ANSWER))
    stored = outcome.model_dump(mode="json")

    assert stored["kind"] == "success"
    restored = TypeAdapter(VerificationOutcome).validate_python(stored)
    assert restored == outcome

    failure = VerificationFailure(reason="timeout")
    restored = TypeAdapter(VerificationOutcome).validate_python(failure.model_dump(mode="json"))
    assert isinstance(restored, VerificationFailure)


def test_verify_sends_prompt_and_document():
    seen = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=gemini_response(json.dumps(GOOD_ANSWER)))

    verifier = make_verifier(handler)
    outcome = verifier.verify(b"%PDF-1.4", "application/pdf", 150.0, "Thandi Mokoena")

    assert isinstance(outcome, VerificationSuccess)
    assert verifier.passes(outcome)
    assert "gemini-1.5-flash:generateContent" in seen["url"]
    assert "key=test-key" in seen["url"]
    parts = seen["body"]["contents"][0]["parts"]
    assert "R150.00" in parts[0]["text"]
    assert "Thandi Mokoena" in parts[0]["text"]
    assert parts[1]["inline_data"] == {"mime_type": "application/pdf", "data": "JVBERi0xLjQ="}


def test_http_error_becomes_failure():
    verifier = make_verifier(lambda request: httpx.Response(503, text="overloaded"))

    outcome = verifier.verify(b"img", "image/png", 50.0, "ref")

    assert isinstance(outcome, VerificationFailure)
    assert "503" in outcome.reason
    assert not verifier.passes(outcome)


def test_network_error_becomes_failure():
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    outcome = make_verifier(handler).verify(b"img", "image/png", 50.0, "ref")

    assert isinstance(outcome, VerificationFailure)
    assert "connection refused" in outcome.reason


@pytest.mark.parametrize(
    "changes, passes",
    [
        ({}, True),
        ({"confidence": 69}, False),
        ({"amountMatches": False}, False),
        ({"isPaymentProof": False}, False),
        ({"isValid": False}, False),
    ],
)
def test_passes_threshold(changes, passes):
    outcome = parse_verification_text(json.dumps(dict(GOOD_ANSWER, **changes)))
    verifier = PaymentVerifier(api_key="k", min_confidence=70, client=httpx.Client())
    assert verifier.passes(outcome) is passes


@pytest.mark.parametrize(
    "changes, message",
    [
        ({}, "Payment proof verified successfully"),
        ({"confidence": 40}, "Payment proof appears valid but with some concerns"),
        ({"amountMatches": False}, "Payment proof detected but amount mismatch"),
        ({"isPaymentProof": False}, "Document does not appear to be a payment proof"),
    ],
)
def test_verification_summary_messages(changes, message):
    outcome = parse_verification_text(json.dumps(dict(GOOD_ANSWER, **changes)))
    assert verification_summary(outcome) == message


def test_verification_summary_for_missing_and_failed():
    assert verification_summary(None) == "Not verified"
    assert (
        verification_summary(VerificationFailure(reason="timeout"))
        == "Verification failed: timeout"
    )


def test_non_json_body_becomes_failure():
    verifier = make_verifier(lambda request: httpx.Response(200, text="<html>proxy error</html>"))

    outcome = verifier.verify(b"img", "image/png", 50.0, "ref")

    assert isinstance(outcome, VerificationFailure)
    assert outcome.reason == "Invalid Gemini response"
    assert outcome.raw_response == "<html>proxy error</html>"


@pytest.mark.parametrize(
    "body",
    [
        {"candidates": ["x"]},
        {"candidates": {"content": {}}},
        {"candidates": [{"content": "text"}]},
        {"candidates": [{"content": {"parts": ["text"]}}]},
        ["not", "an", "object"],
    ],
)
def test_malformed_reply_becomes_failure(body):
    verifier = make_verifier(lambda request: httpx.Response(200, json=body))

    outcome = verifier.verify(b"img", "image/png", 50.0, "ref")

    assert isinstance(outcome, VerificationFailure)
    assert outcome.reason == "Invalid Gemini response"


def test_blocked_reply_without_candidates():
    verifier = make_verifier(lambda request: httpx.Response(200, json={"promptFeedback": {}}))

    outcome = verifier.verify(b"img", "image/png", 50.0, "ref")

    assert isinstance(outcome, VerificationFailure)
    assert outcome.reason == "No JSON found in AI response"


def test_dependency_reuses_one_verifier(monkeypatch):
    settings = get_settings()
    monkeypatch.setattr(settings, "GEMINI_API_KEY", "test-key")
    _shared_verifier.cache_clear()
    try:
        first = get_payment_verifier()
        second = get_payment_verifier()
    finally:
        _shared_verifier.cache_clear()

    assert isinstance(first, PaymentVerifier)
    assert first is second
    assert first.client is second.client


def test_dependency_without_key(monkeypatch):
    monkeypatch.setattr(get_settings(), "GEMINI_API_KEY", None)
    assert get_payment_verifier() is None

# bakery/services/payment_verification.py
import base64
import json
import logging
import re
from functools import lru_cache

import httpx
from pydantic import ValidationError

from bakery.core.config import get_settings
from bakery.schemas.verification import (
    VerificationFailure,
    VerificationOutcome,
    VerificationSuccess,
)

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

REQUIRED_FIELDS = ("isValid", "isPaymentProof", "amountMatches", "confidence")

# Gemini answers in camelCase; our schema is snake_case.
FIELD_MAP = {
    "isValid": "is_valid",
    "isPaymentProof": "is_payment_proof",
    "detectedAmount": "detected_amount",
    "amountMatches": "amount_matches",
    "detectedReference": "detected_reference",
    "referenceMatches": "reference_matches",
    "recipient": "recipient",
    "confidence": "confidence",
    "issues": "issues",
    "bankName": "bank_name",
    "transactionDate": "transaction_date",
    "documentType": "document_type",
}

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")

PROMPT_TEMPLATE = """
Analyze this payment proof image/document and verify the following:

Expected Payment Amount: {currency}{amount:.2f}
Expected Reference: {reference}

Please check:
1. Is this a valid payment proof/receipt/bank statement?
2. Can you identify the payment amount? What amount is shown?
3. Can you identify the recipient/beneficiary information?
4. Can you identify any reference information?
5. Does the payment amount match {currency}{amount:.2f} (allow for small differences like bank fees)?
6. Is this document clear and readable?
7. Does this appear to be a legitimate banking document?

Respond in JSON format:
{{
  "isValid": boolean,
  "isPaymentProof": boolean,
  "detectedAmount": number or null,
  "amountMatches": boolean,
  "detectedReference": "string or null",
  "referenceMatches": boolean,
  "recipient": "string or null",
  "confidence": number (0-100),
  "issues": ["array of any issues found"],
  "bankName": "string or null",
  "transactionDate": "string or null",
  "documentType": "string (e.g., 'bank receipt', 'statement', 'proof of payment')"
}}

Bank documents vary in format. Look for amounts, dates, references and banking information.
"""


def parse_verification_text(text: str) -> VerificationOutcome:
    """
    Turn the model's free-text answer into a VerificationOutcome.

    The model sometimes wraps the JSON in prose or code fences, so we take
    the first `{...}` block.
    """
    match = _JSON_BLOCK.search(text or "")
    if not match:
        return VerificationFailure(reason="No JSON found in AI response", raw_response=text)

    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError:
        return VerificationFailure(
            reason="Failed to parse AI verification response", raw_response=text
        )

    if not isinstance(data, dict) or any(f not in data for f in REQUIRED_FIELDS):
        return VerificationFailure(
            reason="AI response missing required fields", raw_response=text
        )

    fields = {FIELD_MAP[k]: v for k, v in data.items() if k in FIELD_MAP}
    if fields.get("issues") is None:
        fields.pop("issues", None)
    try:
        return VerificationSuccess(**fields)
    except ValidationError as exc:
        return VerificationFailure(
            reason=f"AI response has invalid fields: {exc.error_count()} error(s)",
            raw_response=text,
        )


def verification_summary(outcome: VerificationOutcome | None) -> str:
    """
    One-line human message for the admin order view.
    """
    if outcome is None:
        return "Not verified"
    if isinstance(outcome, VerificationFailure):
        return f"Verification failed: {outcome.reason}"

    if (
        outcome.is_valid
        and outcome.is_payment_proof
        and outcome.amount_matches
        and outcome.confidence >= get_settings().VERIFICATION_MIN_CONFIDENCE
    ):
        return "Payment proof verified successfully"
    if outcome.is_payment_proof and outcome.amount_matches:
        return "Payment proof appears valid but with some concerns"
    if outcome.is_payment_proof and not outcome.amount_matches:
        return "Payment proof detected but amount mismatch"
    if not outcome.is_payment_proof:
        return "Document does not appear to be a payment proof"
    return "Payment proof verification inconclusive"


def extract_answer_text(data) -> str:
    """
    Concatenate the text parts of the first Gemini candidate.

    A body with no candidates (e.g. a safety block) yields "". Raises
    ValueError when the body is not shaped like a generateContent reply.
    """
    if not isinstance(data, dict):
        raise ValueError("response body is not an object")
    candidates = data.get("candidates") or []
    if not isinstance(candidates, list):
        raise ValueError("candidates is not a list")
    if not candidates:
        return ""

    first = candidates[0]
    if not isinstance(first, dict):
        raise ValueError("candidate is not an object")
    content = first.get("content") or {}
    if not isinstance(content, dict):
        raise ValueError("content is not an object")
    parts = content.get("parts") or []
    if not isinstance(parts, list) or not all(isinstance(p, dict) for p in parts):
        raise ValueError("parts is not a list of objects")
    return "".join(str(p.get("text") or "") for p in parts)


class PaymentVerifier:
    """
    Asks Gemini to read a proof-of-payment document.

    Never raises for transport or parsing problems: those come back as
    VerificationFailure so checkout can carry on.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "gemini-1.5-flash",
        min_confidence: float = 70,
        currency: str = "R",
        client: httpx.Client | None = None,
    ):
        self.api_key = api_key
        self.model = model
        self.min_confidence = min_confidence
        self.currency = currency
        self.client = client or httpx.Client(timeout=30)

    def build_prompt(self, expected_amount: float, expected_reference: str) -> str:
        return PROMPT_TEMPLATE.format(
            currency=self.currency,
            amount=expected_amount,
            reference=expected_reference,
        )

    def verify(
        self,
        file_bytes: bytes,
        mime_type: str,
        expected_amount: float,
        expected_reference: str,
    ) -> VerificationOutcome:
        payload = {
            "contents": [
                {
                    "parts": [
                        {"text": self.build_prompt(expected_amount, expected_reference)},
                        {
                            "inline_data": {
                                "mime_type": mime_type,
                                "data": base64.b64encode(file_bytes).decode("ascii"),
                            }
                        },
                    ]
                }
            ]
        }

        try:
            resp = self.client.post(
                GEMINI_URL.format(model=self.model),
                params={"key": self.api_key},
                json=payload,
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning("Gemini API error %s", exc.response.status_code)
            return VerificationFailure(
                reason=f"Gemini API error {exc.response.status_code}",
                raw_response=exc.response.text[:500],
            )
        except httpx.RequestError as exc:
            logger.warning("Gemini request failed: %s", exc)
            return VerificationFailure(reason=f"Gemini request failed: {exc}")

        try:
            text = extract_answer_text(resp.json())
        except ValueError:
            logger.warning("Gemini returned an unreadable body (%s bytes)", len(resp.content))
            return VerificationFailure(
                reason="Invalid Gemini response",
                raw_response=resp.text[:500],
            )
        return parse_verification_text(text)

    def passes(self, outcome: VerificationOutcome) -> bool:
        """
        True when the proof is good enough to move the order to 'verified'.
        """
        return (
            isinstance(outcome, VerificationSuccess)
            and outcome.is_valid
            and outcome.is_payment_proof
            and outcome.amount_matches
            and outcome.confidence >= self.min_confidence
        )


@lru_cache
def _shared_verifier(
    api_key: str,
    model: str,
    min_confidence: float,
    currency: str,
) -> PaymentVerifier:
    # One verifier (and one httpx connection pool) per process and settings.
    return PaymentVerifier(
        api_key=api_key,
        model=model,
        min_confidence=min_confidence,
        currency=currency,
    )


def get_payment_verifier() -> PaymentVerifier | None:
    """
    FastAPI dependency. None when GEMINI_API_KEY is not configured.
    """
    settings = get_settings()
    if not settings.GEMINI_API_KEY:
        return None
    return _shared_verifier(
        settings.GEMINI_API_KEY,
        settings.GEMINI_MODEL,
        settings.VERIFICATION_MIN_CONFIDENCE,
        settings.CURRENCY_SYMBOL,
    )

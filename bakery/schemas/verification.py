# bakery/schemas/verification.py
from typing import Annotated, Literal, Union

from pydantic import ConfigDict, Field as PydanticField
from sqlmodel import SQLModel, Field


class VerificationSuccess(SQLModel):
    """
    The verifier read the document and answered every required question.

    "Success" means the model produced a usable answer, not that the
    payment is genuine: check `is_valid`, `amount_matches` and
    `confidence` for that.
    """

    model_config = ConfigDict(extra="forbid")

    kind: Literal["success"] = "success"
    is_valid: bool
    is_payment_proof: bool
    detected_amount: float | None = None
    amount_matches: bool
    detected_reference: str | None = None
    reference_matches: bool = False
    recipient: str | None = None
    confidence: float = Field(ge=0, le=100)
    issues: list[str] = []
    bank_name: str | None = None
    transaction_date: str | None = None
    document_type: str | None = None


class VerificationFailure(SQLModel):
    """
    The verifier could not produce an answer (network error, bad JSON...).
    """

    model_config = ConfigDict(extra="forbid")

    kind: Literal["failure"] = "failure"
    reason: str
    raw_response: str | None = None


VerificationOutcome = Annotated[
    Union[VerificationSuccess, VerificationFailure],
    PydanticField(discriminator="kind"),
]

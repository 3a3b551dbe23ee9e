"""
API schemas for the payment history listing.
"""

from typing import List
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from packages.payments.models.domain.payment_transaction import PaymentTransaction
from packages.payments.models.schemas.status import TransactionSummary


class PaymentHistoryResponse(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    transactions: List[TransactionSummary]
    limit: int
    offset: int

    @classmethod
    def from_domain(
        cls, transactions: List[PaymentTransaction], limit: int, offset: int
    ) -> "PaymentHistoryResponse":
        return cls(
            transactions=[TransactionSummary.from_domain(t) for t in transactions],
            limit=limit,
            offset=offset,
        )

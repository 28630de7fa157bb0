"""Validation of loosely-typed holdings feed rows into domain Holdings"""

import logging
from typing import Any, Iterable, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from safebank_router.domain.classifier import infer_category, infer_currency, license_for
from safebank_router.domain.exceptions import InvalidRecordError
from safebank_router.domain.models import CATEGORIES, Holding
from safebank_router.infrastructure.observability.metrics import skipped_records_counter
from safebank_router.utils.money import as_amount

logger = logging.getLogger(__name__)


class HoldingRecord(BaseModel):
    """One account row as delivered by a holdings feed (MyData API or generator)"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., min_length=1)
    institution: str = Field(..., min_length=1)
    license: Optional[str] = None
    type: Optional[str] = None
    currency: Optional[str] = None
    balance: Any = 0
    fx_rate: Any = Field(default=None, alias="fxRate")
    term: Any = None
    product_name: Optional[str] = None

    @field_validator("id", "institution", mode="before")
    @classmethod
    def _strip_identity(cls, value: Any) -> Any:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            value = str(value)
        return value.strip() if isinstance(value, str) else value

    @field_validator("license", "type", "currency", "product_name", mode="before")
    @classmethod
    def _stringify(cls, value: Any) -> Any:
        # Feeds sometimes send numeric codes for optional text fields
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value

    @field_validator("type")
    @classmethod
    def _known_category(cls, value: Optional[str]) -> Optional[str]:
        # Unknown categories fall back to inference rather than rejecting the row
        return value if value in CATEGORIES else None

    def to_holding(self) -> Holding:
        """Build the strict domain record, inferring absent category/currency from the product name"""
        balance = as_amount(self.balance)
        fx_rate = as_amount(self.fx_rate)
        term = as_amount(self.term)
        return Holding(
            holding_id=self.id,
            institution=self.institution,
            license=(self.license or "").strip() or license_for(self.institution),
            category=self.type or infer_category(self.product_name),
            currency=(self.currency or "").strip().upper() or infer_currency(self.product_name),
            balance=balance if balance > 0 else 0,
            fx_rate=fx_rate if fx_rate > 0 else None,
            term_months=int(term) if term > 0 else None,
            product_name=self.product_name or None,
        )


def parse_holding(row: Mapping[str, Any]) -> Holding:
    """
    Validate a single feed row.

    Raises:
        InvalidRecordError: Row is not a mapping or lacks id/institution
    """
    if not isinstance(row, Mapping):
        raise InvalidRecordError(f"Holding row is not an object: {type(row).__name__}")
    try:
        return HoldingRecord.model_validate(row).to_holding()
    except ValidationError as e:
        raise InvalidRecordError(f"Invalid holding row: {e.error_count()} error(s)") from e


def parse_holdings(rows: Iterable[Any]) -> List[Holding]:
    """Validate feed rows, skipping malformed ones instead of failing the batch"""
    holdings = []
    for position, row in enumerate(rows):
        try:
            holdings.append(parse_holding(row))
        except InvalidRecordError as e:
            skipped_records_counter.labels(source="holdings").inc()
            logger.warning(f"Skipping holding row {position}: {e}")
    return holdings

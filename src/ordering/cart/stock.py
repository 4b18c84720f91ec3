"""Stock validation for cart quantity changes.

A requested cart quantity may never exceed the units the catalogue reports
for the (product, weight option) pair. Products without a tracked stock list
are unlimited.
"""

from dataclasses import dataclass
from enum import Enum

import structlog

from ordering.catalogue.port import ProductCatalogue
from shared.errors import CollaboratorError, StockExceededError

logger = structlog.get_logger(__name__)


class StockMode(Enum):
    ADD = "add"  # requested is a delta on top of the existing quantity
    SET = "set"  # requested is the new absolute quantity


@dataclass(frozen=True)
class StockCheck:
    allowed: bool
    max_additional: int | None  # None: unlimited
    available: int | None = None


class StockValidator:
    def __init__(self, catalogue: ProductCatalogue):
        self.catalogue = catalogue

    def validate(
        self,
        product_id: str,
        weight_option: str | None,
        existing_qty: int,
        requested: int,
        mode: StockMode = StockMode.ADD,
    ) -> StockCheck:
        try:
            available = self.catalogue.available_units(product_id, weight_option)
        except Exception as exc:
            raise CollaboratorError(f"Stock lookup failed: {exc}", product_id=str(product_id)) from exc

        if available is None:
            return StockCheck(allowed=True, max_additional=None)

        prospective = existing_qty + requested if mode == StockMode.ADD else requested
        max_additional = max(0, available - existing_qty)
        return StockCheck(
            allowed=prospective <= available,
            max_additional=max_additional,
            available=available,
        )

    def ensure(
        self,
        product_id: str,
        weight_option: str | None,
        existing_qty: int,
        requested: int,
        mode: StockMode = StockMode.ADD,
    ) -> StockCheck:
        """Like ``validate`` but raises ``StockExceededError`` on rejection."""
        check = self.validate(product_id, weight_option, existing_qty, requested, mode)
        if not check.allowed:
            logger.info(
                "Stock exceeded",
                product_id=str(product_id),
                weight_option=weight_option,
                existing_qty=existing_qty,
                requested=requested,
                mode=mode.value,
                available=check.available,
            )
            raise StockExceededError(max_additional=check.max_additional, available=check.available)
        return check

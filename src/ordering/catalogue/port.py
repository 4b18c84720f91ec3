"""Product catalogue port (abstract interface).

The cart never owns product data. It asks the catalogue whether a product
exists, how it should be displayed, and how many units of each weight option
are in stock. Adapters: ``InMemoryCatalogue`` for development and tests; a
production adapter talks to the catalogue service.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class VariantStock:
    """One entry of a product's weight-vs-price list."""

    weight: str
    price: float
    quantity: int | None = None  # None: stock not tracked


@dataclass(frozen=True)
class ProductSnapshot:
    product_id: str
    title: str
    images: tuple[str, ...] = ()
    is_deleted: bool = False
    variants: tuple[VariantStock, ...] = field(default_factory=tuple)

    def variant(self, weight_option: str | None) -> VariantStock | None:
        if weight_option is None:
            return None
        return next((v for v in self.variants if v.weight == weight_option), None)

    @property
    def image(self) -> str | None:
        return self.images[0] if self.images else None


class ProductCatalogue(ABC):
    """Abstract product lookup interface."""

    @abstractmethod
    def find(self, product_id: str) -> ProductSnapshot | None:
        """Return the product, deleted or not, or None when it never existed."""
        ...

    @abstractmethod
    def find_many(self, product_ids: list[str]) -> dict[str, ProductSnapshot]:
        """Return live (not deleted) products keyed by product id."""
        ...

    def available_units(self, product_id: str, weight_option: str | None) -> int | None:
        """Units in stock for a product variant, or None when stock is not tracked."""
        product = self.find(product_id)
        if product is None or not product.variants:
            return None
        variant = product.variant(weight_option)
        if variant is None:
            return None
        return variant.quantity

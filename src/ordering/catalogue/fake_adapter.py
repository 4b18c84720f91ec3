"""In-memory product catalogue for development and testing.

Products are registered at runtime. ``fail_with`` makes every lookup raise,
which is how tests exercise the collaborator-failure path.
"""

from ordering.catalogue.port import ProductCatalogue, ProductSnapshot, VariantStock


class InMemoryCatalogue(ProductCatalogue):
    def __init__(self) -> None:
        self.products: dict[str, ProductSnapshot] = {}
        self.failure: Exception | None = None
        self.calls: list[dict] = []

    def register(
        self,
        product_id: str,
        title: str = "Product",
        images: list[str] | None = None,
        variants: list[dict] | None = None,
        is_deleted: bool = False,
    ) -> ProductSnapshot:
        """Add or replace a product.

        ``variants`` is a list of ``{"weight", "price", "quantity"}`` dicts,
        mirroring the catalogue's weight-vs-price list.
        """
        product = ProductSnapshot(
            product_id=product_id,
            title=title,
            images=tuple(images or ()),
            is_deleted=is_deleted,
            variants=tuple(
                VariantStock(weight=v["weight"], price=v.get("price", 0.0), quantity=v.get("quantity"))
                for v in (variants or [])
            ),
        )
        self.products[product_id] = product
        return product

    def fail_with(self, exc: Exception | None) -> None:
        """Make subsequent lookups raise ``exc`` (None restores normal behavior)."""
        self.failure = exc

    def _check_failure(self) -> None:
        if self.failure is not None:
            raise self.failure

    def find(self, product_id: str) -> ProductSnapshot | None:
        self.calls.append({"method": "find", "product_id": product_id})
        self._check_failure()
        return self.products.get(str(product_id))

    def find_many(self, product_ids: list[str]) -> dict[str, ProductSnapshot]:
        self.calls.append({"method": "find_many", "product_ids": list(product_ids)})
        self._check_failure()
        return {
            pid: self.products[pid]
            for pid in (str(p) for p in product_ids)
            if pid in self.products and not self.products[pid].is_deleted
        }

"""Repository for the Coupon aggregate."""

from protean.exceptions import ObjectNotFoundError

from ordering.coupon.coupon import Coupon, normalize_code
from ordering.domain import ordering


@ordering.repository(part_of=Coupon)
class CouponRepository:
    def live(self) -> list[Coupon]:
        return self._dao.query.filter(is_deleted=False).limit(None).all().items

    def by_code(self, code) -> Coupon | None:
        """The non-deleted coupon with ``code`` (case-insensitive)."""
        matches = self._dao.query.filter(code=normalize_code(code), is_deleted=False).all().items
        return matches[0] if matches else None

    def resolve(self, id_or_code) -> Coupon | None:
        """Find a live coupon by its id, falling back to its code."""
        if not id_or_code:
            return None

        try:
            coupon = self.get(str(id_or_code))
        except ObjectNotFoundError:
            coupon = None

        if coupon is not None and not coupon.is_deleted:
            return coupon
        return self.by_code(id_or_code)

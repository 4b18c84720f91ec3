"""SelectedCoupon — per-user pointer to the coupon checkout should honour.

The record mirrors the cart's applied-coupon slot: it exists exactly while
the user's cart carries a coupon. At most one record per user.
"""

from datetime import UTC, datetime

from protean.fields import DateTime, Identifier, String

from ordering.domain import ordering


@ordering.aggregate
class SelectedCoupon:
    user_id = Identifier(required=True, unique=True)
    coupon_id = String(required=True, max_length=50)
    coupon_code = String(required=True, max_length=20)
    selected_at = DateTime()


@ordering.repository(part_of=SelectedCoupon)
class SelectedCouponRepository:
    def for_user(self, user_id) -> list[SelectedCoupon]:
        return self._dao.query.filter(user_id=str(user_id)).all().items

    def bind_selection(self, user_id, coupon_id, coupon_code) -> SelectedCoupon:
        """Point the user's single selection record at a coupon (upsert)."""
        records = self.for_user(user_id)
        for stale in records[1:]:
            self._dao.delete(stale)

        if records:
            record = records[0]
            record.coupon_id = str(coupon_id)
            record.coupon_code = coupon_code
            record.selected_at = datetime.now(UTC)
        else:
            record = SelectedCoupon(
                user_id=str(user_id),
                coupon_id=str(coupon_id),
                coupon_code=coupon_code,
                selected_at=datetime.now(UTC),
            )
        self.add(record)
        return record

    def clear_for(self, user_id) -> int:
        """Delete the user's selection record(s); returns how many were removed."""
        records = self.for_user(user_id)
        for record in records:
            self._dao.delete(record)
        return len(records)

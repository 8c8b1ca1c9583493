import logging
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable

from sqlalchemy import select, func

from database.models import Review
from database.repositories.base import BaseRepository
from core.matcher.models import RatingAggregate

logger = logging.getLogger(__name__)


def _round_rating(average) -> float:
    return float(Decimal(str(average)).quantize(Decimal('0.1'), rounding=ROUND_HALF_UP))


class ReviewRepository(BaseRepository):
    """Aggregates over visible reviews."""

    def rating_aggregate(self, user_id: int) -> RatingAggregate:
        return self.rating_aggregates([user_id])[user_id]

    def rating_aggregates(self, user_ids: Iterable[int]) -> Dict[int, RatingAggregate]:
        """Batch aggregate for many reviewees; users without reviews get RatingAggregate()."""
        ids = list(user_ids)
        result = {uid: RatingAggregate() for uid in ids}
        if not ids:
            return result

        stmt = (
            select(Review.reviewee_id, func.avg(Review.rating), func.count(Review.id))
            .where(Review.reviewee_id.in_(ids), Review.is_visible.is_(True))
            .group_by(Review.reviewee_id)
        )
        for reviewee_id, average, count in self.db.execute(stmt).all():
            result[reviewee_id] = RatingAggregate(average=_round_rating(average), count=int(count))
        return result

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import InternalError
from app.models.promotions import Promotion, PromotionSlab
from app.logging.utils import get_app_logger

logger = get_app_logger("app.repository.promotions")


class PromotionsRepository:
    def __init__(self, db: Session):
        self.db = db

    def _active_clause(self, now: datetime):
        return (
            Promotion.is_active.is_(True),
            or_(Promotion.starts_at.is_(None), Promotion.starts_at <= now),
            or_(Promotion.ends_at.is_(None), Promotion.ends_at >= now),
        )

    def get_by_id(self, promotion_id: str) -> Optional[Promotion]:
        return self.db.get(Promotion, promotion_id)

    def list_all(self) -> List[Promotion]:
        query = select(Promotion).order_by(Promotion.priority.desc(), Promotion.created_at.desc())
        return list(self.db.execute(query).scalars().all())

    def find_active(self, now: datetime) -> List[Promotion]:
        """Enabled promotions whose window contains `now`, highest priority first."""
        try:
            query = (
                select(Promotion)
                .where(*self._active_clause(now))
                .order_by(Promotion.priority.desc(), Promotion.created_at.asc(), Promotion.id)
            )
            return list(self.db.execute(query).scalars().all())
        except SQLAlchemyError as e:
            logger.error(f"active_promotions_fetch_error | now={now.isoformat()} error={e}", exc_info=True)
            raise InternalError("Failed to load active promotions") from e

    def add(self, promotion: Promotion) -> Promotion:
        try:
            self.db.add(promotion)
            self.db.flush()
            return promotion
        except SQLAlchemyError as e:
            logger.error(f"promotion_save_error | name={promotion.name} error={e}", exc_info=True)
            raise InternalError("Failed to save promotion") from e

    def replace_slabs(self, promotion: Promotion, slabs: List[PromotionSlab]) -> Promotion:
        """Delete every slab of the promotion and insert the new set."""
        try:
            # delete-orphan cascade removes the old rows on flush
            promotion.slabs.clear()
            self.db.flush()
            promotion.slabs.extend(slabs)
            self.db.flush()
            return promotion
        except SQLAlchemyError as e:
            logger.error(f"promotion_slabs_replace_error | promotion_id={promotion.id} error={e}", exc_info=True)
            raise InternalError("Failed to replace promotion slabs") from e

    def count_by_status(self, now: datetime) -> Dict[str, int]:
        total = self.db.execute(select(func.count(Promotion.id))).scalar_one()
        active = self.db.execute(select(func.count(Promotion.id)).where(*self._active_clause(now))).scalar_one()
        return {"total": total, "active": active, "inactive": total - active}

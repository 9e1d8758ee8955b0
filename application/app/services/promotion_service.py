from datetime import datetime
from decimal import Decimal
from typing import Callable, List, Optional

from sqlalchemy.orm import sessionmaker

from app.connections.database import get_db_session
from app.core.constants import ErrorCode, PromotionType, SlabRuleKind
from app.core.exceptions import InvalidInputError, NotFoundError
from app.dto.promotions import (
    DiscountCalculateRequest,
    DiscountCalculateResponse,
    PromotionCreate,
    PromotionResponse,
    PromotionUpdate,
    SlabCreate,
    SlabResponse,
)
from app.models.promotions import Promotion, PromotionSlab
from app.promotions.engine import evaluate_promotion
from app.promotions.inference import infer_promotion_type
from app.promotions.snapshots import product_to_snapshot, promotion_to_snapshot
from app.promotions.type_tag import format_type_tag
from app.promotions.types import TypeTag
from app.repository.products import ProductsRepository
from app.repository.promotions import PromotionsRepository
from app.utils.datetime_helpers import ensure_utc, get_utc_now
from app.utils.money import quantize_money
from app.validations.slab_ranges import validate_ranges

# Request context
from app.middlewares.request_context import request_context

# Logger
from app.logging.utils import get_app_logger
logger = get_app_logger("app.services.promotion_service")


def promotion_to_response(promotion: Promotion) -> PromotionResponse:
    snapshot = promotion_to_snapshot(promotion)
    return PromotionResponse(
        id=promotion.id,
        name=promotion.name,
        type=infer_promotion_type(snapshot),
        type_tag=promotion.type_tag,
        priority=promotion.priority,
        is_active=promotion.is_active,
        starts_at=snapshot.starts_at,
        ends_at=snapshot.ends_at,
        slabs=[SlabResponse.model_validate(s) for s in sorted(promotion.slabs, key=lambda s: s.range_start)],
        created_at=ensure_utc(promotion.created_at),
        updated_at=ensure_utc(promotion.updated_at),
    )


def weight_slabs(slabs: List[SlabCreate]) -> List[PromotionSlab]:
    return [
        PromotionSlab(
            range_start=Decimal(slab.min_weight),
            range_end=Decimal(slab.max_weight) if slab.max_weight is not None else None,
            rule_kind=SlabRuleKind.FIXED_AMOUNT_DISCOUNT.value,
            rule_value=slab.discount_per_unit,
        )
        for slab in slabs
    ]


def single_slab(kind: SlabRuleKind, value: Decimal) -> List[PromotionSlab]:
    # unbounded slab covering every weight
    return [PromotionSlab(range_start=Decimal("0"), range_end=None, rule_kind=kind.value, rule_value=value)]


def _check_window(starts_at: Optional[datetime], ends_at: Optional[datetime]):
    starts_at, ends_at = ensure_utc(starts_at), ensure_utc(ends_at)
    if starts_at and ends_at and starts_at >= ends_at:
        raise InvalidInputError(
            "Start date must be before end date",
            errors=[{"code": ErrorCode.INVALID_DATE_RANGE, "field": "end_date", "message": "Start date must be before end date"}],
        )


class PromotionService:
    """Promotion admin flows and single-product discount preview"""

    def __init__(self, session_factory: Optional[sessionmaker] = None, clock: Callable[[], datetime] = get_utc_now):
        self.session_factory = session_factory
        self.clock = clock
        request_context.module_name = 'promotion_service'

    def _get_or_raise(self, repository: PromotionsRepository, promotion_id: str) -> Promotion:
        promotion = repository.get_by_id(promotion_id)
        if promotion is None:
            raise NotFoundError(f"Promotion {promotion_id} not found")
        return promotion

    async def create_promotion(self, data: PromotionCreate) -> PromotionResponse:
        _check_window(data.start_date, data.end_date)

        if data.type == PromotionType.WEIGHTED:
            validate_ranges(data.slabs)
            slabs = weight_slabs(data.slabs)
            tag = TypeTag(promotion_type=PromotionType.WEIGHTED)
        elif data.type == PromotionType.PERCENTAGE:
            slabs = single_slab(SlabRuleKind.PERCENTAGE_DISCOUNT, data.percentage_value)
            tag = TypeTag(promotion_type=PromotionType.PERCENTAGE, percentage_value=data.percentage_value)
        else:
            slabs = single_slab(SlabRuleKind.FIXED_AMOUNT_DISCOUNT, data.fixed_value)
            tag = TypeTag(promotion_type=PromotionType.FIXED, fixed_value=data.fixed_value)

        promotion = Promotion(
            name=data.title,
            type_tag=format_type_tag(tag),
            priority=data.priority,
            is_active=data.is_enabled,
            starts_at=ensure_utc(data.start_date),
            ends_at=ensure_utc(data.end_date),
            slabs=slabs,
        )
        with get_db_session(self.session_factory) as db:
            PromotionsRepository(db).add(promotion)
            logger.info(f"promotion_created | promotion_id={promotion.id} type={data.type.value} slabs={len(slabs)}")
            return promotion_to_response(promotion)

    async def update_promotion(self, promotion_id: str, data: PromotionUpdate) -> PromotionResponse:
        changes = data.model_dump(exclude_unset=True)
        with get_db_session(self.session_factory) as db:
            promotion = self._get_or_raise(PromotionsRepository(db), promotion_id)

            starts_at = changes["start_date"] if "start_date" in changes else promotion.starts_at
            ends_at = changes["end_date"] if "end_date" in changes else promotion.ends_at
            _check_window(starts_at, ends_at)

            if changes.get("title") is not None:
                promotion.name = changes["title"]
            if changes.get("priority") is not None:
                promotion.priority = changes["priority"]
            if "start_date" in changes:
                promotion.starts_at = ensure_utc(changes["start_date"])
            if "end_date" in changes:
                promotion.ends_at = ensure_utc(changes["end_date"])
            db.flush()

            logger.info(f"promotion_updated | promotion_id={promotion_id} fields={sorted(changes)}")
            return promotion_to_response(promotion)

    async def toggle_promotion(self, promotion_id: str, is_enabled: bool) -> PromotionResponse:
        with get_db_session(self.session_factory) as db:
            promotion = self._get_or_raise(PromotionsRepository(db), promotion_id)
            if promotion.is_active != is_enabled:
                promotion.is_active = is_enabled
                db.flush()
                logger.info(f"promotion_toggled | promotion_id={promotion_id} is_enabled={is_enabled}")
            return promotion_to_response(promotion)

    async def replace_slabs(self, promotion_id: str, slabs: List[SlabCreate]) -> PromotionResponse:
        """Swap the weight slabs of a WEIGHTED promotion in one transaction."""
        validate_ranges(slabs)
        with get_db_session(self.session_factory) as db:
            repository = PromotionsRepository(db)
            promotion = self._get_or_raise(repository, promotion_id)

            promotion_type = infer_promotion_type(promotion_to_snapshot(promotion))
            if promotion_type != PromotionType.WEIGHTED:
                raise InvalidInputError(
                    "Slabs can only be replaced on WEIGHTED promotions",
                    errors=[{"code": ErrorCode.INVALID_INPUT, "field": "slabs", "message": f"Promotion type is {promotion_type.value}"}],
                )

            repository.replace_slabs(promotion, weight_slabs(slabs))
            logger.info(f"promotion_slabs_replaced | promotion_id={promotion_id} slabs={len(slabs)}")
            return promotion_to_response(promotion)

    async def get_promotion(self, promotion_id: str) -> PromotionResponse:
        with get_db_session(self.session_factory, read_only=True) as db:
            return promotion_to_response(self._get_or_raise(PromotionsRepository(db), promotion_id))

    async def list_promotions(self) -> List[PromotionResponse]:
        with get_db_session(self.session_factory, read_only=True) as db:
            return [promotion_to_response(p) for p in PromotionsRepository(db).list_all()]

    async def list_active_promotions(self) -> List[PromotionResponse]:
        with get_db_session(self.session_factory, read_only=True) as db:
            return [promotion_to_response(p) for p in PromotionsRepository(db).find_active(ensure_utc(self.clock()))]

    async def calculate_discount(self, promotion_id: str, request: DiscountCalculateRequest) -> DiscountCalculateResponse:
        request_context.promotion_id = promotion_id
        with get_db_session(self.session_factory, read_only=True) as db:
            promotion = self._get_or_raise(PromotionsRepository(db), promotion_id)
            product = ProductsRepository(db).get_by_id(request.product_id)
            if product is None:
                raise NotFoundError(f"Product {request.product_id} not found")
            promotion_snapshot = promotion_to_snapshot(promotion)
            product_snapshot = product_to_snapshot(product)

        result = evaluate_promotion(promotion_snapshot, product_snapshot, request.quantity, ensure_utc(self.clock()))
        logger.info(f"discount_calculated | promotion_id={promotion_id} product_id={request.product_id} quantity={request.quantity} applied={result.applied} amount={result.discount_amount}")
        return DiscountCalculateResponse(
            promotion_id=promotion_id,
            product_id=request.product_id,
            quantity=request.quantity,
            promotion_type=result.promotion_type,
            discount=float(quantize_money(result.discount_amount)),
            applied=result.applied,
            reason=result.reason,
        )

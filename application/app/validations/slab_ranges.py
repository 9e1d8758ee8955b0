from typing import Dict, List, Sequence

from app.core.constants import ErrorCode
from app.core.exceptions import RangeOrderError, RangeOverlapError
from app.logging.utils import get_app_logger
logger = get_app_logger("app.validations.slab_ranges")


def _label(slab) -> str:
    end = "inf" if slab.range_end is None else slab.range_end
    return f"[{slab.range_start}-{end}]"


class SlabRangeValidator:
    """Checks a set of weight slabs for ordering and overlap.

    Works on anything exposing range_start and range_end (None = unbounded).
    Collects every violation instead of stopping at the first one.
    """

    def __init__(self, slabs: Sequence):
        self.slabs = sorted(slabs, key=lambda s: s.range_start)
        self.errors: List[Dict] = []

    def validate_order(self):
        for index, slab in enumerate(self.slabs):
            if slab.range_end is not None and slab.range_start >= slab.range_end:
                self.errors.append({
                    "code": ErrorCode.RANGE_ORDER,
                    "field": f"slabs[{index}]",
                    "message": f"Slab {_label(slab)} must start before it ends",
                })

    def validate_overlaps(self):
        for index, (current, following) in enumerate(zip(self.slabs, self.slabs[1:])):
            # an unbounded slab overlaps anything after it
            if current.range_end is None or current.range_end >= following.range_start:
                self.errors.append({
                    "code": ErrorCode.RANGE_OVERLAP,
                    "field": f"slabs[{index + 1}]",
                    "message": f"Slab ranges overlap: {_label(current)} overlaps with {_label(following)}",
                })

    def validate_all(self) -> List[Dict]:
        self.validate_overlaps()
        self.validate_order()
        return self.errors


def validate_ranges(slabs: Sequence) -> None:
    """Raise RangeOverlapError or RangeOrderError listing every violation found."""
    errors = SlabRangeValidator(slabs).validate_all()
    if not errors:
        return

    logger.warning(f"slab_range_validation_failed | slabs={len(slabs)} violations={len(errors)}")
    if any(error["code"] == ErrorCode.RANGE_OVERLAP for error in errors):
        raise RangeOverlapError("Slab ranges overlap", errors=errors)
    raise RangeOrderError("Slab ranges are not well ordered", errors=errors)

from datetime import datetime
from typing import Callable, Dict, Optional

from sqlalchemy.orm import sessionmaker

from app.connections.database import get_db_session
from app.repository.orders import OrdersRepository
from app.repository.products import ProductsRepository
from app.repository.promotions import PromotionsRepository
from app.utils.datetime_helpers import days_ago, ensure_utc, get_utc_now, start_of_day
from app.utils.money import quantize_money

# Logger
from app.logging.utils import get_app_logger
logger = get_app_logger("app.services.analytics_service")

WEEK_DAYS = 7
MONTH_DAYS = 30


class AnalyticsService:
    """Dashboard counters for orders, catalog and promotions"""

    def __init__(self, session_factory: Optional[sessionmaker] = None, clock: Callable[[], datetime] = get_utc_now):
        self.session_factory = session_factory
        self.clock = clock

    async def get_dashboard_stats(self) -> Dict:
        now = ensure_utc(self.clock())
        windows = {
            "today": start_of_day(now),
            "this_week": days_ago(now, WEEK_DAYS),
            "this_month": days_ago(now, MONTH_DAYS),
        }

        with get_db_session(self.session_factory, read_only=True) as db:
            orders_repository = OrdersRepository(db)
            total_orders, total_revenue = orders_repository.summarize()
            window_stats = {name: orders_repository.summarize(since=since) for name, since in windows.items()}
            products = ProductsRepository(db).count_by_status()
            promotions = PromotionsRepository(db).count_by_status(now)

        total_revenue = quantize_money(total_revenue)
        average = quantize_money(total_revenue / total_orders) if total_orders else quantize_money(0)
        revenue = {name: float(quantize_money(stats[1])) for name, stats in window_stats.items()}
        revenue["all_time"] = float(total_revenue)

        logger.info(f"dashboard_stats_computed | total_orders={total_orders} total_revenue={total_revenue}")
        return {
            "orders": {
                "total": total_orders,
                "today": window_stats["today"][0],
                "this_week": window_stats["this_week"][0],
                "this_month": window_stats["this_month"][0],
                "average_order_value": float(average),
            },
            "products": products,
            "promotions": promotions,
            "revenue": revenue,
        }

"""Admin overview: dashboard figures plus every admin listing."""

from __future__ import annotations

from dataclasses import dataclass

from ..api import AdminApi
from ..domain.models import Order, Product
from ..observability import get_logger

logger = get_logger("shop_client.application.admin")


@dataclass(frozen=True)
class AdminOverview:
    dashboard: dict[str, object]
    products: tuple[Product, ...]
    users: list[dict[str, object]]
    orders: tuple[Order, ...]
    logs: list[dict[str, object]]


def load_admin_overview(admin: AdminApi) -> AdminOverview:
    """Fetch everything the admin dashboard shows; any failure propagates."""
    overview = AdminOverview(
        dashboard=admin.dashboard(),
        products=admin.products(),
        users=admin.users(),
        orders=admin.orders(),
        logs=admin.logs(),
    )
    logger.info(
        "Admin overview loaded: products=%d users=%d orders=%d logs=%d",
        len(overview.products),
        len(overview.users),
        len(overview.orders),
        len(overview.logs),
    )
    return overview

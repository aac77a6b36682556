# bakery/reporting/aggregator.py
import uuid
from collections.abc import Iterable

from bakery.reporting import money
from bakery.schemas.order import OrderStatus
from bakery.schemas.report import (
    LocationRollup,
    ProductRollup,
    ReportOrder,
    StatusCounts,
    WeeklySummary,
)


class OrderValidationError(ValueError):
    """
    An order cannot be aggregated because nested data is missing or invalid.
    """

    def __init__(self, order_id: uuid.UUID, reason: str):
        self.order_id = order_id
        self.reason = reason
        super().__init__(f"Order {order_id}: {reason}")


def _validate(order: ReportOrder) -> None:
    for item in order.items:
        if item.product is None:
            raise OrderValidationError(
                order.id,
                f"line item for product {item.product_id} has no product data",
            )
        if item.quantity <= 0:
            raise OrderValidationError(
                order.id,
                f"line item for {item.product.name!r} has quantity {item.quantity}",
            )


def aggregate_orders(orders: Iterable[ReportOrder]) -> WeeklySummary:
    """
    Fold a week's orders into a WeeklySummary.

    Per order:
      - total_amount -> total_revenue and the pickup location's revenue
      - status "completed" -> completed_orders, anything else -> pending_orders
      - location keys are used verbatim (no trimming / case folding)

    Per line item:
      - revenue = price x quantity, cost = cost_price x quantity
      - profit = revenue - cost
      - quantity is added to bread_quantities, location_breakdown and
        product_summary

    Raises:
        OrderValidationError: on the first order with missing product data
        or a non-positive quantity. Nothing is returned in that case.
    """
    orders = list(orders)
    for order in orders:
        _validate(order)

    total_revenue = money.ZERO
    total_profit = money.ZERO
    total_cost = money.ZERO
    completed = 0
    status_counts = {status: 0 for status in OrderStatus}

    product_summary: dict[str, ProductRollup] = {}
    location_summary: dict[str, LocationRollup] = {}
    bread_quantities: dict[str, int] = {}
    location_breakdown: dict[str, dict[str, int]] = {}

    for order in orders:
        order_total = money.to_money(order.total_amount)
        total_revenue = money.add(total_revenue, order_total)

        status_counts[order.status] += 1
        if order.status == OrderStatus.COMPLETED:
            completed += 1

        location = location_summary.setdefault(
            order.pickup_location, LocationRollup(orders=[])
        )
        location.count += 1
        location.revenue = money.add(location.revenue, order_total)
        location.orders.append(order)

        per_location = location_breakdown.setdefault(order.pickup_location, {})

        for item in order.items:
            name = item.product.name
            quantity = item.quantity
            revenue = money.line_amount(item.price, quantity)
            cost = money.line_amount(item.product.cost_price, quantity)
            profit = money.subtract(revenue, cost)

            total_profit = money.add(total_profit, profit)
            total_cost = money.add(total_cost, cost)

            bread_quantities[name] = bread_quantities.get(name, 0) + quantity
            per_location[name] = per_location.get(name, 0) + quantity

            rollup = product_summary.setdefault(name, ProductRollup())
            rollup.quantity += quantity
            rollup.revenue = money.add(rollup.revenue, revenue)
            rollup.profit = money.add(rollup.profit, profit)
            rollup.cost = money.add(rollup.cost, cost)

    return WeeklySummary(
        total_orders=len(orders),
        total_revenue=total_revenue,
        total_profit=total_profit,
        total_cost=total_cost,
        completed_orders=completed,
        pending_orders=len(orders) - completed,
        status_counts=StatusCounts(
            pending=status_counts[OrderStatus.PENDING],
            verified=status_counts[OrderStatus.VERIFIED],
            completed=status_counts[OrderStatus.COMPLETED],
        ),
        product_summary=product_summary,
        location_summary=location_summary,
        bread_quantities=bread_quantities,
        location_breakdown=location_breakdown,
    )

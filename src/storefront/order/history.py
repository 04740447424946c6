"""Order history lookups."""

from protean.utils.globals import current_domain

from storefront.order.order import Order


def orders_for_user(user_id) -> list[Order]:
    """A user's orders, newest first."""
    orders = current_domain.repository_for(Order)._dao.query.filter(user_id=str(user_id)).all().items
    return sorted(orders, key=lambda o: o.created_at, reverse=True)


def find_order_by_checkout(checkout_id) -> Order | None:
    """The order committed for a checkout attempt, if any.

    Used to settle the outcome of a placement whose result never reached the
    caller before retrying it.
    """
    orders = current_domain.repository_for(Order)._dao.query.filter(checkout_id=str(checkout_id)).all().items
    return orders[0] if orders else None

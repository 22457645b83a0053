"""
Order and payment status transitions available to administrators
"""

from typing import Dict, List, Set
from storefront.models.order import OrderStatus, PaymentMethod, PaymentStatus

class OrderStateMachine:
    """
    Manages valid admin order status transitions

    CONFIRMED is never an admin target: it is reached through payment
    fulfillment or cash-on-delivery order creation.
    """

    def __init__(self):
        self.transitions: Dict[OrderStatus, Set[OrderStatus]] = {
            OrderStatus.PENDING: {
                OrderStatus.CANCELLED
            },
            OrderStatus.CONFIRMED: {
                OrderStatus.SHIPPED,
                OrderStatus.CANCELLED
            },
            OrderStatus.SHIPPED: {
                OrderStatus.FULFILLED
            },
            OrderStatus.FULFILLED: set(),
            OrderStatus.CANCELLED: set()
        }

    def can_transition(
        self,
        current_status: OrderStatus,
        new_status: OrderStatus
    ) -> bool:
        """
        Check if transition is valid

        Args:
            current_status: Current order status
            new_status: Desired new status

        Returns:
            True if transition is allowed
        """
        return new_status in self.transitions.get(current_status, set())

    def get_valid_transitions(self, current_status: OrderStatus) -> List[OrderStatus]:
        return sorted(self.transitions.get(current_status, set()), key=lambda s: s.value)

    def is_terminal_state(self, status: OrderStatus) -> bool:
        return len(self.transitions.get(status, set())) == 0

    def is_cancellable(self, status: OrderStatus) -> bool:
        return OrderStatus.CANCELLED in self.transitions.get(status, set())

class PaymentStateMachine:
    """Manual payment status changes; card payments settle only through the gateway"""

    def can_transition(
        self,
        method: PaymentMethod,
        current_status: PaymentStatus,
        new_status: PaymentStatus
    ) -> bool:
        if current_status == PaymentStatus.PENDING and new_status == PaymentStatus.PAID:
            # Cash collected on delivery
            return method == PaymentMethod.COD
        if current_status == PaymentStatus.PAID and new_status == PaymentStatus.REFUNDED:
            return True
        return False

"""
Order lifecycle

Statuses and the rules for moving between them. Nothing here touches the
store: functions take the current order document and return the `$set`
update to apply, or raise.

Admins may set any status in ADMIN_STATUSES. Under the default "permissive"
policy that includes moving backwards (completed -> pending); the
"forward_only" policy restricts admins to FORWARD_TRANSITIONS. Customers may
only cancel their own orders while they are pending.
"""
import secrets
import time
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, FrozenSet, Optional, Tuple

from errors import AuthorizationError, ValidationError


class OrderStatus(str, Enum):
    PENDING = "pending"
    RECEIVED = "received"
    COMPLETED = "completed"
    REJECTED = "rejected"
    CANCELLED = "cancelled"


INITIAL_STATUS = OrderStatus.PENDING

TERMINAL_STATUSES: FrozenSet[OrderStatus] = frozenset([
    OrderStatus.COMPLETED,
    OrderStatus.REJECTED,
    OrderStatus.CANCELLED,
])

# Statuses an admin may assign
ADMIN_STATUSES: FrozenSet[OrderStatus] = frozenset([
    OrderStatus.PENDING,
    OrderStatus.RECEIVED,
    OrderStatus.COMPLETED,
    OrderStatus.REJECTED,
])

# Admin edges allowed under the forward_only policy
FORWARD_TRANSITIONS: FrozenSet[Tuple[OrderStatus, OrderStatus]] = frozenset([
    (OrderStatus.PENDING, OrderStatus.RECEIVED),
    (OrderStatus.PENDING, OrderStatus.REJECTED),
    (OrderStatus.RECEIVED, OrderStatus.COMPLETED),
    (OrderStatus.RECEIVED, OrderStatus.REJECTED),
])

POLICY_PERMISSIVE = "permissive"
POLICY_FORWARD_ONLY = "forward_only"
POLICIES = (POLICY_PERMISSIVE, POLICY_FORWARD_ONLY)

INVALID_STATUS_MESSAGE = "Invalid status. Must be: pending, received, completed, or rejected"
NOT_OWNER_MESSAGE = "You can only cancel your own orders"
NOT_PENDING_MESSAGE = "You can only cancel orders that are still pending"
INVALID_ACTION_MESSAGE = "Invalid action"

ACTION_CANCEL = "cancel"


def check_policy(policy: str) -> str:
    if policy not in POLICIES:
        raise ValueError(f"Unknown order status policy: {policy}")
    return policy


def new_order_id() -> str:
    return f"ORD-{int(time.time() * 1000)}-{secrets.token_hex(3).upper()}"


def parse_status(value: Any) -> Optional[OrderStatus]:
    try:
        return OrderStatus(value)
    except ValueError:
        return None


def is_terminal(status: Any) -> bool:
    return parse_status(status) in TERMINAL_STATUSES


def is_admin_transition_allowed(current: Any, target: Any, policy: str = POLICY_PERMISSIVE) -> bool:
    target_status = parse_status(target)
    if target_status not in ADMIN_STATUSES:
        return False
    if policy == POLICY_PERMISSIVE:
        return True
    if policy == POLICY_FORWARD_ONLY:
        current_status = parse_status(current)
        return current_status == target_status or (current_status, target_status) in FORWARD_TRANSITIONS
    raise ValueError(f"Unknown order status policy: {policy}")


def admin_update(order: Dict[str, Any], status: Optional[str] = None, admin_notes: Optional[str] = None,
                 policy: str = POLICY_PERMISSIVE, at: Optional[datetime] = None) -> Dict[str, Any]:
    """Build the update for an admin edit of `order`; status and notes are both optional."""
    updates: Dict[str, Any] = {"updated_at": at or datetime.now(timezone.utc)}

    if status:
        if parse_status(status) not in ADMIN_STATUSES:
            raise ValidationError(INVALID_STATUS_MESSAGE)
        if not is_admin_transition_allowed(order.get("status"), status, policy):
            raise ValidationError(f"Cannot move order from {order.get('status')} to {status}")
        updates["status"] = status

    if admin_notes is not None:
        updates["admin_notes"] = admin_notes

    return updates


def cancel(order: Dict[str, Any], user_id: str, at: Optional[datetime] = None) -> Dict[str, Any]:
    """Build the update for a customer cancelling `order`."""
    if order.get("user_id") != user_id:
        raise AuthorizationError(NOT_OWNER_MESSAGE)
    if order.get("status") != OrderStatus.PENDING.value:
        raise ValidationError(NOT_PENDING_MESSAGE)
    return {
        "status": OrderStatus.CANCELLED.value,
        "updated_at": at or datetime.now(timezone.utc),
    }


def customer_update(order: Dict[str, Any], user_id: str, action: Optional[str]) -> Dict[str, Any]:
    if order.get("user_id") != user_id:
        raise AuthorizationError(NOT_OWNER_MESSAGE)
    if action == ACTION_CANCEL:
        return cancel(order, user_id)
    raise ValidationError(INVALID_ACTION_MESSAGE)

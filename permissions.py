"""
Authorization gate

Every request passes through `authorize`, installed as an application-wide
dependency. It looks the matched route up in ROUTE_POLICIES once and either
lets the request through (public routes), requires a valid credential, or
requires a credential whose role satisfies the route's predicate.

Handlers that need the caller declare `identity: Identity = Depends(authorize)`;
FastAPI caches the dependency so the gate still runs only once per request.
"""
import logging
from typing import Callable, Dict, Optional, Tuple

from fastapi import Request

from errors import AuthenticationError, AuthorizationError
from schemas import ROLE_ADMIN, ROLE_CUSTOMER
from security import Identity, identity_from_request

logger = logging.getLogger(__name__)

PUBLIC = "public"
AUTHENTICATED = "authenticated"

UNAUTHORIZED_MESSAGE = "Unauthorized. Please login."

# Role gates: customer routes are open to admins as well
ROLE_PREDICATES: Dict[str, Callable[[str], bool]] = {
    ROLE_CUSTOMER: lambda role: role in (ROLE_CUSTOMER, ROLE_ADMIN),
    ROLE_ADMIN: lambda role: role == ROLE_ADMIN,
}

FORBIDDEN_MESSAGES = {
    ROLE_CUSTOMER: "Forbidden. Customer access required.",
    ROLE_ADMIN: "Forbidden. Admin access required.",
}

# (method, route path) -> PUBLIC | AUTHENTICATED | role name
# Routes missing from the table are public.
ROUTE_POLICIES: Dict[Tuple[str, str], str] = {
    ("GET", "/api/auth/me"): AUTHENTICATED,
    ("GET", "/api/profile"): ROLE_CUSTOMER,
    ("PUT", "/api/profile"): ROLE_CUSTOMER,
    ("POST", "/api/profile/change-password"): AUTHENTICATED,
    ("GET", "/api/orders"): AUTHENTICATED,
    ("POST", "/api/orders"): ROLE_CUSTOMER,
    ("PATCH", "/api/orders"): AUTHENTICATED,
    ("POST", "/api/reviews"): AUTHENTICATED,
    ("DELETE", "/api/reviews"): AUTHENTICATED,
    ("GET", "/api/reviews/check-purchase"): AUTHENTICATED,
    ("GET", "/api/admin/users"): ROLE_ADMIN,
    ("PATCH", "/api/admin/users"): ROLE_ADMIN,
    ("GET", "/api/admin/stats"): ROLE_ADMIN,
    ("POST", "/api/admin/products"): ROLE_ADMIN,
    ("PUT", "/api/admin/products"): ROLE_ADMIN,
    ("DELETE", "/api/admin/products"): ROLE_ADMIN,
    ("POST", "/api/admin/qr-generate"): ROLE_ADMIN,
    ("POST", "/api/admin/setup-indexes"): ROLE_ADMIN,
    ("POST", "/api/team/reset"): ROLE_ADMIN,
}


def require_auth(request: Request) -> Identity:
    identity = identity_from_request(request)
    if identity is None:
        raise AuthenticationError(UNAUTHORIZED_MESSAGE)
    request.state.identity = identity
    return identity


def check_role(identity: Identity, role: str):
    predicate = ROLE_PREDICATES.get(role)
    if predicate is None:
        raise ValueError(f"Unknown role gate: {role}")
    if not predicate(identity.role):
        logger.info("Denied %s (%s) on %s gate", identity.email, identity.role, role)
        raise AuthorizationError(FORBIDDEN_MESSAGES[role])


def require_role(role: str) -> Callable[[Request], Identity]:
    """Dependency factory: 401 without a valid credential, 403 without the role."""
    if role not in ROLE_PREDICATES:
        raise ValueError(f"Unknown role gate: {role}")

    def dependency(request: Request) -> Identity:
        identity = require_auth(request)
        check_role(identity, role)
        return identity

    return dependency


def policy_for(method: str, path: str) -> str:
    return ROUTE_POLICIES.get((method.upper(), path), PUBLIC)


def authorize(request: Request) -> Optional[Identity]:
    route = request.scope.get("route")
    path = getattr(route, "path", request.url.path)
    policy = policy_for(request.method, path)

    if policy == PUBLIC:
        identity = identity_from_request(request)
        request.state.identity = identity
        return identity

    identity = require_auth(request)
    if policy != AUTHENTICATED:
        check_role(identity, policy)
    return identity

from typing import Optional

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel, Field

import config
from cart import CartSession, cart_item_from_product, new_guest_token
from database import get_db
from permissions import authorize
from schemas import CamelModel
from security import Identity
from store_routes import find_product

router = APIRouter(prefix="/api/cart")

GUEST_COOKIE_MAX_AGE = 60 * 60 * 24 * 30


class CartAddRequest(CamelModel):
    product_id: str = Field(..., alias="productId")
    quantity: int = 1


class CartQuantityRequest(BaseModel):
    quantity: int


def cart_session(request: Request, response: Response,
                 identity: Optional[Identity] = Depends(authorize)) -> CartSession:
    token = request.cookies.get(config.CART_COOKIE_NAME)
    if not token:
        token = new_guest_token()
        response.set_cookie(
            key=config.CART_COOKIE_NAME,
            value=token,
            max_age=GUEST_COOKIE_MAX_AGE,
            path="/",
            httponly=True,
            secure=config.COOKIE_SECURE,
            samesite="lax",
        )
    session = CartSession(get_db()["cart"], guest_token=token)
    if identity is not None:
        session.login(identity.user_id)
    return session


@router.get("")
def get_cart(session: CartSession = Depends(cart_session)):
    return session.summary()


@router.post("/items")
def add_item(req: CartAddRequest, session: CartSession = Depends(cart_session)):
    product = find_product(req.product_id, {"image": 0})
    session.add_item(cart_item_from_product(product, req.quantity))
    return session.summary()


@router.patch("/items/{product_id}")
def update_item(product_id: str, req: CartQuantityRequest, session: CartSession = Depends(cart_session)):
    session.update_quantity(product_id, req.quantity)
    return session.summary()


@router.delete("/items/{product_id}")
def remove_item(product_id: str, session: CartSession = Depends(cart_session)):
    session.remove_item(product_id)
    return session.summary()


@router.delete("")
def clear_cart(session: CartSession = Depends(cart_session)):
    session.clear()
    return session.summary()

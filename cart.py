"""
Cart sessions

A CartSession is bound to one cart key: "user:<id>" for a signed-in caller,
"guest:<token>" otherwise. Logging in or out switches the key explicitly;
carts are never merged, so a guest cart stays where it was left.
"""
import secrets
from typing import Any, Dict, List, Optional

from errors import NotFoundError, ValidationError
from schemas import Cart, CartItem

GUEST_PREFIX = "guest:"
USER_PREFIX = "user:"


def user_key(user_id: str) -> str:
    return USER_PREFIX + str(user_id)


def guest_key(token: str) -> str:
    return GUEST_PREFIX + token


def new_guest_token() -> str:
    return secrets.token_urlsafe(16)


class CartSession:
    def __init__(self, collection, guest_token: str, user_id: Optional[str] = None):
        self.collection = collection
        self.guest_token = guest_token
        self.user_id = user_id

    @property
    def key(self) -> str:
        if self.user_id:
            return user_key(self.user_id)
        return guest_key(self.guest_token)

    @property
    def is_guest(self) -> bool:
        return not self.user_id

    # Session events

    def login(self, user_id: str):
        self.user_id = str(user_id)

    def logout(self):
        self.user_id = None

    # Persistence

    def _load(self) -> Cart:
        doc = self.collection.find_one({"key": self.key})
        if not doc:
            return Cart(key=self.key)
        return Cart(key=doc["key"], items=doc.get("items", []))

    def _save(self, cart: Cart) -> Cart:
        self.collection.update_one(
            {"key": cart.key},
            {"$set": {"items": [i.model_dump() for i in cart.items]}},
            upsert=True,
        )
        return cart

    # Item operations

    def items(self) -> List[CartItem]:
        return self._load().items

    def add_item(self, item: CartItem) -> Cart:
        cart = self._load()
        for existing in cart.items:
            if existing.product_id == item.product_id:
                existing.quantity += item.quantity
                break
        else:
            cart.items.append(item)
        return self._save(cart)

    def update_quantity(self, product_id: str, quantity: int) -> Cart:
        if quantity <= 0:
            return self.remove_item(product_id)
        cart = self._load()
        for existing in cart.items:
            if existing.product_id == product_id:
                existing.quantity = quantity
                return self._save(cart)
        raise NotFoundError("Item not in cart")

    def remove_item(self, product_id: str) -> Cart:
        cart = self._load()
        cart.items = [i for i in cart.items if i.product_id != product_id]
        return self._save(cart)

    def clear(self) -> Cart:
        return self._save(Cart(key=self.key))

    def total(self) -> float:
        return round(sum(i.price * i.quantity for i in self.items()), 2)

    def item_count(self) -> int:
        return sum(i.quantity for i in self.items())

    def summary(self) -> Dict[str, Any]:
        items = self.items()
        return {
            "key": self.key,
            "guest": self.is_guest,
            "items": [i.model_dump() for i in items],
            "total": round(sum(i.price * i.quantity for i in items), 2),
            "count": sum(i.quantity for i in items),
        }


def cart_item_from_product(product: Dict[str, Any], quantity: int) -> CartItem:
    if quantity < 1:
        raise ValidationError("Quantity must be at least 1")
    return CartItem(
        product_id=str(product["_id"]),
        name=product["name"],
        price=float(product["price"]),
        quantity=quantity,
    )

from __future__ import annotations

"""
Library example: a book inventory keyed by title.

Public functions (all take the host Env first):

    initialize(env) -> None
    add_book(env, title, author, year, price=0.0, quantity=1) -> Record
    get_book(env, title) -> Record
    remove_book(env, title) -> Record
    list_books(env) -> list[Record]
    book_count(env) -> int
    books_by_author(env, author) -> list[Record]
    sell(env, title, n=1) -> Record           InvalidState if stock would go negative
    restock(env, title, n) -> Record
    apply_discount(env, title, percent) -> Record

Empty titles are stored as "Untitled", empty authors as "Unknown", and
negative prices or quantities as 0.
"""

from typing import Final, List

from recstore.core.schema import FieldSpec, RecordSchema
from recstore.core.table import Record
from recstore.errors import InvalidState
from recstore.runtime.context import Env
from recstore.store import RecordStore

UNTITLED: Final[str] = "Untitled"
UNKNOWN_AUTHOR: Final[str] = "Unknown"

BOOK = RecordSchema(
    "book",
    [
        FieldSpec("title", "text", placeholder=UNTITLED),
        FieldSpec("author", "text", placeholder=UNKNOWN_AUTHOR),
        FieldSpec("year", "int"),
        FieldSpec("price", "amount"),
        FieldSpec("quantity", "count", default=1),
    ],
    key="title",
)

STORE: Final[RecordStore] = RecordStore(BOOK, "library")


def initialize(env: Env) -> None:
    STORE.initialize(env)


def add_book(
    env: Env,
    title: str,
    author: str,
    year: int,
    price: float = 0.0,
    quantity: int = 1,
) -> Record:
    return STORE.add(env, title=title, author=author, year=year, price=price, quantity=quantity)


def get_book(env: Env, title: str) -> Record:
    return STORE.find_by_key(env, title)


def remove_book(env: Env, title: str) -> Record:
    return STORE.remove_by_key(env, title)


def list_books(env: Env) -> List[Record]:
    return STORE.list(env)


def book_count(env: Env) -> int:
    return STORE.count(env)


def books_by_author(env: Env, author: str) -> List[Record]:
    return STORE.find_where(env, lambda r: r["author"] == author)


def sell(env: Env, title: str, n: int = 1) -> Record:
    """Reduce stock by n; selling more than is on the shelf fails with InvalidState."""
    if n <= 0:
        raise InvalidState("sell count must be positive", field="n", value=n)
    return STORE.adjust(env, title, lambda f: {**f, "quantity": f["quantity"] - n})


def restock(env: Env, title: str, n: int) -> Record:
    if n <= 0:
        raise InvalidState("restock count must be positive", field="n", value=n)
    return STORE.adjust(env, title, lambda f: {**f, "quantity": f["quantity"] + n})


def apply_discount(env: Env, title: str, percent: float) -> Record:
    if not 0 <= percent <= 100:
        raise InvalidState("discount must be between 0 and 100 percent", field="percent", value=percent)
    return STORE.adjust(env, title, lambda f: {**f, "price": round(f["price"] * (100 - percent) / 100, 2)})


__all__ = [
    "BOOK",
    "STORE",
    "UNTITLED",
    "UNKNOWN_AUTHOR",
    "initialize",
    "add_book",
    "get_book",
    "remove_book",
    "list_books",
    "book_count",
    "books_by_author",
    "sell",
    "restock",
    "apply_discount",
]

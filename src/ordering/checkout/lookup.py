"""Product lookup port and its catalogue-backed adapter.

Lookups return ``Found`` or ``NotFound`` instead of raising, so callers
have to decide what a missing product means for them.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from decimal import Decimal

from protean.exceptions import ObjectNotFoundError


@dataclass(frozen=True)
class Product:
    """A catalogue product as seen by checkout: identity and current price."""

    product_id: str
    price: Decimal


@dataclass(frozen=True)
class Found:
    product: Product


@dataclass(frozen=True)
class NotFound:
    product_id: str


LookupResult = Found | NotFound


class ProductLookup(ABC):
    """Resolves product ids to their current price."""

    @abstractmethod
    def find(self, product_id: str) -> LookupResult:
        """Return the product's current price, or NotFound."""
        ...


class CatalogueProductLookup(ProductLookup):
    """Reads the ``CatalogueProduct`` projection through its repository."""

    def __init__(self, repository) -> None:
        self.repository = repository

    def find(self, product_id: str) -> LookupResult:
        try:
            record = self.repository.get(str(product_id))
        except ObjectNotFoundError:
            return NotFound(product_id=str(product_id))
        return Found(Product(product_id=str(record.product_id), price=Decimal(record.price)))

import logging
import math
from typing import Any, Dict, Iterable, List, NamedTuple, Optional

from api import ProductService
from errors import ApiError

logger = logging.getLogger(__name__)

PRODUCTS_PER_PAGE = 8
SORT_OPTIONS = ("default", "price-asc", "price-desc", "rating", "name")


class Page(NamedTuple):
    items: List[Dict[str, Any]]
    total: int
    page: int
    pages: int


def _overlaps(values: Optional[Iterable[str]], wanted: Iterable[str]) -> bool:
    return any(v in wanted for v in values or ())


class CatalogProvider:
    """The full product list, fetched once and replaced wholesale on refresh().

    A failed refresh sets `error` and keeps whatever was loaded before.
    """

    def __init__(self, products: ProductService, autoload: bool = True):
        self.service = products
        self.products: List[Dict[str, Any]] = []
        self.loading = False
        self.error: Optional[str] = None
        if autoload:
            self.refresh()

    def refresh(self):
        self.loading = True
        self.error = None
        try:
            self.products = self.service.list()
        except ApiError as e:
            logger.error("Failed to fetch products: %s", e)
            self.error = e.message
        finally:
            self.loading = False

    def get(self, product_id: str) -> Optional[Dict[str, Any]]:
        for product in self.products:
            if product["id"] == product_id:
                return product
        return None

    def categories(self) -> List[str]:
        return sorted({p["category"] for p in self.products if p.get("category")})

    def browse(self, categories: Iterable[str] = (), brands: Iterable[str] = (),
               colors: Iterable[str] = (), sizes: Iterable[str] = (),
               min_price: float = 0, max_price: Optional[float] = None,
               search: Optional[str] = None, sort: str = "default",
               page: int = 1, per_page: int = PRODUCTS_PER_PAGE) -> Page:
        if sort not in SORT_OPTIONS:
            raise ValueError(f"Unknown sort option: {sort}")
        categories, brands, colors, sizes = set(categories), set(brands), set(colors), set(sizes)
        needle = search.strip().lower() if search else ""

        matches = []
        for p in self.products:
            if categories and p.get("category") not in categories:
                continue
            if brands and p.get("brand") not in brands:
                continue
            if colors and not _overlaps(p.get("color"), colors):
                continue
            if sizes and not _overlaps(p.get("size"), sizes):
                continue
            if p["price"] < min_price or (max_price is not None and p["price"] > max_price):
                continue
            if needle and needle not in p.get("name", "").lower():
                continue
            matches.append(p)

        # sorted() is stable, so "default" keeps fetch order
        if sort == "price-asc":
            matches = sorted(matches, key=lambda p: p["price"])
        elif sort == "price-desc":
            matches = sorted(matches, key=lambda p: p["price"], reverse=True)
        elif sort == "rating":
            matches = sorted(matches, key=lambda p: p.get("rating") or 0, reverse=True)
        elif sort == "name":
            matches = sorted(matches, key=lambda p: p.get("name", "").lower())

        pages = math.ceil(len(matches) / per_page) if per_page else 0
        page = max(page, 1)
        start = (page - 1) * per_page
        return Page(matches[start:start + per_page], len(matches), page, pages)

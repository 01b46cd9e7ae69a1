"""Liste sayfalama yardımcıları."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Any, Sequence

PAGE_SIZES = (10, 20, 50)


@dataclass
class Page:
    items: list[Any] = field(default_factory=list)
    page: int = 1
    per_page: int = 10
    total_items: int = 0

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total_items / self.per_page)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def first_index(self) -> int:
        """1 tabanlı ilk kayıt numarası ("11-20 / 45" gösterimi için)."""
        return (self.page - 1) * self.per_page + 1 if self.items else 0

    @property
    def last_index(self) -> int:
        return min(self.page * self.per_page, self.total_items) if self.items else 0


def paginate(items: Sequence[Any], page: int = 1, per_page: int = 10) -> Page:
    """Bir listenin istenen sayfasını döndürür; son sayfadan sonrası boştur."""
    if page < 1:
        raise ValueError(f"Sayfa numarası 1'den küçük olamaz: {page}")
    if per_page < 1:
        raise ValueError(f"Sayfa boyutu pozitif olmalı: {per_page}")

    start = (page - 1) * per_page
    return Page(
        items=list(items[start:start + per_page]),
        page=page,
        per_page=per_page,
        total_items=len(items),
    )


def page_window(current: int, total_pages: int, size: int = 5) -> list[int]:
    """Mevcut sayfayı ortalayan en fazla `size` sayfalık numara penceresi."""
    if total_pages <= 0:
        return []
    size = min(size, total_pages)
    current = min(max(current, 1), total_pages)
    start = current - size // 2
    start = max(1, min(start, total_pages - size + 1))
    return list(range(start, start + size))

"""
Page planning for the segmented sweep.

Responsibility: choose a power-of-two page size and the range of aligned
page indices covering [val_min, val_max]. No sieving here.

Page pg covers the integers [pg << page_exp, (pg + 1) << page_exp).
"""

from typing import Iterator, NamedTuple


DEFAULT_PAGE_EXP = 20
MAX_PAGE_EXP = 32


class PagePlan(NamedTuple):
    page_exp: int
    page_size: int
    first_page: int
    last_page: int

    @property
    def num_pages(self) -> int:
        return self.last_page - self.first_page + 1

    def page_start(self, pg: int) -> int:
        return pg << self.page_exp

    def pages(self) -> Iterator[int]:
        """Page indices in ascending order."""
        return iter(range(self.first_page, self.last_page + 1))


def choose_page_exp(span: int, max_page_exp: int = DEFAULT_PAGE_EXP) -> int:
    """
    Pick the page size exponent for a range of width `span` (max - min).

    Ranges narrower than the cap get the smallest power of two >= span,
    never less than 2**1.
    """
    if not 1 <= max_page_exp <= MAX_PAGE_EXP:
        raise ValueError(f"max_page_exp must be in [1, {MAX_PAGE_EXP}], got {max_page_exp}")
    if span >= (1 << max_page_exp):
        return max_page_exp
    # bit_length of span - 1 is the exponent of the next power of two >= span.
    return (span - 1).bit_length() if span > 2 else 1


def plan_pages(val_min: int, val_max: int, max_page_exp: int = DEFAULT_PAGE_EXP) -> PagePlan:
    """
    Partition [val_min, val_max] into aligned pages.

    Parameters
    ----------
    val_min, val_max : int
        Normalised range, val_min <= val_max.
    max_page_exp : int
        Cap on the page size exponent (default 20, i.e. 2**20 bits).

    Returns
    -------
    PagePlan
    """
    page_exp = choose_page_exp(val_max - val_min, max_page_exp)
    return PagePlan(
        page_exp=page_exp,
        page_size=1 << page_exp,
        first_page=val_min >> page_exp,
        last_page=val_max >> page_exp,
    )

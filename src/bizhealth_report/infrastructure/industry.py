"""Industry multiple lookups used by the valuation engine."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple

DEFAULT_REVENUE_MULTIPLE = 2.5


@dataclass(frozen=True)
class IndustryMultiples:
    revenue: float
    ebitda: float
    pe: float


# Average trading multiples per industry label as shown on the listing form
INDUSTRY_MULTIPLIERS: Dict[str, IndustryMultiples] = {
    "Technology - Software": IndustryMultiples(revenue=8.0, ebitda=25.0, pe=30.0),
    "Technology - Hardware": IndustryMultiples(revenue=4.0, ebitda=15.0, pe=20.0),
    "Healthcare - Services": IndustryMultiples(revenue=5.0, ebitda=18.0, pe=25.0),
    "Healthcare - Pharmaceuticals": IndustryMultiples(revenue=7.0, ebitda=22.0, pe=28.0),
    "Financial Services": IndustryMultiples(revenue=3.5, ebitda=12.0, pe=15.0),
    "E-commerce": IndustryMultiples(revenue=4.5, ebitda=18.0, pe=22.0),
    "Manufacturing": IndustryMultiples(revenue=2.0, ebitda=9.0, pe=14.0),
    "Retail": IndustryMultiples(revenue=1.2, ebitda=8.0, pe=12.0),
    "Food & Beverage": IndustryMultiples(revenue=2.5, ebitda=10.0, pe=16.0),
    "Real Estate": IndustryMultiples(revenue=4.0, ebitda=12.0, pe=18.0),
    "Energy": IndustryMultiples(revenue=2.5, ebitda=8.0, pe=11.0),
    "Transportation": IndustryMultiples(revenue=2.0, ebitda=9.0, pe=13.0),
    "Media & Entertainment": IndustryMultiples(revenue=4.5, ebitda=13.0, pe=17.0),
    "Education": IndustryMultiples(revenue=3.5, ebitda=12.0, pe=19.0),
    "Construction": IndustryMultiples(revenue=1.2, ebitda=7.0, pe=11.0),
    "Telecommunications": IndustryMultiples(revenue=2.5, ebitda=9.0, pe=14.0),
    "Professional Services": IndustryMultiples(revenue=3.5, ebitda=12.0, pe=16.0),
    "Restaurant & Hospitality": IndustryMultiples(revenue=1.5, ebitda=6.0, pe=12.0),
    "Automotive": IndustryMultiples(revenue=0.8, ebitda=6.0, pe=9.0),
    "Agriculture": IndustryMultiples(revenue=1.2, ebitda=8.0, pe=11.0),
    "Other": IndustryMultiples(revenue=2.5, ebitda=10.0, pe=15.0),
}

# Keyword -> revenue multiple, first substring hit wins
REVENUE_MULTIPLE_KEYWORDS: Tuple[Tuple[str, float], ...] = (
    ("technology", 4.5),
    ("software", 5.0),
    ("saas", 6.0),
    ("e-commerce", 3.0),
    ("retail", 1.5),
    ("restaurant", 2.0),
    ("manufacturing", 2.5),
    ("healthcare", 3.5),
    ("consulting", 2.0),
    ("real estate", 2.0),
    ("finance", 3.0),
    ("education", 2.5),
    ("media", 2.0),
    ("construction", 1.5),
)


class IndustryMultipleService:
    """Resolve revenue, EBITDA and P/E multiples for a free-text industry name."""

    def __init__(
        self,
        table: Optional[Dict[str, IndustryMultiples]] = None,
        keywords: Tuple[Tuple[str, float], ...] = REVENUE_MULTIPLE_KEYWORDS,
        default: float = DEFAULT_REVENUE_MULTIPLE,
    ) -> None:
        table = INDUSTRY_MULTIPLIERS if table is None else table
        self._table = {name.lower(): multiples for name, multiples in table.items()}
        self._keywords = keywords
        self._default = default

    def multiples_for(self, industry: Optional[str]) -> Optional[IndustryMultiples]:
        if not industry:
            return None
        return self._table.get(industry.strip().lower())

    def revenue_multiple(self, industry: Optional[str]) -> float:
        """Case-insensitive substring match over the keyword table."""
        name = (industry or "").lower()
        for keyword, multiple in self._keywords:
            if keyword in name:
                return multiple
        return self._default

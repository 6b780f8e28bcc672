"""Social security contributions for the general employment regime."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from fiscalticket.backend.config.dataset import ContributionSide, SocialSecurityConfig


@dataclass(frozen=True, slots=True)
class SocialContributionBreakdown:
    """Contribution owed by one side of the payroll, itemised by concept."""

    side: ContributionSide
    gross: float
    base: float
    rate: float
    components: Mapping[str, float]

    @property
    def capped(self) -> bool:
        return self.gross > self.base

    @property
    def total(self) -> float:
        return sum(self.components.values())


def contribution_base(annual_gross: float, max_annual_base: float) -> float:
    """Return the contribution base after applying the annual cap."""

    if annual_gross <= 0:
        return 0.0
    return min(annual_gross, max_annual_base)


def calculate_contribution(annual_gross: float, rate: float, max_annual_base: float) -> float:
    """Return ``rate`` applied to the capped contribution base."""

    return contribution_base(annual_gross, max_annual_base) * rate


def contribution_breakdown(
    annual_gross: float,
    side: ContributionSide | str,
    config: SocialSecurityConfig,
) -> SocialContributionBreakdown:
    """Itemise the contribution of ``side`` on the capped base."""

    resolved = ContributionSide(side)
    table = config.table(resolved)
    base = contribution_base(annual_gross, config.max_annual_base)
    components = {name: base * rate for name, rate in table.components.items()}

    return SocialContributionBreakdown(
        side=resolved,
        gross=max(annual_gross, 0.0),
        base=base,
        rate=table.rate,
        components=components,
    )


__all__ = [
    "SocialContributionBreakdown",
    "calculate_contribution",
    "contribution_base",
    "contribution_breakdown",
]

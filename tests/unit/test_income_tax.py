"""Unit tests for the income tax (IRPF) calculator."""

from __future__ import annotations

import pytest

from fiscalticket.backend.app.services.calculators import (
    TaxpayerProfile,
    calculate_income_tax,
    effective_income_tax_rate,
    personal_family_minimum,
    work_income_reduction,
)
from fiscalticket.backend.config.dataset import FiscalDataset, Regime


def _profile(gross: float, jurisdiction: str = "madrid", **kwargs) -> TaxpayerProfile:
    return TaxpayerProfile(gross_annual_salary=gross, jurisdiction_id=jurisdiction, **kwargs)


@pytest.mark.parametrize(
    ("net_income", "expected"),
    [
        (10_000, 7_302.0),
        (14_852, 7_302.0),
        (16_000, 5_293.0),
        (17_673.52, 2_364.34),
        (18_000, 1_992.1528),
        (19_747.5, 0.0),
        (20_000, 0.0),
    ],
)
def test_work_income_reduction_taper(
    dataset: FiscalDataset, net_income: float, expected: float
) -> None:
    config = dataset.income_tax.work_income_reduction

    assert work_income_reduction(net_income, 0.0, config) == pytest.approx(expected, abs=0.01)


def test_work_income_reduction_excluded_by_other_income(dataset: FiscalDataset) -> None:
    config = dataset.income_tax.work_income_reduction

    assert work_income_reduction(12_000, 6_500, config) == 7_302.0
    assert work_income_reduction(12_000, 6_500.01, config) == 0.0


def test_personal_minimum_is_graduated_by_child_order(dataset: FiscalDataset) -> None:
    config = dataset.income_tax.minimums

    assert personal_family_minimum(0, 0, config) == 5_550
    assert personal_family_minimum(1, 0, config) == 7_950
    assert personal_family_minimum(4, 0, config) == 19_150
    assert personal_family_minimum(4, 0, config) != 5_550 + 4 * 2_400
    # Children beyond the fourth reuse the last amount.
    assert personal_family_minimum(5, 0, config) == 23_650
    assert personal_family_minimum(2, 1, config) == 5_550 + 2_400 + 2_700 + 2_920


def test_common_regime_adds_national_and_regional_scales(dataset: FiscalDataset) -> None:
    result = calculate_income_tax(_profile(30_000), dataset)

    assert result.jurisdiction_found
    assert result.regime is Regime.COMMON
    assert result.social_security_deduction == pytest.approx(1_944.0)
    assert result.net_work_income == pytest.approx(26_056.0)
    assert result.work_reduction == 0.0
    assert result.personal_minimum == 5_550
    assert result.taxable_base == pytest.approx(20_506.0)
    assert result.national_tax == pytest.approx(2_158.65)
    assert result.regional_tax == pytest.approx(1_931.70193)
    assert result.total_tax == pytest.approx(4_090.35193)
    assert result.effective_rate == pytest.approx(4_090.35193 / 30_000)
    assert set(result.tranches) == {"national", "regional"}


def test_foral_regime_uses_unified_scale_only(dataset: FiscalDataset) -> None:
    result = calculate_income_tax(_profile(30_000, "navarra"), dataset)

    assert result.regime is Regime.FORAL
    assert result.regional_tax == 0.0
    assert result.national_tax == pytest.approx(4_550.68)
    assert set(result.tranches) == {"unified"}


def test_unknown_jurisdiction_falls_back_to_national_scale(dataset: FiscalDataset) -> None:
    result = calculate_income_tax(_profile(30_000, "atlantis"), dataset)

    assert not result.jurisdiction_found
    assert result.regional_tax == 0.0
    assert result.total_tax == pytest.approx(2_158.65)


@pytest.mark.parametrize("gross", [0, -10_000])
def test_non_positive_salary_has_zero_rate(dataset: FiscalDataset, gross: float) -> None:
    result = calculate_income_tax(_profile(gross), dataset)

    assert result.total_tax == 0.0
    assert result.effective_rate == 0.0


def test_low_salary_is_fully_covered_by_reduction_and_minimum(dataset: FiscalDataset) -> None:
    result = calculate_income_tax(_profile(15_000), dataset)

    assert result.work_reduction == 7_302.0
    assert result.taxable_base == 0.0
    assert result.total_tax == 0.0


def test_children_lower_the_tax(dataset: FiscalDataset) -> None:
    without = calculate_income_tax(_profile(45_000), dataset)
    with_children = calculate_income_tax(
        _profile(45_000, children=2, children_under_three=1), dataset
    )

    assert with_children.total_tax < without.total_tax


@pytest.mark.parametrize("jurisdiction", ["madrid", "cataluna", "navarra", "pais_vasco", "atlantis"])
def test_tax_and_rate_are_monotonic_in_gross(dataset: FiscalDataset, jurisdiction: str) -> None:
    previous_tax = -1.0
    previous_rate = -1.0
    for gross in range(0, 400_001, 2_500):
        result = calculate_income_tax(_profile(float(gross), jurisdiction), dataset)
        assert result.total_tax >= previous_tax - 1e-9
        assert result.effective_rate >= previous_rate - 1e-9
        previous_tax = result.total_tax
        previous_rate = result.effective_rate


@pytest.mark.parametrize("jurisdiction", ["madrid", "cataluna", "navarra", "pais_vasco", "atlantis"])
def test_tax_and_rate_strictly_increase_across_salary_levels(
    dataset: FiscalDataset, jurisdiction: str
) -> None:
    results = [
        calculate_income_tax(_profile(float(gross), jurisdiction), dataset)
        for gross in (20_000, 40_000, 60_000, 100_000)
    ]

    for lower, higher in zip(results, results[1:]):
        assert higher.total_tax > lower.total_tax
        assert higher.effective_rate > lower.effective_rate


@pytest.mark.parametrize("jurisdiction", ["madrid", "valencia", "navarra", "pais_vasco"])
def test_effective_rate_stays_below_top_marginal_rate(
    dataset: FiscalDataset, jurisdiction: str
) -> None:
    entry = dataset.get_jurisdiction(jurisdiction)
    assert entry is not None
    top = entry.brackets[-1].rate
    if not entry.is_unified:
        top += dataset.income_tax.national_brackets[-1].rate

    for gross in (1_000, 30_000, 120_000, 1_000_000, 50_000_000):
        rate = effective_income_tax_rate(float(gross), _profile(0.0), jurisdiction, dataset)
        assert 0.0 <= rate < top


def test_effective_rate_helper_matches_full_computation(dataset: FiscalDataset) -> None:
    profile = _profile(0.0, "andalucia", children=1)
    rate = effective_income_tax_rate(52_000, profile, "cataluna", dataset)
    expected = calculate_income_tax(
        TaxpayerProfile(52_000, "cataluna", children=1), dataset
    ).effective_rate

    assert rate == expected

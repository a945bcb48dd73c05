import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from homeopt.jurisdictions import BOSTON, SAN_FRANCISCO, SEATTLE
from homeopt.models import FinancingStructure, MarketAssumptions
from homeopt.presets import FEDERAL_MORTGAGE_DEBT_CEILING, REFI_CLOSING_RATE
from homeopt.scenario import (
    allocate_investment_interest,
    build_financing,
    calc_scenario,
    cash_flow_impact,
    compare_scenarios,
    deductible_interest,
    remaining_cash,
)


def _example_financing(**kw):
    args = dict(home_price=2_000_000, cash_down=400_000, mortgage_rate=0.065, loan_term=30, gross_income=1_500_000)
    args.update(kw)
    return FinancingStructure(**args)


def _market(**kw):
    args = dict(appreciation_rate=0.05, investment_return=0.08, monthly_rent=8_000)
    args.update(kw)
    return MarketAssumptions(**args)


def _be(result):
    return result.break_even_year if result.break_even_year is not None else 31


def test_example_twenty_percent_down_breaks_even():
    res = calc_scenario(_example_financing(), _market(), SAN_FRANCISCO)
    assert res.break_even_year is not None
    assert 1 <= res.break_even_year <= 30
    assert res.owner_wealth20 > 0
    assert len(res.yearly) == 30
    assert res.mortgage_loan == pytest.approx(1_600_000)
    assert res.acquisition_debt == pytest.approx(1_600_000)
    assert res.yearly[res.break_even_year - 1].break_even


def test_heloc_dropped_when_mortgage_needed():
    res = calc_scenario(_example_financing(heloc_amount=600_000), _market(), SAN_FRANCISCO)
    assert res.heloc_amount == 0
    assert res.heloc_interest_annual == 0
    assert res.heloc_zeroed
    f = build_financing(1_000_000, 0.20, heloc_pct=0.30)
    assert f.heloc_amount == 0


def test_heloc_kept_on_cash_purchase():
    f = build_financing(1_000_000, 1.0, heloc_pct=0.30, gross_income=400_000)
    assert f.cash_down == 1_000_000
    res = calc_scenario(f, _market(monthly_rent=4_000), SAN_FRANCISCO)
    assert res.heloc_amount == pytest.approx(300_000)
    assert not res.needs_mortgage
    assert res.amort.schedule == []


def test_federal_deduction_respects_debt_ceiling():
    res = calc_scenario(_example_financing(), _market(), SAN_FRANCISCO)
    bound = res.mortgage_interest_annual * FEDERAL_MORTGAGE_DEBT_CEILING / res.acquisition_debt
    assert res.federal_deductible_mortgage_interest <= bound + 1e-6
    assert res.state_deductible_mortgage_interest == pytest.approx(
        res.mortgage_interest_annual * 1_000_000 / 1_600_000
    )
    assert res.non_deductible_mortgage_interest > 0


def test_deductible_interest_helper():
    assert deductible_interest(10_000, 500_000, 750_000) == 10_000
    assert deductible_interest(10_000, 1_500_000, 750_000) == pytest.approx(5_000)
    assert deductible_interest(10_000, 0, 750_000) == 0.0


def test_investment_pool_is_shared_in_order():
    assert allocate_investment_interest(10_000, [6_000, 3_000, 4_000]) == [6_000, 3_000, 1_000]
    assert allocate_investment_interest(0, [1, 2]) == [0, 0]
    assert sum(allocate_investment_interest(5_000, [9_000, 9_000, 9_000])) == 5_000


def test_investment_deduction_never_exceeds_income():
    f = build_financing(1_000_000, 1.0, stock_portfolio=1_000_000, margin_pct=0.30, heloc_pct=0.50, gross_income=500_000)
    res = calc_scenario(f, _market(), SAN_FRANCISCO)
    total = res.deductible_margin_interest + res.deductible_cash_out_interest + res.deductible_heloc_interest
    assert total <= res.total_deductible_investment_income + 1e-9
    assert res.investment_interest_deduction == pytest.approx(total)
    # margin is served first from the pool
    assert res.deductible_margin_interest == pytest.approx(min(res.margin_interest_annual, res.total_deductible_investment_income))


def test_cash_out_refi_structure():
    f = _example_financing(cash_out_refi_amount=200_000, cash_out_refi_rate=0.07)
    res = calc_scenario(f, _market(), SAN_FRANCISCO)
    assert res.is_cash_out_refi
    assert res.mortgage_loan == 0
    assert res.total_refi_loan == pytest.approx(1_800_000)
    assert res.acquisition_debt == pytest.approx(1_600_000)
    assert res.cash_out_refi_closing_costs == pytest.approx(1_800_000 * REFI_CLOSING_RATE)
    plain = calc_scenario(_example_financing(), _market(), SAN_FRANCISCO)
    assert res.tx_costs.buy == pytest.approx(plain.tx_costs.buy + 1_000 + res.cash_out_refi_closing_costs)
    assert res.cash_out_interest_annual == pytest.approx(200_000 * 0.07)


def test_pmi_applied_on_small_down_payment():
    res = calc_scenario(_example_financing(cash_down=200_000), _market(), SAN_FRANCISCO)
    assert res.pmi.monthly > 0
    assert res.monthly_payment == pytest.approx(res.amort.monthly_payment + res.pmi.monthly)


def test_cash_purchase_has_no_loan():
    res = calc_scenario(FinancingStructure(home_price=800_000, cash_down=800_000), _market(), SEATTLE)
    assert res.monthly_payment == 0
    assert res.pmi.monthly == 0
    assert res.mortgage_interest_annual == 0
    assert all(y.loan_balance == 0 for y in res.yearly)


def test_break_even_earlier_with_more_appreciation():
    slow = calc_scenario(_example_financing(), _market(appreciation_rate=0.04), SAN_FRANCISCO)
    fast = calc_scenario(_example_financing(), _market(appreciation_rate=0.06), SAN_FRANCISCO)
    assert _be(fast) <= _be(slow)
    assert fast.owner_wealth20 > slow.owner_wealth20


def test_break_even_later_with_higher_investment_return():
    low = calc_scenario(_example_financing(), _market(investment_return=0.06), SAN_FRANCISCO)
    high = calc_scenario(_example_financing(), _market(investment_return=0.09), SAN_FRANCISCO)
    assert _be(low) <= _be(high)
    assert high.renter_wealth20 > low.renter_wealth20


def test_never_breaking_even_reports_sensitivity():
    res = calc_scenario(_example_financing(), _market(appreciation_rate=0.0, monthly_rent=3_000), SAN_FRANCISCO)
    assert res.break_even_year is None
    assert res.break_even_label == "Never"
    assert res.sensitivity.appreciation_needed is not None
    assert res.sensitivity.appreciation_needed > 0
    assert res.sensitivity.rent_needed > 3_000


def test_assessment_cap_savings():
    res = calc_scenario(_example_financing(), _market(), SAN_FRANCISCO)
    assert res.yearly[0].assessment_cap_savings > 0
    assert res.yearly[9].assessment_cap_savings > res.yearly[0].assessment_cap_savings
    sea = calc_scenario(_example_financing(), _market(), SEATTLE)
    assert all(y.assessment_cap_savings == 0 for y in sea.yearly)


def test_niit_reduces_renter_return():
    res = calc_scenario(_example_financing(), _market(), SAN_FRANCISCO)
    assert res.sensitivity.subject_to_niit
    assert res.sensitivity.after_niit_return == pytest.approx(0.08 * (1 - 0.038 * 0.5))
    modest = calc_scenario(_example_financing(gross_income=150_000), _market(), SAN_FRANCISCO)
    assert modest.sensitivity.after_niit_return == pytest.approx(0.08)


def test_state_without_itemizing_gets_no_state_benefit():
    res = calc_scenario(_example_financing(), _market(), BOSTON)
    assert res.state_mortgage_tax_benefit == 0
    assert not res.should_itemize_state
    assert res.jurisdiction == "BOS"


def test_salt_cap_limits_federal_itemization():
    res = calc_scenario(_example_financing(), _market(), SAN_FRANCISCO)
    assert res.salt_capped == 10_000
    assert res.salt_lost > 0


def test_remaining_cash_and_cash_flow():
    res = calc_scenario(_example_financing(), _market(), SAN_FRANCISCO)
    assert remaining_cash(res, 1_000_000) == pytest.approx(600_000 - res.tx_costs.buy)
    tight = cash_flow_impact(res, 8_000, 14_000)
    assert tight.show_warning
    roomy = cash_flow_impact(res, 8_000, 60_000)
    assert not roomy.show_warning
    assert roomy.cash_flow_change == pytest.approx(8_000 - roomy.net_monthly_housing)


def test_compare_scenarios_keeps_names():
    out = compare_scenarios(
        {"twenty": _example_financing(), "forty": _example_financing(cash_down=800_000)},
        _market(),
        SAN_FRANCISCO,
    )
    assert set(out) == {"twenty", "forty"}
    assert out["forty"].mortgage_loan < out["twenty"].mortgage_loan


def test_short_loan_stops_interest_after_payoff():
    market = _market()
    financed = calc_scenario(_example_financing(loan_term=15, gross_income=600_000), market, SAN_FRANCISCO)
    cash = calc_scenario(
        _example_financing(cash_down=2_000_000, gross_income=600_000), market, SAN_FRANCISCO
    )
    assert financed.yearly[14].yearly_interest > 0
    assert financed.yearly[14].yearly_principal > 0
    for y in financed.yearly[15:]:
        assert y.loan_balance == pytest.approx(0.0, abs=1e-3)
        assert y.yearly_interest == 0
        assert y.yearly_principal == 0
    year20, cash20 = financed.yearly[19], cash.yearly[19]
    assert year20.tax_benefit == pytest.approx(cash20.tax_benefit)
    assert year20.owner_outflow == pytest.approx(cash20.owner_outflow)


def test_heloc_allowed_when_margin_covers_price():
    f = build_financing(1_000_000, 0.20, stock_portfolio=4_000_000, margin_pct=0.30, heloc_pct=0.30)
    assert f.cash_down == 0
    assert f.margin_loan == pytest.approx(1_200_000)
    assert f.heloc_amount == pytest.approx(300_000)
    res = calc_scenario(f, _market(), SAN_FRANCISCO)
    assert res.heloc_amount == pytest.approx(300_000)
    assert not res.heloc_zeroed

import os
import sys

import pytest

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from homeopt.calculators import (
    amortize,
    buy_costs,
    calc_pmi,
    compute_ltv,
    mansion_tax,
    monthly_payment,
    sell_costs,
    transaction_costs,
)
from homeopt.jurisdictions import NEW_YORK_CITY, SAN_FRANCISCO


def test_known_payment():
    assert monthly_payment(1_000_000, 0.065, 30) == pytest.approx(6320.68, abs=0.01)


def test_zero_rate_and_no_loan():
    assert monthly_payment(360_000, 0.0, 30) == pytest.approx(1000.0)
    assert monthly_payment(0, 0.065, 30) == 0.0
    assert monthly_payment(-5, 0.065, 30) == 0.0


def test_amortization_conserves_principal():
    principal = 1_600_000
    sched = amortize(principal, 0.065, 30)
    assert len(sched.schedule) == 30
    last = sched.schedule[-1]
    assert last.balance == pytest.approx(0.0, abs=1e-3)
    assert last.principal_paid == pytest.approx(principal, abs=1e-3)
    assert sum(r.yearly_principal for r in sched.schedule) == pytest.approx(principal, abs=1e-3)
    assert sched.total_interest == pytest.approx(sched.monthly_payment * 360 - principal, abs=1e-3)
    assert sum(r.yearly_interest for r in sched.schedule) == pytest.approx(sched.total_interest)


def test_amortization_balances_decline():
    sched = amortize(500_000, 0.07, 15)
    balances = [r.balance for r in sched.schedule]
    assert balances == sorted(balances, reverse=True)


def test_empty_schedule_for_cash_purchase():
    sched = amortize(0, 0.065, 30)
    assert sched.schedule == []
    assert sched.monthly_payment == 0.0
    assert sched.row_for_year(5) is None


def test_row_for_year_clamps_after_term():
    sched = amortize(100_000, 0.05, 10)
    assert sched.row_for_year(25).year == 10


def test_ltv():
    assert compute_ltv(1_000_000, 900_000) == pytest.approx(0.9)
    assert compute_ltv(0, 100) == 0.0


def test_pmi_only_above_eighty_percent():
    assert calc_pmi(800_000, 1_000_000).monthly == 0.0
    pmi = calc_pmi(900_000, 1_000_000)
    assert pmi.monthly == pytest.approx(900_000 * 0.005 / 12)
    assert 0 < pmi.years < 30
    assert pmi.total == pytest.approx(pmi.monthly * pmi.years * 12)


def test_pmi_burn_off_slower_at_higher_rate():
    low = calc_pmi(950_000, 1_000_000, reference_rate=0.03)
    high = calc_pmi(950_000, 1_000_000, reference_rate=0.09)
    assert low.years < high.years


def test_sf_transaction_costs():
    # transfer 6,800 + closing 15,000 + loan fee 4,000 + title 3,000 + flat 2,500
    assert buy_costs(1_000_000, 800_000, SAN_FRANCISCO) == pytest.approx(31_300)
    # commission 50,000 + transfer 6,800 + closing 10,000 + misc 10,000
    assert sell_costs(1_000_000, SAN_FRANCISCO) == pytest.approx(76_800)
    tx = transaction_costs(1_000_000, 800_000, SAN_FRANCISCO)
    assert tx.total == pytest.approx(tx.buy + tx.sell)
    assert tx.mansion_tax == 0.0


def test_title_and_sell_fee_caps():
    buy = buy_costs(10_000_000, 0, SAN_FRANCISCO)
    assert buy == pytest.approx(68_000 + 150_000 + 15_000 + 2_500)
    sell = sell_costs(10_000_000, SAN_FRANCISCO)
    assert sell == pytest.approx(500_000 + 68_000 + 100_000 + 50_000)


def test_mansion_tax_threshold():
    assert mansion_tax(1_000_000, NEW_YORK_CITY) == 0.0
    assert mansion_tax(2_000_000, NEW_YORK_CITY) == pytest.approx(20_000)
    assert mansion_tax(5_000_000, SAN_FRANCISCO) == 0.0
    tx = transaction_costs(2_000_000, 1_600_000, NEW_YORK_CITY)
    assert tx.mansion_tax == pytest.approx(20_000)

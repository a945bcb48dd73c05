import os
import sys

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

from homeopt.affordability import affordability_matrix, calc_affordability
from homeopt.frames import (
    AFFORDABILITY_COLUMNS,
    YEARLY_COLUMNS,
    affordability_frame,
    matrix_frame,
    rankings_frame,
    schedule_frame,
    yearly_frame,
)
from homeopt.models import AffordabilityRequest, FinancingStructure, MarketAssumptions, OptimizationRequest
from homeopt.optimizer import run_optimization
from homeopt.scenario import calc_scenario

MARKET = MarketAssumptions(monthly_rent=6_000)


def test_schedule_and_yearly_frames():
    res = calc_scenario(FinancingStructure(home_price=1_500_000, cash_down=300_000, gross_income=500_000), MARKET)
    sched = schedule_frame(res.amort)
    assert len(sched) == 30
    assert sched["Balance"].is_monotonic_decreasing
    yearly = yearly_frame(res)
    assert list(yearly.columns) == YEARLY_COLUMNS
    assert yearly["Year"].tolist() == list(range(1, 31))


def test_empty_schedule_frame_keeps_columns():
    res = calc_scenario(FinancingStructure(home_price=500_000, cash_down=500_000), MARKET)
    df = schedule_frame(res.amort)
    assert df.empty
    assert "Balance" in df.columns


def test_rankings_frame():
    req = OptimizationRequest(home_price=1_000_000, total_savings=600_000, min_buffer=50_000, gross_income=300_000)
    res = run_optimization(req, MARKET)
    df = rankings_frame(res.top_five)
    assert df["Rank"].tolist() == list(range(1, len(res.top_five) + 1))
    assert df["Score"].is_monotonic_decreasing
    assert rankings_frame([]).empty


def test_affordability_frames():
    req = AffordabilityRequest(gross_income=250_000, total_savings=400_000, min_buffer=50_000)
    df = affordability_frame(calc_affordability(req))
    assert list(df.columns) == AFFORDABILITY_COLUMNS
    assert len(df) == 5
    pivot = matrix_frame(affordability_matrix(req))
    assert pivot.shape == (4, 5)
    assert list(pivot.index) == [0.25, 0.30, 0.35, 0.40]

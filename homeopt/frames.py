"""Tabular views of engine results for charts and exports."""
from __future__ import annotations

from typing import Dict, Iterable

import pandas as pd

from .models import AffordabilityResult, AmortizationSchedule, RankedScenario, ScenarioResult

SCHEDULE_COLUMNS = ["Year", "Balance", "InterestPaid", "PrincipalPaid", "YearlyInterest", "YearlyPrincipal"]
YEARLY_COLUMNS = [
    "Year", "HomeValue", "LoanBalance", "Equity", "OwnerWealth", "RenterWealth", "Advantage",
    "BreakEven", "PropertyTax", "AssessmentCapSavings", "TaxBenefit", "OwnerOutflow", "Rent", "CostDiff",
]
RANKING_COLUMNS = [
    "Rank", "Strategy", "Description", "RiskLevel", "DownPct", "Remaining", "BreakEven",
    "Advantage20", "BlendedRate", "MonthlyPayment", "Score",
]
AFFORDABILITY_COLUMNS = [
    "DownPct", "MaxPrice", "MaxPriceByIncome", "MaxPriceBySavings", "LimitedBy", "MonthlyPITI",
    "PI", "Tax", "Insurance", "PMI", "HOA", "CashNeeded", "Remaining", "TakeHomePct", "VsRent",
    "BufferMonths",
]


def schedule_frame(amort: AmortizationSchedule) -> pd.DataFrame:
    if not amort.schedule:
        return pd.DataFrame(columns=SCHEDULE_COLUMNS)
    return pd.DataFrame(
        [
            [r.year, r.balance, r.interest_paid, r.principal_paid, r.yearly_interest, r.yearly_principal]
            for r in amort.schedule
        ],
        columns=SCHEDULE_COLUMNS,
    )


def yearly_frame(result: ScenarioResult) -> pd.DataFrame:
    """One row per projected year, owner against renter."""
    rows = [
        [
            y.year, y.home_value, y.loan_balance, y.equity, y.owner_wealth, y.renter_wealth,
            y.advantage, y.break_even, y.property_tax, y.assessment_cap_savings, y.tax_benefit,
            y.owner_outflow, y.yearly_rent, y.cost_diff,
        ]
        for y in result.yearly
    ]
    return pd.DataFrame(rows, columns=YEARLY_COLUMNS)


def rankings_frame(ranked: Iterable[RankedScenario]) -> pd.DataFrame:
    rows = []
    for i, r in enumerate(ranked, start=1):
        s = r.scenario
        rows.append(
            [
                i, r.strategy, r.strategy_desc, r.risk_level, r.dp_pct, r.remaining,
                s.break_even_label, r.advantage20, s.blended_effective_rate, s.monthly_payment, r.score,
            ]
        )
    return pd.DataFrame(rows, columns=RANKING_COLUMNS)


def affordability_frame(result: AffordabilityResult) -> pd.DataFrame:
    rows = []
    for o in result.options:
        b = o.monthly_breakdown
        rows.append(
            [
                o.dp_pct, o.max_price, o.max_price_by_income, o.max_price_by_savings, o.limited_by,
                o.monthly_piti, b.pi, b.tax, b.insurance, b.pmi, b.hoa, o.cash_needed, o.remaining,
                o.take_home_pct, o.vs_rent, o.buffer_months,
            ]
        )
    return pd.DataFrame(rows, columns=AFFORDABILITY_COLUMNS)


def matrix_frame(matrix: Dict[float, AffordabilityResult]) -> pd.DataFrame:
    """Max price pivoted with comfort levels as rows and down payments as columns."""
    frames = []
    for level, result in matrix.items():
        df = affordability_frame(result)
        df.insert(0, "ComfortPct", level)
        frames.append(df)
    if not frames:
        return pd.DataFrame()
    long = pd.concat(frames, ignore_index=True)
    return long.pivot(index="ComfortPct", columns="DownPct", values="MaxPrice")

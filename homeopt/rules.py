from __future__ import annotations
from typing import Literal, List, Dict, Any, Optional
from pydantic import BaseModel, Field

from .models import ScenarioResult
from .scenario import cash_flow_impact, remaining_cash
from .presets import CASH_FLOW_WARNING_PCT, FEDERAL_MORTGAGE_DEBT_CEILING, MAX_MARGIN_PCT


class RuleResult(BaseModel):
    code: str
    severity: Literal["info", "warn", "critical"]
    message: str
    context: Dict[str, Any] = Field(default_factory=dict)


def evaluate_rules(
    result: ScenarioResult,
    gross_income: Optional[float] = None,
    total_savings: Optional[float] = None,
    min_buffer: Optional[float] = None,
    stock_portfolio: Optional[float] = None,
    monthly_take_home: Optional[float] = None,
) -> List[RuleResult]:
    """Advisory checks on a computed scenario.

    Checks that need information outside the scenario run only when the
    caller supplies it.
    """

    res: List[RuleResult] = []

    if result.break_even_year is None:
        res.append(
            RuleResult(
                code="NEVER_BREAKS_EVEN",
                severity="warn",
                message="Renting and investing stays ahead for the full 30 years.",
                context={
                    "appreciation_needed": result.sensitivity.appreciation_needed,
                    "rent_needed": result.sensitivity.rent_needed,
                },
            )
        )

    if result.salt_lost > 0:
        res.append(
            RuleResult(
                code="SALT_CAP_LOST",
                severity="info",
                message="State and property taxes exceed the $10,000 SALT cap.",
                context={"lost": result.salt_lost},
            )
        )

    if result.acquisition_debt > FEDERAL_MORTGAGE_DEBT_CEILING:
        res.append(
            RuleResult(
                code="JUMBO_ACQUISITION_DEBT",
                severity="info",
                message="Only part of the mortgage interest is federally deductible.",
                context={
                    "acquisition_debt": result.acquisition_debt,
                    "ceiling": FEDERAL_MORTGAGE_DEBT_CEILING,
                    "non_deductible": result.non_deductible_mortgage_interest,
                },
            )
        )

    if result.pmi.monthly > 0:
        res.append(
            RuleResult(
                code="PMI_ACTIVE",
                severity="info",
                message="Loan is above 80% LTV; PMI applies until the balance falls to 78%.",
                context={"monthly": result.pmi.monthly, "years": result.pmi.years},
            )
        )

    if result.heloc_zeroed:
        res.append(
            RuleResult(
                code="HELOC_ZEROED",
                severity="warn",
                message="HELOC ignored: it requires a home owned without a first mortgage.",
                context={"requested": result.requested_heloc},
            )
        )

    capped = (
        result.non_deductible_margin_interest
        + result.non_deductible_cash_out_interest
        + result.non_deductible_heloc_interest
    )
    if capped > 0:
        res.append(
            RuleResult(
                code="INVESTMENT_INTEREST_CAPPED",
                severity="info",
                message="Investment interest exceeds investment income; the excess is not deductible.",
                context={
                    "non_deductible": capped,
                    "investment_income": result.total_deductible_investment_income,
                },
            )
        )

    if stock_portfolio and result.margin_loan > stock_portfolio * MAX_MARGIN_PCT:
        res.append(
            RuleResult(
                code="MARGIN_HIGH",
                severity="critical",
                message="Margin loan exceeds 30% of the portfolio.",
                context={"margin_loan": result.margin_loan, "portfolio": stock_portfolio},
            )
        )

    if total_savings is not None and min_buffer is not None:
        remaining = remaining_cash(result, total_savings)
        if remaining < min_buffer:
            res.append(
                RuleResult(
                    code="BUFFER_THIN",
                    severity="critical",
                    message="Cash left after closing is below the minimum buffer.",
                    context={"remaining": remaining, "buffer": min_buffer},
                )
            )

    if monthly_take_home is not None and monthly_take_home > 0:
        left = cash_flow_impact(result, 0.0, monthly_take_home).remaining_pct
        if left < CASH_FLOW_WARNING_PCT:
            res.append(
                RuleResult(
                    code="HOUSING_SHARE_HIGH",
                    severity="warn",
                    message="Less than 20% of take-home pay remains after housing costs.",
                    context={"remaining_pct": left},
                )
            )

    if gross_income is not None and gross_income <= 0:
        res.append(
            RuleResult(
                code="NO_INCOME",
                severity="critical",
                message="No income entered; tax benefits and affordability are not meaningful.",
            )
        )

    return res


def has_blocking(res: List[RuleResult]) -> bool:
    return any(r.severity == "critical" for r in res)

"""Maximum purchase price per down-payment tier.

Two constraints bind each tier: monthly housing cost against a debt-to-income
ceiling (optionally tightened to a share of take-home pay), and cash needed at
closing against savings above the buffer. The lower price wins.
"""
from __future__ import annotations

import logging
import math
from typing import Dict, Iterable

from .calculators import buy_costs, monthly_payment, payment_factor
from .jurisdictions import DEFAULT_JURISDICTION, JurisdictionProfile
from .models import (
    AffordabilityOption,
    AffordabilityRequest,
    AffordabilityResult,
    MonthlyBreakdown,
)
from .presets import (
    AFFORDABILITY_DP_PCTS,
    COMFORT_LEVELS,
    DTI_CEILING,
    FLAT_BUY_FEE,
    LOAN_FEE_RATE,
    PMI_LTV_THRESHOLD,
    TITLE_FEE_RATE,
)

logger = logging.getLogger(__name__)


def _max_price_by_savings(available: float, dp_pct: float, loan_frac: float, profile: JurisdictionProfile) -> float:
    closing_factor = (
        profile.buyer_closing_rate + profile.transfer_tax_rate + loan_frac * LOAN_FEE_RATE + TITLE_FEE_RATE
    )
    cash_per_dollar = dp_pct + closing_factor
    if cash_per_dollar <= 0:
        return 0.0
    price = (available - FLAT_BUY_FEE) / cash_per_dollar
    mt = profile.mansion_tax
    if mt is not None and price > mt.threshold:
        # Above the threshold the whole price is taxed; prices just over it
        # cost more cash than the threshold price itself.
        price = max((available - FLAT_BUY_FEE) / (cash_per_dollar + mt.rate), mt.threshold)
    return price


def _option(
    request: AffordabilityRequest,
    dp_pct: float,
    housing_budget: float,
    monthly_take_home: float,
    profile: JurisdictionProfile,
) -> AffordabilityOption:
    r = request
    if housing_budget <= 0 or r.gross_income <= 0:
        return AffordabilityOption(dp_pct=dp_pct, target_take_home_pct=r.target_take_home_pct)

    loan_frac = 1 - dp_pct
    has_pmi = loan_frac > PMI_LTV_THRESHOLD
    pi_factor = payment_factor(r.mortgage_rate, r.loan_term) * loan_frac if loan_frac > 0 else 0.0
    per_dollar = (
        pi_factor
        + profile.property_tax_rate / 12
        + profile.insurance_rate / 12
        + (loan_frac * profile.pmi_rate / 12 if has_pmi else 0.0)
    )
    fixed_monthly = r.monthly_hoa + profile.parcel_tax / 12
    by_income = (housing_budget - fixed_monthly) / per_dollar if per_dollar > 0 else 0.0
    by_savings = _max_price_by_savings(r.total_savings - r.min_buffer, dp_pct, loan_frac, profile)

    limited_by = "income" if by_income <= by_savings else "savings"
    price = max(0, math.floor(min(by_income, by_savings)))

    loan = price * loan_frac
    breakdown = MonthlyBreakdown(
        pi=monthly_payment(loan, r.mortgage_rate, r.loan_term),
        tax=(price * profile.property_tax_rate + (profile.parcel_tax if price > 0 else 0.0)) / 12,
        insurance=price * profile.insurance_rate / 12,
        pmi=loan * profile.pmi_rate / 12 if has_pmi else 0.0,
        hoa=r.monthly_hoa,
    )
    piti = breakdown.pi + breakdown.tax + breakdown.insurance + breakdown.pmi + breakdown.hoa
    cash_needed = price * dp_pct + buy_costs(price, loan, profile) if price > 0 else 0.0
    remaining = r.total_savings - cash_needed

    return AffordabilityOption(
        dp_pct=dp_pct,
        max_price=price,
        max_price_by_income=math.floor(max(0.0, by_income)),
        max_price_by_savings=math.floor(max(0.0, by_savings)),
        monthly_piti=piti,
        monthly_breakdown=breakdown,
        cash_needed=cash_needed,
        remaining=remaining,
        limited_by=limited_by,
        take_home_pct=piti / monthly_take_home if monthly_take_home > 0 else 0.0,
        vs_rent=piti - r.monthly_rent,
        buffer_months=remaining / piti if piti > 0 else 0.0,
        target_take_home_pct=r.target_take_home_pct,
    )


def calc_affordability(
    request: AffordabilityRequest,
    profile: JurisdictionProfile = DEFAULT_JURISDICTION,
    dp_pcts: Iterable[float] = AFFORDABILITY_DP_PCTS,
) -> AffordabilityResult:
    """Solve the largest affordable price for each down-payment tier.

    Zero income or a non-positive housing budget yields all-zero tiers rather
    than an error.
    """

    r = request
    monthly_take_home = r.gross_income * (1 - r.effective_tax_rate) / 12
    dti_max = r.gross_income * DTI_CEILING / 12 - r.monthly_other_debt
    if r.target_take_home_pct is not None:
        housing_budget = min(r.target_take_home_pct * monthly_take_home, dti_max)
    else:
        housing_budget = dti_max

    options = [_option(r, dp, housing_budget, monthly_take_home, profile) for dp in dp_pcts]
    logger.debug(
        "affordability income=%.0f budget=%.0f prices=%s",
        r.gross_income,
        housing_budget,
        [o.max_price for o in options],
    )
    return AffordabilityResult(options=options, monthly_take_home=monthly_take_home)


def affordability_matrix(
    request: AffordabilityRequest,
    comfort_levels: Iterable[float] = COMFORT_LEVELS,
    profile: JurisdictionProfile = DEFAULT_JURISDICTION,
) -> Dict[float, AffordabilityResult]:
    """Re-run :func:`calc_affordability` at each take-home comfort target."""

    return {
        level: calc_affordability(request.model_copy(update={"target_take_home_pct": level}), profile)
        for level in comfort_levels
    }

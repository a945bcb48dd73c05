"""Income-tax estimates for pricing interest deductions.

Brackets are integrated on gross income; this is an approximation used to
find marginal rates and the state tax that feeds the SALT deduction, not a
return preparer.
"""
from __future__ import annotations

from typing import Sequence, Tuple

from .jurisdictions import IncomeTaxKind, JurisdictionProfile, StateIncomeTax
from .models import FilingStatus, TaxSituation
from .presets import (
    FEDERAL_BRACKETS,
    FEDERAL_STD_DEDUCTION,
    FICA,
    NIIT_THRESHOLD,
)

BracketTable = Sequence[Tuple[float, float, float]]


def _check_income(income: float) -> float:
    income = float(income)
    if income < 0:
        raise ValueError(f"income must be non-negative, got {income}")
    return income


def tax_owed(
    income: float,
    filing_status: FilingStatus,
    table: BracketTable,
    double_for_married: bool = False,
) -> float:
    """Integrate marginal rates across ``table`` up to ``income``.

    When ``double_for_married`` is set, every bracket edge is doubled for
    joint filers (the California convention).
    """

    income = _check_income(income)
    m = 2 if double_for_married and filing_status == FilingStatus.MARRIED else 1
    tax = 0.0
    for lower, upper, rate in table:
        lo, hi = lower * m, upper * m
        if income <= lo:
            break
        tax += (min(income, hi) - lo) * rate
    return tax


def marginal_rate(
    income: float,
    filing_status: FilingStatus,
    table: BracketTable,
    double_for_married: bool = False,
) -> float:
    """Rate of the bracket containing ``income``.

    Income beyond every bound is clamped to the top bracket's rate. An income
    sitting exactly on an edge takes the upper bracket, matching the slope of
    :func:`tax_owed` just above that point.
    """

    income = _check_income(income)
    if not table:
        return 0.0
    m = 2 if double_for_married and filing_status == FilingStatus.MARRIED else 1
    for lower, upper, rate in table:
        if lower * m <= income < upper * m:
            return rate
    return table[-1][2]


def _surtax(income: float, rule: StateIncomeTax) -> Tuple[float, float]:
    owed = 0.0
    rate = 0.0
    for s in rule.surtaxes:
        if income > s.threshold:
            owed += (income - s.threshold) * s.rate
            rate += s.rate
    return owed, rate


def federal_tax(income: float, filing_status: FilingStatus) -> float:
    return tax_owed(income, filing_status, FEDERAL_BRACKETS[FilingStatus(filing_status).value])


def federal_marginal_rate(income: float, filing_status: FilingStatus) -> float:
    return marginal_rate(income, filing_status, FEDERAL_BRACKETS[FilingStatus(filing_status).value])


def state_tax(income: float, filing_status: FilingStatus, rule: StateIncomeTax) -> float:
    """State plus local income tax owed under ``rule``, surtaxes included."""

    income = _check_income(income)
    filing_status = FilingStatus(filing_status)
    if rule.kind == IncomeTaxKind.NONE:
        return 0.0
    if rule.kind == IncomeTaxKind.FLAT:
        base = max(0.0, income - rule.exemption_for(filing_status)) * rule.flat_rate
    else:
        table, double = rule.brackets_for(filing_status)
        base = tax_owed(income, filing_status, table, double)
        base += tax_owed(income, filing_status, rule.local_brackets_for(filing_status))
    return base + _surtax(income, rule)[0]


def state_marginal_rate(income: float, filing_status: FilingStatus, rule: StateIncomeTax) -> float:
    income = _check_income(income)
    filing_status = FilingStatus(filing_status)
    if rule.kind == IncomeTaxKind.NONE:
        return 0.0
    if rule.kind == IncomeTaxKind.FLAT:
        base = rule.flat_rate if income > rule.exemption_for(filing_status) else 0.0
    else:
        table, double = rule.brackets_for(filing_status)
        base = marginal_rate(income, filing_status, table, double)
        base += marginal_rate(income, filing_status, rule.local_brackets_for(filing_status))
    return base + _surtax(income, rule)[1]


def payroll_tax(income: float, profile: JurisdictionProfile) -> float:
    """State payroll add-on (disability or family-leave withholding)."""

    income = _check_income(income)
    wages = income if profile.payroll_tax_cap is None else min(income, profile.payroll_tax_cap)
    return wages * profile.payroll_tax_rate


def fica_tax(income: float, filing_status: FilingStatus) -> float:
    income = _check_income(income)
    filing_status = FilingStatus(filing_status)
    ss = min(income, FICA["ss_wage_base"]) * FICA["ss_rate"]
    medicare = income * FICA["medicare_rate"]
    threshold = FICA["addl_medicare_threshold"][filing_status.value]
    medicare += max(0.0, income - threshold) * FICA["addl_medicare_rate"]
    return ss + medicare


def niit_applies(income: float, filing_status: FilingStatus) -> bool:
    return _check_income(income) > NIIT_THRESHOLD[FilingStatus(filing_status).value]


def tax_situation(
    gross_income: float, filing_status: FilingStatus, profile: JurisdictionProfile
) -> TaxSituation:
    """Marginal rates, state tax and standard deductions for one household."""

    filing_status = FilingStatus(filing_status)
    rule = profile.income_tax
    return TaxSituation(
        federal_rate=federal_marginal_rate(gross_income, filing_status),
        state_rate=state_marginal_rate(gross_income, filing_status, rule),
        state_tax=state_tax(gross_income, filing_status, rule) + payroll_tax(gross_income, profile),
        federal_std_deduction=FEDERAL_STD_DEDUCTION[filing_status.value],
        state_std_deduction=profile.state_standard_deduction(filing_status),
    )


def estimated_take_home(
    gross_income: float, filing_status: FilingStatus, profile: JurisdictionProfile
) -> float:
    """Annual after-tax pay: gross less federal, state, payroll and FICA."""

    filing_status = FilingStatus(filing_status)
    gross_income = _check_income(gross_income)
    taxable = max(0.0, gross_income - FEDERAL_STD_DEDUCTION[filing_status.value])
    total = (
        federal_tax(taxable, filing_status)
        + state_tax(gross_income, filing_status, profile.income_tax)
        + payroll_tax(gross_income, profile)
        + fica_tax(gross_income, filing_status)
    )
    return max(0.0, gross_income - total)

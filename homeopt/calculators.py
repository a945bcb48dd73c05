from __future__ import annotations

from .jurisdictions import JurisdictionProfile
from .models import AmortizationRow, AmortizationSchedule, PMIEstimate, TransactionCosts
from .presets import (
    FLAT_BUY_FEE,
    LOAN_FEE_RATE,
    PMI_CANCEL_LTV,
    PMI_DEFAULT_RATE,
    PMI_LTV_THRESHOLD,
    PMI_REFERENCE_RATE,
    PMI_REFERENCE_TERM,
    SELL_FEE_CAP,
    SELL_FEE_RATE,
    TITLE_FEE_CAP,
    TITLE_FEE_RATE,
)


def monthly_payment(principal, annual_rate, term_years):
    """Calculate the fully amortizing monthly payment for a loan.

    ``principal`` is the starting loan amount, ``annual_rate`` is the nominal
    yearly interest rate as a decimal (``0.065`` for 6.5%), and ``term_years``
    is the amortization period in years. A zero rate spreads the principal
    evenly; a non-positive principal (an all-cash purchase) pays nothing.
    """

    L = float(principal)
    r = float(annual_rate) / 12
    n = int(term_years * 12)
    if L <= 0 or n <= 0:
        return 0.0
    if abs(r) < 1e-12:
        return L / n
    return L * (r * (1 + r) ** n) / ((1 + r) ** n - 1)


def payment_factor(annual_rate, term_years):
    """Monthly payment per dollar borrowed."""

    return monthly_payment(1.0, annual_rate, term_years)


def amortize(principal, annual_rate, term_years) -> AmortizationSchedule:
    """Simulate a fixed-rate loan month by month, snapshotting each year.

    Each yearly row carries cumulative interest/principal plus that year's
    increments (first differences of the cumulative totals).
    """

    if principal <= 0:
        return AmortizationSchedule()
    mp = monthly_payment(principal, annual_rate, term_years)
    mr = annual_rate / 12
    bal = float(principal)
    tot_int = 0.0
    tot_prin = 0.0
    rows = []
    for m in range(1, int(term_years * 12) + 1):
        int_pay = bal * mr
        prin_pay = mp - int_pay
        bal = max(0.0, bal - prin_pay)
        tot_int += int_pay
        tot_prin += prin_pay
        if m % 12 == 0:
            prev = rows[-1] if rows else None
            rows.append(
                AmortizationRow(
                    year=m // 12,
                    balance=bal,
                    interest_paid=tot_int,
                    principal_paid=tot_prin,
                    yearly_interest=tot_int - prev.interest_paid if prev else tot_int,
                    yearly_principal=tot_prin - prev.principal_paid if prev else tot_prin,
                )
            )
    return AmortizationSchedule(schedule=rows, monthly_payment=mp, total_interest=tot_int)


def compute_ltv(purchase_price, loan):
    """Loan-to-value as a decimal."""

    if purchase_price <= 0:
        return 0.0
    return loan / purchase_price


def calc_pmi(
    loan,
    home_value,
    pmi_rate=PMI_DEFAULT_RATE,
    reference_rate=PMI_REFERENCE_RATE,
) -> PMIEstimate:
    """Estimate private mortgage insurance and when it falls away.

    PMI applies only above 80% LTV and is charged as a flat annual rate on the
    original loan. Cancellation is estimated by amortizing at a fixed reference
    rate until the balance reaches 78% of the original home value; this is
    balance-based and ignores appreciation, like typical lender rules.
    """

    if loan <= 0 or compute_ltv(home_value, loan) <= PMI_LTV_THRESHOLD:
        return PMIEstimate()
    target = home_value * PMI_CANCEL_LTV
    mp = monthly_payment(loan, reference_rate, PMI_REFERENCE_TERM)
    mr = reference_rate / 12
    bal = float(loan)
    months = 0
    while bal > target and months < PMI_REFERENCE_TERM * 12:
        bal -= mp - bal * mr
        months += 1
    monthly = loan * pmi_rate / 12
    return PMIEstimate(monthly=monthly, years=months / 12, total=monthly * months)


def mansion_tax(price, profile: JurisdictionProfile):
    mt = profile.mansion_tax
    if mt is None or price <= mt.threshold:
        return 0.0
    return price * mt.rate


def buy_costs(price, loan, profile: JurisdictionProfile):
    """Buyer closing costs: transfer tax, closing rate, loan fee, capped title fee, flat fee."""

    return (
        price * profile.transfer_tax_rate
        + price * profile.buyer_closing_rate
        + max(0.0, loan) * LOAN_FEE_RATE
        + min(TITLE_FEE_CAP, price * TITLE_FEE_RATE)
        + FLAT_BUY_FEE
        + mansion_tax(price, profile)
    )


def sell_costs(price, profile: JurisdictionProfile):
    """Seller costs: commission, transfer tax, closing rate, capped escrow/misc fee."""

    return (
        price * profile.realtor_commission
        + price * profile.transfer_tax_rate
        + price * profile.seller_closing_rate
        + min(SELL_FEE_CAP, price * SELL_FEE_RATE)
    )


def transaction_costs(price, loan, profile: JurisdictionProfile) -> TransactionCosts:
    buy = buy_costs(price, loan, profile)
    sell = sell_costs(price, profile)
    return TransactionCosts(buy=buy, sell=sell, total=buy + sell, mansion_tax=mansion_tax(price, profile))

"""Thirty-year buy-versus-rent projection for a single financing structure.

The interesting part is interest tracing: acquisition-debt interest goes to
Schedule A under separate federal and state debt ceilings, while margin, HELOC
and cash-out interest is investment interest, deductible only up to the
investment income the borrowed money actually throws off.
"""
from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from .calculators import amortize, calc_pmi, transaction_costs
from .jurisdictions import DEFAULT_JURISDICTION, JurisdictionProfile
from .models import (
    AmortizationSchedule,
    BreakEvenSensitivity,
    CashFlowImpact,
    CostBreakdown,
    FinancingStructure,
    MarketAssumptions,
    ScenarioResult,
    TaxSituation,
    YearlyAnalysis,
)
from .presets import (
    CASH_FLOW_WARNING_PCT,
    FEDERAL_MORTGAGE_DEBT_CEILING,
    NIIT_RATE,
    PROJECTION_YEARS,
    REFI_CLOSING_RATE,
    SALT_CAP,
)
from .taxes import niit_applies, tax_situation

logger = logging.getLogger(__name__)


def deductible_interest(annual_interest: float, debt: float, ceiling: float) -> float:
    """Interest deductible when only the first ``ceiling`` dollars of debt qualify."""

    if debt <= 0 or annual_interest <= 0:
        return 0.0
    if debt <= ceiling:
        return annual_interest
    return annual_interest * max(0.0, ceiling) / debt


def allocate_investment_interest(pool: float, interests: Iterable[float]) -> List[float]:
    """Split a shared investment-income pool across interest sources in order.

    Each source deducts as much as the pool still allows, so the total can
    never exceed the pool however the individual amounts are sized.
    """

    remaining = max(0.0, pool)
    out = []
    for interest in interests:
        d = min(max(0.0, interest), remaining)
        out.append(d)
        remaining -= d
    return out


def _itemized_benefit(itemized: float, standard: float, rate: float) -> float:
    if itemized > standard:
        return (itemized - standard) * rate
    return 0.0


def calc_scenario(
    financing: FinancingStructure,
    market: Optional[MarketAssumptions] = None,
    profile: JurisdictionProfile = DEFAULT_JURISDICTION,
    tax: Optional[TaxSituation] = None,
) -> ScenarioResult:
    """Project owner and renter wealth for ``financing`` over thirty years.

    ``tax`` overrides the rates derived from the household's gross income and
    filing status. Every branch (no loan, no margin, never breaking even) is
    a valid result rather than an error.
    """

    market = market or MarketAssumptions()
    f = financing
    if tax is None:
        tax = tax_situation(f.gross_income, f.filing_status, profile)

    price = f.home_price
    total_down = f.total_down
    needs_mortgage = f.needs_mortgage
    base_mortgage = price - total_down if needs_mortgage else 0.0

    # A cash-out refinance replaces the purchase mortgage with a larger loan
    is_refi = f.cash_out_refi_amount > 0
    cash_out = f.cash_out_refi_amount if is_refi else 0.0
    total_refi_loan = base_mortgage + cash_out if is_refi else 0.0
    mortgage_loan = 0.0 if is_refi else base_mortgage
    loan_rate = f.cash_out_refi_rate if is_refi else f.mortgage_rate
    amort_principal = total_refi_loan if is_refi else mortgage_loan

    # HELOC needs a home owned free of a first mortgage
    heloc = f.heloc_amount if not needs_mortgage and not is_refi else 0.0
    if f.heloc_amount > 0 and heloc == 0:
        logger.debug(
            "HELOC of %.0f dropped: mortgage=%s cash_out_refi=%s", f.heloc_amount, needs_mortgage, is_refi
        )

    prop_tax = price * profile.property_tax_rate + profile.parcel_tax
    insurance = price * profile.insurance_rate
    maintenance = price * profile.maintenance_rate
    pmi = calc_pmi(amort_principal, price, profile.pmi_rate)
    tx = transaction_costs(price, amort_principal, profile)
    refi_closing = total_refi_loan * REFI_CLOSING_RATE
    amort = amortize(amort_principal, loan_rate, f.loan_term)

    acquisition_debt = base_mortgage
    acquisition_interest = acquisition_debt * loan_rate
    cash_out_interest = cash_out * loan_rate
    margin_interest = f.margin_loan * market.margin_rate
    heloc_interest = heloc * market.heloc_rate
    total_interest = acquisition_interest + cash_out_interest + margin_interest + heloc_interest

    invested = f.margin_loan + heloc + cash_out
    total_investment_income = invested * market.investment_return
    # Only dividends and interest count toward the cap, not unrealized gains
    deductible_income = invested * market.dividend_yield

    fed_ded_mortgage = deductible_interest(acquisition_interest, acquisition_debt, FEDERAL_MORTGAGE_DEBT_CEILING)
    state_ded_mortgage = deductible_interest(
        acquisition_interest, acquisition_debt, profile.state_mortgage_debt_ceiling
    )

    ded_margin, ded_cash_out, ded_heloc = allocate_investment_interest(
        deductible_income, (margin_interest, cash_out_interest, heloc_interest)
    )
    investment_deduction = ded_margin + ded_cash_out + ded_heloc

    salt_full = tax.state_tax + prop_tax
    salt_capped = min(salt_full, SALT_CAP)
    itemized = fed_ded_mortgage + salt_capped
    should_itemize = itemized > tax.federal_std_deduction
    fed_benefit = _itemized_benefit(itemized, tax.federal_std_deduction, tax.federal_rate)

    state_rate = tax.state_rate if profile.state_allows_itemizing else 0.0
    state_itemized = state_ded_mortgage + prop_tax if profile.state_allows_itemizing else 0.0
    should_itemize_state = profile.state_allows_itemizing and state_itemized > tax.state_std_deduction
    state_benefit = _itemized_benefit(state_itemized, tax.state_std_deduction, state_rate)

    mortgage_benefit = fed_benefit + state_benefit
    invest_rate = tax.federal_rate + state_rate
    invest_benefit = investment_deduction * invest_rate
    total_benefit = mortgage_benefit + invest_benefit

    net_mortgage = acquisition_interest
    if should_itemize:
        net_mortgage -= fed_ded_mortgage * tax.federal_rate
    if should_itemize_state:
        net_mortgage -= state_ded_mortgage * state_rate
    net_cash_out = cash_out_interest - ded_cash_out * invest_rate
    net_margin = margin_interest - ded_margin * invest_rate
    net_heloc = heloc_interest - ded_heloc * invest_rate

    total_borrowed = amort_principal + f.margin_loan + heloc
    total_net_interest = net_mortgage + net_cash_out + net_margin + net_heloc

    gross_costs = total_interest + pmi.monthly * 12 + prop_tax + insurance + maintenance
    breakdown = CostBreakdown(
        mortgage_interest=acquisition_interest,
        cash_out_interest=cash_out_interest,
        margin_interest=margin_interest,
        heloc_interest=heloc_interest,
        pmi=pmi.monthly * 12,
        property_tax=prop_tax,
        insurance=insurance,
        maintenance=maintenance,
        gross_total=gross_costs,
        mortgage_tax_benefit=-mortgage_benefit,
        invest_interest_tax_benefit=-invest_benefit,
        total_tax_benefit=-total_benefit,
        net_total=gross_costs - total_benefit,
    )

    subject_to_niit = niit_applies(f.gross_income, f.filing_status)
    niit_rate = NIIT_RATE if subject_to_niit else 0.0
    # Half the surtax approximates the share of return realized each year
    after_niit_return = market.investment_return * (1 - niit_rate * 0.5)

    yearly = _project(
        f,
        market,
        profile,
        tax,
        amort=amort,
        pmi_monthly=pmi.monthly,
        pmi_years=pmi.years,
        acquisition_debt=acquisition_debt,
        amort_principal=amort_principal,
        heloc=heloc,
        margin_interest=margin_interest,
        heloc_interest=heloc_interest,
        insurance=insurance,
        maintenance=maintenance,
        invest_benefit=invest_benefit,
        sell_costs=tx.sell,
        renter_start=total_down + tx.buy,
        renter_return=after_niit_return,
    )

    break_even_year = next((y.year for y in yearly if y.break_even), None)
    y1, y30 = yearly[0], yearly[-1]
    appreciation_needed = None
    rent_needed = None
    if break_even_year is None:
        if y30.renter_wealth > y30.owner_wealth and price > 0:
            # home value at which year-30 owner wealth would match the renter
            needed_value = y30.renter_wealth + y30.loan_balance + f.margin_loan + heloc + tx.sell
            appreciation_needed = (needed_value / price) ** (1 / PROJECTION_YEARS) - 1
        if y1.cost_diff > 0:
            rent_needed = market.monthly_rent + y1.cost_diff / 12

    result = ScenarioResult(
        home_price=price,
        jurisdiction=profile.key,
        total_down=total_down,
        cash_down=f.cash_down,
        margin_loan=f.margin_loan,
        heloc_amount=heloc,
        requested_heloc=f.heloc_amount,
        mortgage_loan=mortgage_loan,
        needs_mortgage=needs_mortgage,
        is_cash_out_refi=is_refi,
        cash_out_refi_amount=cash_out,
        total_refi_loan=total_refi_loan,
        acquisition_debt=acquisition_debt,
        cash_out_refi_closing_costs=refi_closing,
        monthly_payment=amort.monthly_payment + pmi.monthly,
        pmi=pmi,
        tx_costs=tx.model_copy(update={"buy": tx.buy + refi_closing, "total": tx.total + refi_closing}),
        amort=amort,
        mortgage_interest_annual=acquisition_interest,
        cash_out_interest_annual=cash_out_interest,
        margin_interest_annual=margin_interest,
        heloc_interest_annual=heloc_interest,
        total_interest_annual=total_interest,
        federal_deductible_mortgage_interest=fed_ded_mortgage,
        state_deductible_mortgage_interest=state_ded_mortgage,
        non_deductible_mortgage_interest=acquisition_interest - fed_ded_mortgage,
        deductible_margin_interest=ded_margin,
        non_deductible_margin_interest=margin_interest - ded_margin,
        deductible_cash_out_interest=ded_cash_out,
        non_deductible_cash_out_interest=cash_out_interest - ded_cash_out,
        deductible_heloc_interest=ded_heloc,
        non_deductible_heloc_interest=heloc_interest - ded_heloc,
        investment_interest_deduction=investment_deduction,
        total_investment_income=total_investment_income,
        total_deductible_investment_income=deductible_income,
        salt_capped=salt_capped,
        salt_lost=max(0.0, salt_full - SALT_CAP),
        itemized_total=itemized,
        std_deduction=tax.federal_std_deduction,
        should_itemize=should_itemize,
        state_itemized_total=state_itemized,
        state_std_deduction=tax.state_std_deduction,
        should_itemize_state=should_itemize_state,
        federal_mortgage_tax_benefit=fed_benefit,
        state_mortgage_tax_benefit=state_benefit,
        mortgage_tax_benefit=mortgage_benefit,
        invest_interest_tax_benefit=invest_benefit,
        total_tax_benefit=total_benefit,
        mortgage_effective_rate=net_mortgage / acquisition_debt if acquisition_debt > 0 else 0.0,
        cash_out_effective_rate=net_cash_out / cash_out if cash_out > 0 else 0.0,
        margin_effective_rate=net_margin / f.margin_loan if f.margin_loan > 0 else 0.0,
        heloc_effective_rate=net_heloc / heloc if heloc > 0 else 0.0,
        blended_effective_rate=total_net_interest / total_borrowed if total_borrowed > 0 else 0.0,
        property_tax=prop_tax,
        insurance=insurance,
        maintenance=maintenance,
        non_recoverable=breakdown,
        yearly=yearly,
        break_even_year=break_even_year,
        sensitivity=BreakEvenSensitivity(
            year1_cost_diff=y1.cost_diff,
            owner_advantage_year30=y30.advantage,
            appreciation_needed=appreciation_needed,
            rent_needed=rent_needed,
            subject_to_niit=subject_to_niit,
            niit_rate=niit_rate,
            after_niit_return=after_niit_return,
        ),
        owner_wealth20=yearly[19].owner_wealth,
        renter_wealth20=yearly[19].renter_wealth,
    )
    logger.debug(
        "scenario price=%.0f down=%.0f margin=%.0f heloc=%.0f refi=%.0f break_even=%s",
        price,
        f.cash_down,
        f.margin_loan,
        heloc,
        cash_out,
        result.break_even_label,
    )
    return result


def _project(
    f: FinancingStructure,
    market: MarketAssumptions,
    profile: JurisdictionProfile,
    tax: TaxSituation,
    *,
    amort: AmortizationSchedule,
    pmi_monthly: float,
    pmi_years: float,
    acquisition_debt: float,
    amort_principal: float,
    heloc: float,
    margin_interest: float,
    heloc_interest: float,
    insurance: float,
    maintenance: float,
    invest_benefit: float,
    sell_costs: float,
    renter_start: float,
    renter_return: float,
) -> List[YearlyAnalysis]:
    price = f.home_price
    acquisition_share = acquisition_debt / amort_principal if amort_principal > 0 else 0.0
    state_rate = tax.state_rate if profile.state_allows_itemizing else 0.0
    annual_pi = amort.monthly_payment * 12
    renter = renter_start
    out = []
    for y in range(1, PROJECTION_YEARS + 1):
        home_val = price * (1 + market.appreciation_rate) ** y
        row = amort.row_for_year(y)
        loan_bal = row.balance if row else 0.0
        # balance stays clamped at payoff; no interest or principal after the term
        paying = row is not None and y <= f.loan_term
        y_interest = row.yearly_interest if paying else 0.0
        y_principal = row.yearly_principal if paying else 0.0
        equity = home_val - loan_bal - f.margin_loan - heloc

        market_prop_tax = home_val * profile.property_tax_rate + profile.parcel_tax
        if profile.assessment_capped:
            assessed = min(price * (1 + profile.assessment_growth_cap) ** (y - 1), home_val)
            y_prop_tax = assessed * profile.property_tax_rate + profile.parcel_tax
        else:
            y_prop_tax = market_prop_tax

        # Yearly mortgage benefit follows actual interest; the investment
        # interest benefit stays at its year-1 value.
        y_acq_interest = y_interest * acquisition_share
        y_salt = min(tax.state_tax + y_prop_tax, SALT_CAP)
        y_fed_ded = deductible_interest(y_acq_interest, acquisition_debt, FEDERAL_MORTGAGE_DEBT_CEILING)
        y_fed_benefit = _itemized_benefit(y_fed_ded + y_salt, tax.federal_std_deduction, tax.federal_rate)
        y_state_benefit = 0.0
        if profile.state_allows_itemizing:
            y_state_ded = deductible_interest(y_acq_interest, acquisition_debt, profile.state_mortgage_debt_ceiling)
            y_state_benefit = _itemized_benefit(y_state_ded + y_prop_tax, tax.state_std_deduction, state_rate)
        y_benefit = y_fed_benefit + y_state_benefit + invest_benefit

        outflow = (
            (annual_pi if y <= f.loan_term else 0.0)
            + margin_interest
            + heloc_interest
            + (pmi_monthly * 12 if y <= pmi_years else 0.0)
            + y_prop_tax
            + insurance
            + maintenance
            - y_benefit
        )
        rent = market.monthly_rent * 12 * (1 + market.rent_growth_rate) ** (y - 1)

        renter *= 1 + renter_return
        cost_diff = outflow - rent
        if cost_diff > 0:
            renter += cost_diff

        owner_wealth = equity - sell_costs
        out.append(
            YearlyAnalysis(
                year=y,
                home_value=home_val,
                loan_balance=loan_bal,
                equity=equity,
                owner_wealth=owner_wealth,
                renter_wealth=renter,
                advantage=owner_wealth - renter,
                break_even=owner_wealth >= renter,
                property_tax=y_prop_tax,
                assessment_cap_savings=market_prop_tax - y_prop_tax,
                tax_benefit=y_benefit,
                yearly_interest=y_interest,
                yearly_principal=y_principal,
                owner_outflow=outflow,
                yearly_rent=rent,
                cost_diff=cost_diff,
            )
        )
    return out


def build_financing(
    home_price: float,
    dp_pct: float,
    stock_portfolio: float = 0.0,
    margin_pct: float = 0.0,
    heloc_pct: float = 0.0,
    cash_out_pct: float = 0.0,
    **terms,
) -> FinancingStructure:
    """Turn percentage inputs into a :class:`FinancingStructure`.

    ``dp_pct`` is the total down payment as a share of price, part of which
    may come from a margin loan of ``margin_pct`` of the portfolio. A 100%
    down payment buys outright. A HELOC is possible only when cash plus
    margin covers the full price. ``terms`` passes through rates, term,
    filing status and income.
    """

    margin = stock_portfolio * margin_pct
    if dp_pct >= 1:
        cash_down = max(0.0, home_price - margin)
    else:
        cash_down = max(0.0, home_price * dp_pct - margin)
    structure = FinancingStructure(
        home_price=home_price,
        cash_down=cash_down,
        margin_loan=margin,
        cash_out_refi_amount=home_price * cash_out_pct,
        **terms,
    )
    if heloc_pct > 0 and not structure.needs_mortgage:
        return structure.model_copy(update={"heloc_amount": home_price * heloc_pct})
    return structure


def remaining_cash(result: ScenarioResult, total_savings: float) -> float:
    """Savings left after closing; HELOC and cash-out proceeds come back as cash."""

    return (
        total_savings
        - result.cash_down
        - result.tx_costs.buy
        + result.heloc_amount
        + result.cash_out_refi_amount
    )


def cash_flow_impact(result: ScenarioResult, monthly_rent: float, monthly_take_home: float) -> CashFlowImpact:
    """Monthly budget before (renting) and after the purchase."""

    nr = result.non_recoverable
    # cash-out interest is already inside the refinanced loan's payment
    gross = (
        result.monthly_payment
        + (nr.property_tax + nr.insurance + nr.maintenance) / 12
        + (nr.margin_interest + nr.heloc_interest) / 12
    )
    net = gross - result.total_tax_benefit / 12
    current = monthly_take_home - monthly_rent
    after = monthly_take_home - net
    remaining_pct = after / monthly_take_home if monthly_take_home > 0 else 0.0
    return CashFlowImpact(
        gross_monthly_housing=gross,
        net_monthly_housing=net,
        current_cash_flow=current,
        after_purchase_cash_flow=after,
        cash_flow_change=after - current,
        remaining_pct=remaining_pct,
        show_warning=remaining_pct < CASH_FLOW_WARNING_PCT,
    )


def compare_scenarios(
    structures: Dict[str, FinancingStructure],
    market: Optional[MarketAssumptions] = None,
    profile: JurisdictionProfile = DEFAULT_JURISDICTION,
    tax: Optional[TaxSituation] = None,
) -> Dict[str, ScenarioResult]:
    """Run several named structures under the same assumptions."""

    return {name: calc_scenario(s, market, profile, tax) for name, s in structures.items()}

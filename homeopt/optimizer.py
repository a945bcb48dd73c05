"""Grid search over financing strategies, scored and ranked.

Four families are enumerated over small fixed grids (see ``presets``):
traditional down payments, margin-assisted down payments, an all-cash
purchase followed by a HELOC, and a purchase followed by a cash-out
refinance. Each candidate must leave at least the caller's minimum cash
buffer before it is scored.
"""
from __future__ import annotations

import logging
from collections import Counter
from typing import List, Optional

from .jurisdictions import DEFAULT_JURISDICTION, JurisdictionProfile
from .models import (
    FinancingStructure,
    MarketAssumptions,
    OptimizationDiagnostics,
    OptimizationRequest,
    OptimizationResult,
    RankedScenario,
    ScenarioResult,
    TaxSituation,
)
from .presets import (
    ADVANTAGE_NORMALIZER,
    HELOC_MARGIN_PCTS,
    HELOC_PCTS,
    MARGIN_DP_PCTS,
    MARGIN_PCTS,
    MAX_MARGIN_PCT,
    MAX_REFI_LTV,
    NEVER_BREAK_EVEN_SCORE,
    PROJECTION_YEARS,
    RATE_SCORE_PIVOT,
    REFI_CASH_OUT_PCTS,
    REFI_DP_PCTS,
    RISK_SCORES,
    SCORE_WEIGHTS,
    TRADITIONAL_DP_PCTS,
)
from .scenario import calc_scenario, remaining_cash
from .taxes import tax_situation

logger = logging.getLogger(__name__)

TRADITIONAL = "Traditional"
MARGIN_MORTGAGE = "Margin + Mortgage"
CASH_HELOC = "Cash + HELOC"
MARGIN_CASH_HELOC = "Margin + Cash + HELOC"
CASH_OUT_REFI = "Cash-Out Refi"


def _pct(x: float) -> str:
    return f"{x * 100:.0f}%"


def score_candidate(
    scenario: ScenarioResult, remaining: float, risk_level: str, min_buffer: float
) -> float:
    """Weighted score: wealth advantage, break-even speed, risk, rate, buffer."""

    advantage20 = scenario.owner_wealth20 - scenario.renter_wealth20
    advantage_score = advantage20 / ADVANTAGE_NORMALIZER
    if scenario.break_even_year is None:
        break_even_score = NEVER_BREAK_EVEN_SCORE
    else:
        break_even_score = (PROJECTION_YEARS - scenario.break_even_year) / PROJECTION_YEARS * 3
    risk_score = RISK_SCORES.get(risk_level, 0.0)
    rate_score = (RATE_SCORE_PIVOT - scenario.blended_effective_rate) * 20
    # a zero buffer requirement is always comfortably met
    buffer_ratio = remaining / min_buffer if min_buffer > 0 else 2.0
    buffer_score = min(buffer_ratio, 2) * 0.5
    w = SCORE_WEIGHTS
    return (
        advantage_score * w["advantage"]
        + break_even_score * w["break_even"]
        + risk_score * w["risk"]
        + rate_score * w["rate"]
        + buffer_score * w["buffer"]
    )


class _Search:
    """Accumulates feasible candidates and rejection counts for one request."""

    def __init__(self, request, market, profile, tax):
        self.req = request
        self.market = market
        self.profile = profile
        self.tax = tax
        self.results: List[RankedScenario] = []
        self.rejected: Counter = Counter()

    def structure(self, cash_down, margin=0.0, heloc=0.0, cash_out=0.0) -> FinancingStructure:
        r = self.req
        return FinancingStructure(
            home_price=r.home_price,
            cash_down=cash_down,
            margin_loan=margin,
            heloc_amount=heloc,
            cash_out_refi_amount=cash_out,
            mortgage_rate=r.mortgage_rate,
            cash_out_refi_rate=r.cash_out_refi_rate,
            loan_term=r.loan_term,
            filing_status=r.filing_status,
            gross_income=r.gross_income,
        )

    def reject(self, strategy: str, reason: str) -> None:
        self.rejected[strategy] += 1
        logger.debug("rejected %s candidate: %s", strategy, reason)

    def consider(self, strategy, desc, risk_level, dp_pct, structure) -> None:
        scenario = calc_scenario(structure, self.market, self.profile, self.tax)
        remaining = remaining_cash(scenario, self.req.total_savings)
        if remaining < self.req.min_buffer:
            self.reject(strategy, f"{desc} leaves {remaining:,.0f} below buffer")
            return
        self.results.append(
            RankedScenario(
                scenario=scenario,
                strategy=strategy,
                strategy_desc=desc,
                remaining=remaining,
                risk_level=risk_level,
                dp_pct=dp_pct * 100,
                advantage20=scenario.owner_wealth20 - scenario.renter_wealth20,
                score=score_candidate(scenario, remaining, risk_level, self.req.min_buffer),
            )
        )


def run_optimization(
    request: OptimizationRequest,
    market: Optional[MarketAssumptions] = None,
    profile: JurisdictionProfile = DEFAULT_JURISDICTION,
    tax: Optional[TaxSituation] = None,
) -> OptimizationResult:
    """Enumerate, filter, score and rank every financing strategy on the grid.

    No feasible strategy is reported in-band: ``optimal`` is ``None``,
    ``top_five`` is empty and the diagnostics explain the shortfall.
    """

    market = market or MarketAssumptions()
    if tax is None:
        tax = tax_situation(request.gross_income, request.filing_status, profile)
    req = request
    price = req.home_price
    spendable = req.total_savings - req.min_buffer
    search = _Search(req, market, profile, tax)

    for dp in TRADITIONAL_DP_PCTS:
        cash_down = price * dp
        if cash_down > spendable:
            search.reject(TRADITIONAL, f"{_pct(dp)} down exceeds spendable savings")
            continue
        search.consider(TRADITIONAL, f"{_pct(dp)} cash down + Mortgage", "Low", dp, search.structure(cash_down))

    for dp in MARGIN_DP_PCTS:
        for margin_pct in MARGIN_PCTS:
            margin = req.stock_portfolio * margin_pct
            cash_down = max(0.0, price * dp - margin)
            if cash_down > spendable:
                search.reject(MARGIN_MORTGAGE, f"{_pct(dp)} down exceeds spendable savings")
                continue
            if margin_pct > MAX_MARGIN_PCT or margin <= 0:
                search.reject(MARGIN_MORTGAGE, "margin outside allowed range")
                continue
            risk = "Medium-High" if margin_pct > 0.20 else "Medium"
            search.consider(
                MARGIN_MORTGAGE,
                f"{_pct(margin_pct)} margin + cash -> {_pct(dp)} down",
                risk,
                dp,
                search.structure(cash_down, margin=margin),
            )

    max_margin = req.stock_portfolio * MAX_MARGIN_PCT
    can_buy_cash = req.total_savings + max_margin >= price
    if can_buy_cash:
        for margin_pct in HELOC_MARGIN_PCTS:
            margin = req.stock_portfolio * margin_pct
            cash_needed = price - margin
            if cash_needed > req.total_savings:
                search.reject(CASH_HELOC, f"{_pct(margin_pct)} margin leaves cash short of price")
                continue
            for heloc_pct in HELOC_PCTS:
                heloc = price * heloc_pct
                if margin > 0:
                    strategy = MARGIN_CASH_HELOC
                    desc = f"{_pct(margin_pct)} margin + Full cash + {_pct(heloc_pct)} HELOC"
                    risk = "High" if margin_pct > 0.20 else "Medium-High"
                else:
                    strategy = CASH_HELOC
                    desc = f"Full cash + {_pct(heloc_pct)} HELOC"
                    risk = "Medium"
                search.consider(strategy, desc, risk, 1.0, search.structure(cash_needed, margin=margin, heloc=heloc))

    for dp in REFI_DP_PCTS:
        for cash_out_pct in REFI_CASH_OUT_PCTS:
            cash_down = price * dp
            if cash_down > spendable:
                search.reject(CASH_OUT_REFI, f"{_pct(dp)} down exceeds spendable savings")
                continue
            cash_out = price * cash_out_pct
            if price <= 0 or (price - cash_down + cash_out) / price > MAX_REFI_LTV:
                search.reject(CASH_OUT_REFI, f"combined LTV above {_pct(MAX_REFI_LTV)}")
                continue
            search.consider(
                CASH_OUT_REFI,
                f"{_pct(dp)} down + {_pct(cash_out_pct)} cash-out refi",
                "Medium",
                dp,
                search.structure(cash_down, cash_out=cash_out),
            )

    ranked = sorted(search.results, key=lambda r: r.score, reverse=True)

    cash_needed_full = price - max_margin
    additional_needed = max(0.0, cash_needed_full - req.total_savings + req.min_buffer)
    gap = price - (req.total_savings + max_margin)
    notes = []
    if not can_buy_cash:
        notes.append(
            f"Full-cash purchase needs ${gap:,.0f} more than savings plus maximum margin "
            f"(${req.total_savings + max_margin:,.0f} available)."
        )
    if not ranked:
        notes.append(
            f"No strategy leaves the ${req.min_buffer:,.0f} minimum buffer; "
            f"savings of ${req.total_savings:,.0f} are too low for this price."
        )
    diagnostics = OptimizationDiagnostics(
        total_savings=req.total_savings,
        max_margin=max_margin,
        total_available=req.total_savings + max_margin,
        home_price=price,
        gap=gap,
        rejected=dict(search.rejected),
        notes=notes,
    )
    logger.info(
        "optimization price=%.0f feasible=%d rejected=%d best=%s",
        price,
        len(ranked),
        sum(search.rejected.values()),
        ranked[0].strategy_desc if ranked else None,
    )
    return OptimizationResult(
        all_results=ranked,
        optimal=ranked[0] if ranked else None,
        top_five=ranked[:5],
        can_buy_cash=can_buy_cash,
        additional_needed=additional_needed,
        diagnostics=diagnostics,
    )

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from .presets import DEFAULT_EFFECTIVE_TAX_RATE


class FilingStatus(str, Enum):
    SINGLE = "single"
    MARRIED = "married"


class FinancingStructure(BaseModel):
    """How a single purchase is paid for.

    ``cash_down + margin_loan`` is the equity put in at closing. Anything short
    of ``home_price`` becomes a first mortgage; a cash-out refinance replaces
    that mortgage with a larger loan at ``cash_out_refi_rate``.
    """

    model_config = ConfigDict(frozen=True)

    home_price: float = Field(ge=0)
    cash_down: float = Field(0.0, ge=0)
    margin_loan: float = Field(0.0, ge=0)
    heloc_amount: float = Field(0.0, ge=0)
    cash_out_refi_amount: float = Field(0.0, ge=0)
    mortgage_rate: float = Field(0.065, ge=0, le=1)
    cash_out_refi_rate: float = Field(0.0675, ge=0, le=1)
    loan_term: int = Field(30, ge=1, le=50)
    filing_status: FilingStatus = FilingStatus.MARRIED
    gross_income: float = Field(0.0, ge=0)

    @property
    def total_down(self) -> float:
        return self.cash_down + self.margin_loan

    @property
    def needs_mortgage(self) -> bool:
        # sub-cent shortfalls are float residue, not a loan
        return self.home_price - self.total_down > 0.005


class MarketAssumptions(BaseModel):
    model_config = ConfigDict(frozen=True)

    appreciation_rate: float = Field(0.05, ge=-0.5, le=1)
    investment_return: float = Field(0.08, ge=-0.5, le=1)
    dividend_yield: float = Field(0.02, ge=0, le=1)
    monthly_rent: float = Field(0.0, ge=0)
    rent_growth_rate: float = Field(0.03, ge=-0.5, le=1)
    margin_rate: float = Field(0.065, ge=0, le=1)
    heloc_rate: float = Field(0.085, ge=0, le=1)


class TaxSituation(BaseModel):
    """Marginal rates and deductions used to price interest deductions."""

    model_config = ConfigDict(frozen=True)

    federal_rate: float = Field(0.0, ge=0, le=1)
    state_rate: float = Field(0.0, ge=0, le=1)
    state_tax: float = Field(0.0, ge=0)
    federal_std_deduction: float = Field(0.0, ge=0)
    state_std_deduction: float = Field(0.0, ge=0)

    @property
    def combined_rate(self) -> float:
        return self.federal_rate + self.state_rate


class AmortizationRow(BaseModel):
    year: int
    balance: float
    interest_paid: float
    principal_paid: float
    yearly_interest: float
    yearly_principal: float


class AmortizationSchedule(BaseModel):
    schedule: List[AmortizationRow] = Field(default_factory=list)
    monthly_payment: float = 0.0
    total_interest: float = 0.0

    def row_for_year(self, year: int) -> Optional[AmortizationRow]:
        """Row for ``year`` (1-based), clamped to the final year once the term ends."""
        if not self.schedule:
            return None
        return self.schedule[min(year, len(self.schedule)) - 1]


class PMIEstimate(BaseModel):
    monthly: float = 0.0
    years: float = 0.0
    total: float = 0.0


class TransactionCosts(BaseModel):
    buy: float = 0.0
    sell: float = 0.0
    total: float = 0.0
    mansion_tax: float = 0.0


class CostBreakdown(BaseModel):
    """Annual non-recoverable costs of owning, before and after tax benefits."""

    mortgage_interest: float = 0.0
    cash_out_interest: float = 0.0
    margin_interest: float = 0.0
    heloc_interest: float = 0.0
    pmi: float = 0.0
    property_tax: float = 0.0
    insurance: float = 0.0
    maintenance: float = 0.0
    gross_total: float = 0.0
    mortgage_tax_benefit: float = 0.0
    invest_interest_tax_benefit: float = 0.0
    total_tax_benefit: float = 0.0
    net_total: float = 0.0


class YearlyAnalysis(BaseModel):
    year: int
    home_value: float
    loan_balance: float
    equity: float
    owner_wealth: float
    renter_wealth: float
    advantage: float
    break_even: bool
    property_tax: float = 0.0
    assessment_cap_savings: float = 0.0
    tax_benefit: float = 0.0
    yearly_interest: float = 0.0
    yearly_principal: float = 0.0
    owner_outflow: float = 0.0
    yearly_rent: float = 0.0
    cost_diff: float = 0.0


class BreakEvenSensitivity(BaseModel):
    year1_cost_diff: float = 0.0
    owner_advantage_year30: float = 0.0
    appreciation_needed: Optional[float] = None
    rent_needed: Optional[float] = None
    subject_to_niit: bool = False
    niit_rate: float = 0.0
    after_niit_return: float = 0.0


class ScenarioResult(BaseModel):
    home_price: float
    jurisdiction: str
    total_down: float
    cash_down: float
    margin_loan: float
    heloc_amount: float = 0.0
    requested_heloc: float = 0.0
    mortgage_loan: float = 0.0
    needs_mortgage: bool = False
    is_cash_out_refi: bool = False
    cash_out_refi_amount: float = 0.0
    total_refi_loan: float = 0.0
    acquisition_debt: float = 0.0
    cash_out_refi_closing_costs: float = 0.0
    monthly_payment: float = 0.0
    pmi: PMIEstimate = Field(default_factory=PMIEstimate)
    tx_costs: TransactionCosts = Field(default_factory=TransactionCosts)
    amort: AmortizationSchedule = Field(default_factory=AmortizationSchedule)

    mortgage_interest_annual: float = 0.0
    cash_out_interest_annual: float = 0.0
    margin_interest_annual: float = 0.0
    heloc_interest_annual: float = 0.0
    total_interest_annual: float = 0.0

    federal_deductible_mortgage_interest: float = 0.0
    state_deductible_mortgage_interest: float = 0.0
    non_deductible_mortgage_interest: float = 0.0
    deductible_margin_interest: float = 0.0
    non_deductible_margin_interest: float = 0.0
    deductible_cash_out_interest: float = 0.0
    non_deductible_cash_out_interest: float = 0.0
    deductible_heloc_interest: float = 0.0
    non_deductible_heloc_interest: float = 0.0
    investment_interest_deduction: float = 0.0
    total_investment_income: float = 0.0
    total_deductible_investment_income: float = 0.0

    salt_capped: float = 0.0
    salt_lost: float = 0.0
    itemized_total: float = 0.0
    std_deduction: float = 0.0
    should_itemize: bool = False
    state_itemized_total: float = 0.0
    state_std_deduction: float = 0.0
    should_itemize_state: bool = False
    federal_mortgage_tax_benefit: float = 0.0
    state_mortgage_tax_benefit: float = 0.0
    mortgage_tax_benefit: float = 0.0
    invest_interest_tax_benefit: float = 0.0
    total_tax_benefit: float = 0.0

    mortgage_effective_rate: float = 0.0
    cash_out_effective_rate: float = 0.0
    margin_effective_rate: float = 0.0
    heloc_effective_rate: float = 0.0
    blended_effective_rate: float = 0.0

    property_tax: float = 0.0
    insurance: float = 0.0
    maintenance: float = 0.0
    non_recoverable: CostBreakdown = Field(default_factory=CostBreakdown)

    yearly: List[YearlyAnalysis] = Field(default_factory=list)
    break_even_year: Optional[int] = None
    sensitivity: BreakEvenSensitivity = Field(default_factory=BreakEvenSensitivity)
    owner_wealth20: float = 0.0
    renter_wealth20: float = 0.0

    @property
    def break_even_label(self) -> str:
        return "Never" if self.break_even_year is None else str(self.break_even_year)

    @property
    def heloc_zeroed(self) -> bool:
        return self.requested_heloc > 0 and self.heloc_amount == 0


class CashFlowImpact(BaseModel):
    gross_monthly_housing: float
    net_monthly_housing: float
    current_cash_flow: float
    after_purchase_cash_flow: float
    cash_flow_change: float
    remaining_pct: float
    show_warning: bool


class OptimizationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    home_price: float = Field(ge=0)
    total_savings: float = Field(ge=0)
    stock_portfolio: float = Field(0.0, ge=0)
    mortgage_rate: float = Field(0.065, ge=0, le=1)
    cash_out_refi_rate: float = Field(0.0675, ge=0, le=1)
    loan_term: int = Field(30, ge=1, le=50)
    min_buffer: float = Field(0.0, ge=0)
    filing_status: FilingStatus = FilingStatus.MARRIED
    gross_income: float = Field(0.0, ge=0)


class RankedScenario(BaseModel):
    scenario: ScenarioResult
    strategy: str
    strategy_desc: str
    remaining: float
    risk_level: str
    dp_pct: float
    advantage20: float = 0.0
    score: float = 0.0


class OptimizationDiagnostics(BaseModel):
    total_savings: float
    max_margin: float
    total_available: float
    home_price: float
    gap: float
    rejected: Dict[str, int] = Field(default_factory=dict)
    notes: List[str] = Field(default_factory=list)


class OptimizationResult(BaseModel):
    all_results: List[RankedScenario] = Field(default_factory=list)
    optimal: Optional[RankedScenario] = None
    top_five: List[RankedScenario] = Field(default_factory=list)
    can_buy_cash: bool = False
    additional_needed: float = 0.0
    diagnostics: OptimizationDiagnostics


class AffordabilityRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    gross_income: float = Field(ge=0)
    total_savings: float = Field(ge=0)
    mortgage_rate: float = Field(0.065, ge=0, le=1)
    loan_term: int = Field(30, ge=1, le=50)
    min_buffer: float = Field(0.0, ge=0)
    monthly_hoa: float = Field(0.0, ge=0)
    monthly_other_debt: float = Field(0.0, ge=0)
    monthly_rent: float = Field(0.0, ge=0)
    effective_tax_rate: float = Field(DEFAULT_EFFECTIVE_TAX_RATE, ge=0, le=1)
    target_take_home_pct: Optional[float] = Field(None, gt=0, le=1)


class MonthlyBreakdown(BaseModel):
    pi: float = 0.0
    tax: float = 0.0
    insurance: float = 0.0
    pmi: float = 0.0
    hoa: float = 0.0


class AffordabilityOption(BaseModel):
    dp_pct: float
    max_price: float = 0.0
    max_price_by_income: float = 0.0
    max_price_by_savings: float = 0.0
    monthly_piti: float = 0.0
    monthly_breakdown: MonthlyBreakdown = Field(default_factory=MonthlyBreakdown)
    cash_needed: float = 0.0
    remaining: float = 0.0
    limited_by: str = "income"
    take_home_pct: float = 0.0
    vs_rent: float = 0.0
    buffer_months: float = 0.0
    target_take_home_pct: Optional[float] = None


class AffordabilityResult(BaseModel):
    options: List[AffordabilityOption] = Field(default_factory=list)
    monthly_take_home: float = 0.0

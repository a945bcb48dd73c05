"""Location profiles: property, transaction and income-tax rules per market.

Every profile is built once at import time and never mutated. Rates are
approximations for the 2024 tax year and typical closing practice in each
market; they are inputs to estimates, not a substitute for a title quote.
"""
from __future__ import annotations

from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from .models import FilingStatus

Bracket = Tuple[float, float, float]
INF = float("inf")


class IncomeTaxKind(str, Enum):
    PROGRESSIVE = "progressive"
    FLAT = "flat"
    NONE = "none"


class SurtaxRule(BaseModel):
    """Extra rate above an absolute threshold, the same for every filer."""

    model_config = ConfigDict(frozen=True)

    threshold: float = Field(ge=0)
    rate: float = Field(ge=0, le=1)


class StateIncomeTax(BaseModel):
    model_config = ConfigDict(frozen=True)

    kind: IncomeTaxKind = IncomeTaxKind.NONE
    single_brackets: Tuple[Bracket, ...] = ()
    # Empty means married thresholds are the single thresholds doubled.
    married_brackets: Tuple[Bracket, ...] = ()
    local_single_brackets: Tuple[Bracket, ...] = ()
    local_married_brackets: Tuple[Bracket, ...] = ()
    flat_rate: float = Field(0.0, ge=0, le=1)
    exemption_single: float = Field(0.0, ge=0)
    exemption_married: float = Field(0.0, ge=0)
    surtaxes: Tuple[SurtaxRule, ...] = ()

    def brackets_for(self, filing_status: FilingStatus) -> Tuple[Tuple[Bracket, ...], bool]:
        """Return ``(table, double_for_married)`` for the state brackets."""
        if filing_status == FilingStatus.MARRIED and self.married_brackets:
            return self.married_brackets, False
        return self.single_brackets, filing_status == FilingStatus.MARRIED

    def local_brackets_for(self, filing_status: FilingStatus) -> Tuple[Bracket, ...]:
        if filing_status == FilingStatus.MARRIED:
            return self.local_married_brackets
        return self.local_single_brackets

    def exemption_for(self, filing_status: FilingStatus) -> float:
        if filing_status == FilingStatus.MARRIED:
            return self.exemption_married
        return self.exemption_single


class MansionTax(BaseModel):
    model_config = ConfigDict(frozen=True)

    threshold: float = Field(ge=0)
    rate: float = Field(ge=0, le=1)


class JurisdictionProfile(BaseModel):
    model_config = ConfigDict(frozen=True)

    key: str
    name: str
    property_tax_rate: float = Field(ge=0, le=1)
    parcel_tax: float = Field(0.0, ge=0)
    transfer_tax_rate: float = Field(0.0, ge=0, le=1)
    mansion_tax: Optional[MansionTax] = None
    realtor_commission: float = Field(0.05, ge=0, le=1)
    buyer_closing_rate: float = Field(0.015, ge=0, le=1)
    seller_closing_rate: float = Field(0.01, ge=0, le=1)
    insurance_rate: float = Field(0.003, ge=0, le=1)
    maintenance_rate: float = Field(0.01, ge=0, le=1)
    pmi_rate: float = Field(0.005, ge=0, le=1)
    income_tax: StateIncomeTax = Field(default_factory=StateIncomeTax)
    state_std_deduction_single: float = Field(0.0, ge=0)
    state_std_deduction_married: float = Field(0.0, ge=0)
    state_mortgage_debt_ceiling: float = Field(750000.0, ge=0)
    state_allows_itemizing: bool = True
    payroll_tax_rate: float = Field(0.0, ge=0, le=1)
    payroll_tax_cap: Optional[float] = Field(None, ge=0)
    assessment_capped: bool = False
    assessment_growth_cap: float = Field(0.0, ge=0, le=1)

    def state_standard_deduction(self, filing_status: FilingStatus) -> float:
        if filing_status == FilingStatus.MARRIED:
            return self.state_std_deduction_married
        return self.state_std_deduction_single


CA_BRACKETS: Tuple[Bracket, ...] = (
    (0, 10412, 0.01), (10412, 24684, 0.02), (24684, 38959, 0.04), (38959, 54081, 0.06),
    (54081, 68350, 0.08), (68350, 349137, 0.093), (349137, 418961, 0.103),
    (418961, 698271, 0.113), (698271, INF, 0.123),
)

NY_SINGLE_BRACKETS: Tuple[Bracket, ...] = (
    (0, 8500, 0.04), (8500, 11700, 0.045), (11700, 13900, 0.0525), (13900, 80650, 0.055),
    (80650, 215400, 0.06), (215400, 1077550, 0.0685), (1077550, 5000000, 0.0965),
    (5000000, 25000000, 0.103), (25000000, INF, 0.109),
)
NY_MARRIED_BRACKETS: Tuple[Bracket, ...] = (
    (0, 17150, 0.04), (17150, 23600, 0.045), (23600, 27900, 0.0525), (27900, 161550, 0.055),
    (161550, 323200, 0.06), (323200, 2155350, 0.0685), (2155350, 5000000, 0.0965),
    (5000000, 25000000, 0.103), (25000000, INF, 0.109),
)
NYC_SINGLE_BRACKETS: Tuple[Bracket, ...] = (
    (0, 12000, 0.03078), (12000, 25000, 0.03762), (25000, 50000, 0.03819), (50000, INF, 0.03876),
)
NYC_MARRIED_BRACKETS: Tuple[Bracket, ...] = (
    (0, 21600, 0.03078), (21600, 45000, 0.03762), (45000, 90000, 0.03819), (90000, INF, 0.03876),
)

SAN_FRANCISCO = JurisdictionProfile(
    key="SF",
    name="San Francisco, CA",
    property_tax_rate=0.0118,
    parcel_tax=350.0,
    transfer_tax_rate=0.0068,
    realtor_commission=0.05,
    buyer_closing_rate=0.015,
    seller_closing_rate=0.01,
    insurance_rate=0.003,
    maintenance_rate=0.01,
    pmi_rate=0.005,
    income_tax=StateIncomeTax(
        kind=IncomeTaxKind.PROGRESSIVE,
        single_brackets=CA_BRACKETS,
        # Mental Health Services Tax; the $1M threshold is not doubled for joint filers
        surtaxes=(SurtaxRule(threshold=1000000.0, rate=0.01),),
    ),
    state_std_deduction_single=5363.0,
    state_std_deduction_married=10726.0,
    state_mortgage_debt_ceiling=1000000.0,
    payroll_tax_rate=0.011,  # SDI, uncapped from 2024
    assessment_capped=True,
    assessment_growth_cap=0.02,
)

NEW_YORK_CITY = JurisdictionProfile(
    key="NYC",
    name="New York City, NY",
    property_tax_rate=0.0088,
    transfer_tax_rate=0.00913,
    mansion_tax=MansionTax(threshold=1000000.0, rate=0.01),
    realtor_commission=0.05,
    buyer_closing_rate=0.02,
    seller_closing_rate=0.01,
    insurance_rate=0.003,
    maintenance_rate=0.01,
    pmi_rate=0.005,
    income_tax=StateIncomeTax(
        kind=IncomeTaxKind.PROGRESSIVE,
        single_brackets=NY_SINGLE_BRACKETS,
        married_brackets=NY_MARRIED_BRACKETS,
        local_single_brackets=NYC_SINGLE_BRACKETS,
        local_married_brackets=NYC_MARRIED_BRACKETS,
    ),
    state_std_deduction_single=8000.0,
    state_std_deduction_married=16050.0,
    state_mortgage_debt_ceiling=1000000.0,
    payroll_tax_rate=0.00373,  # paid family leave
    payroll_tax_cap=89343.80,
    assessment_capped=True,
    assessment_growth_cap=0.06,
)

SEATTLE = JurisdictionProfile(
    key="SEA",
    name="Seattle, WA",
    property_tax_rate=0.0085,
    transfer_tax_rate=0.0128,
    realtor_commission=0.05,
    buyer_closing_rate=0.01,
    seller_closing_rate=0.01,
    insurance_rate=0.0025,
    maintenance_rate=0.01,
    pmi_rate=0.005,
)

AUSTIN = JurisdictionProfile(
    key="AUS",
    name="Austin, TX",
    property_tax_rate=0.018,
    realtor_commission=0.05,
    buyer_closing_rate=0.015,
    seller_closing_rate=0.01,
    insurance_rate=0.006,
    maintenance_rate=0.01,
    pmi_rate=0.005,
    # homestead appraisal cap
    assessment_capped=True,
    assessment_growth_cap=0.10,
)

BOSTON = JurisdictionProfile(
    key="BOS",
    name="Boston, MA",
    property_tax_rate=0.0105,
    transfer_tax_rate=0.00456,
    realtor_commission=0.05,
    buyer_closing_rate=0.015,
    seller_closing_rate=0.01,
    insurance_rate=0.003,
    maintenance_rate=0.01,
    pmi_rate=0.005,
    income_tax=StateIncomeTax(
        kind=IncomeTaxKind.FLAT,
        flat_rate=0.05,
        exemption_single=4400.0,
        exemption_married=8800.0,
        surtaxes=(SurtaxRule(threshold=1053750.0, rate=0.04),),
    ),
    state_mortgage_debt_ceiling=0.0,
    state_allows_itemizing=False,
    payroll_tax_rate=0.0046,  # paid family and medical leave, employee share
    payroll_tax_cap=168600.0,
)

JURISDICTIONS: Dict[str, JurisdictionProfile] = {
    p.key: p for p in (SAN_FRANCISCO, NEW_YORK_CITY, SEATTLE, AUSTIN, BOSTON)
}
DEFAULT_JURISDICTION = SAN_FRANCISCO


def get_jurisdiction(key: str) -> JurisdictionProfile:
    """Look up a built-in profile by its short key (case-insensitive)."""
    try:
        return JURISDICTIONS[key.upper()]
    except KeyError:
        known = ", ".join(sorted(JURISDICTIONS))
        raise KeyError(f"Unknown jurisdiction {key!r}; expected one of: {known}") from None

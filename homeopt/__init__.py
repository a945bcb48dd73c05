"""Home purchase financing engine.

Scenario projection, strategy optimization and affordability estimates for
buying a home with cash, mortgage, margin, HELOC or cash-out refinance.
"""

from importlib import metadata

from .affordability import affordability_matrix, calc_affordability
from .jurisdictions import DEFAULT_JURISDICTION, JURISDICTIONS, get_jurisdiction
from .models import (
    AffordabilityRequest,
    FilingStatus,
    FinancingStructure,
    MarketAssumptions,
    OptimizationRequest,
    TaxSituation,
)
from .optimizer import run_optimization
from .presets import DISCLAIMER
from .scenario import build_financing, calc_scenario, cash_flow_impact, compare_scenarios

try:
    __version__ = metadata.version("homeopt")
except metadata.PackageNotFoundError:  # pragma: no cover - during local dev
    __version__ = "0.1.0"

__all__ = [
    "__version__",
    "AffordabilityRequest",
    "DEFAULT_JURISDICTION",
    "DISCLAIMER",
    "FilingStatus",
    "FinancingStructure",
    "JURISDICTIONS",
    "MarketAssumptions",
    "OptimizationRequest",
    "TaxSituation",
    "affordability_matrix",
    "build_financing",
    "calc_affordability",
    "calc_scenario",
    "cash_flow_impact",
    "compare_scenarios",
    "get_jurisdiction",
    "run_optimization",
]

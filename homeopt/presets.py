DISCLAIMER = (
    "This tool estimates financing outcomes using simplified 2024 tax brackets, fixed "
    "jurisdiction cost rates and constant market assumptions. Results are estimates only; "
    "lender terms, actual assessments and a tax professional's advice prevail."
)

PROJECTION_YEARS = 30

# Federal 2024 ordinary-income brackets: (lower, upper, rate)
FEDERAL_BRACKETS = {
    "single": (
        (0, 11600, 0.10), (11600, 47150, 0.12), (47150, 100525, 0.22), (100525, 191950, 0.24),
        (191950, 243725, 0.32), (243725, 609350, 0.35), (609350, float("inf"), 0.37),
    ),
    "married": (
        (0, 23200, 0.10), (23200, 94300, 0.12), (94300, 201050, 0.22), (201050, 383900, 0.24),
        (383900, 487450, 0.32), (487450, 731200, 0.35), (731200, float("inf"), 0.37),
    ),
}
FEDERAL_STD_DEDUCTION = {"single": 14600.0, "married": 29200.0}

FEDERAL_MORTGAGE_DEBT_CEILING = 750000.0
SALT_CAP = 10000.0

NIIT_RATE = 0.038
NIIT_THRESHOLD = {"single": 200000.0, "married": 250000.0}

FICA = {
    "ss_rate": 0.062,
    "ss_wage_base": 168600.0,
    "medicare_rate": 0.0145,
    "addl_medicare_rate": 0.009,
    "addl_medicare_threshold": {"single": 200000.0, "married": 250000.0},
}

# Closing-cost constants shared by every jurisdiction
LOAN_FEE_RATE = 0.005
TITLE_FEE_RATE = 0.003
TITLE_FEE_CAP = 15000.0
FLAT_BUY_FEE = 2500.0
SELL_FEE_RATE = 0.01
SELL_FEE_CAP = 50000.0
REFI_CLOSING_RATE = 0.025

PMI_LTV_THRESHOLD = 0.80
PMI_CANCEL_LTV = 0.78
PMI_REFERENCE_RATE = 0.065
PMI_REFERENCE_TERM = 30
PMI_DEFAULT_RATE = 0.005

# Optimizer grids
TRADITIONAL_DP_PCTS = (0.10, 0.15, 0.20, 0.25, 0.30, 0.35, 0.40, 0.50)
MARGIN_DP_PCTS = (0.20, 0.25, 0.30, 0.35, 0.40, 0.50)
MARGIN_PCTS = (0.10, 0.15, 0.20, 0.25, 0.30)
HELOC_MARGIN_PCTS = (0.0, 0.10, 0.15, 0.20, 0.25, 0.30)
HELOC_PCTS = (0.30, 0.40, 0.50, 0.60, 0.70, 0.80)
REFI_DP_PCTS = (0.20, 0.25, 0.30, 0.35, 0.40)
REFI_CASH_OUT_PCTS = (0.20, 0.30, 0.40, 0.50)
MAX_MARGIN_PCT = 0.30
MAX_REFI_LTV = 0.80

SCORE_WEIGHTS = {"advantage": 0.40, "break_even": 0.25, "risk": 0.10, "rate": 0.15, "buffer": 0.10}
RISK_SCORES = {"Low": 1.5, "Medium": 1.0, "Medium-High": 0.5, "High": 0.0}
ADVANTAGE_NORMALIZER = 500000.0
RATE_SCORE_PIVOT = 0.08
NEVER_BREAK_EVEN_SCORE = -3.0

# Affordability
DTI_CEILING = 0.43
AFFORDABILITY_DP_PCTS = (0.05, 0.10, 0.20, 0.30, 0.50)
COMFORT_LEVELS = (0.25, 0.30, 0.35, 0.40)
DEFAULT_EFFECTIVE_TAX_RATE = 0.45
CASH_FLOW_WARNING_PCT = 0.20

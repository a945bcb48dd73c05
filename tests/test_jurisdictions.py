import os
import sys

import pytest
from pydantic import ValidationError

sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import homeopt
from homeopt.jurisdictions import DEFAULT_JURISDICTION, JURISDICTIONS, SAN_FRANCISCO, get_jurisdiction
from homeopt.models import AffordabilityRequest, FinancingStructure, MarketAssumptions


def test_lookup_is_case_insensitive():
    assert get_jurisdiction("sf") is SAN_FRANCISCO
    assert get_jurisdiction("NYC").key == "NYC"
    assert DEFAULT_JURISDICTION is SAN_FRANCISCO


def test_unknown_jurisdiction_lists_known_keys():
    with pytest.raises(KeyError) as exc:
        get_jurisdiction("XX")
    assert "SF" in str(exc.value)


def test_registry_keys_match_profiles():
    for key, profile in JURISDICTIONS.items():
        assert profile.key == key
        assert 0 < profile.property_tax_rate < 0.05


def test_profiles_are_frozen():
    with pytest.raises(ValidationError):
        SAN_FRANCISCO.property_tax_rate = 0.5


def test_invalid_inputs_rejected():
    with pytest.raises(ValidationError):
        FinancingStructure(home_price=-1)
    with pytest.raises(ValidationError):
        FinancingStructure(home_price=1_000_000, loan_term=0)
    with pytest.raises(ValidationError):
        MarketAssumptions(margin_rate=1.5)
    with pytest.raises(ValidationError):
        AffordabilityRequest(gross_income=100_000, total_savings=0, target_take_home_pct=0)


def test_package_exports_version():
    assert isinstance(homeopt.__version__, str)
    assert homeopt.DISCLAIMER

# =============================================================================
# lib/pricing.py - Call Cost Estimates
# =============================================================================
# Approximate Twilio voice rates (USD per minute) from a US number to common
# destinations. Shown to users before a test call; rates change, so treat
# these as estimates only.
#
# Usage:
#   from lib.pricing import estimate_call_cost
#   estimate_call_cost("+447400123456")
#   # CallCostEstimate(country_code="GB", country_name="United Kingdom", rate=0.14, ...)
# =============================================================================

from typing import NamedTuple

import phonenumbers


class CallPricing(NamedTuple):
    country_code: str
    country_name: str
    calling_code: str
    mobile_rate: float    # USD per minute
    landline_rate: float  # USD per minute


class CallCostEstimate(NamedTuple):
    country_code: str
    country_name: str
    rate: float
    estimated: float
    currency: str = "USD"


_PRICING = [
    # Popular destinations
    CallPricing("GB", "United Kingdom", "44", 0.14, 0.02),
    CallPricing("US", "United States", "1", 0.017, 0.017),
    CallPricing("CA", "Canada", "1", 0.017, 0.017),
    CallPricing("IN", "India", "91", 0.04, 0.04),
    CallPricing("AU", "Australia", "61", 0.10, 0.03),
    CallPricing("DE", "Germany", "49", 0.14, 0.02),
    CallPricing("FR", "France", "33", 0.15, 0.02),

    # Europe
    CallPricing("AT", "Austria", "43", 0.18, 0.03),
    CallPricing("BE", "Belgium", "32", 0.17, 0.03),
    CallPricing("CH", "Switzerland", "41", 0.20, 0.03),
    CallPricing("CZ", "Czech Republic", "420", 0.15, 0.03),
    CallPricing("DK", "Denmark", "45", 0.12, 0.02),
    CallPricing("ES", "Spain", "34", 0.16, 0.02),
    CallPricing("FI", "Finland", "358", 0.18, 0.03),
    CallPricing("GR", "Greece", "30", 0.16, 0.03),
    CallPricing("HU", "Hungary", "36", 0.15, 0.03),
    CallPricing("IE", "Ireland", "353", 0.16, 0.02),
    CallPricing("IT", "Italy", "39", 0.18, 0.02),
    CallPricing("NL", "Netherlands", "31", 0.16, 0.02),
    CallPricing("NO", "Norway", "47", 0.12, 0.02),
    CallPricing("PL", "Poland", "48", 0.14, 0.03),
    CallPricing("PT", "Portugal", "351", 0.16, 0.03),
    CallPricing("RO", "Romania", "40", 0.12, 0.04),
    CallPricing("RU", "Russia", "7", 0.12, 0.05),
    CallPricing("SE", "Sweden", "46", 0.12, 0.02),
    CallPricing("UA", "Ukraine", "380", 0.12, 0.06),

    # Asia Pacific
    CallPricing("BD", "Bangladesh", "880", 0.08, 0.06),
    CallPricing("CN", "China", "86", 0.04, 0.02),
    CallPricing("HK", "Hong Kong", "852", 0.04, 0.02),
    CallPricing("ID", "Indonesia", "62", 0.10, 0.06),
    CallPricing("JP", "Japan", "81", 0.12, 0.08),
    CallPricing("KR", "South Korea", "82", 0.08, 0.04),
    CallPricing("LK", "Sri Lanka", "94", 0.12, 0.08),
    CallPricing("MY", "Malaysia", "60", 0.06, 0.03),
    CallPricing("NP", "Nepal", "977", 0.12, 0.10),
    CallPricing("NZ", "New Zealand", "64", 0.12, 0.03),
    CallPricing("PH", "Philippines", "63", 0.19, 0.04),
    CallPricing("PK", "Pakistan", "92", 0.15, 0.08),
    CallPricing("SG", "Singapore", "65", 0.04, 0.02),
    CallPricing("TH", "Thailand", "66", 0.06, 0.04),
    CallPricing("TW", "Taiwan", "886", 0.10, 0.04),
    CallPricing("VN", "Vietnam", "84", 0.08, 0.06),

    # Middle East
    CallPricing("AE", "United Arab Emirates", "971", 0.18, 0.10),
    CallPricing("IL", "Israel", "972", 0.12, 0.04),
    CallPricing("SA", "Saudi Arabia", "966", 0.18, 0.10),
    CallPricing("TR", "Turkey", "90", 0.18, 0.04),

    # Africa
    CallPricing("EG", "Egypt", "20", 0.12, 0.08),
    CallPricing("GH", "Ghana", "233", 0.20, 0.12),
    CallPricing("KE", "Kenya", "254", 0.18, 0.10),
    CallPricing("NG", "Nigeria", "234", 0.25, 0.25),
    CallPricing("ZA", "South Africa", "27", 0.16, 0.06),

    # Latin America
    CallPricing("AR", "Argentina", "54", 0.18, 0.06),
    CallPricing("BR", "Brazil", "55", 0.20, 0.04),
    CallPricing("CL", "Chile", "56", 0.14, 0.04),
    CallPricing("CO", "Colombia", "57", 0.12, 0.06),
    CallPricing("MX", "Mexico", "52", 0.12, 0.04),
    CallPricing("PE", "Peru", "51", 0.14, 0.06),
]

CALL_PRICING: dict[str, CallPricing] = {p.country_code: p for p in _PRICING}

DEFAULT_PRICING = CallPricing("DEFAULT", "Other", "", 0.20, 0.10)


def get_estimated_call_cost(country_code: str, duration_minutes: float = 1) -> CallCostEstimate:
    """
    Estimate a call's cost for an ISO country code.

    Uses the mobile rate (the higher one) so the estimate errs high.
    Unlisted countries get the DEFAULT rate.
    """
    pricing = CALL_PRICING.get(country_code.upper(), DEFAULT_PRICING)
    rate = pricing.mobile_rate
    return CallCostEstimate(
        country_code=pricing.country_code,
        country_name=pricing.country_name,
        rate=rate,
        estimated=rate * duration_minutes,
    )


def find_pricing_for_number(phone_number: str) -> CallPricing | None:
    """
    Match an E.164 number to a destination in the rate table.

    The country comes from libphonenumber's region for the number, so
    shared calling codes (+1 Jamaica, +7 Kazakhstan) are not priced as the
    US or Russia. Numbers that do not parse, or resolve to a region outside
    the table, return None.
    """
    try:
        parsed = phonenumbers.parse(phone_number.strip(), None)
    except phonenumbers.NumberParseException:
        return None

    region = phonenumbers.region_code_for_number(parsed)
    if not region:
        return None
    return CALL_PRICING.get(region)


def estimate_call_cost(phone_number: str, minutes: float = 1) -> CallCostEstimate | None:
    """
    Estimate a call's cost from the destination number.

    Returns None when the destination country is not in the rate table.
    """
    pricing = find_pricing_for_number(phone_number)
    if pricing is None:
        return None
    return get_estimated_call_cost(pricing.country_code, minutes)


def format_cost(cost: float) -> str:
    """Format a USD cost for display, e.g. "$0.14"."""
    return f"${cost:.2f}"

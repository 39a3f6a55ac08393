"""ISO 3166-1 country code conversion; the ticketing API expects alpha-3."""

from __future__ import annotations

ISO3_TO_ISO2: dict[str, str] = {
    # Europe
    "GBR": "GB", "ESP": "ES", "ITA": "IT", "DEU": "DE", "FRA": "FR", "NLD": "NL",
    "PRT": "PT", "AUT": "AT", "BEL": "BE", "DNK": "DK", "SWE": "SE", "NOR": "NO",
    "IRL": "IE", "POL": "PL", "TUR": "TR", "CHE": "CH", "GRC": "GR", "CZE": "CZ",
    "HUN": "HU", "ROU": "RO", "FIN": "FI", "RUS": "RU", "UKR": "UA", "HRV": "HR",
    "SRB": "RS", "BGR": "BG", "SVK": "SK", "SVN": "SI", "LVA": "LV", "LTU": "LT",
    "EST": "EE", "ISL": "IS", "LUX": "LU", "MNE": "ME", "MKD": "MK", "ALB": "AL",
    "BIH": "BA", "MLT": "MT", "CYP": "CY", "MCO": "MC", "AND": "AD",
    # Americas
    "USA": "US", "CAN": "CA", "MEX": "MX", "BRA": "BR", "ARG": "AR", "CHL": "CL",
    "COL": "CO", "PER": "PE", "VEN": "VE", "ECU": "EC", "URY": "UY", "PRY": "PY",
    "BOL": "BO", "PAN": "PA", "CRI": "CR", "DOM": "DO", "HND": "HN", "GTM": "GT",
    "NIC": "NI", "SLV": "SV", "CUB": "CU", "JAM": "JM", "HTI": "HT", "TTO": "TT",
    # Asia Pacific and Middle East
    "AUS": "AU", "NZL": "NZ", "JPN": "JP", "CHN": "CN", "IND": "IN", "KOR": "KR",
    "SGP": "SG", "MYS": "MY", "THA": "TH", "IDN": "ID", "VNM": "VN", "PHL": "PH",
    "HKG": "HK", "TWN": "TW", "ARE": "AE", "SAU": "SA", "QAT": "QA", "BHR": "BH",
    "KWT": "KW", "OMN": "OM", "ISR": "IL", "PAK": "PK", "BGD": "BD", "LKA": "LK",
    "AZE": "AZ",
    # Africa
    "ZAF": "ZA", "EGY": "EG", "MAR": "MA", "NGA": "NG", "KEN": "KE", "TUN": "TN",
    "DZA": "DZ", "GHA": "GH", "UGA": "UG", "TZA": "TZ", "ETH": "ET", "SDN": "SD",
}

ISO2_TO_ISO3: dict[str, str] = {iso2: iso3 for iso3, iso2 in ISO3_TO_ISO2.items()}


def iso3_to_iso2(code: str | None) -> str | None:
    if not code:
        return None
    return ISO3_TO_ISO2.get(code.strip().upper())


def iso2_to_iso3(code: str | None) -> str | None:
    if not code:
        return None
    return ISO2_TO_ISO3.get(code.strip().upper())


def normalize_to_iso3(code: str | None) -> str | None:
    """Accept alpha-2 or alpha-3 and return alpha-3, or None if unusable."""

    if not code:
        return None
    upper = code.strip().upper()
    if len(upper) == 3:
        return upper
    if len(upper) == 2:
        return iso2_to_iso3(upper)
    return None

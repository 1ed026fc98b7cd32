"""Built-in country records served when the upstream provider is unavailable."""

from __future__ import annotations

from typing import Any

SAMPLE_COUNTRIES: list[dict[str, Any]] = [
    {
        "name": {"common": "United States", "official": "United States of America"},
        "region": "Americas",
        "subregion": "North America",
        "capital": ["Washington, D.C."],
        "population": 331900000,
        "area": 9372610.0,
        "flags": {
            "png": "https://flagcdn.com/w320/us.png",
            "svg": "https://flagcdn.com/us.svg",
            "alt": "The flag of the United States",
        },
    },
    {
        "name": {"common": "Germany", "official": "Federal Republic of Germany"},
        "region": "Europe",
        "subregion": "Western Europe",
        "capital": ["Berlin"],
        "population": 83240000,
        "area": 357114.0,
        "flags": {
            "png": "https://flagcdn.com/w320/de.png",
            "svg": "https://flagcdn.com/de.svg",
            "alt": "The flag of Germany",
        },
    },
    {
        "name": {"common": "Japan", "official": "Japan"},
        "region": "Asia",
        "subregion": "Eastern Asia",
        "capital": ["Tokyo"],
        "population": 125800000,
        "area": 377930.0,
        "flags": {
            "png": "https://flagcdn.com/w320/jp.png",
            "svg": "https://flagcdn.com/jp.svg",
            "alt": "The flag of Japan",
        },
    },
    {
        "name": {"common": "Brazil", "official": "Federative Republic of Brazil"},
        "region": "Americas",
        "subregion": "South America",
        "capital": ["Brasília"],
        "population": 215300000,
        "area": 8515767.0,
        "flags": {
            "png": "https://flagcdn.com/w320/br.png",
            "svg": "https://flagcdn.com/br.svg",
            "alt": "The flag of Brazil",
        },
    },
    {
        "name": {"common": "Australia", "official": "Commonwealth of Australia"},
        "region": "Oceania",
        "subregion": "Australia and New Zealand",
        "capital": ["Canberra"],
        "population": 25690000,
        "area": 7692024.0,
        "flags": {
            "png": "https://flagcdn.com/w320/au.png",
            "svg": "https://flagcdn.com/au.svg",
            "alt": "The flag of Australia",
        },
    },
]

"""Core constants used across Epicurve modules.

This module centralizes source field names, calendar tables, and chart
defaults. Keeping values here avoids magic literals in business logic.
"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path

DEFAULT_OUTPUT_DIR = Path(".")
DEFAULT_CHART_FILE_NAME = "total.png"
DEFAULT_HTTP_TIMEOUT_SECONDS = 60.0
DEFAULT_LOG_LEVEL = "info"
DEFAULT_TARGET_YEAR = 2020
DEFAULT_AVERAGE_DAYS = 7
PER_CAPITA_UNIT = 100_000
POPULATION_UNAVAILABLE_REASON = "population unavailable"
ECDC_CASE_DISTRIBUTION_URL = "https://opendata.ecdc.europa.eu/covid19/casedistribution/json/"

# Cumulative day count at the start of each month; index 0 is January.
FIRST_DAY_OF_MONTH = (0, 31, 60, 91, 121, 152, 182, 213, 244, 274, 305, 336)
# Day offset zero; January 1st is day 1.
DAY_OFFSET_EPOCH = datetime(2019, 12, 31)

DAY_FIELD = "day"
MONTH_FIELD = "month"
YEAR_FIELD = "year"
CASES_FIELD = "cases"
DEATHS_FIELD = "deaths"
REGION_FIELD = "countriesAndTerritories"
POPULATION_FIELD = "popData2018"

TIMESTAMP_FIELDS = ("Last Update", "Last_Update")
COUNTRY_FIELDS = ("Country/Region", "Country_Region")
PROVINCE_FIELDS = ("Province/State", "Province_State")
CONFIRMED_FIELD = "Confirmed"
DEATHS_REPORT_FIELD = "Deaths"
RECOVERED_FIELD = "Recovered"

TIMESTAMP_FORMATS = (
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
    "%m/%d/%Y %H:%M",
    "%m/%d/%y %H:%M",
    "%m/%d/%Y",
)

SUPPORTED_PAYLOAD_FORMATS = ("auto", "json", "csv", "zip")
SUPPORTED_COUNT_FIELDS = ("confirmed", "deaths", "recovered")

DEFAULT_REGIONS = (
    "Spain",
    "Sweden",
    "Belgium",
    "United Kingdom",
    "Germany",
    "Brazil",
    "United States of America",
)

CHART_WIDTH_PIXELS = 1920
CHART_HEIGHT_PIXELS = 1024
CHART_DPI = 100
CHART_LEGEND_LOCATION = "upper left"

GRAPH_PALETTE = (
    (230, 25, 75),
    (60, 180, 75),
    (255, 225, 25),
    (0, 130, 200),
    (245, 130, 48),
    (145, 30, 180),
    (70, 240, 240),
    (240, 50, 230),
    (210, 245, 60),
    (250, 190, 190),
    (0, 128, 128),
    (230, 190, 255),
    (170, 110, 40),
    (155, 250, 200),
    (128, 0, 0),
    (170, 255, 195),
    (128, 128, 0),
    (255, 215, 180),
    (0, 0, 128),
    (128, 128, 128),
    (0, 0, 0),
)

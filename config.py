# Configuration constants and environment settings for the commute stress engine.

import os
from datetime import timedelta, timezone
from dotenv import load_dotenv

load_dotenv()

# Hawaii Standard Time. Hawaii has no daylight saving, so this stays a fixed
# offset rather than a timezone database lookup.
HAWAII_UTC_OFFSET = timezone(timedelta(hours=-10), "HST")

# Provider-call budget per analyzed window.
MAX_DEPARTURE_SLOTS = 8
DEFAULT_INTERVAL_MINUTES = 10

# Stress index bounds and level thresholds (inclusive upper bounds).
STRESS_INDEX_MAX = 200
STABLE_MAX = 35
MODERATE_MAX = 70

STRESS_LATENESS_WEIGHT = 2
STRESS_VOLATILITY_WEIGHT = 8

# A slot arriving with this many minutes (or fewer) to spare is "tight".
TIGHT_BUFFER_MINUTES = 5

# Risk factor signal: the next slot's delay grows by more than 10%.
RISK_FACTOR_BASE = 5
RISK_FACTOR_RISING = 20
RISK_DELAY_GROWTH = 1.1

# Impact estimates
CO2_KG_PER_CONGESTION_MINUTE = 0.02
COMMUTE_DAYS_PER_YEAR = 240
FUEL_GAL_PER_CONGESTION_MINUTE = 0.034
GAS_PRICE_PER_GALLON = 4.50
H1_COMMUTERS = 10_857

# --- Environment ---
GOOGLE_MAPS_API_KEY = os.getenv("GOOGLE_MAPS_API_KEY", "")
TRAFFIC_CORRECTION = os.getenv("TRAFFIC_CORRECTION", "reality")
REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", "10"))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

PLACEHOLDER_API_KEYS = ("", "your_api_key_here")

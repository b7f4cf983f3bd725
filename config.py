"""Configuration settings for Millionaire."""

import os

# Game settings
GOAL = 1_000_000
STARTING_BALANCE = 1000
STARTING_INCOME = 1000
STARTING_STOCKS = 3
NEW_STOCK_COST = 15000
INCOME_UPGRADE_MULTIPLIER = 10  # Upgrade costs 10x the starting income

# Bounds for randomly generated stocks (inclusive)
STOCK_GENERATION = {
    "min_value": 10,
    "max_value": 100,
    "min_variation": 1,
    "max_variation": 10,
}

# Name parts for randomly generated stocks
NAME_PREFIXES = [
    "Rainbow", "Asteroid", "Quantum", "Golden", "Iron", "Crystal", "Silver",
    "Atlas", "Nova", "Polar", "Summit", "Harbor", "Cobalt", "Velvet", "Echo",
]
NAME_SUFFIXES = [
    "Industries", "Holdings", "Corp", "Mining", "Foods", "Motors",
    "Systems", "Energy", "Labs", "Logistics", "Pharma", "Textiles",
]

# Save files
SAVE_SUFFIX = ".save.json"
SAVE_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
COPY_PREFIX = "Copy of "
APP_NAME = "Millionaire"
APP_AUTHOR = "Rainbow Asteroids"

# Overrides the platform data directory when set
SAVE_DIR = os.environ.get('MILLIONAIRE_SAVE_DIR', '')

# Turn logging
LOGGING = {
    "log_file_name": "turn_log.json",   # Written inside the save directory
    "max_entries": 1000,                # Keep last 1000 turns
    "verbose": os.environ.get('MILLIONAIRE_VERBOSE', '').lower() in ('1', 'true', 'yes'),
}

# Price history indicators
INDICATORS = {
    "sma_periods": [5, 10],
    "rsi_period": 14,
}

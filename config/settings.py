"""
Configuration settings for FleetLedger.
Handles environment variables and application constants.
"""

import os
from dotenv import load_dotenv
from typing import List

# Load environment variables
load_dotenv()

# Supabase Configuration
SUPABASE_URL = os.getenv("SUPABASE_URL", "")
SUPABASE_KEY = os.getenv("SUPABASE_KEY", "")

# Application Settings
APP_NAME = os.getenv("APP_NAME", "Income & Expense Tracker")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

# Remote tables
TRANSACTIONS_TABLE = "Transactions"
VEHICLES_TABLE = "Vehicles"
VEHICLES_SELECT = "*, color:Color(*), model:Model(*, brand:Brands(*))"
ORDER_COLUMN = "created_at"

# Enumerations (must match the database enums exactly)
INCOME = "Income"
EXPENSE = "Expense"
TRANSACTION_TYPES: List[str] = [INCOME, EXPENSE]
TRANSACTION_STATUSES: List[str] = ["Not Yet Paid", "Pending", "Completed", "Missing in Action"]
VEHICLE_TYPES: List[str] = ["Car", "Motorcycle"]

# Defaults for a freshly added row
DEFAULT_VEHICLE_ID = 1
DEFAULT_AMOUNT = 0
DEFAULT_TYPE = INCOME
DEFAULT_STATUS = "Not Yet Paid"
DEFAULT_DESCRIPTION = ""

# Fallbacks when an edited numeric cell cannot be parsed
AMOUNT_FALLBACK = 0.0
VEHICLE_FALLBACK = 1

# Filterable columns, in display order
FILTER_FIELDS: List[str] = ["date", "description", "vehicle", "type", "amount"]

# CSV Export
CSV_FILENAME = "budget_template.csv"
CSV_HEADERS: List[str] = ["Date", "Description", "Category", "Income", "Expense"]
CSV_LEGACY_LAYOUT = os.getenv("CSV_LEGACY_LAYOUT", "false").strip().lower() in ("1", "true", "yes")

# Currency display (amounts are stored currency-agnostic)
CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₱")

# UI Theme Colors
THEME_COLORS = {
    "primary": "#1e40af",
    "income": "#16a34a",
    "expense": "#dc2626",
    "balance_positive": "#2563eb",
    "balance_negative": "#dc2626"
}

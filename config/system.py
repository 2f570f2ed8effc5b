"""
====================================================
🎯 SYSTEM CONFIGURATION — DEPTH SELLER
====================================================

Execution mode, logging and observability switches.
Mode and port stay raw env strings; core.settings validates them.
"""

import os

from dotenv import load_dotenv

load_dotenv()

# =====================================================
# 🎯 MODE
# =====================================================

# Operating mode:
#  - "paper" → real feeds, sells recorded in memory by the paper gateway
#  - "live"  → real feeds, real limit sells on the executable venue
MODE = os.getenv("SELLER_MODE", "paper").strip().lower()


# =====================================================
# 🚨 LIVE TRADING SAFETY
# =====================================================

# Live mode refuses to start unless this env flag is "true"
LIVE_ENV_FLAG = "SELLER_LIVE_TRADING_ENABLED"
LIVE_TRADING_ENABLED = os.getenv(LIVE_ENV_FLAG, "false").strip().lower() == "true"


# =====================================================
# 🧾 LOGGING
# =====================================================

# Log level (DEBUG, INFO, WARNING, ERROR)
LOG_LEVEL = os.getenv("SELLER_LOG_LEVEL", "INFO")

# "console" for development, "json" for production
LOG_FORMAT = os.getenv("SELLER_LOG_FORMAT", "console")

# Log file written alongside stdout (empty string disables it)
LOG_FILE = os.getenv("SELLER_LOG_FILE", "seller.log")


# =====================================================
# 📊 METRICS
# =====================================================

METRICS_ENABLED = os.getenv("SELLER_METRICS_ENABLED", "true").strip().lower() == "true"
METRICS_PORT = os.getenv("SELLER_METRICS_PORT", "8000")

"""
====================================================
💰 TRADING CONFIGURATION — DEPTH SELLER
====================================================

Sell policy. Fixed for the whole process lifetime once validated.
Values stay raw env strings here; core.settings parses and validates them
so a bad value surfaces as a ConfigurationError at startup.
"""

import os

from dotenv import load_dotenv

load_dotenv()


# =====================================================
# 💰 SIZE & GATES
# =====================================================

# Size of every sell. Also the depth both order books are weighted over.
TRADE_AMOUNT = os.getenv("SELLER_TRADE_AMOUNT", "1.0")

# Minimum executable/reference ratio to sell (in (0, 1]); 0.98 = up to 2% below mark
ALLOWED_DIVERGENCE = os.getenv("SELLER_ALLOWED_DIVERGENCE", "0.98")

# Never sell while the executable weighted bid is below this price
FLOOR_THRESHOLD = os.getenv("SELLER_FLOOR_THRESHOLD", "1.0")

# "utilize-divergence" or "disregard-divergence" (reference is informational only)
STRATEGY = os.getenv("SELLER_STRATEGY", "utilize-divergence")


# =====================================================
# ⏱️ SCHEDULING & FRESHNESS
# =====================================================

# Seconds between evaluations
INTERVAL_SECS = os.getenv("SELLER_INTERVAL_SECS", "10.0")

# Skip when a feed has sent nothing for this many seconds. Unset disables the gate.
MAX_STALENESS_SECS = (os.getenv("SELLER_MAX_STALENESS_SECS") or "").strip() or None

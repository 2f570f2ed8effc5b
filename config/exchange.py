"""
====================================================
🏦 EXCHANGE CONFIGURATION — DEPTH SELLER
====================================================

Venues and symbols of both feeds, plus the executable venue's account.
Venue ids are ccxt exchange ids (e.g. "binance", "kraken", "okx").
"""

import os

from dotenv import load_dotenv

load_dotenv()

# =====================================================
# 📡 REFERENCE FEED (informational mark price)
# =====================================================

REFERENCE_EXCHANGE = os.getenv("SELLER_REFERENCE_EXCHANGE", "binance")
REFERENCE_SYMBOL = os.getenv("SELLER_REFERENCE_SYMBOL", "SOL/USDT")


# =====================================================
# 💱 EXECUTABLE FEED (where sells are placed)
# =====================================================

EXECUTABLE_EXCHANGE = os.getenv("SELLER_EXECUTABLE_EXCHANGE", "kraken")
EXECUTABLE_SYMBOL = os.getenv("SELLER_EXECUTABLE_SYMBOL", "SOL/USD")

# Order book levels requested from each venue per snapshot
ORDERBOOK_LIMIT = os.getenv("SELLER_ORDERBOOK_LIMIT", "100")


# =====================================================
# 🔑 EXECUTABLE ACCOUNT
# =====================================================

EXECUTABLE_API_KEY = os.getenv("SELLER_EXECUTABLE_API_KEY")
EXECUTABLE_API_SECRET = os.getenv("SELLER_EXECUTABLE_API_SECRET")

# Optional account addresses forwarded to the venue with every order
WALLET_ADDRESS = os.getenv("SELLER_WALLET_ADDRESS")
OPEN_ORDERS_ADDRESS = os.getenv("SELLER_OPEN_ORDERS_ADDRESS")

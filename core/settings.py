"""
Startup settings for the depth seller.

Merges config/ defaults with CLI overrides into immutable dataclasses and
validates them. Any invalid value raises ConfigurationError, which is fatal:
the process must not start.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from config import exchange as exchange_config
from config import system as system_config
from config import trading as trading_config
from core.exceptions import ConfigurationError, create_configuration_error
from decision.engine import Strategy


def parse_strategy(value) -> Strategy:
    """Accept a Strategy or its config spelling ('utilize-divergence', ...)."""
    if isinstance(value, Strategy):
        return value
    normalized = str(value).strip().lower().replace("_", "-")
    for strategy in Strategy:
        if strategy.value == normalized:
            return strategy
    raise create_configuration_error("strategy", value, f"must be one of {[s.value for s in Strategy]}")


@dataclass(frozen=True)
class TradingPolicy:
    trade_amount: float
    allowed_divergence: float
    floor_threshold: float
    strategy: Strategy = Strategy.UTILIZE_DIVERGENCE
    interval_secs: float = 10.0
    max_staleness: Optional[float] = None


@dataclass(frozen=True)
class VenueSettings:
    exchange_id: str
    symbol: str


@dataclass(frozen=True)
class MarketAccount:
    """
    Account data that travels next to the executable market handle.
    Never attached onto the venue client object itself.
    """

    api_key: Optional[str] = None
    secret: Optional[str] = None
    wallet_address: Optional[str] = None
    open_orders_address: Optional[str] = None
    params: Dict[str, Any] = field(default_factory=dict)

    def order_params(self) -> Dict[str, Any]:
        """Extra params forwarded with every order."""
        params = dict(self.params)
        if self.wallet_address:
            params.setdefault("walletAddress", self.wallet_address)
        if self.open_orders_address:
            params.setdefault("openOrdersAddress", self.open_orders_address)
        return params

    @property
    def has_credentials(self) -> bool:
        return bool(self.api_key and self.secret)


@dataclass(frozen=True)
class SellerSettings:
    mode: str
    reference: VenueSettings
    executable: VenueSettings
    policy: TradingPolicy
    account: MarketAccount = field(default_factory=MarketAccount)
    orderbook_limit: int = 100
    live_trading_enabled: bool = False
    metrics_enabled: bool = True
    metrics_port: int = 8000


def _pick(override, default):
    return default if override is None else override


def _as_number(name: str, value, kind=float):
    """Parse a numeric setting (env values arrive as strings). None stays None."""
    if value is None:
        return None
    try:
        number = kind(value)
    except (TypeError, ValueError) as e:
        raise create_configuration_error(name, value, f"not a valid {kind.__name__}") from e
    if not math.isfinite(number):
        raise create_configuration_error(name, value, "must be finite")
    return number


def build_settings(args: Any = None) -> SellerSettings:
    """
    Build settings from config/ defaults, overridden by parsed CLI args.
    Attributes missing on `args` (or None) fall back to config.

    Raises:
        ConfigurationError: When a numeric value does not parse
    """

    def arg(name):
        return getattr(args, name, None) if args is not None else None

    policy = TradingPolicy(
        trade_amount=_as_number("trade_amount", _pick(arg("trade_amount"), trading_config.TRADE_AMOUNT)),
        allowed_divergence=_as_number(
            "allowed_divergence", _pick(arg("allowed_divergence"), trading_config.ALLOWED_DIVERGENCE)
        ),
        floor_threshold=_as_number("floor_threshold", _pick(arg("floor_threshold"), trading_config.FLOOR_THRESHOLD)),
        strategy=parse_strategy(_pick(arg("strategy"), trading_config.STRATEGY)),
        interval_secs=_as_number("interval_secs", _pick(arg("interval_secs"), trading_config.INTERVAL_SECS)),
        max_staleness=_as_number("max_staleness", _pick(arg("max_staleness"), trading_config.MAX_STALENESS_SECS)),
    )
    return SellerSettings(
        mode=str(_pick(arg("mode"), system_config.MODE)).strip().lower(),
        reference=VenueSettings(
            exchange_id=_pick(arg("reference_exchange"), exchange_config.REFERENCE_EXCHANGE),
            symbol=_pick(arg("reference_symbol"), exchange_config.REFERENCE_SYMBOL),
        ),
        executable=VenueSettings(
            exchange_id=_pick(arg("executable_exchange"), exchange_config.EXECUTABLE_EXCHANGE),
            symbol=_pick(arg("executable_symbol"), exchange_config.EXECUTABLE_SYMBOL),
        ),
        policy=policy,
        account=MarketAccount(
            api_key=_pick(arg("api_key"), exchange_config.EXECUTABLE_API_KEY),
            secret=_pick(arg("api_secret"), exchange_config.EXECUTABLE_API_SECRET),
            wallet_address=_pick(arg("wallet"), exchange_config.WALLET_ADDRESS),
            open_orders_address=_pick(arg("open_orders_address"), exchange_config.OPEN_ORDERS_ADDRESS),
        ),
        orderbook_limit=_as_number("orderbook_limit", exchange_config.ORDERBOOK_LIMIT, int),
        live_trading_enabled=system_config.LIVE_TRADING_ENABLED,
        metrics_enabled=system_config.METRICS_ENABLED and not arg("no_metrics"),
        metrics_port=_as_number("metrics_port", _pick(arg("metrics_port"), system_config.METRICS_PORT), int),
    )


def validate_settings(settings: SellerSettings) -> SellerSettings:
    """
    Validate settings before anything connects.

    Raises:
        ConfigurationError: On the first invalid value
    """
    policy = settings.policy

    if settings.mode not in ("paper", "live"):
        raise create_configuration_error("mode", settings.mode, "must be 'paper' or 'live'")
    for label, venue in (("reference", settings.reference), ("executable", settings.executable)):
        if not venue.exchange_id:
            raise create_configuration_error(f"{label}_exchange", venue.exchange_id, "undefined")
        if not venue.symbol:
            raise create_configuration_error(f"{label}_symbol", venue.symbol, "undefined")
    if policy.trade_amount is None or policy.trade_amount <= 0:
        raise create_configuration_error("trade_amount", policy.trade_amount, "tradeAmount too low")
    if policy.floor_threshold is None or policy.floor_threshold <= 0:
        raise create_configuration_error("floor_threshold", policy.floor_threshold, "floorThreshold too low")
    if policy.allowed_divergence is None or not 0 < policy.allowed_divergence <= 1:
        raise create_configuration_error("allowed_divergence", policy.allowed_divergence, "must be in (0, 1]")
    if policy.interval_secs is None or policy.interval_secs <= 0:
        raise create_configuration_error("interval_secs", policy.interval_secs, "must be > 0")
    if policy.max_staleness is not None and policy.max_staleness <= 0:
        raise create_configuration_error("max_staleness", policy.max_staleness, "must be > 0 when set")
    if settings.orderbook_limit <= 0:
        raise create_configuration_error("orderbook_limit", settings.orderbook_limit, "must be > 0")

    if settings.mode == "live":
        if not settings.live_trading_enabled:
            raise ConfigurationError(
                "Live trading requires explicit confirmation: export SELLER_LIVE_TRADING_ENABLED=true",
                {"field": "mode", "value": "live"},
            )
        if not settings.account.has_credentials:
            raise create_configuration_error("api_key", None, "live mode needs executable venue API credentials")

    return settings


def describe_settings(settings: SellerSettings) -> str:
    """Human-readable setup block (credentials are never printed)."""
    policy = settings.policy
    return (
        "Setup as per config:\n"
        f"- mode:                 {settings.mode}\n"
        f"- referenceFeed:        {settings.reference.exchange_id} {settings.reference.symbol}\n"
        f"- executableFeed:       {settings.executable.exchange_id} {settings.executable.symbol}\n"
        f"- openOrdersAddress:    {settings.account.open_orders_address}\n"
        f"- tradeAmount:          {policy.trade_amount}\n"
        f"- allowedDivergence:    {policy.allowed_divergence}\n"
        f"- floorThreshold:       {policy.floor_threshold}\n"
        f"- strategy:             {policy.strategy.value}\n"
        f"- intervalSecs:         {policy.interval_secs}\n"
        f"- maxStalenessSecs:     {policy.max_staleness}"
    )

import importlib
import sys
from argparse import Namespace
from dataclasses import replace

import pytest

from core import settings as settings_module
from core.exceptions import ConfigurationError
from core.settings import (
    MarketAccount,
    build_settings,
    describe_settings,
    parse_strategy,
    validate_settings,
)
from decision.engine import Strategy

ENV_VARS = [
    "SELLER_MODE",
    "SELLER_LIVE_TRADING_ENABLED",
    "SELLER_TRADE_AMOUNT",
    "SELLER_ALLOWED_DIVERGENCE",
    "SELLER_STRATEGY",
    "SELLER_MAX_STALENESS_SECS",
]


def _reload_config(monkeypatch, module, **env_overrides):
    for key, value in env_overrides.items():
        if value is None:
            monkeypatch.delenv(key, raising=False)
        else:
            monkeypatch.setenv(key, value)

    # Remove config modules from sys.modules so they are reimported
    monkeypatch.delitem(sys.modules, "config", raising=False)
    monkeypatch.delitem(sys.modules, "config.system", raising=False)
    monkeypatch.delitem(sys.modules, "config.exchange", raising=False)
    monkeypatch.delitem(sys.modules, "config.trading", raising=False)
    return importlib.import_module(module)


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch):
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    yield


def _args(**overrides):
    fields = {
        "trade_amount": 2.0,
        "allowed_divergence": 0.9,
        "floor_threshold": 50.0,
        "strategy": None,
        "mode": "paper",
    }
    fields.update(overrides)
    return Namespace(**fields)


class TestConfigModules:
    def test_default_mode_is_paper(self, monkeypatch):
        system = _reload_config(monkeypatch, "config.system")
        assert system.MODE == "paper"
        assert system.LIVE_TRADING_ENABLED is False

    def test_mode_override_via_env(self, monkeypatch):
        system = _reload_config(monkeypatch, "config.system", SELLER_MODE="LIVE")
        assert system.MODE == "live"

    def test_invalid_mode_is_kept_for_validation(self, monkeypatch):
        system = _reload_config(monkeypatch, "config.system", SELLER_MODE="backtest")
        assert system.MODE == "backtest"

    def test_trading_values_from_env(self, monkeypatch):
        trading = _reload_config(
            monkeypatch,
            "config.trading",
            SELLER_TRADE_AMOUNT="12.5",
            SELLER_ALLOWED_DIVERGENCE="0.95",
            SELLER_MAX_STALENESS_SECS="30",
        )
        monkeypatch.setattr(settings_module, "trading_config", trading)

        policy = build_settings(None).policy

        assert policy.trade_amount == 12.5
        assert policy.allowed_divergence == 0.95
        assert policy.max_staleness == 30.0

    def test_non_numeric_value_imports(self, monkeypatch):
        trading = _reload_config(monkeypatch, "config.trading", SELLER_TRADE_AMOUNT="lots")
        assert trading.TRADE_AMOUNT == "lots"

    def test_unset_staleness_disables_gate(self, monkeypatch):
        trading = _reload_config(monkeypatch, "config.trading", SELLER_MAX_STALENESS_SECS=" ")
        assert trading.MAX_STALENESS_SECS is None


class TestEnvParsing:
    @pytest.mark.parametrize(
        "module,name,value",
        [
            ("trading_config", "TRADE_AMOUNT", "lots"),
            ("trading_config", "INTERVAL_SECS", "nan"),
            ("trading_config", "MAX_STALENESS_SECS", "soon"),
            ("exchange_config", "ORDERBOOK_LIMIT", "1.5"),
            ("system_config", "METRICS_PORT", "http"),
        ],
    )
    def test_bad_env_value_is_configuration_error(self, monkeypatch, module, name, value):
        monkeypatch.setattr(getattr(settings_module, module), name, value)

        with pytest.raises(ConfigurationError) as exc_info:
            build_settings(None)

        assert exc_info.value.details["value"] == value

    def test_env_strings_are_parsed(self, monkeypatch):
        monkeypatch.setattr(settings_module.trading_config, "FLOOR_THRESHOLD", " 42.5 ")
        monkeypatch.setattr(settings_module.exchange_config, "ORDERBOOK_LIMIT", "25")
        monkeypatch.setattr(settings_module.system_config, "MODE", " Paper ")

        settings = build_settings(None)

        assert settings.policy.floor_threshold == 42.5
        assert settings.orderbook_limit == 25
        assert settings.mode == "paper"


class TestParseStrategy:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("utilize-divergence", Strategy.UTILIZE_DIVERGENCE),
            ("DISREGARD_DIVERGENCE", Strategy.DISREGARD_DIVERGENCE),
            (Strategy.DISREGARD_DIVERGENCE, Strategy.DISREGARD_DIVERGENCE),
        ],
    )
    def test_known_values(self, value, expected):
        assert parse_strategy(value) is expected

    def test_unknown_value(self):
        with pytest.raises(ConfigurationError):
            parse_strategy("yolo")


class TestBuildSettings:
    def test_cli_overrides_config(self):
        settings = build_settings(
            _args(strategy="disregard-divergence", executable_symbol="SOL/EUR", interval_secs=5.0)
        )

        assert settings.policy.trade_amount == 2.0
        assert settings.policy.strategy is Strategy.DISREGARD_DIVERGENCE
        assert settings.policy.interval_secs == 5.0
        assert settings.executable.symbol == "SOL/EUR"

    def test_missing_args_fall_back_to_config(self):
        settings = build_settings(None)

        assert settings.policy.trade_amount == float(settings_module.trading_config.TRADE_AMOUNT)
        assert settings.reference.symbol == settings_module.exchange_config.REFERENCE_SYMBOL

    def test_no_metrics_flag(self):
        assert build_settings(_args(no_metrics=True)).metrics_enabled is False

    def test_wallet_forwarded_to_account(self):
        settings = build_settings(_args(wallet="W1", open_orders_address="OO1"))

        assert settings.account.order_params() == {"walletAddress": "W1", "openOrdersAddress": "OO1"}


class TestValidateSettings:
    def test_valid_paper_settings(self):
        settings = build_settings(_args())
        assert validate_settings(settings) is settings

    @pytest.mark.parametrize(
        "overrides",
        [
            {"trade_amount": 0.0},
            {"trade_amount": -1.0},
            {"floor_threshold": 0.0},
            {"allowed_divergence": 0.0},
            {"allowed_divergence": 1.5},
            {"interval_secs": 0.0},
            {"max_staleness": -3.0},
            {"mode": "backtest"},
            {"executable_symbol": ""},
            {"reference_exchange": ""},
        ],
    )
    def test_invalid_values_are_fatal(self, overrides):
        with pytest.raises(ConfigurationError):
            validate_settings(build_settings(_args(**overrides)))

    def test_live_requires_explicit_flag(self, monkeypatch):
        monkeypatch.setattr(settings_module.system_config, "LIVE_TRADING_ENABLED", False)

        with pytest.raises(ConfigurationError, match="SELLER_LIVE_TRADING_ENABLED"):
            validate_settings(build_settings(_args(mode="live", api_key="k", api_secret="s")))

    def test_live_requires_credentials(self, monkeypatch):
        monkeypatch.setattr(settings_module.system_config, "LIVE_TRADING_ENABLED", True)
        settings = build_settings(_args(mode="live"))
        settings = replace(settings, account=MarketAccount())

        with pytest.raises(ConfigurationError):
            validate_settings(settings)

    def test_live_with_flag_and_credentials(self, monkeypatch):
        monkeypatch.setattr(settings_module.system_config, "LIVE_TRADING_ENABLED", True)

        settings = validate_settings(build_settings(_args(mode="live", api_key="k", api_secret="s")))

        assert settings.mode == "live"


def test_describe_settings_hides_credentials():
    settings = build_settings(_args(api_key="super-key", api_secret="super-secret"))

    text = describe_settings(settings)

    assert "tradeAmount:          2.0" in text
    assert "super-key" not in text
    assert "super-secret" not in text

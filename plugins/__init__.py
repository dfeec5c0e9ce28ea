"""Agent plugins: the Base dynamic trading tool and the auto client wrapper."""

from .auto_client import AutoClient, AutoClientInterface, auto_client_interface
from .dynamic_trading import DynamicTradingPlugin

__all__ = ["AutoClient", "AutoClientInterface", "DynamicTradingPlugin", "auto_client_interface"]

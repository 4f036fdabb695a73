"""
Rate limiting package for the proxy.

Holds the fixed-window governor that caps upstream profile requests per
minute.
"""

from .fixed_window import RequestGovernor

__all__ = [
    "RequestGovernor",
]

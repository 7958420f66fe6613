from __future__ import annotations

from .key_split_dashboard import make_key_split_dashboard
from .prime_search_dashboard import make_prime_search_dashboard

__all__ = ["make_key_split_dashboard", "make_prime_search_dashboard"]

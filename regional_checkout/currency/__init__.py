"""
Module 'currency': taux de change mis en cache et conversion des montants.
"""
from .rates import RateCache, fetch_rate, get_rate, convert

__all__ = ["RateCache", "fetch_rate", "get_rate", "convert"]

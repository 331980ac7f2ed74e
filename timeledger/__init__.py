"""Time Ledger - log exclusive time intervals and reconcile the day against them"""

__version__ = "0.5.0"

"""Subscription, account and customer management back office."""

__version__ = "1.0.0"

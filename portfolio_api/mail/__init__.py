"""Outbound mail transport."""

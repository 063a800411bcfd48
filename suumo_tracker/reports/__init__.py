"""Reporting: trend charts and the metrics e-mail."""

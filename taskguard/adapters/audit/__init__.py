"""Audit sinks.

Services report security-relevant state transitions (failed logins, blocks,
session changes, task writes) to an injected sink. The default sink discards
events; the store-backed sink keeps a capped, append-only log.
"""

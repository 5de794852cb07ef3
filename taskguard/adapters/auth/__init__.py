"""Credential verification and session adapters used by the login flow."""

"""Signature, Graph API and event processing services."""

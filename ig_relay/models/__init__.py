"""Webhook and Graph API models."""

"""Test doubles for code that uses broker_client."""

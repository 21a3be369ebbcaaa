"""Broker HTTP API."""

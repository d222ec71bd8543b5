"""Adapters — Discord transport, delimited storage, status API."""

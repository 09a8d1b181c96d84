"""Coercion of raw row values and lookups into telematics bags."""

"""Frequency reference data, audio providers and the detection service."""

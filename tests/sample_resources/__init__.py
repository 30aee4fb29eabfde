"""Endpoint modules mounted by the test suite."""

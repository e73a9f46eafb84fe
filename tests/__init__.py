"""
Financial Command Center Test Suite

This package contains unit tests and fixtures for the dashboard.

Run tests with:
    pytest tests/
    pytest tests/test_readiness.py -v
    pytest tests/test_readiness.py::TestTeardown -v
"""

__version__ = "1.0.0"

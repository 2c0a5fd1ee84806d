"""
Test Suite for Portfolio Gateway.

Test organization:
    - unit/: Unit tests for individual components
    - integration/: Dispatcher, pipeline and HTTP wiring together
    - fixtures/: Shared fakes and sample upstream rows

Running Tests:
    pytest tests/                           # All tests
    pytest tests/unit/                      # Unit tests only
    pytest -m integration                   # Integration tests only
"""

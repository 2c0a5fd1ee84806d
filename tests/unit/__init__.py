"""
Unit Tests - Testing Individual Components in Isolation.

Each component is tested in isolation with scripted upstreams and
in-memory stores. Unit tests should be fast, deterministic, and focused.

Test Files:
    - test_tiered_resolver.py: Tier selection and provenance
    - test_strategies.py: Screen strategies and viability guard
    - test_screening_pipeline.py: Cron run and batched upsert
    - test_dispatcher.py: Command routing and error responses
    - test_config_loader.py: Configuration loading/validation
"""

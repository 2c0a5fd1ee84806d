"""
Integration Tests - End-to-End Gateway Tests.

These tests wire the real registry, dispatcher, pipeline and FastAPI app
to ScriptedUpstreamClient and InMemoryCacheStore, so no network is used.

Test Files:
    - test_template_cache_flow.py: Cron -> cache -> getTemplateAssets
    - test_api_server.py: HTTP transport
"""

"""
Test Suite for the Market Research Backend

Unit and integration tests for the city roster, city detail and BLS
employment scrapers, metro matching, report generation and the HTTP API.
Every external page is served from fixtures; nothing touches the network.

Test Categories:
- test_roster, test_city_detail, test_employment: Scrapers
- test_pipeline: End-to-end runs against canned pages
- test_metro_resolver, test_reference_data, test_job_growth: Services
- test_artifacts: Artifact store and Excel/JSON rendering
- test_api, test_resilience, test_cache: HTTP layer
- test_seed, test_models, test_area_codes: Database and reference data
- conftest.py: Shared fixtures and test configuration

Running Tests:
    pytest                          # Run all tests
    pytest -m "not integration"     # Skip end-to-end runs
    pytest tests/test_employment.py -v
    python scripts/run_tests.py     # With coverage report

Author: Market Research Project
License: AGPL-3.0
"""

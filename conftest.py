"""
Shared pytest configuration for Tenantry tests.
"""
pytest_plugins = [
    "tests.fixtures.auth",
    "tests.fixtures.billing",
]

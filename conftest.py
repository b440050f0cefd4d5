pytest_plugins = [
    "tests.fixtures.db_client",
    "tests.fixtures.auth_fixtures",
    "tests.fixtures.app_client",
]

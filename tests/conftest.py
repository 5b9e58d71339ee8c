"""
Shared pytest fixtures for the favorite-number load-test suite.

Fixtures follow the Arrange-Act-Assert (AAA) pattern and ensure test
isolation by handing every test fresh doubles and, where needed, a
fresh application instance.

Key Concepts Demonstrated:
- Factory fixtures for fake responses and fake HTTP clients
- Flask test client for in-process endpoint tests
- A live threaded server for tests that need a real socket
"""

import os
import threading
from collections.abc import Callable, Generator
from datetime import timedelta
from pathlib import Path
from typing import Any
from unittest.mock import MagicMock

import pytest
from faker import Faker
from werkzeug.serving import make_server

# Set testing environment before importing the service
os.environ["FLASK_ENV"] = "testing"

from favorite_service import create_app


# Initialize Faker for generating test data
fake = Faker()


# -----------------------------------------------------------------------------
# Application Fixtures
# -----------------------------------------------------------------------------

@pytest.fixture(scope="session")
def app():
    """
    Create the favorite service for the test session.

    The validation log is disabled in the testing config, so this app
    never writes to disk.
    """
    return create_app("testing")


@pytest.fixture(scope="function")
def client(app):
    """Flask test client for making in-process HTTP requests."""
    with app.test_client() as test_client:
        yield test_client


@pytest.fixture
def validation_log_path(tmp_path) -> Path:
    """Location of a per-test validation error log."""
    return tmp_path / "validation_errors.csv"


@pytest.fixture
def logging_client(validation_log_path):
    """Test client for an app that writes rejected fields to a CSV log."""
    logging_app = create_app("testing", VALIDATION_LOG_PATH=str(validation_log_path))
    with logging_app.test_client() as test_client:
        yield test_client


@pytest.fixture(scope="session")
def live_server(app) -> Generator[str, None, None]:
    """
    Serve the favorite service on a real socket in a background thread.

    Binds to port 0 so the OS picks a free port.

    Yields:
        str: Base URL of the running server.
    """
    server = make_server("127.0.0.1", 0, app, threaded=True)
    server_thread = threading.Thread(target=server.serve_forever)
    server_thread.daemon = True
    server_thread.start()

    yield f"http://127.0.0.1:{server.server_port}"

    server.shutdown()


# -----------------------------------------------------------------------------
# HTTP Double Factories
# -----------------------------------------------------------------------------

@pytest.fixture
def response_factory() -> Callable[..., MagicMock]:
    """
    Factory fixture for fake Locust responses.

    Example:
        def test_something(response_factory):
            response = response_factory(status_code=500, elapsed_ms=120)
    """

    def _create_response(status_code: int = 200, elapsed_ms: float = 100.0) -> MagicMock:
        response = MagicMock()
        response.status_code = status_code
        response.elapsed = timedelta(milliseconds=elapsed_ms)
        return response

    return _create_response


@pytest.fixture
def client_factory() -> Callable[..., MagicMock]:
    """
    Factory fixture for a fake ``HttpSession``.

    Each ``post`` call returns a context manager yielding the next of
    the given responses, the way ``catch_response=True`` does.
    """

    def _create_client(*responses: Any) -> MagicMock:
        contexts = []
        for response in responses:
            context = MagicMock()
            context.__enter__.return_value = response
            context.__exit__.return_value = False
            contexts.append(context)

        http_client = MagicMock()
        http_client.post.side_effect = contexts
        return http_client

    return _create_client


@pytest.fixture
def valid_payload() -> dict[str, Any]:
    """A valid favorite-number request body."""
    return {
        "userId": fake.uuid4(),
        "favNum": fake.random_int(min=1, max=100),
    }

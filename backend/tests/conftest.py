import os

# Ensure JWT_SECRET is set before backend.config is imported
os.environ["JWT_SECRET"] = "test_secret"

from unittest.mock import MagicMock

import pytest

from backend.auth_service.utils import create_token
from backend.gateway.server import create_app
from backend.tests.factories import make_user_row


@pytest.fixture
def app():
    app = create_app()
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def mock_db(mocker):
    """
    Mocks the database connection and cursor for every route module.
    """
    mock_conn = MagicMock()
    mock_cursor = MagicMock()

    # Setup the context manager for connection
    mock_conn.__enter__.return_value = mock_conn
    mock_conn.__exit__.return_value = None

    # Setup the context manager for cursor
    mock_cursor.__enter__.return_value = mock_cursor
    mock_cursor.__exit__.return_value = None

    # Connect cursor to connection
    mock_conn.cursor.return_value = mock_cursor

    mocker.patch("backend.auth_service.routes.get_db", return_value=mock_conn)
    mocker.patch("backend.events_service.routes.get_db", return_value=mock_conn)

    return mock_conn, mock_cursor


@pytest.fixture
def current_user(mocker):
    """The user the auth gate resolves bearer tokens to."""
    user = make_user_row()
    mocker.patch("backend.auth_service.utils.load_user", return_value=user)
    return user


@pytest.fixture
def auth_headers(current_user):
    token = create_token(current_user["user_id"])
    return {"Authorization": f"Bearer {token}"}

"""
Pytest configuration and shared fixtures for the stats widget tests
"""
import pytest
import sys
from pathlib import Path
from unittest.mock import Mock

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))


ENDPOINTS = ("https://e1.example", "https://e2.example", "https://e3.example")

FLAT_PAYLOAD = {
    "totalSolved": 10,
    "easySolved": 5,
    "mediumSolved": 3,
    "hardSolved": 2,
    "totalEasy": 700,
    "totalMedium": 700,
    "totalHard": 700,
    "ranking": 1000,
    "acceptanceRate": 55.5555,
    "contributionPoints": 20,
}


def nested_payload(entries=None, ranking=4242, acceptance_rate=61.234):
    if entries is None:
        entries = [
            {"difficulty": "Easy", "count": 5},
            {"difficulty": "Medium", "count": 3},
            {"difficulty": "Hard", "count": 2},
        ]
    return {
        "data": {
            "matchedUser": {
                "submitStats": {"acSubmissionNum": entries},
                "profile": {"ranking": ranking, "acceptanceRate": acceptance_rate},
            }
        }
    }


def fake_response(status_code=200, body=None, json_error=None):
    """Build a stand-in for requests.Response."""
    resp = Mock()
    resp.status_code = status_code
    resp.ok = status_code < 400
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = body
    return resp


@pytest.fixture(scope='session')
def app():
    """Flask application configured for testing"""
    from app import app as flask_app

    flask_app.config.update({'TESTING': True})
    yield flask_app


@pytest.fixture(scope='function')
def client(app):
    """Test client for the Flask application"""
    return app.test_client()


@pytest.fixture
def trigger():
    """A fresh, idle search trigger"""
    from app import SearchTrigger

    return SearchTrigger()

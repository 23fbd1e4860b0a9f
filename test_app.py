import asyncio

import pytest

import app as app_module
from exceptions import InvalidURL, ScrapeError
from models import PerformanceReport, ScrapeResult
from seo_analyzer import SEOAnalyzer


@pytest.fixture
def client():
    app_module.app.config['TESTING'] = True
    app_module.limiter.enabled = False
    with app_module.app.test_client() as client:
        yield client
    app_module.limiter.enabled = True


def test_health(client):
    response = client.get('/health')
    assert response.status_code == 200
    assert response.get_json()['status'] == 'healthy'


def test_audit_requires_url(client):
    response = client.post('/api/audit', json={})
    assert response.status_code == 400


def test_audit_returns_result(client, monkeypatch, settings, fake_scraper, fake_performance_client, lighthouse):
    page = ScrapeResult(markdown="# Hello\n\nshort page", metadata={"title": "Hello"})
    analyzer = SEOAnalyzer(fake_scraper(page),
                           fake_performance_client(PerformanceReport.from_lighthouse(lighthouse())), settings)
    monkeypatch.setattr(app_module, 'run_audit', lambda url: asyncio.run(analyzer.analyze(url)))

    response = client.post('/api/audit', json={'url': 'https://example.com'})
    assert response.status_code == 200
    body = response.get_json()
    assert body['status'] == 'completed'
    assert body['result']['url'] == 'https://example.com/'
    assert body['result']['page_content']['title'] == 'Hello'
    assert isinstance(body['result']['score'], int)


@pytest.mark.parametrize("error, status", [
    (InvalidURL("not a url"), 400),
    (ScrapeError("https://example.com/", "Failed to connect"), 502),
])
def test_audit_maps_errors(client, monkeypatch, error, status):
    def failing_audit(url):
        raise error

    monkeypatch.setattr(app_module, 'run_audit', failing_audit)
    response = client.post('/api/audit', json={'url': 'not a url'})
    assert response.status_code == status
    assert 'error' in response.get_json()


def test_app_does_not_configure_sessions():
    assert app_module.app.secret_key is None

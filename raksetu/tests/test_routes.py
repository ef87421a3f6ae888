# SPDX-License-Identifier: Apache-2.0

"""
HTTP tests for the emergency, preference and translation endpoints.
"""

from pymongo.errors import ServerSelectionTimeoutError

from raksetu.utils.context import CLIENT_COOKIE


def _ids(response):
    return [item["id"] for item in response.get_json()["items"]]


class TestEmergencyRoutes:
    """Test the emergency listing and detail endpoints."""

    def test_list_hides_fulfilled_by_default(self, client):
        response = client.get('/api/emergencies')

        assert response.status_code == 200
        data = response.get_json()
        assert data["count"] == 3
        assert data["total"] == 4
        assert data["filters"]["bloodType"] == "All"
        assert data["items"][0]["displayClass"] == "severe"

    def test_blood_type_filter(self, client):
        response = client.get('/api/emergencies', query_string={"bloodType": "A+", "hideFulfilled": "false"})
        assert _ids(response) == ["e1", "e4"]

    def test_unescaped_plus_sign(self, client):
        response = client.get('/api/emergencies?bloodType=A+')
        assert response.get_json()["filters"]["bloodType"] == "A+"
        assert _ids(response) == ["e1"]

    def test_location_filter(self, client):
        response = client.get('/api/emergencies?location=hyder')
        assert _ids(response) == ["e1", "e3"]

    def test_search_and_sort(self, client):
        response = client.get('/api/emergencies?sort=urgency&hideFulfilled=false')
        assert _ids(response) == ["e1", "e3", "e4", "e2"]

        response = client.get('/api/emergencies?search=aiims')
        assert _ids(response) == ["e2"]

    def test_distance_filter(self, client):
        response = client.get('/api/emergencies?lat=17.4&lng=78.5&maxDistance=50')

        data = response.get_json()
        assert _ids(response) == ["e1"]
        assert data["items"][0]["distanceLabel"].endswith("km")

    def test_invalid_query(self, client):
        response = client.get('/api/emergencies?lat=north&lng=1')

        assert response.status_code == 400
        problem = response.get_json()
        assert problem["status"] == 400
        assert problem["type"].endswith("/validation-error")
        assert problem["errors"]

    def test_lat_without_lng(self, client):
        assert client.get('/api/emergencies?lat=17.4').status_code == 400

    def test_unknown_sort(self, client):
        assert client.get('/api/emergencies?sort=alphabetical').status_code == 400

    def test_database_unavailable(self, client, emergency_repository):
        emergency_repository.error = ServerSelectionTimeoutError("no servers")

        response = client.get('/api/emergencies')

        assert response.status_code == 503
        assert response.get_json()["type"].endswith("/service-unavailable")

    def test_get_emergency(self, client):
        response = client.get('/api/emergencies/e2')

        assert response.status_code == 200
        data = response.get_json()
        assert data["bloodType"] == "O-"
        assert data["isRare"] is True

    def test_get_missing_emergency(self, client):
        assert client.get('/api/emergencies/nope').status_code == 404

    def test_compatible_donors(self, client):
        response = client.get('/api/blood-types/O-/donors')
        assert response.get_json() == {"recipient": "O-", "donors": ["O-"], "isRare": True}

    def test_unknown_blood_type(self, client):
        assert client.get('/api/blood-types/XY/donors').status_code == 404


class TestPreferenceRoutes:
    """Test theme and locale endpoints."""

    def test_new_client_gets_cookie(self, client):
        response = client.get('/api/preferences')

        assert response.status_code == 200
        assert CLIENT_COOKIE in response.headers.get('Set-Cookie', '')
        data = response.get_json()
        assert data["theme"]["isDark"] is False
        assert data["locale"]["language"] == "en"
        assert data["document"]["lang"] == "en"

    def test_toggle_is_persisted(self, client):
        response = client.post('/api/preferences/theme/toggle')
        assert response.get_json()["isDark"] is True
        assert response.get_json()["document"]["classList"] == ["dark"]

        response = client.get('/api/preferences/theme')
        assert response.get_json()["theme"] == "dark"

        client.post('/api/preferences/theme/toggle')
        assert client.get('/api/preferences/theme').get_json()["isDark"] is False

    def test_accept_language_detection(self, client):
        response = client.get('/api/preferences/locale', headers={'Accept-Language': 'ta-IN,ta;q=0.9'})

        data = response.get_json()
        assert data["language"] == "ta"
        assert {entry["code"] for entry in data["supported"]} == {"bn", "en", "hi", "kn", "ta", "te"}

    def test_change_language(self, client):
        response = client.put('/api/preferences/locale', json={"language": "te"})

        data = response.get_json()
        assert response.status_code == 200
        assert data["changed"] is True
        assert data["language"] == "te"
        assert data["document"]["lang"] == "te"

        assert client.get('/api/preferences/locale').get_json()["language"] == "te"

    def test_stored_language_beats_accept_language(self, client):
        client.put('/api/preferences/locale', json={"language": "hi"})

        response = client.get('/api/preferences/locale', headers={'Accept-Language': 'ta'})

        assert response.get_json()["language"] == "hi"

    def test_unsupported_language_is_ignored(self, client):
        client.put('/api/preferences/locale', json={"language": "bn"})

        response = client.put('/api/preferences/locale', json={"language": "xx"})

        data = response.get_json()
        assert response.status_code == 200
        assert data["changed"] is False
        assert data["language"] == "bn"

    def test_change_language_requires_object(self, client):
        response = client.put('/api/preferences/locale', data="te", content_type="text/plain")
        assert response.status_code == 400

    def test_change_language_rejects_empty_code(self, client):
        response = client.put('/api/preferences/locale', json={"language": ""})
        assert response.status_code == 400


class TestTranslationRoutes:
    """Test translation resource endpoints."""

    def test_resource_set(self, client):
        response = client.get('/api/i18n/hi')

        assert response.status_code == 200
        assert response.get_json()["resources"]["nav"]["home"] == "होम"

    def test_translate_key(self, client):
        response = client.get('/api/i18n/en/emergency.unitsNeeded?count=4')
        assert response.get_json()["text"] == "4 units needed"

    def test_missing_key_renders_key(self, client):
        response = client.get('/api/i18n/kn/does.not.exist')
        assert response.get_json()["text"] == "does.not.exist"

    def test_unsupported_language(self, client):
        assert client.get('/api/i18n/fr').status_code == 404
        assert client.get('/api/i18n/fr/nav.home').status_code == 404

    def test_current_language(self, client):
        response = client.get('/api/i18n/current/nav.home', headers={'Accept-Language': 'hi'})

        data = response.get_json()
        assert data["language"] == "hi"
        assert data["text"] == "होम"


class TestHealthRoute:

    def test_healthy(self, client):
        response = client.get('/api/healthz')

        assert response.status_code == 200
        data = response.get_json()
        assert data["status"] == "healthy"
        assert data["dependencies"]["preferences"]["status"] == "healthy"
        assert "mongodb" not in data["dependencies"]

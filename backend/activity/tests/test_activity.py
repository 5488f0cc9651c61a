"""
Tests for activity logging and the activity API.
"""
import pytest

from activity.models import ActivityLog
from activity.services import log_activity


@pytest.mark.django_db
class TestLogActivity:

    def test_creates_row(self, tenant_a, owner_a):
        entry = log_activity(tenant_a, "CREATE_RECIPE", "Added recipe", user=owner_a,
                             entity_type="recipe", entity_id=7)

        assert entry.entity_id == "7"
        assert entry.user == owner_a

    def test_anonymous_user_is_stored_as_none(self, tenant_a):
        from django.contrib.auth.models import AnonymousUser

        entry = log_activity(tenant_a, "LOGIN", user=AnonymousUser())

        assert entry.user is None

    def test_failure_is_swallowed(self, tenant_a, monkeypatch):
        def broken(**kwargs):
            raise RuntimeError("database unavailable")

        monkeypatch.setattr(ActivityLog.all_objects, "create", broken)

        assert log_activity(tenant_a, "LOGIN") is None


@pytest.mark.django_db
class TestActivityApi:

    def test_list_newest_first_and_filter(self, owner_client, tenant_a, owner_a):
        log_activity(tenant_a, "CREATE_RECIPE", "Added recipe \"Roti\"", user=owner_a)
        log_activity(tenant_a, "PRICE_UPDATE", "Updated selling price", user=owner_a)

        response = owner_client.get('/api/activity/', {'action': 'PRICE_UPDATE'})

        assert response.status_code == 200
        assert response.data['count'] == 1
        assert response.data['results'][0]['username'] == owner_a.username

    def test_actions(self, owner_client, tenant_a):
        log_activity(tenant_a, "PRICE_UPDATE", "a")
        log_activity(tenant_a, "CREATE_RECIPE", "b")
        log_activity(tenant_a, "PRICE_UPDATE", "c")

        response = owner_client.get('/api/activity/actions/')

        assert response.data == ["CREATE_RECIPE", "PRICE_UPDATE"]

    @pytest.mark.tenant_isolation
    def test_other_tenant_activity_is_hidden(self, owner_b_client, tenant_a):
        entry = log_activity(tenant_a, "CREATE_RECIPE", "Rahasia")

        assert owner_b_client.get('/api/activity/').data['count'] == 0
        assert owner_b_client.get(f'/api/activity/{entry.pk}/').status_code == 404

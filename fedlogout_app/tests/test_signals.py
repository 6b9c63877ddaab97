import pytest
from django.contrib.auth.signals import user_logged_in
from django.contrib.sessions.backends.db import SessionStore
from django.test import RequestFactory
from social_django.utils import load_strategy

from fedlogout_app.auth import FederatedOIDCBackend, stash_oidc_session
from fedlogout_app.constants import (
    SESSION_IDP_KEY,
    SESSION_SID_KEY,
    SESSION_SUB_KEY,
    SESSION_TENANT_KEY,
)
from fedlogout_app.models import FederatedIdentity, FederatedSession
from fedlogout_app.tests.fakes import fake


@pytest.fixture
def user(django_user_model):
    return django_user_model.objects.create_user(username=fake.user_name())


@pytest.fixture
def request_with_session(db):
    request = RequestFactory().get("/")
    request.session = SessionStore()
    return request


def stash(session, sid=None, sub="alice", idp="partner-idp", tenant="acme"):
    session[SESSION_IDP_KEY] = idp
    session[SESSION_SUB_KEY] = sub
    session[SESSION_TENANT_KEY] = tenant
    if sid:
        session[SESSION_SID_KEY] = sid


class TestRecordFederatedLogin:
    def test_maps_sid_to_session_key(self, request_with_session, user):
        sid = fake.uuid4()
        stash(request_with_session.session, sid=sid)
        request_with_session.session.save()

        user_logged_in.send(sender=user.__class__, request=request_with_session, user=user)

        mapping = FederatedSession.objects.get(sid=sid)
        assert mapping.session_key == request_with_session.session.session_key
        assert (mapping.tenant, mapping.idp_name) == ("acme", "partner-idp")
        assert (
            FederatedSession.objects.session_key_for_sid(sid, "acme", "partner-idp")
            == mapping.session_key
        )
        assert FederatedSession.objects.session_key_for_sid(sid, "carbon.super", "partner-idp") is None

    def test_links_identity_per_tenant(self, request_with_session, user):
        stash(request_with_session.session, tenant="acme")
        request_with_session.session.save()

        user_logged_in.send(sender=user.__class__, request=request_with_session, user=user)

        assert FederatedIdentity.objects.user_id_for("acme", "partner-idp", "alice") == user.pk
        assert FederatedIdentity.objects.user_id_for("carbon.super", "partner-idp", "alice") is None

    def test_relinking_moves_the_identity(self, request_with_session, user, django_user_model):
        other = django_user_model.objects.create_user(username=fake.user_name())
        FederatedIdentity.objects.link("acme", "partner-idp", "alice", other)
        stash(request_with_session.session)
        request_with_session.session.save()

        user_logged_in.send(sender=user.__class__, request=request_with_session, user=user)

        assert FederatedIdentity.objects.count() == 1
        assert FederatedIdentity.objects.user_id_for("acme", "partner-idp", "alice") == user.pk

    def test_no_sid_links_but_does_not_map(self, request_with_session, user):
        stash(request_with_session.session)
        request_with_session.session.save()

        user_logged_in.send(sender=user.__class__, request=request_with_session, user=user)

        assert FederatedIdentity.objects.exists()
        assert not FederatedSession.objects.exists()

    def test_non_federated_login_is_ignored(self, request_with_session, user):
        request_with_session.session[SESSION_SID_KEY] = fake.uuid4()
        request_with_session.session.save()

        user_logged_in.send(sender=user.__class__, request=request_with_session, user=user)

        assert not FederatedIdentity.objects.exists()
        assert not FederatedSession.objects.exists()

    def test_unsaved_session_is_skipped(self, request_with_session, user):
        stash(request_with_session.session, sid=fake.uuid4())

        user_logged_in.send(sender=user.__class__, request=request_with_session, user=user)

        assert not FederatedSession.objects.exists()

    def test_request_without_session(self, db, user):
        request = RequestFactory().get("/")

        user_logged_in.send(sender=user.__class__, request=request, user=user)

        assert not FederatedSession.objects.exists()

    def test_login_through_django_records_mapping(self, client, user):
        session = client.session
        stash(session, sid="sid-from-idp", tenant="carbon.super")
        session.save()

        client.force_login(user)

        mapping = FederatedSession.objects.get(sid="sid-from-idp")
        assert mapping.session_key == client.session.session_key

    def test_social_pipeline_then_login(self, request_with_session, user, settings):
        settings.SOCIAL_AUTH_FEDERATED_OIDC_TENANT = "acme"
        strategy = load_strategy(request_with_session)
        backend = FederatedOIDCBackend(strategy)
        backend.id_token = {"sub": "alice", "sid": "sid-from-idp"}

        stash_oidc_session(strategy, {}, user, response={}, backend=backend)
        request_with_session.session.save()
        user_logged_in.send(sender=user.__class__, request=request_with_session, user=user)

        mapping = FederatedSession.objects.get(sid="sid-from-idp")
        assert (mapping.tenant, mapping.idp_name) == ("acme", "federated-oidc")
        assert FederatedIdentity.objects.user_id_for("acme", "federated-oidc", "alice") == user.pk

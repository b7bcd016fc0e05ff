"""
Tests for the live query registry.
"""
import logging
from datetime import timedelta

from propdesk import live
from propdesk.extensions import db
from propdesk.live import LiveQueryRegistry, query_key
from propdesk.routes.invites import invite_state
from propdesk.services import invites, maintenance
from propdesk.utils import utcnow


class Source:
    """Loader over a mutable list that counts how often it ran."""

    def __init__(self, rows):
        self.rows = rows
        self.loads = 0

    def __call__(self):
        self.loads += 1
        return list(self.rows)


class TestRegistry:
    def test_initial_snapshot(self):
        registry = LiveQueryRegistry()
        with registry.subscribe("things", Source([1, 2])) as sub:
            assert sub.snapshot == [1, 2]

    def test_publish_replaces_snapshot_and_notifies(self):
        registry = LiveQueryRegistry()
        source = Source([1])
        seen = []
        with registry.subscribe("things", source, listener=seen.append) as sub:
            source.rows.append(2)
            registry.publish("things")
            assert sub.snapshot == [1, 2]
            assert seen == [[1, 2]]

    def test_other_collections_ignored(self):
        registry = LiveQueryRegistry()
        source = Source([1])
        seen = []
        with registry.subscribe("things", source, listener=seen.append):
            registry.publish("other")
        assert seen == []
        assert source.loads == 1

    def test_shared_key_loads_once(self):
        registry = LiveQueryRegistry()
        source = Source(["a"])
        first = registry.subscribe("things", source, filters={"tenant_id": 1})
        second = registry.subscribe("things", source, filters={"tenant_id": 1})
        assert len(registry) == 1
        registry.publish("things")
        assert source.loads == 2
        first.unsubscribe()
        second.unsubscribe()

    def test_filters_make_separate_queries(self):
        registry = LiveQueryRegistry()
        with registry.subscribe("things", Source([1]), filters={"tenant_id": 1}), \
                registry.subscribe("things", Source([2]), filters={"tenant_id": 2}):
            assert len(registry) == 2
            assert registry.snapshot(query_key("things", {"tenant_id": 2})) == [2]

    def test_unsubscribe_stops_callbacks_and_drops_cache(self):
        registry = LiveQueryRegistry()
        seen = []
        sub = registry.subscribe("things", Source([1]), listener=seen.append)
        sub.unsubscribe()
        sub.unsubscribe()
        registry.publish("things")
        assert seen == []
        assert query_key("things") not in registry
        assert sub.snapshot is None

    def test_cache_kept_while_a_subscriber_remains(self):
        registry = LiveQueryRegistry()
        source = Source([1])
        first = registry.subscribe("things", source)
        second = registry.subscribe("things", source)
        first.unsubscribe()
        assert query_key("things") in registry
        second.unsubscribe()
        assert len(registry) == 0

    def test_refresh_notifies_only_on_change(self):
        registry = LiveQueryRegistry()
        source = Source([1])
        seen = []
        with registry.subscribe("things", source, listener=seen.append) as sub:
            assert registry.refresh(sub.key) is False
            assert seen == []

            source.rows.append(2)
            assert registry.refresh(sub.key) is True
            assert seen == [[1, 2]]
            assert sub.snapshot == [1, 2]

    def test_refresh_unknown_key(self):
        assert LiveQueryRegistry().refresh(query_key("things")) is False

    def test_failing_listener_does_not_block_others(self, caplog):
        registry = LiveQueryRegistry()
        seen = []

        def broken(snapshot):
            raise RuntimeError("boom")

        with registry.subscribe("things", Source([1]), listener=broken), \
                registry.subscribe("things", Source([1]), listener=seen.append):
            with caplog.at_level(logging.ERROR):
                registry.publish("things")
        assert seen == [[1]]
        assert "listener" in caplog.text


class TestPublishOnCommit:
    """Service commits push fresh snapshots to live subscribers."""

    def test_submit_request_notifies_admin_view(self, app, tenant_account):
        tenant, account = tenant_account
        seen = []
        registry = live.get_registry()
        with registry.subscribe(
            maintenance.COLLECTION, maintenance.snapshot_loader(), listener=seen.append
        ) as sub:
            assert sub.snapshot == []
            maintenance.submit_request(tenant, {"title": "Squeaky door"}, account=account)

        assert len(seen) == 1
        assert [r["title"] for r in seen[0]] == ["Squeaky door"]
        assert len(registry) == 0

    def test_tenant_view_only_sees_own(self, app, tenant_account):
        tenant, account = tenant_account
        seen = []
        with live.get_registry().subscribe(
            maintenance.COLLECTION,
            maintenance.snapshot_loader(tenant.id + 1),
            listener=seen.append,
            filters={"tenant_id": tenant.id + 1},
        ):
            maintenance.submit_request(tenant, {"title": "Squeaky door"}, account=account)
        assert seen == [[]]

    def test_invite_view_notices_expiry_on_refresh(self, app):
        _, invite, _ = invites.issue_invite("Jane Doe", "jane@example.com")
        registry = live.get_registry()
        seen = []
        with registry.subscribe(
            "tenant_invites", invite_state(invite.code), listener=seen.append, filters={"code": invite.code}
        ) as sub:
            assert sub.snapshot["valid"] is True

            # clock passes the expiry; nothing is published for it
            invite.expires_at = utcnow() - timedelta(seconds=1)
            db.session.commit()
            assert seen == []

            assert registry.refresh(sub.key) is True
            assert seen[-1]["valid"] is False
            assert seen[-1]["error"] == "expired"

    def test_sse_event_format(self):
        assert live.sse_event({"a": 1}) == 'event: snapshot\ndata: {"a": 1}\n\n'

    def test_invite_stream_reports_state(self, client, app):
        _, invite, _ = invites.issue_invite("Jane Doe", "jane@example.com")
        response = client.get(f"/api/invites/{invite.code}/stream")
        first = next(iter(response.response)).decode()
        response.close()
        assert '"valid": true' in first
        assert invite.code in first

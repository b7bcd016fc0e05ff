"""
Live queries: in-process push updates for views that must follow the store.

Each query is identified by ``(collection, filters)`` and owns a single cached
snapshot. Every successful commit publishes the collections it touched; each
live query on those collections is reloaded and its snapshot replaced
wholesale before listeners are called. Subscriptions are scoped: use them as
context managers (or call ``unsubscribe``) so nothing fires after the consumer
is gone.
"""
import json
import logging
import queue
import threading

from flask import Response, current_app, stream_with_context

log = logging.getLogger(__name__)


def query_key(collection, filters=None):
    return (collection, tuple(sorted((filters or {}).items())))


class LiveQuery:
    def __init__(self, key, loader):
        self.key = key
        self.loader = loader
        self.snapshot = loader()
        self.subscriptions = []

    @property
    def collection(self):
        return self.key[0]


class Subscription:
    def __init__(self, registry, key, listener):
        self._registry = registry
        self.key = key
        self.listener = listener
        self.active = True

    @property
    def snapshot(self):
        return self._registry.snapshot(self.key)

    def unsubscribe(self):
        if self.active:
            self.active = False
            self._registry._release(self)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.unsubscribe()
        return False

    def __repr__(self):
        return f"<Subscription {self.key!r} active={self.active}>"


class LiveQueryRegistry:
    def __init__(self, logger=None):
        self._queries = {}
        self._lock = threading.RLock()
        self.logger = logger or log

    def subscribe(self, collection, loader, listener=None, filters=None):
        """Start (or join) the live query for ``collection``/``filters``.

        ``loader`` returns the full snapshot; it only runs for the first
        subscriber of a key and on every publish afterwards.
        """
        key = query_key(collection, filters)
        with self._lock:
            query = self._queries.get(key)
            if query is None:
                query = LiveQuery(key, loader)
                self._queries[key] = query
            sub = Subscription(self, key, listener)
            query.subscriptions.append(sub)
            return sub

    def snapshot(self, key):
        with self._lock:
            query = self._queries.get(key)
            return query.snapshot if query else None

    def publish(self, *collections):
        if not collections:
            return
        pending = []
        with self._lock:
            for query in list(self._queries.values()):
                if query.collection not in collections:
                    continue
                try:
                    query.snapshot = query.loader()
                except Exception:
                    self.logger.exception("Reloading live query %r failed", query.key)
                    continue
                pending.append((query.snapshot, list(query.subscriptions)))

        for snapshot, subscriptions in pending:
            self._notify(snapshot, subscriptions)

    def refresh(self, key):
        """Reload one live query; listeners hear about it only if the snapshot changed.

        For views that depend on the clock as well as the store (invite expiry).
        """
        with self._lock:
            query = self._queries.get(key)
            if query is None:
                return False
            try:
                snapshot = query.loader()
            except Exception:
                self.logger.exception("Reloading live query %r failed", key)
                return False
            if snapshot == query.snapshot:
                return False
            query.snapshot = snapshot
            subscriptions = list(query.subscriptions)

        self._notify(snapshot, subscriptions)
        return True

    def _notify(self, snapshot, subscriptions):
        for sub in subscriptions:
            if not sub.active or sub.listener is None:
                continue
            try:
                sub.listener(snapshot)
            except Exception:
                self.logger.exception("Live query listener for %r failed", sub.key)

    def _release(self, sub):
        with self._lock:
            query = self._queries.get(sub.key)
            if query is None:
                return
            if sub in query.subscriptions:
                query.subscriptions.remove(sub)
            if not query.subscriptions:
                # last consumer gone; drop the cached snapshot
                del self._queries[sub.key]

    def __len__(self):
        with self._lock:
            return len(self._queries)

    def __contains__(self, key):
        with self._lock:
            return key in self._queries


def init_app(app):
    app.extensions["live_queries"] = LiveQueryRegistry(logger=app.logger)


def get_registry():
    return current_app.extensions["live_queries"]


def publish(*collections):
    get_registry().publish(*collections)


def sse_event(data, event="snapshot"):
    return f"event: {event}\ndata: {json.dumps(data)}\n\n"


def stream_response(collection, loader, filters=None, refresh=False):
    """Server-sent events: the current snapshot, then one event per replacement.

    The subscription lives exactly as long as the client stays connected.
    With ``refresh`` the query is also reloaded on every heartbeat.
    """
    registry = get_registry()
    heartbeat = current_app.config.get("LIVE_HEARTBEAT_SECONDS", 15)

    def events():
        updates = queue.Queue()
        with registry.subscribe(collection, loader, listener=updates.put, filters=filters) as sub:
            yield sse_event(sub.snapshot)
            while True:
                try:
                    snapshot = updates.get(timeout=heartbeat)
                except queue.Empty:
                    if refresh and registry.refresh(sub.key):
                        continue
                    yield ": keepalive\n\n"
                    continue
                yield sse_event(snapshot)

    return Response(
        stream_with_context(events()),
        mimetype="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )

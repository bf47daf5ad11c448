from domain.models import Role, SessionUser
from services.sessions import SessionStore


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


def _identity(user_id: int = 1) -> SessionUser:
    return SessionUser(id=user_id, username=f"u{user_id}", email=f"u{user_id}@leitores.org", name="U", role=Role.USER)


def test_create_and_get():
    store = SessionStore(ttl_seconds=60)
    sid = store.create(_identity())
    assert len(sid) >= 32
    assert store.get(sid) == _identity()
    assert store.get("unknown") is None
    assert store.get(None) is None


def test_session_ids_are_unique():
    store = SessionStore(ttl_seconds=60)
    ids = {store.create(_identity()) for _ in range(50)}
    assert len(ids) == 50


def test_expired_session_is_dropped():
    clock = FakeClock()
    store = SessionStore(ttl_seconds=60, clock=clock)
    sid = store.create(_identity())
    clock.now += 59
    assert store.get(sid) is not None
    clock.now += 2
    assert store.get(sid) is None
    assert len(store) == 0


def test_destroy_and_destroy_user():
    store = SessionStore(ttl_seconds=60)
    a1 = store.create(_identity(1))
    a2 = store.create(_identity(1))
    b = store.create(_identity(2))
    store.destroy(a1)
    assert store.get(a1) is None
    assert store.destroy_user(1) == 1
    assert store.get(a2) is None
    assert store.get(b) is not None


def test_purge_expired_and_clear():
    clock = FakeClock()
    store = SessionStore(ttl_seconds=10, clock=clock)
    store.create(_identity(1))
    clock.now += 5
    keep = store.create(_identity(2))
    clock.now += 6
    assert store.purge_expired() == 1
    assert store.get(keep) is not None
    store.clear()
    assert len(store) == 0


def test_update_replaces_identity():
    store = SessionStore(ttl_seconds=60)
    sid = store.create(_identity(1))
    promoted = SessionUser(id=1, username="u1", email="u1@leitores.org", name="U", role=Role.ADMIN)
    store.update(sid, promoted)
    assert store.get(sid).role == Role.ADMIN


def test_create_drops_abandoned_sessions():
    clock = FakeClock()
    store = SessionStore(ttl_seconds=10, clock=clock)
    store.create(_identity(1))
    store.create(_identity(2))
    clock.now += 11
    fresh = store.create(_identity(3))
    assert len(store) == 1
    assert store.get(fresh) == _identity(3)

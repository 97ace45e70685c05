"""In-memory stand-ins for the identity service, session gate and memo store."""

from datetime import datetime, timezone
from types import SimpleNamespace
import uuid

from tagnote.client.events import ListenerSet
from tagnote.core.errors import AuthRequired
from tagnote.schemas.auth import SessionResponse
from tagnote.schemas.memo import MemoResponse
from tagnote.schemas.user import UserResponse


USER_ID = uuid.UUID("11111111-1111-1111-1111-111111111111")


def make_user(user_id=USER_ID, email="alice@example.com") -> UserResponse:
    return UserResponse(id=user_id, email=email, is_active=True, is_verified=True)


def make_session(user=None, access_token="access-1", refresh_token="refresh-1") -> SessionResponse:
    return SessionResponse(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_in=3600,
        user=user or make_user(),
    )


def make_memo(**overrides) -> MemoResponse:
    data = {
        "id": uuid.uuid4(),
        "user_id": USER_ID,
        "title": "UI設計メモ",
        "content": "# 見出し\n本文",
        "category": "work",
        "tags": ["#ui"],
        "created_at": datetime.now(timezone.utc),
        "updated_at": None,
    }
    data.update(overrides)
    return MemoResponse(**data)


class FakeIdentity:
    """Just enough of IdentityClient for SessionGate."""

    def __init__(self, session=None):
        self.session = session
        self.listeners = ListenerSet()

    async def get_session(self):
        return self.session

    def on_session_change(self, listener):
        return self.listeners.subscribe(listener)

    def emit(self, event, session):
        self.session = session
        self.listeners.emit(event, session)


class FakeGate:
    """SessionGate with a fixed user and token."""

    def __init__(self, user_id=USER_ID, access_token="access-1", email="alice@example.com"):
        self.user = SimpleNamespace(id=user_id, email=email) if user_id is not None else None
        self.access_token = access_token
        self.listeners = ListenerSet()

    def require_user(self):
        if self.user is None:
            raise AuthRequired()
        return self.user

    def subscribe(self, listener):
        return self.listeners.subscribe(listener)

    def sign_out(self):
        self.user = None
        self.access_token = None
        self.listeners.emit(None)


class FakeStore:
    """Records every call; set `fail[name] = exc` to make a method raise."""

    def __init__(self, memos=()):
        self.memos = {str(memo.id): memo for memo in memos}
        self.calls = []
        self.fail = {}

    def _record(self, name, *args):
        self.calls.append((name,) + args)
        if name in self.fail:
            raise self.fail[name]

    def names(self):
        return [call[0] for call in self.calls]

    async def select(self, token, filters):
        self._record("select", token, filters)
        return sorted(self.memos.values(), key=lambda m: m.created_at, reverse=True)

    async def select_one(self, token, memo_id):
        self._record("select_one", token, memo_id)
        return self.memos.get(str(memo_id))

    async def insert(self, token, payload):
        self._record("insert", token, payload)
        memo = make_memo(
            title=payload["title"],
            content=payload["content"],
            category=payload["category"],
            tags=payload["tags"],
        )
        self.memos[str(memo.id)] = memo
        return memo

    async def update(self, token, memo_id, payload):
        self._record("update", token, memo_id, payload)
        memo = self.memos.get(str(memo_id))
        if memo is None:
            return None
        updated = memo.model_copy(update={**payload, "updated_at": datetime.now(timezone.utc)})
        self.memos[str(memo_id)] = updated
        return updated

    async def delete(self, token, memo_id, user_id):
        self._record("delete", token, memo_id, user_id)
        self.memos.pop(str(memo_id), None)

    async def delete_via_proxy(self, token, memo_id):
        self._record("delete_via_proxy", token, memo_id)
        self.memos.pop(str(memo_id), None)

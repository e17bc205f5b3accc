import json
from types import SimpleNamespace
from typing import Any

import pytest


class FakeCompletions:
    """Scripted stand-in for `client.chat.completions`; replies in call order."""

    def __init__(self, replies: list[dict[str, Any]], tokens: int = 10) -> None:
        self._replies = list(replies)
        self._tokens = tokens
        self.calls: list[dict[str, Any]] = []

    def create(self, **kwargs: Any) -> Any:
        self.calls.append(kwargs)
        if not self._replies:
            raise RuntimeError("no scripted reply left")
        reply = self._replies.pop(0)
        call = SimpleNamespace(function=SimpleNamespace(arguments=json.dumps(reply)))
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(tool_calls=[call]))],
            usage=SimpleNamespace(total_tokens=self._tokens),
        )


class FakeOpenAI:
    def __init__(self, replies: list[dict[str, Any]], tokens: int = 10) -> None:
        self.chat = SimpleNamespace(completions=FakeCompletions(replies, tokens))

    @property
    def calls(self) -> list[dict[str, Any]]:
        return self.chat.completions.calls


@pytest.fixture
def fake_openai():
    return FakeOpenAI


class FakeQuery:
    def __init__(self, db: "FakeSupabase", table: str) -> None:
        self.db = db
        self.table = table
        self.action = ""
        self.ops: list[tuple[str, Any]] = []

    def _op(self, name: str, *args: Any) -> "FakeQuery":
        if name in ("select", "insert", "update", "delete") and not self.action:
            self.action = name
        self.ops.append((name, args))
        return self

    def select(self, *args: Any) -> "FakeQuery":
        return self._op("select", *args)

    def insert(self, *args: Any) -> "FakeQuery":
        return self._op("insert", *args)

    def update(self, *args: Any) -> "FakeQuery":
        return self._op("update", *args)

    def delete(self) -> "FakeQuery":
        return self._op("delete")

    def eq(self, column: str, value: Any) -> "FakeQuery":
        return self._op("eq", column, value)

    def in_(self, column: str, values: Any) -> "FakeQuery":
        return self._op("in_", column, values)

    def single(self) -> "FakeQuery":
        return self._op("single")

    def filters(self) -> dict[str, Any]:
        return {args[0]: args[1] for name, args in self.ops if name in ("eq", "in_")}

    def execute(self) -> Any:
        self.db.executed.append(self)
        reply = self.db.replies.get((self.table, self.action))
        if isinstance(reply, BaseException):
            raise reply
        if callable(reply):
            reply = reply(self)
        return SimpleNamespace(data=reply)


class FakeBucket:
    def __init__(self, storage: "FakeStorage", name: str) -> None:
        self.storage = storage
        self.name = name

    def download(self, path: str) -> bytes:
        if path not in self.storage.files:
            raise RuntimeError("Object not found")
        return self.storage.files[path]

    def upload(self, path: str, file: bytes, file_options: Any = None) -> Any:
        self.storage.files[path] = file
        return SimpleNamespace(path=path)

    def get_public_url(self, path: str) -> str:
        return f"https://storage.test/{self.name}/{path}"

    def remove(self, paths: list[str]) -> list[dict[str, str]]:
        for path in paths:
            self.storage.files.pop(path, None)
        return [{"name": p} for p in paths]


class FakeStorage:
    def __init__(self) -> None:
        self.files: dict[str, bytes] = {}

    def from_(self, bucket: str) -> FakeBucket:
        return FakeBucket(self, bucket)


class FakeAuth:
    def __init__(self, tokens: dict[str, str]) -> None:
        self.tokens = tokens

    def get_user(self, token: str) -> Any:
        if token not in self.tokens:
            raise RuntimeError("invalid JWT")
        return SimpleNamespace(user=SimpleNamespace(id=self.tokens[token], email=None))


class FakeSupabase:
    """Records every executed query; replies are keyed by (table, action)."""

    def __init__(self, replies: dict[tuple[str, str], Any] | None = None, tokens: dict[str, str] | None = None) -> None:
        self.replies = dict(replies or {})
        self.executed: list[FakeQuery] = []
        self.storage = FakeStorage()
        self.auth = FakeAuth(tokens or {"good-token": "user-1"})

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(self, name)


@pytest.fixture
def fake_supabase():
    return FakeSupabase

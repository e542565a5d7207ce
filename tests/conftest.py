"""Shared test fixtures for policygate."""

from dataclasses import dataclass

import pytest

from policygate import OK, BatchRequest, Deny, KVSource, Loader

COMPANIES = [
    {"id": 1, "name": "Apple", "user_id": 1},
    {"id": 2, "name": "Amazon", "user_id": 2},
    {"id": 3, "name": "Dell", "user_id": 1},
]


@dataclass(frozen=True)
class User:
    id: int
    name: str


@dataclass(frozen=True)
class Company:
    id: int
    name: str


class AccountsPolicy:
    """Owners may view their own companies; ownership is looked up in batches."""

    def __init__(self) -> None:
        self.batches: list[list] = []

    def authorize(self, action, actor, subject):
        if action == "view_true":
            return True
        if action == "view_false":
            return Deny("Unauthorized")
        if action == "view_ok":
            return OK
        if action == "view_error":
            return Deny("Unauthorized")
        if action == "view_reason":
            return Deny("not your company")
        if action == "view_batched":
            return BatchRequest(source=self, batch_key="id", input=(actor.id, subject))
        if action == "view_company":
            return BatchRequest(source=self, batch_key="id", input=(actor.id, subject.id))
        if action == "view_broken":
            return {"allow": True}
        return False

    def data(self) -> KVSource:
        return KVSource(self._load)

    def _load(self, batch_key, items):
        self.batches.append(list(items))
        result = {}
        for actor_id, subject in items:
            record = next((c for c in COMPANIES if c[batch_key] == subject), None)
            result[(actor_id, subject)] = record is not None and record["user_id"] == actor_id
        return result


class SourcelessPolicy:
    """Defers every check but cannot build its own batch source."""

    def authorize(self, action, actor, subject):
        return BatchRequest(source="sourceless", batch_key="id", input=(actor.id, subject))


@pytest.fixture
def accounts():
    return AccountsPolicy()


@pytest.fixture
def loader(accounts):
    return Loader().add_source(accounts, accounts.data())


@pytest.fixture
def user1():
    return User(id=1, name="Ben")


@pytest.fixture
def user2():
    return User(id=2, name="John")


@pytest.fixture
def companies():
    return [Company(id=c["id"], name=c["name"]) for c in COMPANIES]


@pytest.fixture
def sourceless():
    return SourcelessPolicy()

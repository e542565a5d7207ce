"""Tests for permit, is_permitted, enforce and default_loader."""

from __future__ import annotations

import sys
from dataclasses import dataclass

import pytest

from policygate import (
    Allowed,
    BatchRequest,
    DataSourcePolicy,
    Denied,
    InvalidPolicyResultError,
    KVSource,
    Loader,
    MissingDataSourceError,
    Policy,
    UnauthorizedError,
    default_loader,
    enforce,
    is_permitted,
    permit,
)
from policygate.config import LoaderConfig, PolicyGateConfig

DENIED = Denied(error=UnauthorizedError("Unauthorized"))


# ── permit ──────────────────────────────────────────────────────────


class TestPermitImmediate:
    def test_true_is_allowed(self, accounts, user1):
        assert permit(accounts, "view_true", user1) == Allowed()

    def test_deny_result_is_denied(self, accounts, user1):
        assert permit(accounts, "view_false", user1) == DENIED

    def test_ok_is_allowed(self, accounts, user1):
        assert permit(accounts, "view_ok", user1) == Allowed()

    def test_deny_reason_is_kept(self, accounts, user1):
        assert permit(accounts, "view_reason", user1).message == "not your company"

    def test_denial_carries_no_action(self, accounts, user1):
        assert permit(accounts, "view_error", user1).error.action is None

    def test_no_batch_for_immediate_verdicts(self, accounts, user1):
        permit(accounts, "view_true", user1)
        assert accounts.batches == []


class TestPermitBatched:
    @pytest.mark.parametrize(
        "actor_fixture, subject, expected",
        [
            ("user1", 1, Allowed()),
            ("user1", 2, DENIED),
            ("user1", 3, Allowed()),
            ("user2", 1, DENIED),
            ("user2", 2, Allowed()),
            ("user2", 3, DENIED),
        ],
    )
    def test_default_loader(self, request, accounts, actor_fixture, subject, expected):
        actor = request.getfixturevalue(actor_fixture)
        assert permit(accounts, "view_batched", actor, subject=subject) == expected

    @pytest.mark.parametrize("subject, expected", [(1, Allowed()), (2, DENIED), (3, Allowed())])
    def test_explicit_loader(self, accounts, loader, user1, subject, expected):
        assert permit(accounts, "view_batched", user1, subject=subject, loader=loader) == expected

    def test_one_round_trip_per_call(self, accounts, user1):
        permit(accounts, "view_batched", user1, subject=1)
        assert accounts.batches == [[(1, 1)]]

    def test_unknown_subject_is_denied(self, accounts, user1):
        assert permit(accounts, "view_batched", user1, subject=42) == DENIED

    def test_idempotent_without_shared_loader(self, accounts, user1):
        first = permit(accounts, "view_batched", user1, subject=2)
        second = permit(accounts, "view_batched", user1, subject=2)
        assert first == second == DENIED
        assert len(accounts.batches) == 2

    def test_shared_loader_reuses_fetched_inputs(self, accounts, loader, user1):
        permit(accounts, "view_batched", user1, subject=1, loader=loader)
        permit(accounts, "view_batched", user1, subject=1, loader=loader)
        assert accounts.batches == [[(1, 1)]]

    def test_preloaded_inputs_coalesce_into_one_batch(self, accounts, loader, user1):
        loader.load_many(accounts, "id", [(1, 1), (1, 2), (1, 3)])

        verdicts = [
            permit(accounts, "view_batched", user1, subject=s, loader=loader) for s in (1, 2, 3)
        ]

        assert verdicts == [Allowed(), DENIED, Allowed()]
        assert len(accounts.batches) == 1
        assert sorted(accounts.batches[0]) == [(1, 1), (1, 2), (1, 3)]

    def test_missing_data_source(self, sourceless, user1):
        with pytest.raises(MissingDataSourceError) as exc_info:
            permit(sourceless, "view", user1, subject=1)
        assert exc_info.value.policy is sourceless
        assert "SourcelessPolicy" in str(exc_info.value)

    def test_sourceless_policy_with_explicit_loader(self, sourceless, user1):
        loader = Loader().add_source(
            "sourceless", KVSource(lambda key, items: {i: i[1] == 7 for i in items})
        )
        assert permit(sourceless, "view", user1, subject=7, loader=loader) == Allowed()
        assert permit(sourceless, "view", user1, subject=8, loader=loader) == DENIED


class TestPermitProgrammingErrors:
    def test_invalid_policy_result_raises(self, accounts, user1):
        with pytest.raises(InvalidPolicyResultError):
            permit(accounts, "view_broken", user1)

    def test_deferred_batch_result_raises(self, user1):
        nested = BatchRequest(source="s", batch_key="id", input=1)

        class Nested:
            def authorize(self, action, actor, subject):
                return BatchRequest(source="s", batch_key="id", input=subject)

        loader = Loader().add_source("s", KVSource(lambda key, items: {i: nested for i in items}))
        with pytest.raises(InvalidPolicyResultError):
            permit(Nested(), "view", user1, subject=1, loader=loader)

    def test_invalid_batch_value_raises(self, user1):
        class NoneResult:
            def authorize(self, action, actor, subject):
                return BatchRequest(source="s", batch_key="id", input=subject)

        loader = Loader().add_source("s", KVSource(lambda key, items: {i: None for i in items}))
        with pytest.raises(InvalidPolicyResultError):
            permit(NoneResult(), "view", user1, subject=1, loader=loader)

    def test_unhashable_batch_input_raises_before_loading(self, accounts):
        @dataclass
        class Member:
            id: int

        class ByActor:
            def authorize(self, action, actor, subject):
                return BatchRequest(source=accounts, batch_key="id", input=(actor, subject))

        loader = Loader().add_source(accounts, accounts.data())
        with pytest.raises(InvalidPolicyResultError, match="not hashable") as exc_info:
            permit(ByActor(), "view", Member(1), subject=1, loader=loader)
        assert isinstance(exc_info.value.__cause__, TypeError)
        assert accounts.batches == []


# ── is_permitted / enforce ──────────────────────────────────────────


class TestIsPermitted:
    def test_immediate(self, accounts, user1):
        assert is_permitted(accounts, "view_true", user1) is True
        assert is_permitted(accounts, "view_false", user1) is False
        assert is_permitted(accounts, "view_ok", user1) is True
        assert is_permitted(accounts, "view_error", user1) is False

    def test_batched(self, accounts, loader, user1, user2):
        assert is_permitted(accounts, "view_batched", user1, subject=1)
        assert not is_permitted(accounts, "view_batched", user1, subject=2, loader=loader)
        assert is_permitted(accounts, "view_batched", user2, subject=2, loader=loader)


class TestEnforce:
    def test_allowed_returns_none(self, accounts, user1):
        assert enforce(accounts, "view_true", user1) is None

    def test_denied_raises(self, accounts, user1):
        with pytest.raises(UnauthorizedError) as exc_info:
            enforce(accounts, "view_reason", user1)
        assert exc_info.value.message == "not your company"


# ── default_loader ──────────────────────────────────────────────────


class TestDefaultLoader:
    def test_registers_policy_source(self, accounts):
        loader = default_loader(accounts)
        assert list(loader.sources) == [accounts]
        assert isinstance(loader.sources[accounts], KVSource)

    def test_new_loader_per_call(self, accounts):
        assert default_loader(accounts) is not default_loader(accounts)

    def test_missing_data(self, sourceless):
        with pytest.raises(MissingDataSourceError, match="data\\(\\)"):
            default_loader(sourceless)

    def test_config_batch_size(self, accounts):
        config = PolicyGateConfig(loader=LoaderConfig(max_batch_size=25))
        assert default_loader(accounts, config).max_batch_size == 25

    def test_config_reaches_permit_default_loader(self, accounts, user1, monkeypatch):
        built = []

        class RecordingLoader(Loader):
            def __init__(self, max_batch_size=None):
                super().__init__(max_batch_size)
                built.append(self)

        monkeypatch.setattr(sys.modules["policygate.permit"], "Loader", RecordingLoader)
        config = PolicyGateConfig(loader=LoaderConfig(max_batch_size=1))

        assert permit(accounts, "view_batched", user1, subject=1, config=config) == Allowed()
        assert is_permitted(accounts, "view_batched", user1, subject=3, config=config)
        enforce(accounts, "view_batched", user1, subject=1, config=config)
        assert [loader.max_batch_size for loader in built] == [1, 1, 1]

    def test_policy_protocols(self, accounts, sourceless):
        assert isinstance(accounts, DataSourcePolicy)
        assert isinstance(sourceless, Policy)
        assert not isinstance(sourceless, DataSourcePolicy)

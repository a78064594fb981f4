"""Tests for the field mapper pipeline."""

import pytest

from vent.auth.password import PasswordService
from vent.core.errors import FieldMapperError
from vent.mappers import (
    chain_field_mappers,
    compute_field,
    hash_password,
    map_field,
    remove_fields,
    rename_field,
    set_default,
    transform_field,
)


@pytest.fixture(scope="module")
def passwords():
    return PasswordService(rounds=4)


class FailingGenerator:
    def generate(self, password: str) -> str:
        raise RuntimeError(f"cannot hash {password}")


# ── Primitives ───────────────────────────────────────────────────────────────


class TestMapField:
    def test_moves_and_transforms(self):
        data = {"name": "  Ada "}
        map_field("name", "display_name", str.strip)(data)
        assert data == {"display_name": "Ada"}

    def test_absent_source_is_noop(self):
        data = {"other": 1}
        map_field("name", "display_name", str.strip)(data)
        assert data == {"other": 1}

    def test_transform_error_names_fields_not_values(self):
        data = {"age": "secret-value"}
        with pytest.raises(FieldMapperError) as exc_info:
            map_field("age", "age_years", int)(data)
        err = exc_info.value
        assert err.stage == "map_field"
        assert err.fields == ["age"]
        assert err.output == "age_years"
        assert "age" in str(err)
        assert "secret-value" not in str(err)


def test_transform_field_in_place():
    data = {"email": "ADA@EXAMPLE.COM"}
    transform_field("email", str.lower)(data)
    assert data == {"email": "ada@example.com"}


def test_rename_field():
    data = {"mail": "a@b.com"}
    rename_field("mail", "email")(data)
    assert data == {"email": "a@b.com"}


def test_set_default_only_when_absent():
    data = {"is_active": False}
    set_default("is_active", True)(data)
    set_default("is_staff", False)(data)
    assert data == {"is_active": False, "is_staff": False}


def test_remove_fields_ignores_missing():
    data = {"a": 1, "b": 2}
    remove_fields("a", "c")(data)
    assert data == {"b": 2}


class TestComputeField:
    def test_computes_and_removes_inputs(self):
        data = {"first": "Ada", "last": "Lovelace", "keep": 1}
        compute_field(["first", "last"], "full_name", lambda v: f"{v['first']} {v['last']}")(data)
        assert data == {"full_name": "Ada Lovelace", "keep": 1}

    def test_noop_unless_all_inputs_present(self):
        data = {"first": "Ada"}
        compute_field(["first", "last"], "full_name", lambda v: "x")(data)
        assert data == {"first": "Ada"}

    def test_failure(self):
        with pytest.raises(FieldMapperError) as exc_info:
            compute_field(["a", "b"], "c", lambda v: v["a"] / v["b"])({"a": 1, "b": 0})
        assert exc_info.value.stage == "compute_field"
        assert exc_info.value.fields == ["a", "b"]


# ── hash_password ────────────────────────────────────────────────────────────


class TestHashPassword:
    def test_replaces_plain_password_with_hash(self, passwords):
        data = {"email": "a@b.com", "password": "secret"}
        hash_password("password", "password_hash", passwords)(data)
        assert "password" not in data
        assert data["password_hash"] != "secret"
        assert passwords.verify("secret", data["password_hash"])
        assert not passwords.verify("Secret", data["password_hash"])

    def test_absent_password_is_noop(self, passwords):
        data = {"email": "a@b.com"}
        hash_password("password", "password_hash", passwords)(data)
        assert data == {"email": "a@b.com"}

    def test_empty_password_is_dropped(self, passwords):
        data = {"email": "a@b.com", "password": ""}
        hash_password("password", "password_hash", passwords)(data)
        assert data == {"email": "a@b.com"}

    def test_non_string_password(self, passwords):
        with pytest.raises(FieldMapperError, match="expected string"):
            hash_password("password", "password_hash", passwords)({"password": 1234})

    def test_generator_failure_does_not_leak_password(self):
        with pytest.raises(FieldMapperError) as exc_info:
            hash_password("password", "password_hash", FailingGenerator())({"password": "hunter2"})
        assert "hunter2" not in str(exc_info.value)
        assert exc_info.value.stage == "hash_password"


# ── chain_field_mappers ──────────────────────────────────────────────────────


class TestChain:
    def test_runs_left_to_right(self):
        chain = chain_field_mappers(
            rename_field("mail", "email"),
            transform_field("email", str.lower),
            set_default("is_active", True),
        )
        data = {"mail": "A@B.COM"}
        chain(data)
        assert data == {"email": "a@b.com", "is_active": True}

    def test_failure_leaves_payload_untouched(self):
        calls = []

        def record(data):
            calls.append(dict(data))

        chain = chain_field_mappers(
            rename_field("mail", "email"),
            map_field("age", "age", int),
            record,
        )
        data = {"mail": "a@b.com", "age": "old"}
        with pytest.raises(FieldMapperError):
            chain(data)
        assert data == {"mail": "a@b.com", "age": "old"}
        assert calls == []

    def test_empty_chain_is_noop(self):
        data = {"a": 1}
        chain_field_mappers()(data)
        assert data == {"a": 1}

    def test_user_pipeline_hashes_password(self, passwords):
        chain = chain_field_mappers(
            transform_field("email", str.strip),
            hash_password("password", "password_hash", passwords),
        )
        data = {"email": " a@b.com ", "password": "secret"}
        chain(data)
        assert set(data) == {"email", "password_hash"}
        assert passwords.verify("secret", data["password_hash"])

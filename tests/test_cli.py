"""Tests for Vent CLI commands."""

import textwrap

import pytest
from click.testing import CliRunner
from fastapi.testclient import TestClient

from vent.auth.password import PasswordService
from vent.cli.main import cli
from vent.cli.serve_cmd import build_demo_app
from vent.config import AdminConfig


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def schema_dir(tmp_path):
    schemas = tmp_path / "schemas"
    schemas.mkdir()
    (schemas / "post.yaml").write_text(textwrap.dedent("""
        schema: Post
        displayField: title
        fields:
          - name: title
          - name: author
            type: foreign_key
            relation:
              schema: User
    """))
    return tmp_path


class TestSchemasCheck:
    def test_valid_directory(self, runner, schema_dir):
        result = runner.invoke(cli, ["schemas", "check", str(schema_dir)])
        assert result.exit_code == 0
        assert "Loaded 1 schemas" in result.output
        assert "Post (3 fields, path: posts/)" in result.output
        assert "unknown schema 'User'" in result.output
        assert "All schema declarations are valid" in result.output

    def test_strict_fails_on_warnings(self, runner, schema_dir):
        result = runner.invoke(cli, ["schemas", "check", "--strict", str(schema_dir)])
        assert result.exit_code == 1

    def test_invalid_declaration(self, runner, tmp_path):
        (tmp_path / "schemas").mkdir()
        (tmp_path / "schemas" / "x.yaml").write_text("schema: X\nfields:\n  - name: a\n    type: money\n")
        result = runner.invoke(cli, ["schemas", "check", str(tmp_path)])
        assert result.exit_code == 1
        assert "[ERROR] x.yaml at fields[0]/type: 'money' is not one of" in result.output
        assert "1 schema error(s) found" in result.output

    def test_non_string_field_name(self, runner, tmp_path):
        (tmp_path / "schemas").mkdir()
        (tmp_path / "schemas" / "x.yaml").write_text("schema: X\nfields:\n  - name: 5\n")
        result = runner.invoke(cli, ["schemas", "check", str(tmp_path)])
        assert result.exit_code == 1
        assert result.exception is None or isinstance(result.exception, SystemExit)
        assert "fields[0]/name: 5 is not of type 'string'" in result.output

    def test_include_without_block(self, runner, tmp_path):
        (tmp_path / "schemas").mkdir()
        (tmp_path / "schemas" / "x.yaml").write_text("schema: X\nincludes:\n  - prefix: x_\n")
        result = runner.invoke(cli, ["schemas", "check", str(tmp_path)])
        assert result.exit_code == 1
        assert "includes[0]: 'block' is a required property" in result.output

    def test_semantic_error_after_structural_pass(self, runner, tmp_path):
        (tmp_path / "schemas").mkdir()
        (tmp_path / "schemas" / "x.yaml").write_text("schema: X\ncolumns: [missing]\n")
        result = runner.invoke(cli, ["schemas", "check", str(tmp_path)])
        assert result.exit_code == 1
        assert "Invalid schema declarations" in result.output
        assert "column 'missing'" in result.output

    def test_missing_directory(self, runner, tmp_path):
        result = runner.invoke(cli, ["schemas", "check", str(tmp_path / "nope")])
        assert result.exit_code != 0


class TestHashPassword:
    def test_prints_verifiable_hash(self, runner):
        result = runner.invoke(cli, ["hash-password", "--rounds", "4", "--password", "secret"])
        assert result.exit_code == 0
        hashed = result.output.strip()
        assert PasswordService(rounds=4).verify("secret", hashed)

    def test_prompts_for_password(self, runner):
        result = runner.invoke(cli, ["hash-password", "--rounds", "4"], input="secret\nsecret\n")
        assert result.exit_code == 0
        hashed = result.output.strip().splitlines()[-1]
        assert PasswordService(rounds=4).verify("secret", hashed)


class TestDemoApp:
    def test_superuser_can_log_in(self):
        config = AdminConfig(secret_key="demo-secret-key-that-is-long-enough", bcrypt_rounds=4)
        app = build_demo_app(config, "root@example.com", "root-pass")
        with TestClient(app) as client:
            response = client.post(
                "/admin/login/", json={"email": "root@example.com", "password": "root-pass"}
            )
            assert response.status_code == 200
            body = client.get("/admin/").json()
            assert [s["name"] for s in body["schemas"]] == ["Group", "User"]

    def test_permissions_are_seeded(self):
        config = AdminConfig(secret_key="demo-secret-key-that-is-long-enough", bcrypt_rounds=4)
        app = build_demo_app(config, "root@example.com", "root-pass")
        with TestClient(app) as client:
            client.post("/admin/login/", json={"email": "root@example.com", "password": "root-pass"})
            body = client.get("/admin/groups/add/").json()
            permissions = next(f for f in body["fields"] if f["name"] == "permissions")
            labels = {o["label"] for o in permissions["options"]}
            assert {"view_user", "add_group", "delete_permission"} <= labels

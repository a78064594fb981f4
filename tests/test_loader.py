"""Tests for YAML schema declarations."""

import textwrap
from pathlib import Path

import pytest

from vent.core.errors import SchemaConfigError, SchemaValidationError
from vent.core.fields import FieldType
from vent.persistence import InMemorySchemaClient
from vent.schema import RelationDef
from vent.schema.loader import SchemaLoader


def write(path: Path, content: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(textwrap.dedent(content))


@pytest.fixture
def metadata_dir(tmp_path):
    write(tmp_path / "blocks" / "timestamps.yaml", """
        block: timestamps
        fields:
          - name: created_at
            type: time
            editable: false
    """)
    write(tmp_path / "schemas" / "post.yaml", """
        schema: Post
        displayField: title
        columns: [title, author]
        includes:
          - block: timestamps
        fieldSets:
          - label: Content
            fields: [title, body]
          - fields: [author, tags]
        fields:
          - name: title
          - name: body
            label: Body text
            inputType: textarea
          - name: author
            type: foreign_key
            relation:
              schema: User
              displayField: email
          - name: tags
            type: relation
            relation:
              schema: Tag
              displayField: name
    """)
    write(tmp_path / "schemas" / "tag.yaml", """
        schema: Tag
        displayField: name
        disableAdmin: true
        fields:
          - name: name
    """)
    return tmp_path


def test_load_all(metadata_dir):
    schemas = SchemaLoader(metadata_dir).load_all()
    assert sorted(schemas) == ["Post", "Tag"]

    post = schemas["Post"]
    assert post.display_field == "title"
    assert post.columns == ["title", "author"]
    assert [f.name for f in post.fields] == ["id", "created_at", "title", "body", "author", "tags"]
    assert post.get_field("created_at").editable is False
    assert post.get_field("body").label == "Body text"
    assert post.get_field("body").effective_input_type() == "textarea"
    assert post.form_field_names() == ["title", "body", "author", "tags"]
    assert post.field_sets[0].label == "Content"
    assert schemas["Tag"].disable_admin is True


def test_relations(metadata_dir):
    post = SchemaLoader(metadata_dir, base_path="/backoffice/").load_all()["Post"]
    assert post.get_edge("author") == RelationDef("User", "email", "/backoffice/users/", unique=True)
    assert post.get_edge("tags") == RelationDef("Tag", "name", "/backoffice/tags/", unique=False)
    assert post.get_field("tags").type is FieldType.RELATION


def test_binds_clients_and_mappers(metadata_dir):
    clients = {
        "Post": InMemorySchemaClient("Post", {"title": FieldType.STRING}),
        "Tag": InMemorySchemaClient("Tag", {"name": FieldType.STRING}),
    }

    def mapper(data):
        data["title"] = data["title"].strip()

    schemas = SchemaLoader(metadata_dir).load_all(clients, field_mappers={"Post": mapper})
    assert schemas["Post"].client is clients["Post"]
    assert schemas["Post"].field_mappers is mapper
    assert schemas["Tag"].field_mappers is None


def test_missing_client(metadata_dir):
    with pytest.raises(SchemaConfigError, match="No client provided for schema 'Tag'"):
        SchemaLoader(metadata_dir).load_all({"Post": InMemorySchemaClient("Post", {})})


def test_unknown_field_type(tmp_path):
    write(tmp_path / "schemas" / "x.yaml", """
        schema: X
        fields:
          - name: price
            type: decimal
    """)
    with pytest.raises(SchemaValidationError, match="'decimal' is not one of"):
        SchemaLoader(tmp_path).load_all()


def test_unknown_block(tmp_path):
    write(tmp_path / "schemas" / "x.yaml", """
        schema: X
        includes:
          - block: audit
    """)
    with pytest.raises(SchemaConfigError, match="unknown block 'audit'"):
        SchemaLoader(tmp_path).load_all()


def test_block_prefix(tmp_path):
    write(tmp_path / "blocks" / "address.yaml", """
        block: address
        fields:
          - name: street
          - name: city
    """)
    write(tmp_path / "schemas" / "company.yaml", """
        schema: Company
        includes:
          - block: address
            prefix: billing_
    """)
    company = SchemaLoader(tmp_path).load_all()["Company"]
    assert company.get_field("billing_city").label == "Billing city"


def test_duplicate_schema(tmp_path):
    write(tmp_path / "schemas" / "a.yaml", "schema: X\n")
    write(tmp_path / "schemas" / "b.yaml", "schema: X\n")
    with pytest.raises(SchemaConfigError, match="declared twice"):
        SchemaLoader(tmp_path).load_all()


def test_relation_without_target(tmp_path):
    write(tmp_path / "schemas" / "x.yaml", """
        schema: X
        fields:
          - name: owner
            type: foreign_key
            relation:
              displayField: email
    """)
    with pytest.raises(SchemaValidationError, match="'schema' is a required property"):
        SchemaLoader(tmp_path).load_all()


def test_include_without_block_name(tmp_path):
    write(tmp_path / "schemas" / "x.yaml", """
        schema: X
        includes:
          - prefix: x_
    """)
    with pytest.raises(SchemaValidationError) as exc_info:
        SchemaLoader(tmp_path).load_all()
    [issue] = exc_info.value.issues
    assert issue.path == "includes[0]"
    assert issue.message == "'block' is a required property"


def test_non_string_field_name(tmp_path):
    write(tmp_path / "schemas" / "x.yaml", """
        schema: X
        fields:
          - name: 5
    """)
    with pytest.raises(SchemaConfigError, match="5 is not of type 'string'"):
        SchemaLoader(tmp_path).load_all()


def test_invalid_block_file(tmp_path):
    write(tmp_path / "blocks" / "audit.yaml", """
        block: audit
        fields:
          - name: created_by
            editable: "no"
    """)
    with pytest.raises(SchemaValidationError, match="audit.yaml at fields\\[0\\]/editable"):
        SchemaLoader(tmp_path).load_all()


def test_invalid_declaration_is_reported(tmp_path):
    write(tmp_path / "schemas" / "x.yaml", """
        schema: X
        columns: [missing]
    """)
    with pytest.raises(SchemaConfigError, match="column 'missing'"):
        SchemaLoader(tmp_path).load_all()


def test_files_without_schema_key_are_rejected(tmp_path):
    write(tmp_path / "schemas" / "notes.yaml", "title: not a schema\n")
    with pytest.raises(SchemaValidationError, match="'schema' is a required property"):
        SchemaLoader(tmp_path).load_all()


def test_empty_file_is_rejected(tmp_path):
    write(tmp_path / "schemas" / "empty.yaml", "\n")
    with pytest.raises(SchemaValidationError, match="empty"):
        SchemaLoader(tmp_path).load_all()


def test_missing_schemas_directory(tmp_path):
    assert SchemaLoader(tmp_path).load_all() == {}


def test_check_relations(metadata_dir):
    loader = SchemaLoader(metadata_dir)
    schemas = loader.load_all()
    assert loader.check_relations(schemas) == ["Post.author -> unknown schema 'User'"]

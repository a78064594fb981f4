"""Load schema declarations from YAML files.

Layout of a metadata directory:

    schemas/*.yaml   one schema per file (top-level ``schema:`` key)
    blocks/*.yaml    reusable field lists (top-level ``block:`` key)

Each file is checked against its JSON Schema (see vent.schema.validator)
before anything is resolved.

Example schema file:

    schema: Post
    displayField: title
    columns: [title, author]
    includes:
      - block: timestamps
    fields:
      - name: title
        type: string
      - name: author
        type: foreign_key
        relation:
          schema: User
          displayField: email
"""

import logging
from pathlib import Path
from typing import Any

import yaml

from vent.core.errors import SchemaConfigError, SchemaValidationError
from vent.core.fields import FieldType, get_field_type
from vent.mappers import FieldMapper
from vent.schema.client import SchemaClient
from vent.schema.config import FieldConfig, FieldSet, RelationDef, SchemaConfig
from vent.schema.validator import SUBDIR_SCHEMA, validate_document

logger = logging.getLogger(__name__)


class SchemaLoader:
    """Loads schema and block definitions from YAML files."""

    def __init__(self, metadata_path: Path, base_path: str = "/admin/"):
        self.metadata_path = Path(metadata_path)
        self.base_path = base_path
        self.blocks: dict[str, list[dict]] = {}
        self.declarations: dict[str, dict[str, Any]] = {}

    def load_all(
        self,
        clients: dict[str, SchemaClient] | None = None,
        field_mappers: dict[str, FieldMapper] | None = None,
    ) -> dict[str, SchemaConfig]:
        """Load every block and schema.

        Args:
            clients: Storage client per schema name. When omitted, schemas
                are built without clients (useful for validation only).
            field_mappers: Optional mapper pipeline per schema name

        Returns:
            SchemaConfigs keyed by name, in file name order

        Raises:
            SchemaValidationError: When a file does not match its JSON Schema
            SchemaConfigError: On an inconsistent declaration or a missing client
        """
        self._load_blocks()
        self._load_declarations()

        schemas: dict[str, SchemaConfig] = {}
        for name, data in self.declarations.items():
            client = None
            if clients is not None:
                client = clients.get(name)
                if client is None:
                    raise SchemaConfigError(f"No client provided for schema '{name}'")
            mappers = (field_mappers or {}).get(name)
            schemas[name] = self._resolve_schema(data, client, mappers)
        return schemas

    def _read_yaml(self, yaml_file: Path, schema_name: str) -> Any:
        """Parse a YAML file and validate it against its JSON Schema."""
        with open(yaml_file) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise SchemaConfigError(f"{yaml_file.name}: invalid YAML: {e}") from e
        issues = validate_document(data, schema_name, yaml_file)
        if issues:
            raise SchemaValidationError(issues)
        return data

    def _load_blocks(self) -> None:
        """Load reusable block definitions."""
        blocks_path = self.metadata_path / "blocks"
        if not blocks_path.exists():
            return

        for yaml_file in sorted(blocks_path.glob("*.yaml")):
            data = self._read_yaml(yaml_file, SUBDIR_SCHEMA["blocks"])
            self.blocks[data["block"]] = data["fields"]

    def _load_declarations(self) -> None:
        """Load raw schema declarations."""
        schemas_path = self.metadata_path / "schemas"
        if not schemas_path.exists():
            logger.warning("No schemas directory at %s", schemas_path)
            return

        for yaml_file in sorted(schemas_path.glob("*.yaml")):
            data = self._read_yaml(yaml_file, SUBDIR_SCHEMA["schemas"])
            name = data["schema"]
            if name in self.declarations:
                raise SchemaConfigError(f"Schema '{name}' is declared twice ({yaml_file.name})")
            self.declarations[name] = data

    def _resolve_schema(
        self,
        data: dict[str, Any],
        client: SchemaClient | None,
        field_mappers: FieldMapper | None,
    ) -> SchemaConfig:
        """Resolve a schema declaration, expanding blocks."""
        name = data["schema"]

        all_fields: list[dict] = []
        for include in data.get("includes", []):
            block_name = include["block"]
            if block_name not in self.blocks:
                raise SchemaConfigError(f"Schema '{name}' includes unknown block '{block_name}'")
            prefix = include.get("prefix", "")
            for block_field in self.blocks[block_name]:
                field_copy = dict(block_field)
                if prefix:
                    field_copy["name"] = prefix + field_copy["name"]
                all_fields.append(field_copy)
        all_fields.extend(data.get("fields", []))

        fields = [self._resolve_field(f) for f in all_fields]
        if not any(f.name == "id" for f in fields):
            fields.insert(0, FieldConfig("id", "ID", FieldType.INT, editable=False))

        field_sets = [
            FieldSet(fields=list(fs.get("fields", [])), label=fs.get("label", ""))
            for fs in data.get("fieldSets", [])
        ]

        return SchemaConfig(
            name=name,
            fields=fields,
            columns=list(data.get("columns", [])),
            field_sets=field_sets,
            client=client,
            display_field=data.get("displayField"),
            field_mappers=field_mappers,
            disable_admin=bool(data.get("disableAdmin", False)),
        )

    def _resolve_field(self, data: dict) -> FieldConfig:
        """Convert a validated field dict to a FieldConfig."""
        field_type = get_field_type(data.get("type", "string"))

        relation = None
        relation_data = data.get("relation")
        if relation_data:
            target = relation_data["schema"]
            relation = RelationDef(
                target_schema=target,
                target_display=relation_data.get("displayField", "id"),
                target_path=relation_data.get(
                    "path", f"{self.base_path}{target.lower()}s/"
                ),
                unique=relation_data.get("unique", field_type is FieldType.FOREIGN_KEY),
            )

        return FieldConfig(
            name=data["name"],
            label=data.get("label", ""),
            type=field_type,
            input_type=data.get("inputType", ""),
            editable=data.get("editable", True),
            relation=relation,
        )

    def check_relations(self, schemas: dict[str, SchemaConfig]) -> list[str]:
        """Describe relations whose target schema was not loaded."""
        problems = []
        for schema in schemas.values():
            for edge in schema.edge_names():
                target = schema.get_edge(edge).target_schema
                if target not in schemas:
                    problems.append(f"{schema.name}.{edge} -> unknown schema '{target}'")
        return problems

"""Built-in User / Group / Permission schemas.

Any application that wants admin authentication registers these three
schemas (bound to its own clients). The admin handler logs users in
against USER_SCHEMA and resolves principals with PERMISSION_EDGES.
"""

from collections.abc import Iterable

from vent.auth.permissions import schema_permissions
from vent.auth.types import CredentialGenerator
from vent.core.fields import FieldType
from vent.mappers import chain_field_mappers, hash_password
from vent.persistence.memory import InMemorySchemaClient
from vent.schema.client import QueryOptions, SchemaClient
from vent.schema.config import FieldConfig, FieldSet, RelationDef, SchemaConfig

USER_SCHEMA = "User"
GROUP_SCHEMA = "Group"
PERMISSION_SCHEMA = "Permission"

PASSWORD_FIELD = "password"
PASSWORD_HASH_FIELD = "password_hash"


def create_auth_schemas(
    user_client: SchemaClient,
    group_client: SchemaClient,
    permission_client: SchemaClient,
    password_generator: CredentialGenerator,
    base_path: str = "/admin/",
) -> list[SchemaConfig]:
    """Build the User, Group and Permission schema configs.

    The User schema exposes a write-only "password" field that its field
    mappers hash into "password_hash"; the hash itself is never a form field.
    """
    user = SchemaConfig(
        name=USER_SCHEMA,
        fields=[
            FieldConfig("id", "ID", FieldType.INT, editable=False),
            FieldConfig("email", "Email", FieldType.STRING),
            FieldConfig(PASSWORD_FIELD, "Password", FieldType.STRING, input_type="password"),
            FieldConfig("is_staff", "Staff", FieldType.BOOL),
            FieldConfig("is_superuser", "Superuser", FieldType.BOOL),
            FieldConfig("is_active", "Active", FieldType.BOOL),
            FieldConfig(
                "groups",
                "Groups",
                FieldType.RELATION,
                relation=RelationDef(GROUP_SCHEMA, "name", f"{base_path}groups/"),
            ),
        ],
        columns=["email", "is_staff", "is_superuser", "is_active"],
        field_sets=[
            FieldSet(
                fields=["id", "email", PASSWORD_FIELD, "is_staff", "is_superuser", "is_active", "groups"]
            )
        ],
        client=user_client,
        display_field="email",
        field_mappers=chain_field_mappers(
            hash_password(PASSWORD_FIELD, PASSWORD_HASH_FIELD, password_generator),
        ),
    )

    group = SchemaConfig(
        name=GROUP_SCHEMA,
        fields=[
            FieldConfig("id", "ID", FieldType.INT, editable=False),
            FieldConfig("name", "Name", FieldType.STRING),
            FieldConfig(
                "permissions",
                "Permissions",
                FieldType.RELATION,
                relation=RelationDef(PERMISSION_SCHEMA, "name", f"{base_path}permissions/"),
            ),
        ],
        columns=["name"],
        field_sets=[FieldSet(fields=["name", "permissions"])],
        client=group_client,
        display_field="name",
    )

    permission = SchemaConfig(
        name=PERMISSION_SCHEMA,
        fields=[
            FieldConfig("id", "ID", FieldType.INT, editable=False),
            FieldConfig("name", "Name", FieldType.STRING),
        ],
        columns=["name"],
        client=permission_client,
        display_field="name",
        disable_admin=True,
    )

    return [user, group, permission]


def create_memory_auth_clients(
    base_path: str = "/admin/",
) -> tuple[InMemorySchemaClient, InMemorySchemaClient, InMemorySchemaClient]:
    """In-memory user, group and permission clients wired together."""
    users = InMemorySchemaClient(
        USER_SCHEMA,
        {
            "email": FieldType.STRING,
            PASSWORD_HASH_FIELD: FieldType.STRING,
            "is_staff": FieldType.BOOL,
            "is_superuser": FieldType.BOOL,
            "is_active": FieldType.BOOL,
        },
        display_field="email",
    )
    groups = InMemorySchemaClient(GROUP_SCHEMA, {"name": FieldType.STRING}, display_field="name")
    permissions = InMemorySchemaClient(
        PERMISSION_SCHEMA, {"name": FieldType.STRING}, display_field="name"
    )
    users.add_edge("groups", groups, target_path=f"{base_path}groups/")
    groups.add_edge("permissions", permissions, target_path=f"{base_path}permissions/")
    return users, groups, permissions


async def seed_permissions(
    permission_client: SchemaClient,
    schemas: Iterable[SchemaConfig],
) -> list[str]:
    """Create the view/add/change/delete permissions of each schema.

    Existing permission names are left alone.

    Returns:
        Names of the permissions that were created
    """
    existing = {
        p.get_string("name") for p in await permission_client.list(QueryOptions())
    }
    created: list[str] = []
    for schema in schemas:
        for name in schema_permissions(schema).values():
            if name in existing:
                continue
            await permission_client.create({"name": name})
            existing.add(name)
            created.append(name)
    return created

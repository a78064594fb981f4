"""Exception hierarchy shared across Vent.

Authentication failures (401-class) and authorization failures (403-class)
are deliberately separate branches so handlers can tell them apart.
"""


class VentError(Exception):
    """Base exception for all Vent errors."""

    pass


class FieldTypeError(VentError, TypeError):
    """Raised when a typed accessor does not match a FieldValue's tag.

    This is a programming error in the caller, not a recoverable condition.
    """

    pass


class SchemaConfigError(VentError, ValueError):
    """Raised when a schema declaration is inconsistent."""

    pass


class SchemaValidationError(SchemaConfigError):
    """Raised when a YAML declaration does not match its JSON Schema.

    Attributes:
        issues: ValidationIssues for the offending file
    """

    def __init__(self, issues: list):
        self.issues = list(issues)
        super().__init__("; ".join(str(issue) for issue in self.issues))


class SchemaNotFoundError(VentError, KeyError):
    """Raised when a schema name is not registered."""

    def __init__(self, name: str):
        super().__init__(name)
        self.name = name

    def __str__(self) -> str:
        return f"Schema '{self.name}' is not registered"


class EntityNotFoundError(VentError):
    """Raised by a SchemaClient when no entity has the requested id."""

    def __init__(self, schema: str, id: int):
        super().__init__(f"{schema} with id {id} does not exist")
        self.schema = schema
        self.id = id


class EdgeNotLoadedError(VentError, LookupError):
    """Raised when an edge is read before it was loaded.

    Attributes:
        schema: Name of the schema that owns the edge
        edge: Name of the edge
    """

    def __init__(self, schema: str, edge: str):
        self.schema = schema
        self.edge = edge
        super().__init__(
            f"{schema}.{edge} is not loaded; request it with GetOptions(with_edges=[{edge!r}])"
        )


class FieldMapperError(VentError):
    """Raised when a field mapper stage fails.

    Attributes:
        stage: Name of the mapper stage (e.g. "map_field", "hash_password")
        fields: Input fields the stage was reading
        output: Field the stage was writing, if any

    The message names the stage and fields only. Submitted values are
    never included, so a password can not leak into logs or responses.
    """

    def __init__(
        self,
        stage: str,
        fields: list[str],
        output: str | None,
        reason: str,
    ):
        self.stage = stage
        self.fields = list(fields)
        self.output = output
        self.reason = reason
        source = self.fields[0] if len(self.fields) == 1 else self.fields
        target = f" -> {output!r}" if output else ""
        super().__init__(f"field mapper {stage} {source!r}{target}: {reason}")

    def to_dict(self) -> dict:
        return {
            "stage": self.stage,
            "fields": self.fields,
            "output": self.output,
            "message": str(self),
        }


class AuthenticationError(VentError):
    """Base exception for failures to establish who the caller is."""

    pass


class InvalidTokenError(AuthenticationError):
    """Raised when a token is invalid or malformed."""

    pass


class TokenExpiredError(AuthenticationError):
    """Raised when a token has expired."""

    pass


class PasswordMismatchError(AuthenticationError):
    """Raised when a password does not match its stored hash."""

    pass


class PrincipalNotFoundError(AuthenticationError):
    """Raised when a valid token names a user that can not be loaded."""

    pass


class PermissionDeniedError(VentError):
    """Raised when an authenticated principal lacks required permissions.

    Attributes:
        missing: Permission names the principal does not hold
    """

    def __init__(self, missing: list[str]):
        self.missing = list(missing)
        super().__init__(
            "user does not have permission: " + ", ".join(self.missing)
        )


class FormDataError(VentError, ValueError):
    """Raised when a submitted value can not be converted to its field type."""

    def __init__(self, field: str, reason: str):
        self.field = field
        super().__init__(f"field '{field}': {reason}")

"""FastAPI admin application.

Routes are JSON view-models; rendering them is left to a front end.
All routes live under ``AdminConfig.base_path`` (default ``/admin/``):

    POST login/, POST logout/        token cookie management
    GET  (base)                      schemas the user may view
    GET  <schema>s/                  table view        view_<schema>
    GET  <schema>s/add/              empty form        add_<schema>
    POST <schema>s/                  create            add_<schema>
    GET  <schema>s/{id}/             entity form       view_<schema>
    PATCH <schema>s/{id}/            update            change_<schema>
    DELETE <schema>s/{id}/           delete            delete_<schema>
"""

import logging
from dataclasses import replace
from typing import Any

from fastapi import APIRouter, Body, Depends, FastAPI, HTTPException, Request, Response
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from vent.api.deps import PrincipalResolver, require_permissions
from vent.auth.jwt_service import JWTService
from vent.auth.password import PasswordService
from vent.auth.permissions import authorize, schema_permissions
from vent.auth.schemas import PASSWORD_HASH_FIELD, USER_SCHEMA
from vent.auth.types import CredentialAuthenticator
from vent.config import AdminConfig
from vent.core.errors import (
    EntityNotFoundError,
    FieldMapperError,
    FormDataError,
    PasswordMismatchError,
)
from vent.core.fields import FIELD_TYPES, EntityData, FieldType
from vent.schema.client import GetOptions, QueryOptions
from vent.schema.config import SchemaConfig
from vent.schema.forms import parse_entity_form_data
from vent.schema.registry import SchemaRegistry

logger = logging.getLogger(__name__)


class LoginRequest(BaseModel):
    """Request body for login."""

    email: str
    password: str


class LoginResponse(BaseModel):
    """Response body for login."""

    access_token: str
    token_type: str = "Bearer"
    redirect: str


def _write_error(status_code: int, errors: list[dict[str, Any]]) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"valid": False, "errors": errors})


def _entity_url(base_path: str, schema: SchemaConfig, entity: EntityData) -> str:
    return base_path + schema.entity_path(entity.id)


async def build_table(schema: SchemaConfig, base_path: str, options: QueryOptions) -> dict[str, Any]:
    """List view-model: column headers and one row of cells per entity."""
    entities = await schema.client.list(options)

    columns = []
    for name in schema.columns:
        field = schema.lookup_field(name)
        columns.append({
            "name": field.name,
            "label": field.label,
            "type": str(field.type),
            "align": FIELD_TYPES[field.type].alignment,
        })

    rows = []
    for entity in entities:
        cells = []
        for i, name in enumerate(schema.columns):
            value = entity.get(name)
            if value is None:
                cells.append({"display": "", "url": None})
                continue
            url = _entity_url(base_path, schema, entity) if i == 0 else None
            if value.type is FieldType.FOREIGN_KEY and value.relation is not None:
                url = value.relation.url
            cells.append({"display": value.display, "url": url})
        rows.append({
            "id": entity.id,
            "url": _entity_url(base_path, schema, entity),
            "cells": cells,
        })

    return {"schema": schema.name, "columns": columns, "rows": rows}


async def build_form_fields(schema: SchemaConfig, entity: EntityData | None) -> list[dict[str, Any]]:
    """Form view-model: one entry per form field, relation options included."""
    fields = []
    for name in schema.form_field_names():
        field = schema.lookup_field(name)
        input_type = field.effective_input_type()
        value = entity.get(field.name) if entity is not None else None

        field_props: dict[str, Any] = {
            "name": field.name,
            "label": field.label,
            "type": input_type,
            "value": value.display if value is not None and input_type != "password" else "",
            "editable": field.editable,
        }

        if field.relation is not None:
            selected: set[int] = set()
            if value is not None and value.type is FieldType.FOREIGN_KEY:
                selected = {value.raw}
            elif value is not None and value.type is FieldType.RELATION:
                selected = set(value.raw)
            options = await schema.client.get_relation_options(field.relation)
            field_props["options"] = [
                replace(opt, selected=opt.value in selected).to_dict() for opt in options
            ]

        fields.append(field_props)
    return fields


def create_schema_router(
    schema: SchemaConfig,
    resolver: PrincipalResolver,
    base_path: str,
) -> APIRouter:
    """Create the CRUD routes of one schema.

    Args:
        schema: The schema to expose
        resolver: Principal dependency shared by all routes
        base_path: Admin URL prefix

    Returns:
        Configured APIRouter
    """
    router = APIRouter(tags=[schema.name])
    path = base_path + schema.path
    perms = schema_permissions(schema)

    can_view = require_permissions(resolver, perms["view"])
    can_add = require_permissions(resolver, perms["add"])
    can_change = require_permissions(resolver, perms["change"])
    can_delete = require_permissions(resolver, perms["delete"])

    @router.get(path)
    async def list_entities(
        order_by: str = "id",
        desc: bool = False,
        limit: int = 0,
        offset: int = 0,
        principal: EntityData = Depends(can_view),
    ) -> dict[str, Any]:
        if order_by != "id" and schema.get_field(order_by) is None:
            raise HTTPException(400, f"Unknown field '{order_by}'")
        if limit < 0 or offset < 0:
            raise HTTPException(400, "limit and offset must not be negative")
        options = QueryOptions(order_by=order_by, order_desc=desc, limit=limit, offset=offset)
        return await build_table(schema, base_path, options)

    @router.get(path + "add/")
    async def add_form(principal: EntityData = Depends(can_add)) -> dict[str, Any]:
        return {
            "schema": schema.name,
            "fields": await build_form_fields(schema, None),
        }

    @router.post(path, status_code=201)
    async def create_entity(
        data: dict[str, Any] = Body(...),
        principal: EntityData = Depends(can_add),
    ):
        try:
            payload = parse_entity_form_data(schema, data)
        except FormDataError as e:
            return _write_error(422, [{"field": e.field, "message": str(e)}])
        except FieldMapperError as e:
            logger.warning("Field mappers failed creating %s: %s", schema.name, e)
            return _write_error(422, [e.to_dict()])

        entity = await schema.client.create(payload)
        logger.info("User %s created %s %d", principal.id, schema.name, entity.id)
        return {
            "id": entity.id,
            "url": _entity_url(base_path, schema, entity),
            "redirect": path,
        }

    @router.get(path + "{id}/")
    async def get_entity(id: int, principal: EntityData = Depends(can_view)) -> dict[str, Any]:
        try:
            entity = await schema.client.get(id, GetOptions(with_edges=schema.edge_names()))
        except EntityNotFoundError as e:
            raise HTTPException(404, str(e))
        return {
            "schema": schema.name,
            "id": id,
            "display": schema.entity_display(entity),
            "fields": await build_form_fields(schema, entity),
        }

    @router.patch(path + "{id}/")
    async def update_entity(
        id: int,
        data: dict[str, Any] = Body(...),
        principal: EntityData = Depends(can_change),
    ):
        try:
            payload = parse_entity_form_data(schema, data)
        except FormDataError as e:
            return _write_error(422, [{"field": e.field, "message": str(e)}])
        except FieldMapperError as e:
            logger.warning("Field mappers failed updating %s %d: %s", schema.name, id, e)
            return _write_error(422, [e.to_dict()])

        try:
            await schema.client.update(id, payload)
        except EntityNotFoundError as e:
            raise HTTPException(404, str(e))
        logger.info("User %s updated %s %d", principal.id, schema.name, id)
        return {"id": id, "redirect": path}

    @router.delete(path + "{id}/")
    async def delete_entity(id: int, principal: EntityData = Depends(can_delete)):
        try:
            await schema.client.delete(id)
        except EntityNotFoundError as e:
            raise HTTPException(404, str(e))
        logger.info("User %s deleted %s %d", principal.id, schema.name, id)
        return {"id": id, "redirect": path}

    return router


def create_app(
    registry: SchemaRegistry,
    config: AdminConfig | None = None,
    user_schema: str = USER_SCHEMA,
    password_field: str = PASSWORD_HASH_FIELD,
    credential_authenticator: CredentialAuthenticator | None = None,
    token_service: JWTService | None = None,
) -> FastAPI:
    """Create the admin application for a registry of schemas.

    Args:
        registry: Registered schemas; must contain ``user_schema``
        config: Admin settings (defaults to AdminConfig.from_env())
        user_schema: Name of the schema users log in against
        password_field: User field holding the password hash
        credential_authenticator: Password checker (default: bcrypt)
        token_service: Token generator/authenticator (default: HS256 JWT)

    Raises:
        SchemaNotFoundError: If ``user_schema`` is not registered
        SchemaConfigError: If a relation targets an unregistered schema
    """
    config = config or AdminConfig.from_env()
    users = registry.get(user_schema)
    registry.check_relations()

    if config.uses_default_secret:
        logger.warning("Using the default secret key; set VENT_SECRET_KEY in production")

    credentials = credential_authenticator or PasswordService(config.bcrypt_rounds)
    tokens = token_service or JWTService(config.secret_key, config.token_ttl)
    resolver = PrincipalResolver(tokens, users, config.cookie_name)
    base_path = config.base_path

    app = FastAPI(title="Vent Admin")

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info("%s %s", request.method, request.url.path)
        return await call_next(request)

    @app.post(base_path + "login/", response_model=LoginResponse)
    async def login(request: LoginRequest, response: Response) -> LoginResponse:
        """Authenticate a user and set the token cookie.

        Raises:
            HTTPException 401 if credentials are invalid
            HTTPException 403 if the user is disabled
        """
        matches = await users.client.list(
            QueryOptions(filters={"email": request.email}, limit=2)
        )
        if len(matches) != 1:
            logger.warning("Failed login: unknown email")
            raise HTTPException(401, "Invalid email or password")
        user = matches[0]

        password_hash = user.get(password_field)
        if password_hash is None or password_hash.type is not FieldType.STRING:
            logger.warning("Failed login for user %d: no password set", user.id)
            raise HTTPException(401, "Invalid email or password")

        try:
            credentials.authenticate(request.password, password_hash.string_value())
        except PasswordMismatchError:
            logger.warning("Failed login for user %d: bad password", user.id)
            raise HTTPException(401, "Invalid email or password")

        active = user.get("is_active")
        if active is not None and active.raw is False:
            raise HTTPException(403, "User account is disabled")

        token = tokens.generate(tokens.new_claims(user.id))
        response.set_cookie(
            key=config.cookie_name,
            value=token,
            path="/",
            httponly=True,
            samesite="lax",
            max_age=config.token_ttl,
        )
        logger.info("User %d logged in", user.id)
        return LoginResponse(access_token=token, redirect=base_path)

    @app.post(base_path + "logout/")
    async def logout(response: Response) -> dict[str, str]:
        response.delete_cookie(key=config.cookie_name, path="/")
        return {"redirect": base_path + "login/"}

    @app.get(base_path)
    async def index(principal: EntityData = Depends(resolver)) -> dict[str, Any]:
        """Schemas the principal may view, sorted by name."""
        schemas = [
            {"name": schema.name, "path": base_path + schema.path}
            for schema in registry
            if not schema.disable_admin
            and authorize(principal, schema_permissions(schema)["view"])
        ]
        return {"user": users.entity_display(principal), "schemas": schemas}

    for schema in registry:
        if schema.disable_admin:
            continue
        app.include_router(create_schema_router(schema, resolver, base_path))
        logger.info("Registered handlers on %s", base_path + schema.path)

    return app

from __future__ import annotations

from pathlib import Path
from typing import Callable, List, Optional
import json
import logging

import typer

from permtree.config import (
    StoreConfig,
    store_config_from_env,
    store_config_from_table,
    store_config_scope,
    store_defaults,
)
from permtree.exceptions import InvalidPath, InvalidPermission, PermissionDenied
from permtree.json_types import JSONObject, JSONValue
from permtree.permissions import Permission, parse_permission
from permtree.store import Store, restrict

app = typer.Typer(add_completion=False)

EXIT_DENIED = 1
EXIT_INVALID = 2


def _parse_restrictions(values: List[str]) -> dict[str, Permission]:
    overrides: dict[str, Permission] = {}
    for raw in values:
        name, sep, permission = raw.partition("=")
        if not sep or not name.strip():
            raise typer.BadParameter(f"expected name=permission, got {raw!r}")
        try:
            overrides[name.strip()] = parse_permission(permission)
        except InvalidPermission as exc:
            raise typer.BadParameter(str(exc)) from exc
    return overrides


def _resolve_config(policy: Optional[str], config: Optional[Path]) -> StoreConfig:
    try:
        base = store_config_from_table(store_defaults(config_path=config))
        resolved = store_config_from_env(base)
        if policy is not None:
            resolved = StoreConfig(default_policy=parse_permission(policy))
    except InvalidPermission as exc:
        raise typer.BadParameter(str(exc)) from exc
    return resolved


def _load_document(document: Path) -> JSONObject:
    try:
        payload = json.loads(document.read_text(encoding="utf-8"))
    except (OSError, UnicodeError, json.JSONDecodeError) as exc:
        raise typer.BadParameter(f"cannot load {document}: {exc}") from exc
    if not isinstance(payload, dict):
        raise typer.BadParameter(f"{document} must contain a JSON object")
    return payload


def _build_store(
    document: Path, restrictions: List[str], default_policy: Permission
) -> Store:
    store_cls = restrict(_parse_restrictions(restrictions), name="DocumentStore")
    try:
        return store_cls(_load_document(document), default_policy=default_policy)
    except (InvalidPath, PermissionDenied) as exc:
        raise typer.BadParameter(str(exc)) from exc


def render(value: object) -> JSONValue:
    """Render a stored value as JSON; nested Stores show their readable entries."""
    if isinstance(value, Store):
        return {name: render(item) for name, item in value.entries().items()}
    if isinstance(value, list):
        return [render(item) for item in value]
    if callable(value):
        return render(value())
    return value  # type: ignore[return-value]


def _emit(value: object) -> None:
    typer.echo(json.dumps(render(value), indent=2, sort_keys=True))


def _run(
    action: Callable[[Store], object],
    document: Path,
    restrictions: List[str],
    policy: Optional[str],
    config: Optional[Path],
) -> None:
    store_config = _resolve_config(policy, config)
    with store_config_scope(store_config):
        store = _build_store(document, restrictions, store_config.default_policy)
        try:
            _emit(action(store))
        except PermissionDenied as exc:
            typer.secho(str(exc), err=True, fg=typer.colors.RED)
            raise typer.Exit(code=EXIT_DENIED)
        except InvalidPath as exc:
            typer.secho(str(exc), err=True, fg=typer.colors.RED)
            raise typer.Exit(code=EXIT_INVALID)


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Log store decisions."),
) -> None:
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")


@app.command("read")
def read(
    document: Path = typer.Argument(..., help="JSON object document to load."),
    path: str = typer.Argument(..., help="Colon-separated slot path."),
    policy: Optional[str] = typer.Option(None, "--policy", help="Root default policy."),
    restriction: List[str] = typer.Option([], "--restrict", help="name=permission override on the root."),
    config: Optional[Path] = typer.Option(None, "--config"),
) -> None:
    _run(lambda store: store.read(path), document, restriction, policy, config)


@app.command("entries")
def entries(
    document: Path = typer.Argument(..., help="JSON object document to load."),
    path: Optional[str] = typer.Argument(None, help="Store to list (default: root)."),
    policy: Optional[str] = typer.Option(None, "--policy", help="Root default policy."),
    restriction: List[str] = typer.Option([], "--restrict", help="name=permission override on the root."),
    config: Optional[Path] = typer.Option(None, "--config"),
) -> None:
    def _entries(store: Store) -> object:
        target = store if path is None else store.read(path)
        if not isinstance(target, Store):
            raise InvalidPath(path or "", path or "", "does not name a store")
        return target

    _run(_entries, document, restriction, policy, config)

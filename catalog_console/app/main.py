"""
Point d'entrée en ligne de commande de la console catalogue.

Coquille fine autour des services: construit le conteneur et un état de vue par commande, appelle le
service concerné puis affiche le modèle d'affichage. Le code retour est non nul dès que l'action
échoue.

Exemples:
    catalog-console projects list --name Do
    catalog-console search --project 3 --query "" --status DRAFT --top-k 50
    catalog-console artifact edit 12 --title "New title"
"""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence
from pathlib import Path

from catalog_console.app.rendering import (
    render_artifact,
    render_project,
    render_reindex,
    render_search_result,
)
from catalog_console.core.container import Container
from catalog_console.core.logging import setup_logging
from catalog_console.core.settings import get_settings
from catalog_console.domain.entities import ArtifactStatus
from catalog_console.services.artifact_controller import select_content_length
from catalog_console.services.outcomes import ActionResult
from catalog_console.services.projects import default_project_id

_STATUSES = [s.value for s in ArtifactStatus]


def build_parser() -> argparse.ArgumentParser:
    """Construit l'analyseur d'arguments et ses sous-commandes."""
    parser = argparse.ArgumentParser(prog="catalog-console")
    parser.add_argument("--api-url", help="Catalog service base URL (overrides CATALOG_API_URL)")
    parser.add_argument("--log-level", help="Log level (overrides LOG_LEVEL)")
    sub = parser.add_subparsers(dest="command", required=True)

    projects = sub.add_parser("projects", help="List or create projects")
    projects_sub = projects.add_subparsers(dest="action", required=True)
    p_list = projects_sub.add_parser("list")
    p_list.add_argument("--name", default="", help="Name prefix filter")
    p_create = projects_sub.add_parser("create")
    p_create.add_argument("name")

    project = sub.add_parser("project", help="Show a project")
    project.add_argument("action", choices=["show"])
    project.add_argument("id", type=int)

    search = sub.add_parser("search", help="Search artifacts in a project")
    search.add_argument("--project", type=int, help="Defaults to the first project")
    search.add_argument("--query", default="")
    status_group = search.add_mutually_exclusive_group()
    status_group.add_argument("--status", choices=_STATUSES, default=ArtifactStatus.APPROVED.value)
    status_group.add_argument("--any-status", action="store_true")
    search.add_argument("--type", default="")
    search.add_argument("--mode", default="", help="LIKE, VECTOR or HYBRID")
    search.add_argument("--top-k")
    search.add_argument("--max-snippet-length")

    artifact = sub.add_parser("artifact", help="Show, create, edit or transition artifacts")
    artifact_sub = artifact.add_subparsers(dest="action", required=True)
    a_show = artifact_sub.add_parser("show")
    a_show.add_argument("id", type=int)
    a_show.add_argument(
        "--preset",
        help="Content cap preset (4000, 10000, 50000) or 'custom' with --max-content-length",
    )
    a_show.add_argument("--max-content-length")
    a_show.add_argument(
        "--no-auto-expand",
        action="store_true",
        help="Keep the requested cap instead of fetching the full content",
    )
    a_create = artifact_sub.add_parser("create")
    a_create.add_argument("--project", type=int)
    a_create.add_argument("--type", required=True)
    a_create.add_argument("--title", required=True)
    _add_content_args(a_create)
    a_edit = artifact_sub.add_parser("edit")
    a_edit.add_argument("id", type=int)
    a_edit.add_argument("--type")
    a_edit.add_argument("--title")
    _add_content_args(a_edit)
    for action in ("approve", "deprecate"):
        a_transition = artifact_sub.add_parser(action)
        a_transition.add_argument("id", type=int)

    reindex = sub.add_parser("reindex", help="Reindex a project")
    reindex.add_argument("--project", type=int, help="Defaults to the first project")
    reindex.add_argument("--status", choices=_STATUSES, default=ArtifactStatus.APPROVED.value)
    reindex.add_argument("--type", default="")
    reindex.add_argument("--limit")
    return parser


def _add_content_args(parser: argparse.ArgumentParser) -> None:
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--content")
    group.add_argument("--content-file", type=Path)


def _read_content(args: argparse.Namespace) -> str | None:
    if args.content_file is not None:
        return args.content_file.read_text(encoding="utf-8")
    return args.content


def _report(result: ActionResult, body: str | None = None) -> int:
    if body:
        print(body)
    if result.ok:
        if result.message:
            print(result.message)
        return 0
    print(result.message or result.outcome.value, file=sys.stderr)
    return 1


def _resolve_project(c: Container, project_id: int | None) -> int | None:
    """Projet demandé, sinon le premier projet du catalogue."""
    if project_id is not None:
        return project_id
    state = c.projects_view()
    c.projects.load(state)
    return default_project_id(state.projects)


def _run_projects(c: Container, args: argparse.Namespace) -> int:
    state = c.projects_view(args.name if args.action == "list" else "")
    if args.action == "create":
        result = c.projects.create(state, args.name)
        return _report(result)
    result = c.projects.load(state)
    return _report(result, "\n".join(render_project(p) for p in state.projects))


def _run_project(c: Container, args: argparse.Namespace) -> int:
    result = c.projects.get(args.id)
    return _report(result, render_project(result.value) if result.value else None)


def _run_search(c: Container, args: argparse.Namespace) -> int:
    state = c.search_view(_resolve_project(c, args.project))
    state.query = args.query
    state.status = None if args.any_status else ArtifactStatus(args.status)
    state.type = args.type
    state.mode = args.mode
    if args.top_k is not None:
        state.top_k = args.top_k
    if args.max_snippet_length is not None:
        state.max_snippet_length = args.max_snippet_length
    result = c.search.run(state)
    body = "\n\n".join(render_search_result(v) for v in state.results) or "No results."
    return _report(result, body if result.ok else None)


def _run_artifact(c: Container, args: argparse.Namespace) -> int:
    if args.action == "create":
        result = c.artifacts.create(args.project, args.type, args.title, _read_content(args) or "")
        return _report(result)

    state = c.artifact_view(args.id)
    if args.action == "show":
        if args.preset is not None:
            select_content_length(state, args.preset, args.max_content_length or "")
        elif args.max_content_length is not None:
            state.max_content_length = args.max_content_length
        result = c.artifacts.load(state, auto_expand=not args.no_auto_expand)
        body = render_artifact(state, c.settings.CONTENT_LENGTH_PRESETS)
        return _report(result, body if result.ok else None)

    loaded = c.artifacts.load(state)
    if not loaded.ok:
        return _report(loaded)
    if args.action == "edit":
        if args.type is not None:
            state.edit_type = args.type
        if args.title is not None:
            state.edit_title = args.title
        content = _read_content(args)
        if content is not None:
            state.edit_content = content
        result = c.artifacts.save(state)
    else:
        result = c.artifacts.change_status(state, args.action)
    body = render_artifact(state, c.settings.CONTENT_LENGTH_PRESETS)
    return _report(result, body if result.ok and result.value else None)


def _run_reindex(c: Container, args: argparse.Namespace) -> int:
    state = c.reindex_view(_resolve_project(c, args.project))
    state.status = ArtifactStatus(args.status)
    state.type = args.type
    if args.limit is not None:
        state.limit = args.limit
    result = c.reindex.run(state)
    return _report(result, render_reindex(state.result) if state.result else None)


_COMMANDS = {
    "projects": _run_projects,
    "project": _run_project,
    "search": _run_search,
    "artifact": _run_artifact,
    "reindex": _run_reindex,
}


def main(argv: Sequence[str] | None = None, container: Container | None = None) -> int:
    """
    Point d'entrée principal de la console.

    Étapes:
    - Lit les arguments et les paramètres d'exécution
    - Configure le logging structuré (structlog)
    - Construit le conteneur (sauf s'il est fourni) et exécute la commande
    """
    args = build_parser().parse_args(argv)
    settings = get_settings() if container is None else container.settings
    if args.api_url:
        settings.CATALOG_API_URL = args.api_url
    setup_logging(args.log_level or settings.LOG_LEVEL)
    owned = container is None
    c = container or Container(settings)
    try:
        return _COMMANDS[args.command](c, args)
    finally:
        if owned:
            c.close()


if __name__ == "__main__":  # pragma: no cover - script entry
    raise SystemExit(main())

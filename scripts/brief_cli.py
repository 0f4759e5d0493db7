from __future__ import annotations

import argparse
import logging
import re
import sys
from pathlib import Path
from typing import Any

import yaml

from agents.field_generation_agent import FieldGenerationAgent
from app_logging.run_logger import RunLogger
from lib.brief_repository import BriefRepository, RepositoryResult
from lib.env import load_env
from lib.errors import BriefDeskError, TransportError
from lib.model_resolver import ModelResolver
from lib.settings import BriefDeskSettings, load_settings
from lib.table_store import CsvTableStore
from pipeline.brief_editor import BriefEditor
from schemas.brief import BRIEF_FIELDS, Brief
from schemas.session import BriefSession


def _snake(key: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", str(key).strip()).lower()


def brief_from_mapping(raw: Any) -> Brief:
    """Accept snake_case or camelCase keys; unknown keys are rejected by the schema."""
    if not isinstance(raw, dict):
        raise ValueError("Brief file must contain a mapping of field -> text")
    data = {_snake(k): ("" if v is None else str(v)) for k, v in raw.items()}
    data.pop("original_title", None)
    return Brief(**data)


def build_editor(settings: BriefDeskSettings) -> BriefEditor:
    repository = BriefRepository(store=CsvTableStore(path=settings.store_path))
    agent = FieldGenerationAgent(
        settings=settings,
        resolver=ModelResolver(settings=settings),
        run_logger=RunLogger(log_path=settings.run_log_path),
    )
    return BriefEditor(repository=repository, agent=agent)


def _report(res: RepositoryResult) -> int:
    if res.ok:
        print(res.message)
        return 0
    print(f"Error: {res.message}", file=sys.stderr)
    if res.error and res.error != res.message:
        print(f"  {res.error}", file=sys.stderr)
    return 1


def _cmd_init(editor: BriefEditor, args: argparse.Namespace) -> int:
    return _report(editor.repository.ensure_schema())


def _cmd_list(editor: BriefEditor, args: argparse.Namespace) -> int:
    res = editor.repository.list_titles()
    if res.ok:
        for t in res.titles:
            print(t)
    return 0 if res.ok else _report(res)


def _cmd_show(editor: BriefEditor, args: argparse.Namespace) -> int:
    res = editor.repository.fetch(args.title)
    if not res.ok:
        return _report(res)
    if res.brief is None:
        print(res.message, file=sys.stderr)
        return 1
    print(yaml.safe_dump(res.brief.model_dump(), sort_keys=False, allow_unicode=True), end="")
    return 0


def _cmd_save(editor: BriefEditor, args: argparse.Namespace) -> int:
    raw = yaml.safe_load(Path(args.file).read_text(encoding="utf-8"))
    brief = brief_from_mapping(raw)

    original = args.original_title
    if original is None and isinstance(raw, dict):
        original = raw.get("original_title") or raw.get("originalTitle")
    session = BriefSession.for_title(original) if original else BriefSession()

    res, _ = editor.save(brief, session)
    return _report(res)


def _cmd_generate(editor: BriefEditor, args: argparse.Namespace) -> int:
    if args.save and not args.title:
        print("Error: --save needs --title", file=sys.stderr)
        return 1

    if args.title:
        brief, session = editor.open(args.title)
        if brief is None:
            print(f'Error: brief "{args.title}" not found', file=sys.stderr)
            return 1
    else:
        brief, session = editor.new()
        brief = brief.model_copy(update={"main_keyword": args.main_keyword or "", "entities": args.entities or ""})

    updated = editor.fill_field(brief, args.field, topic=args.topic, model_override=args.model)
    field = _snake(args.field)
    print(getattr(updated, field))

    if args.save:
        res, _ = editor.save(updated, session)
        return _report(res)
    return 0


def _cmd_set_model(editor: BriefEditor, args: argparse.Namespace) -> int:
    if editor.agent is None or not editor.agent.resolver.set_default(args.model):
        print("Error: default model was not saved", file=sys.stderr)
        return 1
    print(f"Default model: {args.model}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(description="Maintain SEO content briefs and generate brief fields")
    ap.add_argument("--store", help="CSV store path (overrides BRIEF_STORE_PATH)")
    ap.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    sub = ap.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Create the store or repair its header").set_defaults(func=_cmd_init)
    sub.add_parser("list", help="List brief titles").set_defaults(func=_cmd_list)

    p = sub.add_parser("show", help="Print one brief as YAML")
    p.add_argument("title")
    p.set_defaults(func=_cmd_show)

    p = sub.add_parser("save", help="Insert or update a brief from a YAML/JSON file")
    p.add_argument("file")
    p.add_argument("--original-title", help="Title the brief had before an edit (rename)")
    p.set_defaults(func=_cmd_save)

    p = sub.add_parser("generate", help="Generate one brief field")
    p.add_argument("field", help=f"One of: {', '.join(BRIEF_FIELDS[1:])}")
    p.add_argument("--topic", help="Topic (defaults to the brief title)")
    p.add_argument("--title", help="Use this stored brief as context")
    p.add_argument("--main-keyword")
    p.add_argument("--entities")
    p.add_argument("--model", help="Model override for this call")
    p.add_argument("--save", action="store_true", help="Write the result back into the brief (needs --title)")
    p.set_defaults(func=_cmd_generate)

    p = sub.add_parser("set-model", help="Persist the default generation model")
    p.add_argument("model")
    p.set_defaults(func=_cmd_set_model)

    return ap


def main(argv: list[str] | None = None, *, settings: BriefDeskSettings | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        if settings is None:
            load_env()
            settings = load_settings()
        if args.store:
            settings = settings.model_copy(update={"store_path": Path(args.store)})

        editor = build_editor(settings)
        return int(args.func(editor, args))
    except TransportError as e:
        print(f"Error: {e}", file=sys.stderr)
        if e.body:
            print(e.body, file=sys.stderr)
        return 2
    except BriefDeskError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2
    except (ValueError, OSError, yaml.YAMLError) as e:
        # Bad brief input file (unreadable, not YAML/JSON, unknown fields).
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())

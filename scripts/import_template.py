"""Register a fillable template.

Reads a JSON file with the template's variable definitions and a ``.docx``
whose placeholders are Jinja2 tags, stores the binary in the configured blob
store and upserts the template row.

Usage:
    python scripts/import_template.py rent-agreement "Rent Agreement" \\
        schema.json rent_agreement.docx --category "Property"

``schema.json`` holds either a list of variable definitions or an object
with a ``variables`` list; keys may be camelCase.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from draftgen.core.config import get_settings
from draftgen.core.factory import ComponentFactory
from draftgen.db.models import Template
from draftgen.db.session import close_db, create_all_tables, get_session_maker
from draftgen.strategies.stores import template_blob_path
from draftgen.strategies.template_engine.models import TemplateSchema


def load_schema(schema_path: Path) -> TemplateSchema:
    """Parse and check a template's variable definitions."""
    raw = json.loads(schema_path.read_text(encoding="utf-8"))
    if isinstance(raw, list):
        raw = {"variables": raw}
    return TemplateSchema.model_validate(raw)


async def import_template(args: argparse.Namespace) -> None:
    """Upload the binary and upsert the template row."""
    settings = get_settings()
    factory = ComponentFactory(settings)

    schema = load_schema(Path(args.schema))
    binary = Path(args.docx).read_bytes()

    await create_all_tables(settings)
    try:
        blob_store = factory.get_blob_store()
        await blob_store.upload(
            template_blob_path(args.template_id),
            binary,
            ttl_minutes=settings.draft_url_ttl_minutes,
        )

        async with get_session_maker(settings)() as session:
            existing = await session.get(Template, args.template_id)
            template = existing or Template(id=args.template_id, name=args.name)
            template.name = args.name
            template.slug = args.slug or args.template_id
            template.description = args.description
            template.category_id = args.category_id
            template.category_name = args.category
            template.is_active = not args.inactive
            template.variables = [
                variable.model_dump(mode="json", by_alias=True) for variable in schema.variables
            ]
            session.add(template)
            await session.commit()
    finally:
        await close_db()

    print(f"Imported template {args.template_id} with {len(schema.variables)} variable(s)")


def main() -> None:
    parser = argparse.ArgumentParser(description="Register a fillable .docx template")
    parser.add_argument("template_id", help="Template identifier")
    parser.add_argument("name", help="Display name")
    parser.add_argument("schema", help="JSON file with the variable definitions")
    parser.add_argument("docx", help="Template .docx with {{ variable }} placeholders")
    parser.add_argument("--category", default="", help="Category display name")
    parser.add_argument("--category-id", default="", help="Category identifier")
    parser.add_argument("--slug", default="", help="URL slug; defaults to the id")
    parser.add_argument("--description", default="", help="Short description")
    parser.add_argument("--inactive", action="store_true", help="Register as inactive")
    asyncio.run(import_template(parser.parse_args()))


if __name__ == "__main__":
    main()

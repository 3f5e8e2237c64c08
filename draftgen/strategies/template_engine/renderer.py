"""Document merge strategy.

Merges sanitized, formatted values into a Word template whose placeholders
are Jinja2 tags (``{{ landlord_name }}``) while preserving the template's
runs, styles and layout.
"""

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from io import BytesIO
from typing import Any

from docxtpl import DocxTemplate

from draftgen.core.exceptions import DocumentGenerationError
from draftgen.interfaces.template import (
    BaseDocumentRenderer,
    GeneratedDocument,
    GenerationMetadata,
)
from draftgen.strategies.template_engine.formatters import format_variables
from draftgen.strategies.template_engine.models import VariableDefinition

logger = logging.getLogger(__name__)


class DocxTemplateRenderer(BaseDocumentRenderer):
    """Renders ``.docx`` templates with docxtpl.

    Values are already HTML-escaped by validation, so autoescaping stays off
    and text is merged verbatim. Placeholders with no value render empty.
    """

    def generate(
        self,
        template_binary: bytes,
        values: Mapping[str, Any],
        schema: Sequence[VariableDefinition],
    ) -> GeneratedDocument:
        """Merge sanitized values into a template.

        Args:
            template_binary: The template document bytes.
            values: Sanitized values keyed by variable name.
            schema: The template's variable definitions.

        Returns:
            The generated document and its metadata.

        Raises:
            DocumentGenerationError: If the template cannot be opened as a
                ``.docx`` container or rendering fails.
        """
        try:
            template = DocxTemplate(BytesIO(template_binary))
            template.init_docx()
        except Exception as e:
            logger.error(f"Failed to load template: {e}", exc_info=True)
            raise DocumentGenerationError("Failed to load template") from e

        context = format_variables(schema, values)

        try:
            template.render(context, autoescape=False)
            output = BytesIO()
            template.save(output)
        except Exception as e:
            logger.error(f"Document generation failed: {e}", exc_info=True)
            raise DocumentGenerationError("Document generation failed") from e

        logger.debug(f"Rendered document with {len(context)} variables")

        return GeneratedDocument(
            content=output.getvalue(),
            metadata=GenerationMetadata(
                generated_at=datetime.now(timezone.utc),
                variable_count=len(context),
            ),
        )


def generate_document(
    template_binary: bytes,
    values: Mapping[str, Any],
    schema: Sequence[VariableDefinition],
) -> GeneratedDocument:
    """Render a document with the default renderer."""
    return DocxTemplateRenderer().generate(template_binary, values, schema)

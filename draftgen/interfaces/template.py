"""Template storage and document rendering interfaces.

Defines abstract base classes for loading templates (schema and binary)
and for merging sanitized values into a template binary.
"""

from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from draftgen.strategies.template_engine.models import VariableDefinition

DOCX_MIME_TYPE = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"


@dataclass(frozen=True)
class TemplateRecord:
    """A template as seen by the generation pipeline.

    Attributes:
        id: Template identifier.
        name: Display name, copied onto drafts.
        category_name: Category display name, copied onto drafts.
        variables: Declared form fields.
        is_active: Inactive templates cannot be used for generation.
    """

    id: str
    name: str
    category_name: str
    variables: list[VariableDefinition] = field(default_factory=list)
    is_active: bool = True


@dataclass(frozen=True)
class GenerationMetadata:
    """Audit information about one generated document.

    Attributes:
        generated_at: When rendering finished.
        variable_count: Number of values placed into the merge map.
    """

    generated_at: datetime
    variable_count: int


@dataclass(frozen=True)
class GeneratedDocument:
    """A rendered document and its metadata."""

    content: bytes
    metadata: GenerationMetadata


class BaseTemplateStore(ABC):
    """Abstract base class for template lookup.

    Example:
        ```python
        template = await store.get_template(template_id)
        if template and template.is_active:
            binary = await store.get_template_binary(template.id)
        ```
    """

    @abstractmethod
    async def get_template(self, template_id: str) -> TemplateRecord | None:
        """Load a template's metadata and variable schema.

        Args:
            template_id: Template identifier.

        Returns:
            The template, or None if it does not exist.

        Raises:
            StorageError: If the backing store fails.
        """

    @abstractmethod
    async def get_template_binary(self, template_id: str) -> bytes:
        """Load a template's ``.docx`` binary.

        Args:
            template_id: Template identifier.

        Returns:
            The raw document bytes.

        Raises:
            StorageError: If the binary cannot be fetched.
        """

    @abstractmethod
    async def increment_usage(self, template_id: str) -> None:
        """Record one more successful generation from the template."""


class BaseDocumentRenderer(ABC):
    """Abstract base class for merge strategies.

    Implementations must be pure: no I/O, no shared state.
    """

    @abstractmethod
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
            The generated document.

        Raises:
            DocumentGenerationError: If the template cannot be loaded or rendered.
        """

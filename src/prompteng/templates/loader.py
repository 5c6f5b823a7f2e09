"""
Template loading from YAML-frontmatter sources.

A template source looks like:

    ---
    name: greet
    variables:
      - name: name
        type: string
        required: true
    ---
    Hello {{ name }}

Loading a directory is best-effort: a file that fails to load is logged and
skipped so one broken template does not hide the others.
"""

import logging
import re
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from prompteng.exceptions import TemplateLoadError
from prompteng.templates.models import PromptTemplate, TemplateMetadata

logger = logging.getLogger(__name__)

DEFAULT_TEMPLATE_EXTENSION = ".ptemplate"

FRONTMATTER_PATTERN = re.compile(r"\A\s*---[ \t]*\r?\n(.*?)\r?\n---[ \t]*(?:\r?\n|\Z)", re.DOTALL)

METADATA_FIELDS = ("description", "author", "version", "tags")


def parse_frontmatter(content: str, source: str = "<string>") -> tuple[dict[str, Any], str]:
    """
    Split YAML frontmatter from the template body.

    Params:
        content: Raw template source
        source: Name of the source for error messages

    Returns:
        Tuple of (frontmatter dict, body content)

    Raises:
        TemplateLoadError: If frontmatter is missing or is not a YAML mapping
    """
    match = FRONTMATTER_PATTERN.match(content)
    if not match:
        raise TemplateLoadError(source, "Invalid template format: missing frontmatter.")

    try:
        frontmatter = yaml.safe_load(match.group(1)) or {}
    except yaml.YAMLError as e:
        raise TemplateLoadError(source, f"Invalid frontmatter YAML: {e}") from e

    if not isinstance(frontmatter, dict):
        raise TemplateLoadError(source, "Frontmatter must be a mapping.")

    return frontmatter, content[match.end() :]


def load_template_source(
    content: str,
    source_path: Path | None = None,
    fallback_name: str | None = None,
) -> PromptTemplate:
    """
    Build a PromptTemplate from frontmatter source text.

    Params:
        content: Raw template source
        source_path: File the source came from, if any
        fallback_name: Name used when the frontmatter has none
            (defaults to the file stem)

    Returns:
        The loaded PromptTemplate with its body trimmed

    Raises:
        TemplateLoadError: If the frontmatter is missing, invalid, or names no template
    """
    source = str(source_path) if source_path else (fallback_name or "<string>")
    frontmatter, body = parse_frontmatter(content, source)

    name = frontmatter.get("name") or fallback_name or (source_path.stem if source_path else None)
    if not name:
        raise TemplateLoadError(source, "Template has no name.")

    metadata_fields = {
        key: frontmatter[key] for key in METADATA_FIELDS if frontmatter.get(key) is not None
    }
    # YAML reads "version: 1.0" as a float
    if "version" in metadata_fields:
        metadata_fields["version"] = str(metadata_fields["version"])
    try:
        return PromptTemplate(
            name=str(name),
            content=body.strip(),
            variables=frontmatter.get("variables") or [],
            metadata=TemplateMetadata(**metadata_fields),
            source_path=source_path,
        )
    except ValidationError as e:
        raise TemplateLoadError(source, str(e)) from e


def load_template_file(path: Path) -> PromptTemplate:
    """Load a single template file."""
    return load_template_source(path.read_text(encoding="utf-8"), source_path=path)


def load_template_dir(
    directory: Path | str, extension: str = DEFAULT_TEMPLATE_EXTENSION
) -> dict[str, PromptTemplate]:
    """
    Load every template file with the given extension in a directory.

    Params:
        directory: Directory to scan (not recursive)
        extension: File suffix identifying template files

    Returns:
        Mapping of template name to PromptTemplate, in file name order
    """
    directory = Path(directory)
    templates: dict[str, PromptTemplate] = {}

    if not directory.is_dir():
        logger.warning(f"Template directory not found: {directory}")
        return templates

    for path in sorted(directory.iterdir()):
        if path.suffix != extension or not path.is_file():
            continue
        try:
            template = load_template_file(path)
        except (OSError, TemplateLoadError) as e:
            logger.error(f"Skipping template {path}: {e}")
            continue
        templates[template.name] = template
        logger.debug(f"Loaded prompt template '{template.name}' from {path}")

    return templates

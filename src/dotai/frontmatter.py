"""
Frontmatter parsing and validation for template files.

The template corpus is authored against a deliberately reduced grammar,
not full YAML:

    ---
    name: my-skill
    description: "Quoted values lose their double quotes"
    tags: [one, "two", 'three']
    ---
    Body text.

Limitations:
    - one ``key: value`` pair per line, split at the first colon
    - no nesting, no multi-line scalars, no ``- item`` lists
    - lines of any other shape are ignored
    - the opening ``---`` must be the very first line and the closing
      ``---`` must be followed by a newline; otherwise the whole text is
      treated as body
"""

import re
from pathlib import Path
from typing import Optional, Union

from dotai.models import ValidationIssue, ValidationResult

FRONTMATTER_RE = re.compile(r"\A---\n(.*?)\n---\n(.*)\Z", re.DOTALL)

Value = Union[str, list[str]]


def _strip_list_quotes(value: str) -> str:
    value = value.strip()
    if value[:1] in ("'", '"'):
        value = value[1:]
    if value[-1:] in ("'", '"'):
        value = value[:-1]
    return value


def _parse_value(raw: str) -> Value:
    value = raw.strip()

    if value.startswith('"') and value.endswith('"'):
        value = value[1:-1]

    if value.startswith("[") and value.endswith("]"):
        inner = value[1:-1]
        if not inner.strip():
            return []
        return [_strip_list_quotes(part) for part in inner.split(",")]

    return value


def parse(content: str) -> tuple[dict[str, Value], str]:
    """
    Parse frontmatter from markdown content.

    Args:
        content: Full file content (markdown with optional frontmatter)

    Returns:
        Tuple of (frontmatter dict, body content)
    """
    match = FRONTMATTER_RE.match(content)
    if not match:
        return {}, content

    block, body = match.groups()
    metadata: dict[str, Value] = {}

    for line in block.split("\n"):
        colon = line.find(":")
        if colon <= 0:
            continue
        key = line[:colon].strip()
        metadata[key] = _parse_value(line[colon + 1 :])

    return metadata, body


def parse_file(file_path: Path) -> tuple[dict[str, Value], str]:
    """
    Parse frontmatter from a markdown file.

    Raises:
        OSError: If the file cannot be read.
        UnicodeDecodeError: If the file is not valid UTF-8.
    """
    return parse(file_path.read_text(encoding="utf-8"))


def serialize(metadata: dict[str, Value]) -> str:
    """Render a mapping back into the reduced frontmatter grammar."""
    lines = ["---"]
    for key, value in metadata.items():
        if isinstance(value, list):
            value = "[" + ", ".join(value) + "]"
        lines.append(f"{key}: {value}")
    lines.append("---")
    return "\n".join(lines) + "\n"


def get_metadata(file_path: Path) -> dict[str, Value]:
    """Get just the frontmatter metadata from a file (empty if unreadable)."""
    try:
        metadata, _ = parse_file(file_path)
    except (OSError, UnicodeDecodeError):
        return {}
    return metadata


def get_description(file_path: Path) -> Optional[str]:
    """Get the description field from a file's frontmatter."""
    description = get_metadata(file_path).get("description")
    return description if isinstance(description, str) else None


# =============================================================================
# Validation
# =============================================================================

KEBAB_CASE_RE = re.compile(r"^[a-z0-9]+(-[a-z0-9]+)*$")

RESERVED_PREFIXES = ("claude", "anthropic")

ANGLE_BRACKETS_RE = re.compile(r"[<>]")

MAX_DESCRIPTION_LENGTH = 1024

TRIGGER_PHRASES = (
    "use when",
    "use for",
    "use if",
    "trigger",
    "activate when",
    "asks about",
    "asks to",
    "asks for",
)


def validate_frontmatter(
    metadata: dict, expected_id: Optional[str] = None
) -> ValidationResult:
    """
    Validate template frontmatter against the authoring rules.

    Errors (make the result invalid):
        - ``name`` missing, not kebab-case, or starting with a reserved prefix
        - ``description`` missing, longer than 1024 characters, or
          containing ``<`` / ``>``
        - any other string field containing ``<`` / ``>``

    Warnings:
        - ``name`` differs from ``expected_id`` (the folder name)
        - ``description`` has no trigger phrase ("Use when ...")
        - ``category`` or ``tags`` missing

    Args:
        metadata: Parsed frontmatter mapping
        expected_id: Folder name the item lives in, if known

    Returns:
        ValidationResult with issues in rule order
    """
    issues: list[ValidationIssue] = []

    def error(field: str, message: str) -> None:
        issues.append(ValidationIssue(field, "error", message))

    def warning(field: str, message: str) -> None:
        issues.append(ValidationIssue(field, "warning", message))

    name = metadata.get("name")
    if not name:
        error("name", "Missing required field: name")
    elif not isinstance(name, str):
        error("name", "Field 'name' must be a single string value")
    else:
        if not KEBAB_CASE_RE.match(name):
            error(
                "name",
                f"Name must be kebab-case (got \"{name}\"). "
                "Use lowercase letters, numbers, and hyphens only.",
            )
        if name.startswith(RESERVED_PREFIXES):
            error(
                "name",
                'Name must not start with reserved prefix ("claude" or "anthropic").',
            )
        if expected_id and name != expected_id:
            warning(
                "name",
                f"Name \"{name}\" does not match folder name \"{expected_id}\". "
                "They should match.",
            )

    description = metadata.get("description")
    if not description:
        error("description", "Missing required field: description")
    elif not isinstance(description, str):
        error("description", "Field 'description' must be a single string value")
    else:
        if len(description) > MAX_DESCRIPTION_LENGTH:
            error(
                "description",
                f"Description exceeds {MAX_DESCRIPTION_LENGTH} characters "
                f"(got {len(description)}).",
            )
        if ANGLE_BRACKETS_RE.search(description):
            error(
                "description",
                "Description must not contain XML angle brackets (< >).",
            )
        lowered = description.lower()
        if not any(phrase in lowered for phrase in TRIGGER_PHRASES):
            warning(
                "description",
                "Description should include trigger conditions "
                '(e.g., "Use when user asks about...").',
            )

    for key, value in metadata.items():
        if key == "description":
            continue
        if isinstance(value, str) and ANGLE_BRACKETS_RE.search(value):
            error(key, f'Field "{key}" must not contain XML angle brackets (< >).')

    if not metadata.get("category"):
        warning(
            "category",
            "Missing recommended field: category. Add a category for better organization.",
        )

    if not metadata.get("tags"):
        warning(
            "tags",
            "Missing recommended field: tags. Add tags for improved discoverability.",
        )

    valid = not any(issue.severity == "error" for issue in issues)
    return ValidationResult(valid=valid, issues=issues)

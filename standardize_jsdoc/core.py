"""
Core functionality for normalizing JSDoc headers in source files.

This module locates the leading ``/** ... */`` block of a file, keeps the
legal notices it carries, renders the new metadata in a fixed tag order and
splices the result back into the file content. File access and payload
decoding live here as well, as thin boundary helpers around the pure core.
"""

import os
import re
import json
import shutil
import tempfile
from typing import Dict, List, Optional, Union

from packaging import version

# Tags rendered in the header, in output order
TAG_ORDER = (
    "file",
    "version",
    "description",
    "summary",
    "module",
    "dependencies",
    "outputs",
    "changelog",
)

# Tags preceded by a blank " *" line unless they open the block
SPACING_TAGS = frozenset(["module", "dependencies", "outputs", "changelog"])

# Lines of an existing header containing any of these survive the rewrite
PRESERVE_MARKERS = ("Copyright", "@license")

BUMP_TYPES = ("major", "minor", "patch")

# First /** ... */ block at the very start of the file (leading whitespace and BOM allowed)
JSDOC_PATTERN = re.compile(r'^[\s\ufeff]*/\*\*[\s\S]*?\*/')

JsdocValue = Union[str, List[str], None]
JsdocData = Dict[str, JsdocValue]


class JsdocError(Exception):
    """Base class for errors raised by standardize_jsdoc."""


class InputShapeError(JsdocError, ValueError):
    """The JSDoc payload is not a mapping of tags to strings or string lists."""


class FileAccessError(JsdocError, OSError):
    """The target file could not be read or written."""

    def __init__(self, path: str, operation: str, reason: Exception):
        self.path = path
        self.operation = operation
        self.reason = reason
        super().__init__(f"Could not {operation} {path}: {reason}")


def read_file(filepath: str) -> str:
    """Read the content of a file, keeping its newlines untouched."""
    try:
        with open(filepath, 'r', encoding='utf-8', newline='') as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise FileAccessError(filepath, 'read', e) from e


def write_file(filepath: str, content: str) -> None:
    """
    Replace the content of a file in a single step.

    The content goes to a temporary file next to the target which is then
    moved over it, so the target is either fully rewritten or left as it was.

    Args:
        filepath: Path of the file to overwrite
        content: The complete new content

    Raises:
        FileAccessError: If the file cannot be written
    """
    directory = os.path.dirname(os.path.abspath(filepath))
    try:
        fd, tmp_path = tempfile.mkstemp(prefix='.jsdoc-', suffix='.tmp', dir=directory)
    except OSError as e:
        raise FileAccessError(filepath, 'write', e) from e
    try:
        with os.fdopen(fd, 'w', encoding='utf-8', newline='') as f:
            f.write(content)
        if os.path.exists(filepath):
            shutil.copymode(filepath, tmp_path)
        os.replace(tmp_path, filepath)
    except (OSError, UnicodeError) as e:
        raise FileAccessError(filepath, 'write', e) from e
    finally:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)


def validate_jsdoc_data(jsdoc_data) -> JsdocData:
    """
    Check that the payload can be handed to the header builder.

    Only the recognized tags are inspected; other keys are left alone since
    they are never rendered.

    Args:
        jsdoc_data: Decoded payload

    Returns:
        The same mapping

    Raises:
        InputShapeError: If the payload is not a mapping, or a recognized tag
            holds anything other than a string, a list of strings or None
    """
    if not isinstance(jsdoc_data, dict):
        raise InputShapeError(
            f"JSDoc data must be an object, got {type(jsdoc_data).__name__}"
        )

    for tag in TAG_ORDER:
        value = jsdoc_data.get(tag)
        if value is None or isinstance(value, str):
            continue
        if isinstance(value, list):
            for item in value:
                if not isinstance(item, str):
                    raise InputShapeError(
                        f"Items of '{tag}' must be strings, got {type(item).__name__}"
                    )
            continue
        raise InputShapeError(
            f"'{tag}' must be a string or a list of strings, got {type(value).__name__}"
        )

    return jsdoc_data


def parse_jsdoc_data(payload: str) -> JsdocData:
    """Decode a JSON payload and validate its shape."""
    try:
        jsdoc_data = json.loads(payload)
    except json.JSONDecodeError as e:
        raise InputShapeError(str(e)) from e
    return validate_jsdoc_data(jsdoc_data)


def build_jsdoc_block(jsdoc_data: JsdocData) -> List[str]:
    """
    Render the metadata as JSDoc lines, without the comment delimiters.

    Tags follow TAG_ORDER whatever the order of the mapping. Empty strings,
    empty lists and None are skipped. List values become a ``@tag`` line
    followed by one ``- item`` line per element; string values are rendered
    inline, with embedded newlines continued as `` * `` lines.

    Args:
        jsdoc_data: Mapping of tag names to strings or lists of strings

    Returns:
        List of lines, each starting with " *"
    """
    lines = []

    for tag in TAG_ORDER:
        value = jsdoc_data.get(tag)
        if not value:
            continue

        if tag in SPACING_TAGS and lines:
            lines.append(' *')

        if isinstance(value, list):
            lines.append(f' * @{tag}')
            lines.extend(f' * - {item}' for item in value)
        else:
            content = value.replace('\n', '\n * ')
            lines.append(f' * @{tag} {content}')

    return lines


def find_header(file_content: str) -> Optional["re.Match"]:
    """Match the JSDoc block at the start of the content, if there is one."""
    return JSDOC_PATTERN.match(file_content)


def extract_preserved_lines(header_block: str) -> List[str]:
    """
    Pick the copyright and license lines out of an existing header.

    Each kept line is re-indented so it starts with a single space followed
    by the ``*`` marker.
    """
    preserved = []
    for line in header_block.split('\n'):
        if not any(marker in line for marker in PRESERVE_MARKERS):
            continue
        trimmed = line.strip()
        if trimmed.startswith('*'):
            preserved.append(f' {trimmed}')
        else:
            preserved.append(f' * {trimmed}')
    return preserved


def wrap_block(lines: List[str]) -> str:
    """Wrap rendered lines in JSDoc comment delimiters."""
    return '/**\n' + '\n'.join(lines) + '\n */'


def _compose_header(match: Optional["re.Match"], jsdoc_data: JsdocData) -> str:
    lines = build_jsdoc_block(jsdoc_data)
    if match:
        lines = extract_preserved_lines(match.group(0)) + lines
    return wrap_block(lines)


def render_header(file_content: str, jsdoc_data: JsdocData) -> str:
    """Return the header block merge_header would put at the top of the content."""
    return _compose_header(find_header(file_content), jsdoc_data)


def merge_header(file_content: str, jsdoc_data: JsdocData) -> str:
    """
    Replace or add the JSDoc header of the given content.

    An existing header is only recognized at the very start of the content
    (leading whitespace allowed) and ends at its first ``*/``. Its copyright
    and license lines are carried over ahead of the new metadata, and the
    whole matched span, leading whitespace included, is replaced. Without an
    existing header the new block is prepended, separated from non-empty
    content by a blank line.

    Args:
        file_content: The original content of the file
        jsdoc_data: Validated JSDoc data

    Returns:
        The content with its new header
    """
    match = find_header(file_content)
    header = _compose_header(match, jsdoc_data)

    if match:
        return header + file_content[match.end():]

    separator = '\n\n' if file_content else ''
    return header + separator + file_content


def get_header_tag(file_content: str, tag: str) -> Optional[str]:
    """
    Get the value of a tag from the leading header.

    Only the first line of the value is returned.

    Args:
        file_content: The content of the file
        tag: Tag name without the leading "@"

    Returns:
        The tag value, or None if the header or the tag is missing
    """
    match = find_header(file_content)
    if not match:
        return None

    tag_match = re.search(
        rf'@{re.escape(tag)}(?![\w-])[ \t]*(.*)$',
        match.group(0),
        re.MULTILINE
    )
    if not tag_match:
        return None

    value = tag_match.group(1).split('*/')[0].strip()
    return value or None


def increment_version(current_version: str, bump_type: str) -> str:
    """Increment a version number based on bump type."""
    if bump_type not in BUMP_TYPES:
        raise ValueError(f"Unknown bump type: {bump_type}")

    if not current_version or current_version == '0.0.0':
        return '0.0.1'

    try:
        v = version.parse(str(current_version))
    except version.InvalidVersion as e:
        raise InputShapeError(f"Invalid version {current_version!r}: {e}") from e

    major, minor, patch = v.major, v.minor, v.micro
    if bump_type == 'major':
        return f"{major + 1}.0.0"
    elif bump_type == 'minor':
        return f"{major}.{minor + 1}.0"
    else:  # patch
        return f"{major}.{minor}.{patch + 1}"


def prepare_jsdoc_data(
    file_content: str,
    jsdoc_data: JsdocData,
    bump: Optional[str] = None
) -> JsdocData:
    """
    Return the data to render for a file, with its version bumped if asked.

    The bump starts from the ``@version`` of the existing header and falls
    back to the version given in the data. The input mapping is not modified.
    """
    jsdoc_data = dict(jsdoc_data)
    if bump:
        current_version = get_header_tag(file_content, 'version') or jsdoc_data.get('version') or ''
        jsdoc_data['version'] = increment_version(current_version, bump)
    return jsdoc_data


def process_file(
    filepath: str,
    jsdoc_data: JsdocData,
    dry_run: bool = False,
    verbose: bool = False,
    bump: Optional[str] = None
) -> bool:
    """
    Normalize the JSDoc header of a single file.

    Args:
        filepath: Path to the file to process
        jsdoc_data: JSDoc data to render
        dry_run: Whether to only show the new header
        verbose: Whether to show verbose output
        bump: Optional version bump type ('major', 'minor', 'patch')

    Returns:
        bool: True if the file was (or would be) modified, False otherwise

    Raises:
        InputShapeError: If the data has the wrong shape
        FileAccessError: If the file cannot be read or written
    """
    validate_jsdoc_data(jsdoc_data)
    content = read_file(filepath)
    jsdoc_data = prepare_jsdoc_data(content, jsdoc_data, bump)

    if verbose:
        rendered = [tag for tag in TAG_ORDER if jsdoc_data.get(tag)]
        ignored = sorted(key for key in jsdoc_data if key not in TAG_ORDER)
        print(f"Tags for {filepath}: {', '.join(rendered) or '(none)'}")
        if ignored:
            print(f"  Ignoring unrecognized keys: {', '.join(ignored)}")
        match = find_header(content)
        if match:
            preserved = extract_preserved_lines(match.group(0))
            print(f"  Existing header found, preserving {len(preserved)} line(s)")
        else:
            print("  No existing header found")

    new_content = merge_header(content, jsdoc_data)
    if new_content == content:
        if verbose:
            print(f"No changes to {filepath}")
        return False

    if dry_run:
        print(f"[DRY-RUN] Would update JSDoc header in {filepath}")
        print("--- New header block ---")
        print(render_header(content, jsdoc_data))
        print("------------------------")
        return True

    write_file(filepath, new_content)
    print(f"Successfully updated JSDoc header in {filepath}")
    return True

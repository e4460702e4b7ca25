"""
JSDoc Header Normalization for Source Files

This package rewrites the leading JSDoc block of a source file from structured
metadata, keeping the copyright and license lines already present.
"""

# Version of the package
__version__ = "1.0.0"

# Import core functionality
from .core import (
    # Constants
    TAG_ORDER,
    SPACING_TAGS,
    BUMP_TYPES,

    # Errors
    JsdocError,
    InputShapeError,
    FileAccessError,

    # File operations
    read_file,
    write_file,

    # Payload handling
    parse_jsdoc_data,
    validate_jsdoc_data,

    # Header processing
    build_jsdoc_block,
    find_header,
    extract_preserved_lines,
    wrap_block,
    render_header,
    merge_header,
    get_header_tag,

    # Version control
    increment_version,
    prepare_jsdoc_data,

    # Processing functions
    process_file,
)

# Import CLI if needed
from .cli import main as cli

# Define what gets imported with 'from standardize_jsdoc import *'
__all__ = [
    # Version
    '__version__',

    # Core
    'TAG_ORDER',
    'SPACING_TAGS',
    'BUMP_TYPES',
    'JsdocError',
    'InputShapeError',
    'FileAccessError',
    'read_file',
    'write_file',
    'parse_jsdoc_data',
    'validate_jsdoc_data',
    'build_jsdoc_block',
    'find_header',
    'extract_preserved_lines',
    'wrap_block',
    'render_header',
    'merge_header',
    'get_header_tag',
    'increment_version',
    'prepare_jsdoc_data',
    'process_file',

    # CLI
    'cli',
]

# Package metadata
__license__ = "MIT"
__status__ = "Production"

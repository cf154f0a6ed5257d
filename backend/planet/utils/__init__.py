from .frontmatter import split_frontmatter
from .id_generator import generate_id
from .logging import get_logger, setup_logging
from .time_utils import get_timestamp_ms

__all__ = [
    "generate_id",
    "get_logger",
    "setup_logging",
    "get_timestamp_ms",
    "split_frontmatter",
]

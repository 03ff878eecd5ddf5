"""
Canvas configuration.

Process-wide default plus contextvars-scoped overrides:

    set_canvas_config(CanvasConfig(layout_filename="board.json"))

    with canvas_config_context(loading_text="..."):
        ...  # resolver fallbacks render "..." here

Configuration is immutable; overrides produce a new instance via
dataclasses.replace.
"""

import contextvars
import dataclasses
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Generator, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CanvasConfig:
    """Tunables shared by the store, resolver and layout manager."""
    collection: str = "layout-items"
    layout_filename: str = "layout.json"
    new_item_rect: Tuple[int, int, int, int] = (0, 0, 8, 3)
    duplicate_offset: Tuple[int, int] = (1, 1)
    edit_route: str = "/edit/{id}"  # {id} is replaced by the url-escaped item id
    loading_text: str = "loading..."
    json_indent: Optional[int] = 2


_default_config = CanvasConfig()

# Scoped override; unset means "use the process default"
_current_config: contextvars.ContextVar[Optional[CanvasConfig]] = contextvars.ContextVar(
    'canvas_config', default=None
)


def set_canvas_config(config: CanvasConfig) -> None:
    """Replace the process-wide default configuration."""
    global _default_config
    _default_config = config
    logger.debug(f"Canvas config set: {config}")


def get_canvas_config() -> CanvasConfig:
    """Return the innermost scoped config, else the process default."""
    scoped = _current_config.get()
    return scoped if scoped is not None else _default_config


def reset_canvas_config() -> None:
    """Restore the built-in defaults. Mostly for tests."""
    set_canvas_config(CanvasConfig())


@contextmanager
def canvas_config_context(**overrides) -> Generator[CanvasConfig, None, None]:
    """Temporarily override config fields for the current context.

    Nested contexts build on the enclosing one.
    """
    config = dataclasses.replace(get_canvas_config(), **overrides)
    token = _current_config.set(config)
    try:
        yield config
    finally:
        _current_config.reset(token)

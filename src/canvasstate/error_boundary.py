"""Render-scope guard that swaps a failing subtree for a fallback view."""
import logging
import traceback
from dataclasses import dataclass
from typing import Any, Callable, Optional, Tuple

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ErrorInfo:
    """Diagnostic context captured with a render failure."""
    traceback: str
    scope: Optional[str] = None


@dataclass(frozen=True)
class ErrorAlert:
    """Default fallback view."""
    title: str
    message: str
    type: str = "error"


def get_error_info(error: BaseException) -> Tuple[str, str]:
    """Extract a (title, message) pair for display."""
    title = getattr(error, 'title', None) or type(error).__name__
    message = str(error) or repr(error)
    return str(title), message


def default_error_component(error: BaseException, info: ErrorInfo) -> ErrorAlert:
    title, message = get_error_info(error)
    return ErrorAlert(title=title, message=message)


class ErrorBoundary:
    """Wraps one subtree; wrap each widget separately for per-widget isolation.

    After a failure the boundary keeps rendering the fallback until the
    subtree input (``children``) changes identity, then retries.
    """

    def __init__(
        self,
        error_component: Optional[Callable[[BaseException, ErrorInfo], Any]] = None,
        scope: Optional[str] = None,
    ):
        self._error_component = error_component or default_error_component
        self.scope = scope
        self._children: Any = None
        self._captured: Optional[Tuple[BaseException, ErrorInfo]] = None

    @property
    def error(self) -> Optional[BaseException]:
        return self._captured[0] if self._captured else None

    def reset(self) -> None:
        self._captured = None

    def render(self, children: Any, render_fn: Callable[[], Any]) -> Any:
        if self._captured is not None and children is not self._children:
            logger.debug(f"ErrorBoundary({self.scope}): input changed, retrying render")
            self._captured = None
        self._children = children

        if self._captured is None:
            try:
                return render_fn()
            except Exception as e:
                info = ErrorInfo(traceback=traceback.format_exc(), scope=self.scope)
                self._captured = (e, info)
                logger.warning(f"Render failed in scope {self.scope!r}: {e!r}")

        error, info = self._captured
        return self._error_component(error, info)

"""Access scoping: narrow collections to what a caller may see.

This is defense in depth at the application layer. The store's own
row-level policy is the authoritative boundary; scoping keeps the UI
consistent with it and avoids requesting data the caller cannot use.

Rules:
- Admins see every row, optionally narrowed by selector.workspace_id.
- Everyone else sees only rows in workspaces they are members of. A
  selector can narrow that set but never widen it.
- platform / social_account_id are strict equality filters.
- Output preserves input order.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Iterable, Optional, TypeVar

from studio.access.roles import workspace_key

if TYPE_CHECKING:
    from studio.access.roles import Capabilities

T = TypeVar("T")

_MISSING = object()


@dataclass(frozen=True)
class Selector:
    """Caller-chosen filters. None means "no filter on this dimension"."""

    workspace_id: Optional[Any] = None
    platform: Optional[str] = None
    social_account_id: Optional[Any] = None

    def is_empty(self) -> bool:
        return (
            self.workspace_id is None
            and self.platform is None
            and self.social_account_id is None
        )


def _field(row: Any, name: str) -> Any:
    if isinstance(row, dict):
        return row.get(name, _MISSING)
    return getattr(row, name, _MISSING)


def _workspace_of(row: Any) -> Any:
    return _field(row, "workspace_id")


def _workspace_is_id(row: Any) -> Any:
    return _field(row, "id")


def _matches(row: Any, name: str, wanted: Any) -> bool:
    """Strict equality on a dimension the row actually has."""
    value = _field(row, name)
    if value is _MISSING:
        return True
    return value is not None and str(value) == str(wanted)


def scope(
    rows: Iterable[T],
    capabilities: "Capabilities",
    selector: Optional[Selector] = None,
    workspace_key_of: Callable[[Any], Any] = _workspace_of,
) -> list[T]:
    """Filter rows to the caller's visible workspaces and the selector.

    Args:
        rows: Objects or mappings carrying a workspace id
        capabilities: The caller's resolved capabilities
        selector: Optional narrowing filters
        workspace_key_of: Extracts the workspace id of a row

    Returns:
        The visible rows, in input order
    """
    selector = selector or Selector()
    is_admin = capabilities.is_admin()
    allowed = None if is_admin else capabilities.workspace_ids

    wanted_workspace = (
        workspace_key(selector.workspace_id) if selector.workspace_id is not None else None
    )

    visible: list[T] = []
    for row in rows:
        row_workspace = workspace_key_of(row)
        if row_workspace is _MISSING or row_workspace is None:
            # Rows without a workspace are never visible to non-admins and
            # never match a workspace filter
            if not is_admin or wanted_workspace is not None:
                continue
        else:
            key = workspace_key(row_workspace)
            if allowed is not None and key not in allowed:
                continue
            if wanted_workspace is not None and key != wanted_workspace:
                continue
        if selector.platform is not None and not _matches(row, "platform", selector.platform):
            continue
        if selector.social_account_id is not None and not _matches(
            row, "social_account_id", selector.social_account_id
        ):
            continue
        visible.append(row)
    return visible


def scope_workspaces(
    workspaces: Iterable[T],
    capabilities: "Capabilities",
    selector: Optional[Selector] = None,
) -> list[T]:
    """Scope workspace rows, whose own id is the workspace key."""
    return scope(workspaces, capabilities, selector, workspace_key_of=_workspace_is_id)


def scope_posts(
    posts: Iterable[T],
    capabilities: "Capabilities",
    selector: Optional[Selector] = None,
) -> list[T]:
    return scope(posts, capabilities, selector)


def scope_social_accounts(
    accounts: Iterable[T],
    capabilities: "Capabilities",
    selector: Optional[Selector] = None,
) -> list[T]:
    """Scope social accounts; social_account_id selects the account itself."""
    selector = selector or Selector()
    visible = scope(
        accounts,
        capabilities,
        Selector(workspace_id=selector.workspace_id, platform=selector.platform),
    )
    if selector.social_account_id is None:
        return visible
    wanted = str(selector.social_account_id)
    return [a for a in visible if str(_field(a, "id")) == wanted]

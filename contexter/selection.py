"""
Selection state for one open project.

SelectionStore owns the set of selected file paths, the active file list and
the tree derived from it. Observers registered with `subscribe` are called
synchronously after every mutation. Directory state (none/partial/all) is
never stored: `resolve_directory_state` recomputes it from the current set.
"""
from __future__ import annotations
import logging
from typing import Callable, FrozenSet, Iterable, List, Optional, Sequence, Set

from contexter.expansion import DEFAULT_EXPAND_DEPTH, apply_default_expansion
from contexter.models import SelectionState, SelectionSummary, TreeNode
from contexter.paths import files_under
from contexter.tree import build_file_tree, toggle_node_expansion

logger = logging.getLogger(__name__)

Observer = Callable[["SelectionStore"], None]


def resolve_directory_state(directory_path: str, all_files: Iterable[str],
                            selection: Set[str]) -> SelectionState:
    """Tri-state of a directory: how many of the files under it are selected."""
    members = files_under(directory_path, all_files)
    if not members:
        return SelectionState.NONE
    selected_count = sum(1 for f in members if f in selection)
    if selected_count == 0:
        return SelectionState.NONE
    if selected_count == len(members):
        return SelectionState.ALL
    return SelectionState.PARTIAL


class SelectionStore:
    def __init__(self, files: Optional[Sequence[str]] = None,
                 expand_depth: int = DEFAULT_EXPAND_DEPTH):
        self.expand_depth = expand_depth
        self._files: Sequence[str] = []
        self._selected: Set[str] = set()
        self._tree: List[TreeNode] = []
        self._observers: List[Observer] = []
        if files is not None:
            self._load(files)

    # -- read API --------------------------------------------------------

    @property
    def files(self) -> Sequence[str]:
        return self._files

    @property
    def selected(self) -> FrozenSet[str]:
        return frozenset(self._selected)

    @property
    def tree(self) -> List[TreeNode]:
        return self._tree

    def is_selected(self, path: str) -> bool:
        return path in self._selected

    def state_of(self, directory_path: str) -> SelectionState:
        return resolve_directory_state(directory_path, self._files, self._selected)

    def summary(self) -> SelectionSummary:
        return SelectionSummary(selected=len(self._selected), total=len(self._files))

    # -- observers -------------------------------------------------------

    def subscribe(self, callback: Observer) -> Callable[[], None]:
        """Register `callback`; the returned function removes it again."""
        self._observers.append(callback)

        def unsubscribe() -> None:
            if callback in self._observers:
                self._observers.remove(callback)
        return unsubscribe

    def _notify(self) -> None:
        for callback in list(self._observers):
            callback(self)

    # -- mutations -------------------------------------------------------

    def toggle_file(self, path: str) -> None:
        if path in self._selected:
            self._selected.discard(path)
        else:
            self._selected.add(path)
        self._notify()

    def toggle_directory(self, path: str, all_files: Optional[Iterable[str]] = None) -> None:
        """
        Select every file under `path`, or deselect them if they are all
        selected already. A partially selected directory therefore goes to
        fully selected on the next toggle, never to empty.
        """
        members = files_under(path, self._files if all_files is None else all_files)
        logger.debug("Directory toggle for %s covers %d files", path, len(members))
        if not members:
            return
        if all(f in self._selected for f in members):
            self._selected.difference_update(members)
        else:
            self._selected.update(members)
        self._notify()

    def select_all(self) -> None:
        self._selected = set(self._files)
        self._notify()

    def deselect_all(self) -> None:
        self._selected = set()
        self._notify()

    def set_selection(self, paths: Iterable[str]) -> None:
        known = set(self._files)
        self._selected = {p for p in paths if p in known}
        self._notify()

    def toggle_expansion(self, node_id: str) -> None:
        self._tree = toggle_node_expansion(self._tree, node_id)
        self._notify()

    def replace_active_file_list(self, files: Sequence[str]) -> None:
        """
        Switch to another project's file list. Selection and tree are cleared
        together before observers hear about the new list.
        """
        self._load(files)
        logger.info("Active file list replaced (%d files)", len(self._files))
        self._notify()

    def _load(self, files: Sequence[str]) -> None:
        self._selected = set()
        # one entry per path, first occurrence wins
        self._files = list(dict.fromkeys(files))
        self._tree = apply_default_expansion(build_file_tree(self._files), self.expand_depth)

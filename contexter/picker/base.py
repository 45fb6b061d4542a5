from abc import ABC, abstractmethod
from typing import List, Sequence
import logging

from contexter.models import SelectionState
from contexter.paths import files_under
from contexter.selection import SelectionStore

logger = logging.getLogger(__name__)


class Picker(ABC):
    """
    Abstract base class for choosing which files of a project to include.
    Concrete strategies mutate the given SelectionStore and implement `pick`.
    """
    @abstractmethod
    def pick(self, store: SelectionStore) -> List[str]:
        """
        Update `store` with the user's choice and return the selected paths,
        sorted. An empty list means nothing was picked (or the user aborted).
        """


class DefaultPicker(Picker):
    """
    Non-interactive picker. With no paths everything is selected; otherwise
    each path (file or directory) is selected along with everything below it.
    """
    def __init__(self, paths: Sequence[str] = ()):
        self.paths = list(paths)

    def pick(self, store: SelectionStore) -> List[str]:
        if not self.paths:
            store.select_all()
            return sorted(store.selected)

        for path in self.paths:
            path = path.rstrip("/")
            state = store.state_of(path)
            if state is SelectionState.ALL:
                continue
            if not files_under(path, store.files):
                logger.warning("No files match %s", path)
                continue
            # toggling a partial or empty directory always selects all of it
            store.toggle_directory(path)
        return sorted(store.selected)

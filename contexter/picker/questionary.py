from typing import List
import questionary
from contexter.selection import SelectionStore
from .base import Picker


class QuestionaryPicker(Picker):
    """
    Interactive picker that presents a checkbox-based terminal prompt
    listing every file of the project.
    """
    def __init__(self, message: str = "Select files to include:"):
        self.message = message

    def pick(self, store: SelectionStore) -> List[str]:
        choices = [
            questionary.Choice(title=path, value=path, checked=store.is_selected(path))
            for path in store.files
        ]
        selected = questionary.checkbox(self.message, choices=choices).ask()
        if selected is None:
            # User aborted
            return []

        store.set_selection(selected)
        return sorted(store.selected)

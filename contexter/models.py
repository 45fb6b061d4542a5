"""
where we store the
pydantic Data Structure classes
for the selection engine and the server payloads

"""

from pydantic import BaseModel, model_validator
from typing import List, Optional
from enum import Enum


class SelectionState(str, Enum):
    NONE = "none"
    PARTIAL = "partial"
    ALL = "all"


class TreeNode(BaseModel):
    id: str
    name: str
    path: str
    is_directory: bool
    children: Optional[List['TreeNode']] = None
    selected: bool = False
    expanded: bool = False

    @model_validator(mode="after")
    def _check_shape(self) -> 'TreeNode':
        # directories always own a children list, files never do
        if self.is_directory and self.children is None:
            self.children = []
        if not self.is_directory:
            if self.children is not None:
                raise ValueError(f"file node {self.path!r} cannot have children")
            self.expanded = False
        return self


class Project(BaseModel):
    name: str
    path: str = ""
    files: List[str] = []


class SelectionSummary(BaseModel):
    selected: int
    total: int

    @property
    def percent(self) -> int:
        if self.total == 0:
            return 0
        return round(self.selected / self.total * 100)

    @property
    def all_selected(self) -> bool:
        return self.total > 0 and self.selected == self.total

    def __str__(self) -> str:
        return f"{self.selected} of {self.total} files selected"

from typing import List, Optional
from contexter.models import SelectionState, TreeNode
from contexter.selection import SelectionStore

STATE_MARKS = {
    SelectionState.ALL: "[x]",
    SelectionState.PARTIAL: "[-]",
    SelectionState.NONE: "[ ]",
}


def selection_mark(node: TreeNode, store: SelectionStore) -> str:
    """Checkbox for a node, recomputed from the store on every call."""
    if node.is_directory:
        return STATE_MARKS[store.state_of(node.path)]
    return "[x]" if store.is_selected(node.path) else "[ ]"


class Renderer:
    """
    Renderer takes a TreeNode forest and produces terminal-ready text:
      - render_tree(): the directory/file hierarchy in ASCII form, optionally
        with a checkbox per node taken from a SelectionStore
      - render_summary(): the "N of M files selected" line
    """
    def __init__(self, nodes: List[TreeNode], store: Optional[SelectionStore] = None,
                 respect_expansion: bool = False):
        self.nodes = nodes
        self.store = store
        self.respect_expansion = respect_expansion

    def render_tree(self) -> str:
        """Return an ASCII tree of the TreeNode hierarchy."""
        lines = ["."]
        lines.extend(self._format_children(self.nodes, prefix=""))
        return "\n".join(lines)

    def render_summary(self) -> str:
        if self.store is None:
            return ""
        summary = self.store.summary()
        if summary.selected:
            return f"{summary} ({summary.percent}%)"
        return str(summary)

    def _format_label(self, node: TreeNode) -> str:
        suffix = "/" if node.is_directory else ""
        mark = f"{selection_mark(node, self.store)} " if self.store is not None else ""
        return f"{mark}{node.name}{suffix}"

    def _format_children(self, nodes: List[TreeNode], prefix: str) -> List[str]:
        """Recursively format nodes with ASCII connectors."""
        formatted = []
        count = len(nodes)
        for index, node in enumerate(nodes):
            is_last = (index == count - 1)
            connector = "└── " if is_last else "├── "
            formatted.append(f"{prefix}{connector}{self._format_label(node)}")

            if node.children and (node.expanded or not self.respect_expansion):
                next_prefix = prefix + ("    " if is_last else "│   ")
                formatted.extend(self._format_children(node.children, next_prefix))
        return formatted

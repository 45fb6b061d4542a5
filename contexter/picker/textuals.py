from typing import List, Optional
from contexter.expansion import filter_by_search
from contexter.models import SelectionState, TreeNode
from contexter.picker.base import Picker
from contexter.renderer import Renderer, selection_mark
from contexter.selection import SelectionStore
from contexter.tree import find_node
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.widgets import Tree, Header, Footer, Input, Static
from textual.widgets.tree import TreeNode as UITreeNode
from rich.text import Text


class TextualPicker(Picker):
    """
    Uses Textual to display a navigable tree of the project's files with
    tri-state checkboxes and a search box.
    """
    def pick(self, store: SelectionStore) -> List[str]:
        app = _PickerApp(store)
        result = app.run()
        return result or []


class SelectionTree(Tree):
    """Tree whose space key toggles selection instead of expansion."""

    BINDINGS = [
        Binding("space", "toggle_selection", "Toggle file or folder selection"),
        Binding("enter", "app.confirm", "Confirm selection"),
        Binding("left", "collapse_or_parent", "Collapse / go to parent", show=False),
        Binding("right", "expand_or_child", "Expand / go to first child", show=False),
    ]

    def __init__(self, store: SelectionStore, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.store = store
        # moving the cursor onto a folder must not open or close it
        self.auto_expand = False

    def action_toggle_selection(self) -> None:
        node = self.cursor_node
        if node is None or node.data is None:
            return  # don't toggle the synthetic root
        file_node: TreeNode = node.data
        if file_node.is_directory:
            self.store.toggle_directory(file_node.path)
        else:
            self.store.toggle_file(file_node.path)

    def action_expand_or_child(self) -> None:
        node = self.cursor_node
        if not node:
            return
        # If this row can expand and is currently collapsed, expand it
        if node.allow_expand and not node.is_expanded:
            node.expand()
            return
        # Already expanded: move into first child if any
        if node.children:
            self.select_node(node.children[0])

    def action_collapse_or_parent(self) -> None:
        node = self.cursor_node
        if not node:
            return
        if node.is_expanded and node is not self.root:
            node.collapse()
            return
        if node.parent:
            self.select_node(node.parent)


class _PickerApp(App):  # pylint: disable=too-many-public-methods
    CSS = """
    #picker-tree {
        height: 1fr;
        border: solid gray;
        padding: 1;
    }
    /* this is the focused row highlight */
    #picker-tree > .tree--cursor {
        background: blue;
        color: white;
    }
    #summary {
        padding: 0 1;
    }
    """

    BINDINGS = [
        ("slash", "focus_search", "Search"),
        ("escape", "focus_tree", "Back to tree"),
        ("a", "toggle_all", "Select / deselect all"),
        ("q", "quit_picker", "Quit without selecting"),
    ]

    def __init__(self, store: SelectionStore, **kwargs):
        super().__init__(**kwargs)
        self.store = store
        self.query_text = ""
        self._unsubscribe = None

    def compose(self) -> ComposeResult:
        yield Header(show_clock=True)
        yield Input(placeholder="Search files...", id="search")
        yield SelectionTree(self.store, "Files to include", id="picker-tree")
        yield Static(id="summary")
        yield Footer()

    async def on_mount(self) -> None:
        self._unsubscribe = self.store.subscribe(lambda _store: self.refresh_labels())
        tree = self.query_one(SelectionTree)
        self._rebuild_tree()
        tree.focus()
        tree.root.expand()   # show top-level entries immediately

    def visible_nodes(self) -> List[TreeNode]:
        return filter_by_search(self.store.tree, self.query_text)

    def _rebuild_tree(self) -> None:
        tree = self.query_one(SelectionTree)
        tree.clear()
        self._add_nodes(tree.root, self.visible_nodes())
        self.refresh_labels()

    def _add_nodes(self, parent: UITreeNode, nodes: List[TreeNode]) -> None:
        for node in nodes:
            if node.is_directory:
                child = parent.add(self._format_label(node), data=node, expand=node.expanded)
                self._add_nodes(child, node.children or [])
            else:
                parent.add_leaf(self._format_label(node), data=node)

    def _format_label(self, file_node: TreeNode) -> Text:
        """Generate label with colored checkbox and name based on selection state."""
        mark = selection_mark(file_node, self.store)
        suffix = "/" if file_node.is_directory else ""
        label = f"{mark} {file_node.name}{suffix}"
        if mark == "[x]":
            return Text(label, style="bold green")
        if file_node.is_directory and self.store.state_of(file_node.path) is SelectionState.PARTIAL:
            return Text(label, style="yellow")
        return Text(label)

    def _walk(self, node: UITreeNode):
        for child in node.children:
            yield child
            yield from self._walk(child)

    def refresh_labels(self) -> None:
        """Recompute every checkbox from the store; nothing is cached on the nodes."""
        tree = self.query_one(SelectionTree)
        for ui_node in self._walk(tree.root):
            if ui_node.data is not None:
                ui_node.set_label(self._format_label(ui_node.data))

        summary = Renderer(self.store.tree, self.store).render_summary()
        if self.query_text.strip() and not self.visible_nodes():
            summary = f"No files match your search  |  {summary}"
        self.query_one("#summary", Static).update(summary)

    async def on_input_changed(self, event: Input.Changed) -> None:
        self.query_text = event.value
        self._rebuild_tree()

    async def on_tree_node_expanded(self, event: Tree.NodeExpanded) -> None:
        self._sync_expansion(event.node, True)

    async def on_tree_node_collapsed(self, event: Tree.NodeCollapsed) -> None:
        self._sync_expansion(event.node, False)

    def _sync_expansion(self, ui_node: UITreeNode, expanded: bool) -> None:
        # filtered views force directories open; only mirror the plain tree
        if self.query_text.strip() or ui_node.data is None:
            return
        current = find_node(self.store.tree, ui_node.data.id)
        if current is not None and current.expanded != expanded:
            self.store.toggle_expansion(current.id)

    def action_focus_search(self) -> None:
        self.query_one("#search", Input).focus()

    def action_focus_tree(self) -> None:
        self.query_one(SelectionTree).focus()

    def action_toggle_all(self) -> None:
        if self.store.summary().all_selected:
            self.store.deselect_all()
        else:
            self.store.select_all()

    def _finish(self, result: Optional[List[str]]) -> None:
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None
        self.exit(result)

    def action_confirm(self) -> None:
        """Exit returning the selected paths."""
        self._finish(sorted(self.store.selected))

    def action_quit_picker(self) -> None:
        self._finish(None)

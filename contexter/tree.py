"""
Build and walk the directory/file tree for a flat project file list.
"""
from __future__ import annotations
from typing import Dict, Iterable, Iterator, List, Optional

from contexter.models import TreeNode
from contexter.paths import sort_paths


def build_file_tree(files: Iterable[str]) -> List[TreeNode]:
    """
    Fold a flat list of '/'-separated paths into a forest of TreeNode.

    Paths are sorted first so the result does not depend on input order.
    Every segment but the last becomes (or reuses) a directory node; the last
    becomes a file node. If a file path later turns out to be the prefix of
    another path, that node becomes a directory from then on. Empty segments
    (from '//' or a leading '/') are kept as literal, empty names.
    """
    roots: List[TreeNode] = []
    index: Dict[str, TreeNode] = {}

    for file_path in sort_paths(files):
        parts = file_path.split("/")
        siblings = roots
        current_path = ""

        for depth, part in enumerate(parts):
            current_path = part if depth == 0 else f"{current_path}/{part}"
            is_last = depth == len(parts) - 1
            node = index.get(current_path)

            if node is None:
                node = TreeNode(
                    id=current_path,
                    name=part,
                    path=current_path,
                    is_directory=not is_last,
                )
                index[current_path] = node
                siblings.append(node)
            elif not is_last and not node.is_directory:
                # a file that is also a prefix: the later path wins
                node.is_directory = True
                node.children = []

            if not is_last:
                siblings = node.children

    return roots


def iter_nodes(nodes: List[TreeNode]) -> Iterator[TreeNode]:
    """Pre-order walk over every node of the forest."""
    for node in nodes:
        yield node
        if node.children:
            yield from iter_nodes(node.children)


def collect_files(nodes: List[TreeNode]) -> List[TreeNode]:
    """Traverse nodes and return the leaf file nodes."""
    return [node for node in iter_nodes(nodes) if not node.is_directory]


def find_node(nodes: List[TreeNode], node_id: str) -> Optional[TreeNode]:
    for node in iter_nodes(nodes):
        if node.id == node_id:
            return node
    return None


def toggle_node_expansion(nodes: List[TreeNode], node_id: str) -> List[TreeNode]:
    """Return a new forest with the matching directory's `expanded` flag flipped."""
    toggled: List[TreeNode] = []
    for node in nodes:
        if node.id == node_id and node.is_directory:
            toggled.append(node.model_copy(update={"expanded": not node.expanded}))
        elif node.children:
            toggled.append(node.model_copy(
                update={"children": toggle_node_expansion(node.children, node_id)}
            ))
        else:
            toggled.append(node)
    return toggled

from typing import List
from contexter.models import TreeNode

# Only the first level is open when a project is loaded
DEFAULT_EXPAND_DEPTH = 1


def apply_default_expansion(nodes: List[TreeNode], max_depth: int = DEFAULT_EXPAND_DEPTH,
                            depth: int = 0) -> List[TreeNode]:
    """
    Return a copy of the forest where directories above `max_depth` are expanded
    and everything else is collapsed. Depth starts at 0 for the roots.
    """
    result: List[TreeNode] = []
    for node in nodes:
        if not node.is_directory:
            result.append(node.model_copy())
            continue
        result.append(node.model_copy(update={
            "expanded": depth < max_depth,
            "children": apply_default_expansion(node.children or [], max_depth, depth + 1),
        }))
    return result


def _matches(node: TreeNode, needle: str) -> bool:
    return needle in node.name.lower() or needle in node.path.lower()


def filter_by_search(nodes: List[TreeNode], query: str) -> List[TreeNode]:
    """
    Keep the nodes whose name or path contains `query` (case-insensitive),
    plus the directories leading to them.

    A directory with matching descendants keeps only those descendants and is
    forced open. A directory that matches by itself but has no matching
    descendants is kept with no children and its own `expanded` flag.
    An empty or blank query returns `nodes` untouched.
    """
    if not query.strip():
        return nodes
    return _filter_nodes(nodes, query.lower())


def _filter_nodes(nodes: List[TreeNode], needle: str) -> List[TreeNode]:
    kept: List[TreeNode] = []
    for node in nodes:
        matched = _matches(node, needle)
        if node.is_directory:
            children = _filter_nodes(node.children or [], needle)
            if children or matched:
                kept.append(node.model_copy(update={
                    "children": children,
                    "expanded": bool(children) or node.expanded,
                }))
        elif matched:
            kept.append(node)
    return kept

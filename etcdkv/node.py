"""Store nodes and their projection to plain Python values."""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Union

ROOT_KEY = "/"

ProjectedValue = Union[None, str, Dict[str, Any]]
"""None for a missing key, a string for a leaf, a dict for a directory."""


@dataclass(frozen=True)
class Node:
    """A single entry of the store, as returned on the wire.

    A node is either a leaf (``value`` set, ``nodes`` None) or a directory
    (``dir`` set; ``nodes`` holds the children that were fetched, if any).
    Keys are absolute paths at every level.
    """

    key: str = ROOT_KEY
    """Absolute path of this node. The root node omits it on the wire."""

    value: Optional[str] = None
    """Leaf value."""

    nodes: Optional[List["Node"]] = None
    """Children of a directory, if they were listed."""

    dir: bool = False
    """Whether this node is a directory."""

    created_index: Optional[int] = None
    """Store index at which the node was created."""

    modified_index: Optional[int] = None
    """Store index of the node's last modification."""

    ttl: Optional[int] = None
    """Remaining time-to-live in seconds, for expiring nodes."""

    expiration: Optional[str] = None
    """Expiration timestamp (RFC 3339), for expiring nodes."""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Node":
        """Build a node (and its children) from the decoded JSON object."""
        children = data.get("nodes")
        return cls(
            key=data.get("key", ROOT_KEY),
            value=data.get("value"),
            nodes=(
                [cls.from_dict(child) for child in children]
                if children is not None
                else None
            ),
            dir=bool(data.get("dir", False)),
            created_index=data.get("createdIndex"),
            modified_index=data.get("modifiedIndex"),
            ttl=data.get("ttl"),
            expiration=data.get("expiration"),
        )

    @property
    def is_dir(self) -> bool:
        return self.dir or self.nodes is not None

    def children(self) -> List["Node"]:
        """Listed children, or an empty list for leaves and unlisted dirs."""
        return list(self.nodes or [])


def node_to_value(node: Node) -> ProjectedValue:
    """Project a node onto a plain value, recursively.

    Leaves become their string value. Directories become a dict from each
    child's name, relative to the directory, to the child's projection.
    Child directories that were not listed (a non-recursive read) have no
    children of their own and project to None.

    Example:
        >>> root = Node.from_dict({"dir": True, "nodes": [
        ...     {"key": "/foo", "value": "1"},
        ...     {"key": "/folder", "dir": True},
        ... ]})
        >>> node_to_value(root)
        {'foo': '1', 'folder': None}
    """
    if node.nodes is None:
        return node.value

    prefix_len = 1 if node.key == ROOT_KEY else len(node.key) + 1
    return {
        child.key[prefix_len:]: node_to_value(child) for child in node.nodes
    }

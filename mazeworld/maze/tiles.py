# Cell type constants centralized for modular imports.
# One character each so grid rows render directly as text.
WALL = "W"
PATH = "P"
TASK = "T"
PORTAL = "O"  # inter-maze teleport
EXIT = "E"  # global end cell, stamped by world assembly

CELL_TYPES = frozenset({WALL, PATH, TASK, PORTAL, EXIT})

# Portal/Exit only terminate a route, never let it pass through.
_ALWAYS_WALKABLE = frozenset({PATH, TASK})
_ENDPOINT_WALKABLE = frozenset({PATH, TASK, PORTAL, EXIT})


def is_walkable(cell: str, as_endpoint: bool = False) -> bool:
    if as_endpoint:
        return cell in _ENDPOINT_WALKABLE
    return cell in _ALWAYS_WALKABLE


__all__ = ["WALL", "PATH", "TASK", "PORTAL", "EXIT", "CELL_TYPES", "is_walkable"]

"""Pure graph traversal over the subtype relation - no I/O dependencies.

The subtype graph is described by a ``children`` callable mapping a node id
to the ids of its direct subtypes. Callers decide how ids are resolved
(live objects, a repository, a plain dict in tests).
"""

from typing import Callable, Iterable

Children = Callable[[int], Iterable[int]]


def descendants(root_ids: Iterable[int], children: Children) -> set[int]:
    """
    All ids reachable from root_ids, root_ids included.

    Iterative DFS with a visited set, so shared diamonds are walked once and
    a corrupted (cyclic) store still terminates.
    """
    seen: set[int] = set()
    stack = list(root_ids)
    while stack:
        node = stack.pop()
        if node in seen:
            continue
        seen.add(node)
        stack.extend(c for c in children(node) if c not in seen)
    return seen


def reaches(root_ids: Iterable[int], target_id: int, children: Children) -> bool:
    """True if target_id is one of root_ids or reachable from them."""
    seen: set[int] = set()
    stack = list(root_ids)
    while stack:
        node = stack.pop()
        if node == target_id:
            return True
        if node in seen:
            continue
        seen.add(node)
        stack.extend(children(node))
    return False


def find_cycle(root_id: int, children: Children) -> list[int] | None:
    """
    Return one cycle reachable from root_id as a list of ids, or None.

    The returned path starts and ends with the same id, e.g. [2, 3, 2].
    """
    done: set[int] = set()
    path: list[int] = []
    on_path: set[int] = set()

    def visit(node: int) -> list[int] | None:
        path.append(node)
        on_path.add(node)
        for child in children(node):
            if child in on_path:
                return path[path.index(child):] + [child]
            if child not in done:
                found = visit(child)
                if found:
                    return found
        on_path.discard(node)
        path.pop()
        done.add(node)
        return None

    return visit(root_id)

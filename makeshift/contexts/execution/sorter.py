"""
Topological Sorter

Orders targets so every dependency comes before the targets that need it.
"""

from typing import Iterator, List, Mapping, Sequence, Tuple

from makeshift.exceptions import DependencyCycleError


def topological_sort(dependencies: Mapping[str, Sequence[str]], root: str) -> List[str]:
    """
    Return the execution order for root, dependencies first.

    Depth-first, post-order, each node visited once. Dependencies are visited
    in listed order. Names without an entry in dependencies (plain files with
    no rule) are kept as leaves. Uses an explicit stack, so long dependency
    chains are not limited by the interpreter's recursion depth.

    Args:
        dependencies: Target -> ordered dependency names
        root: Requested target

    Returns:
        Target names ending with root

    Raises:
        DependencyCycleError: If root reaches a cycle

    Examples:
        >>> topological_sort({"a": ["b"], "b": ["c"]}, "a")
        ['c', 'b', 'a']
    """
    order: List[str] = []
    visited = set()

    stack: List[Tuple[str, Iterator[str]]] = [(root, iter(dependencies.get(root, ())))]
    path = [root]
    on_path = {root}

    while stack:
        node, pending = stack[-1]

        for dependency in pending:
            if dependency in visited:
                continue
            if dependency in on_path:
                cycle = path[path.index(dependency) :] + [dependency]
                raise DependencyCycleError(cycle)

            stack.append((dependency, iter(dependencies.get(dependency, ()))))
            path.append(dependency)
            on_path.add(dependency)
            break
        else:
            stack.pop()
            path.pop()
            on_path.discard(node)
            visited.add(node)
            order.append(node)

    return order

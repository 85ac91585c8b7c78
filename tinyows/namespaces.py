"""Detection of namespace prefixes rebound to another URI inside a document."""

from __future__ import annotations

from typing import Any


def _prefixed(nsmap: dict[Any, Any]) -> dict[str, str]:
    """Keep the prefixed bindings of an nsmap, dropping the default namespace."""
    return {
        prefix: uri
        for prefix, uri in nsmap.items()
        if prefix is not None and uri is not None
    }


def _conflicts(node: Any, doc_namespaces: dict[str, str]) -> bool:
    """Tell whether a node binds a document prefix to a different URI."""
    return any(
        prefix in doc_namespaces and doc_namespaces[prefix] != uri
        for prefix, uri in _prefixed(node.nsmap).items()
    )


def check_namespaces(element: Any) -> bool:
    """Check that no prefix is bound to another URI than on the root element.

    ``element`` and its following siblings are checked, each with all its
    descendants. Returns False when the root element has no namespace in
    scope at all, or when a prefix declared on the root is rebound to a
    different URI somewhere below.
    """
    root = element.getroottree().getroot()
    if not root.nsmap:
        return False
    doc_namespaces = _prefixed(root.nsmap)
    return _check_from(element, doc_namespaces)


def _check_from(element: Any, doc_namespaces: dict[str, str]) -> bool:
    for node in (element, *element.itersiblings()):
        if not isinstance(node.tag, str):
            continue
        children = list(node)
        if children and not _check_from(children[0], doc_namespaces):
            return False
        if _conflicts(node, doc_namespaces):
            return False
    return True
"""
Locate the root node list inside the various Figma response envelopes.
"""

import logging
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


def _is_node(value: Any) -> bool:
    return isinstance(value, dict) and bool(value.get('id'))


def _unwrap_documents(mapping: Dict[str, Any], allow_bare_nodes: bool) -> List[Dict[str, Any]]:
    """Collect ``{id: {"document": node}}`` entries, optionally bare nodes too."""
    nodes = []
    for wrapper in mapping.values():
        if not isinstance(wrapper, dict):
            continue
        document = wrapper.get('document')
        if isinstance(document, dict):
            nodes.append(document)
        elif allow_bare_nodes and _is_node(wrapper):
            nodes.append(wrapper)
    return nodes


def extract_nodes(payload: Any) -> List[Dict[str, Any]]:
    """Extract root nodes from a Figma payload of unknown shape.

    Tried in order:
    - ``data.document.{id}.document`` (REST export envelope)
    - ``document.{id}.document`` or ``document.{id}`` as a bare node
    - ``nodes.{id}.document`` (``GET /files/:key/nodes`` response)
    - a list of nodes
    - a single node

    Never raises: an unrecognized payload yields an empty list.
    """
    data = payload.get('data') if isinstance(payload, dict) else None
    if isinstance(data, dict) and isinstance(data.get('document'), dict):
        nodes = _unwrap_documents(data['document'], allow_bare_nodes=False)
        logger.info(f"Extracted {len(nodes)} nodes from data.document format")
        return nodes

    if isinstance(payload, dict) and isinstance(payload.get('document'), dict):
        document = payload['document']
        if document.get('type') and _is_node(document):
            # Full-file response: the document itself is the root
            logger.info("Extracted document root node")
            return [document]
        nodes = _unwrap_documents(document, allow_bare_nodes=True)
        logger.info(f"Extracted {len(nodes)} nodes from document format")
        return nodes

    if isinstance(payload, dict) and isinstance(payload.get('nodes'), dict):
        nodes = _unwrap_documents(payload['nodes'], allow_bare_nodes=False)
        logger.info(f"Extracted {len(nodes)} nodes from nodes format")
        return nodes

    if isinstance(payload, list):
        nodes = [node for node in payload if isinstance(node, dict)]
        logger.info(f"Extracted {len(nodes)} nodes from array format")
        return nodes

    if _is_node(payload):
        logger.info("Extracted a single node")
        return [payload]

    logger.warning("Unknown payload format, no nodes found")
    return []

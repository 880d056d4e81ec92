"""
Figma REST collaborators.

Resolves ``imageRef`` fills to URLs (or base64 data URLs) on the raw tree
before normalization, reads local color variable names, and swaps
synthesized vector markup for Figma's own SVG export afterwards. Caches
live in the dict the caller passes in, so they never outlive one conversion.
"""

import base64
import logging
from typing import Any, Dict, List, Optional, Set

import httpx

from normalizer.nodes import NormalizedNode, VectorNode

logger = logging.getLogger(__name__)

FIGMA_API_BASE = "https://api.figma.com/v1"
DEFAULT_TIMEOUT = 30.0


def collect_image_refs(nodes: List[Dict[str, Any]]) -> Set[str]:
    refs: Set[str] = set()

    def walk(node: Dict[str, Any]) -> None:
        for fill in node.get('fills') or []:
            if isinstance(fill, dict) and fill.get('type') == 'IMAGE' and fill.get('imageRef'):
                refs.add(fill['imageRef'])
        for child in node.get('children') or []:
            if isinstance(child, dict):
                walk(child)

    for node in nodes:
        walk(node)
    return refs


async def fetch_image_fills(client: httpx.AsyncClient, file_key: str, token: str,
                            cache: Optional[Dict[str, Dict[str, str]]] = None) -> Dict[str, str]:
    """Map of imageRef -> image URL for every image fill in the file."""
    if cache is not None and file_key in cache:
        return cache[file_key]

    try:
        response = await client.get(
            f"{FIGMA_API_BASE}/files/{file_key}/images",
            headers={"X-Figma-Token": token},
            timeout=DEFAULT_TIMEOUT
        )
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch image fills for {file_key}: {e}")
        return {}

    data = response.json()
    mapping = (data.get('meta') or {}).get('images') or data.get('images') or {}
    logger.info(f"Retrieved {len(mapping)} image mappings")
    if cache is not None:
        cache[file_key] = mapping
    return mapping


async def image_url_to_base64(client: httpx.AsyncClient, url: str) -> str:
    response = await client.get(url, timeout=DEFAULT_TIMEOUT)
    response.raise_for_status()
    content_type = response.headers.get('content-type', 'image/png').split(';')[0]
    encoded = base64.b64encode(response.content).decode('utf-8')
    return f"data:{content_type};base64,{encoded}"


async def resolve_image_refs(client: httpx.AsyncClient, nodes: List[Dict[str, Any]],
                             file_key: str, token: str, embed_as_base64: bool = False,
                             cache: Optional[Dict[str, Dict[str, str]]] = None) -> int:
    """Set ``imageUrl`` (or ``base64Url``) on every IMAGE fill with a known ref.

    Mutates the fetched raw tree in place; returns how many fills were resolved.
    """
    if not collect_image_refs(nodes):
        logger.info("No image fills found")
        return 0

    mapping = await fetch_image_fills(client, file_key, token, cache)
    resolved = 0

    async def walk(node: Dict[str, Any]) -> None:
        nonlocal resolved
        for fill in node.get('fills') or []:
            if not isinstance(fill, dict) or fill.get('type') != 'IMAGE' or not fill.get('imageRef'):
                continue
            url = mapping.get(fill['imageRef'])
            if not url:
                logger.warning(f"No URL found for image ref {fill['imageRef']}")
                continue
            if embed_as_base64:
                try:
                    fill['base64Url'] = await image_url_to_base64(client, url)
                except httpx.HTTPError as e:
                    logger.warning(f"Failed to embed image {fill['imageRef']}, using URL: {e}")
                    fill['imageUrl'] = url
            else:
                fill['imageUrl'] = url
            resolved += 1
        for child in node.get('children') or []:
            if isinstance(child, dict):
                await walk(child)

    for node in nodes:
        await walk(node)
    return resolved


def _flattened_vectors(nodes: List[NormalizedNode]) -> List[NormalizedNode]:
    found = []
    for node in nodes:
        if isinstance(node, VectorNode) and node.can_be_flattened:
            found.append(node)
        found.extend(_flattened_vectors(node.children or []))
    return found


async def attach_exported_svgs(client: httpx.AsyncClient, nodes: List[NormalizedNode],
                               file_key: str, token: str) -> int:
    """Replace synthesized markup of flattenable vectors with Figma's SVG export."""
    vectors = _flattened_vectors(nodes)
    if not vectors:
        logger.info("No vector nodes found for SVG export")
        return 0

    try:
        response = await client.get(
            f"{FIGMA_API_BASE}/images/{file_key}",
            headers={"X-Figma-Token": token},
            params={"ids": ",".join(v.id for v in vectors), "format": "svg"},
            timeout=DEFAULT_TIMEOUT
        )
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning(f"Failed to fetch SVG exports from Figma: {e}")
        return 0

    urls = response.json().get('images') or {}
    attached = 0
    for vector in vectors:
        url = urls.get(vector.id)
        if not url:
            continue
        try:
            svg_response = await client.get(url, timeout=DEFAULT_TIMEOUT)
            svg_response.raise_for_status()
        except httpx.HTTPError as e:
            logger.warning(f"Failed to fetch SVG for {vector.id}: {e}")
            continue
        vector.svg = svg_response.text
        attached += 1
    return attached


async def fetch_variable_names(client: httpx.AsyncClient, file_key: str, token: str) -> Dict[str, str]:
    """Map of variable id -> variable name from the file's local variables.

    The variables endpoint needs an Enterprise plan; any failure just means
    names fall back to the id-derived form.
    """
    try:
        response = await client.get(
            f"{FIGMA_API_BASE}/files/{file_key}/variables/local",
            headers={"X-Figma-Token": token},
            timeout=DEFAULT_TIMEOUT
        )
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.warning(f"Local variables unavailable for {file_key}: {e}")
        return {}

    variables = (response.json().get('meta') or {}).get('variables') or {}
    return {
        variable_id: variable['name']
        for variable_id, variable in variables.items()
        if isinstance(variable, dict) and variable.get('name')
    }

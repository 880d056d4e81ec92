#!/usr/bin/env python3
"""
Figma Normalize MCP Server - Model Context Protocol server that turns Figma
scene trees into normalized node trees for code generators.

This server provides tools to:
- Normalize an exported Figma JSON payload
- Fetch a node from the Figma REST API and normalize it, with image fills
  resolved and optional SVG exports for vectors
"""

import os
import json
import re
import time
import logging
from typing import Optional, List, Dict, Any
from enum import Enum

import httpx
from pydantic import BaseModel, Field, field_validator, ConfigDict
from mcp.server.fastmcp import FastMCP

from normalizer import (
    ConversionContext, ConversionSettings, NormalizedNode,
    extract_nodes, nodes_to_dicts, normalize,
)
from normalizer.figma_client import (
    FIGMA_API_BASE, DEFAULT_TIMEOUT,
    attach_exported_svgs, fetch_variable_names, resolve_image_refs,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Constants
# ============================================================================

CHARACTER_LIMIT = 25000

# ============================================================================
# Initialize MCP Server
# ============================================================================

mcp = FastMCP("figma_normalize_mcp")

# ============================================================================
# Enums and Types
# ============================================================================

class ResponseFormat(str, Enum):
    """Output format for tool responses."""
    MARKDOWN = "markdown"
    JSON = "json"


# ============================================================================
# Pydantic Input Models
# ============================================================================

class NormalizePayloadInput(BaseModel):
    """Input model for normalizing an inline Figma payload."""
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    payload: str = Field(
        ...,
        description="Figma JSON: REST export envelope, nodes response, node list or single node",
        min_length=2
    )
    settings: ConversionSettings = Field(..., description="Conversion settings")
    response_format: ResponseFormat = Field(
        default=ResponseFormat.JSON,
        description="Output format: 'markdown' or 'json'"
    )


class NormalizeNodeInput(BaseModel):
    """Input model for fetching and normalizing a Figma node."""
    model_config = ConfigDict(str_strip_whitespace=True, validate_assignment=True)

    file_key: str = Field(
        ...,
        description="Figma file key (from URL: figma.com/design/FILE_KEY/...)",
        min_length=10,
        max_length=50
    )
    node_id: str = Field(
        ...,
        description="Node ID (e.g., '1:2' or '1-2')",
        min_length=1
    )
    settings: ConversionSettings = Field(..., description="Conversion settings")
    resolve_images: bool = Field(default=True, description="Resolve image fills to Figma URLs")
    embed_images_as_base64: bool = Field(
        default=False,
        description="Download resolved images and embed them as data URLs"
    )
    export_vector_svgs: bool = Field(
        default=False,
        description="Replace synthesized vector markup with Figma's SVG export"
    )
    response_format: ResponseFormat = Field(
        default=ResponseFormat.JSON,
        description="Output format: 'markdown' or 'json'"
    )

    @field_validator('file_key')
    @classmethod
    def validate_file_key(cls, v: str) -> str:
        # Extract file key from URL if full URL provided
        if 'figma.com' in v:
            match = re.search(r'figma\.com/(?:design|file)/([a-zA-Z0-9]+)', v)
            if match:
                return match.group(1)
            raise ValueError("Could not extract file key from Figma URL")
        return v

    @field_validator('node_id')
    @classmethod
    def normalize_node_id(cls, v: str) -> str:
        return v.replace('-', ':')


# ============================================================================
# Helper Functions
# ============================================================================

def _get_figma_token() -> str:
    """Get Figma API token from environment."""
    token = os.environ.get("FIGMA_ACCESS_TOKEN") or os.environ.get("FIGMA_TOKEN")
    if not token:
        raise ValueError(
            "Figma API token not found. Set FIGMA_ACCESS_TOKEN or FIGMA_TOKEN environment variable. "
            "Get your token from: https://www.figma.com/developers/api#access-tokens"
        )
    return token


async def _make_figma_request(
    client: httpx.AsyncClient,
    endpoint: str,
    token: str,
    params: Optional[Dict[str, Any]] = None
) -> Dict[str, Any]:
    """Make authenticated request to Figma API."""
    response = await client.get(
        f"{FIGMA_API_BASE}/{endpoint}",
        headers={"X-Figma-Token": token},
        params=params,
        timeout=DEFAULT_TIMEOUT
    )
    response.raise_for_status()
    return response.json()


def _handle_api_error(e: Exception) -> str:
    """Format API errors for user-friendly messages."""
    if isinstance(e, httpx.HTTPStatusError):
        status = e.response.status_code
        if status == 401:
            return "Error: Invalid Figma API token. Check your FIGMA_ACCESS_TOKEN environment variable."
        elif status == 403:
            return "Error: Access denied. You don't have permission to view this file."
        elif status == 404:
            return "Error: File or node not found. Check the file key and node ID."
        elif status == 429:
            return "Error: Rate limit exceeded. Please wait before making more requests."
        return f"Error: Figma API returned status {status}"
    elif isinstance(e, httpx.TimeoutException):
        return "Error: Request timed out. The file might be too large."
    elif isinstance(e, ValueError):
        return f"Error: {str(e)}"
    return f"Error: {type(e).__name__}: {str(e)}"


def _elapsed_ms(start: float) -> int:
    return round((time.perf_counter() - start) * 1000)


def _format_markdown(nodes: List[NormalizedNode], metadata: Dict[str, Any]) -> str:
    """Render a normalized tree as an indented markdown outline."""
    lines = [
        "# Normalized Figma Nodes",
        f"**Framework:** {metadata['framework']}",
        f"**Node Count:** {metadata['nodeCount']}",
        f"**Processing Time:** {metadata['processingTime']}ms",
    ]
    if metadata['failedNodeIds']:
        lines.append(f"**Dropped Nodes:** {', '.join(metadata['failedNodeIds'])}")
    lines.extend(["", "## Tree", ""])

    def format_tree(node: NormalizedNode, indent: int = 0) -> None:
        prefix = "  " * indent
        size_str = ""
        if node.width is not None and node.height is not None:
            size_str = f" ({node.width}×{node.height} at {node.x},{node.y})"
        flags = []
        if node.can_be_flattened:
            flags.append("svg" if node.svg else "flattenable")
        if node.cumulative_rotation:
            flags.append(f"rot {node.cumulative_rotation:.1f}°")
        flag_str = f" [{', '.join(flags)}]" if flags else ""

        lines.append(f"{prefix}- **{node.unique_name}** `{node.id}` {node.type}{size_str}{flag_str}")
        for child in node.children or []:
            format_tree(child, indent + 1)

    for node in nodes:
        format_tree(node)

    return "\n".join(lines)


def _format_result(nodes: List[NormalizedNode], context: ConversionContext,
                   settings: ConversionSettings, response_format: ResponseFormat,
                   breakdown: Dict[str, int]) -> str:
    metadata = {
        'framework': settings.framework.value,
        'nodeCount': len(nodes),
        'processingTime': sum(breakdown.values()),
        'breakdown': breakdown,
        'failedNodeIds': list(context.failed_node_ids),
    }

    if response_format == ResponseFormat.MARKDOWN:
        result = _format_markdown(nodes, metadata)
        if len(result) > CHARACTER_LIMIT:
            return result[:CHARACTER_LIMIT] + "\n\n... (truncated)"
        return result

    result = json.dumps({
        'success': True,
        'nodes': nodes_to_dicts(nodes),
        'settings': settings.model_dump(by_alias=True, mode='json'),
        'metadata': metadata,
    }, indent=2)

    # Check character limit
    if len(result) > CHARACTER_LIMIT:
        logger.info(f"Normalized tree is {len(result)} characters, above {CHARACTER_LIMIT}")
        return json.dumps({
            'success': True,
            'truncated': True,
            'message': f'Result exceeded {CHARACTER_LIMIT} characters. '
                       'Normalize a smaller node (node_id) to get the full tree.',
            'nodes': [
                {'id': node.id, 'type': node.type, 'uniqueName': node.unique_name}
                for node in nodes
            ],
            'metadata': metadata,
        }, indent=2)
    return result


# ============================================================================
# Tools
# ============================================================================

@mcp.tool(
    name="figma_normalize_payload",
    annotations={
        "title": "Normalize Figma JSON",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": False
    }
)
async def figma_normalize_payload(params: NormalizePayloadInput) -> str:
    """
    Normalize an exported Figma JSON payload into a code-generator-ready tree.

    Positions become parent-relative, names unique, layout fields complete,
    groups are inlined, hidden nodes removed and icons flattened to SVG
    when embedVectors is set.

    Args:
        params: NormalizePayloadInput containing:
            - payload (str): Figma JSON in any supported envelope
            - settings: framework, useColorVariables, embedVectors, icon thresholds
            - response_format: 'markdown' or 'json'

    Returns:
        str: Normalized nodes with conversion metadata, or an error message
    """
    try:
        start = time.perf_counter()
        try:
            payload = json.loads(params.payload)
        except json.JSONDecodeError as e:
            raise ValueError(f"payload is not valid JSON: {e.msg}")

        raw_nodes = extract_nodes(payload)
        if not raw_nodes:
            raise ValueError("No valid nodes found in payload")
        extraction_ms = _elapsed_ms(start)

        start = time.perf_counter()
        context = ConversionContext(settings=params.settings)
        nodes = normalize(raw_nodes, params.settings, context)
        if not nodes:
            raise ValueError("No processable nodes found after conversion")

        return _format_result(nodes, context, params.settings, params.response_format, {
            'extraction': extraction_ms,
            'processing': _elapsed_ms(start),
        })

    except Exception as e:
        return _handle_api_error(e)


@mcp.tool(
    name="figma_normalize_node",
    annotations={
        "title": "Fetch and Normalize Figma Node",
        "readOnlyHint": True,
        "destructiveHint": False,
        "idempotentHint": True,
        "openWorldHint": True
    }
)
async def figma_normalize_node(params: NormalizeNodeInput) -> str:
    """
    Fetch a node (with path geometry) from a Figma file and normalize it.

    Image fills are resolved to Figma-hosted URLs (or embedded as base64),
    bound color variables are named from the file's local variables when
    useColorVariables is set, and flattenable vectors can optionally use
    Figma's own SVG export instead of the synthesized markup.

    Args:
        params: NormalizeNodeInput containing:
            - file_key (str): Figma file key or full URL
            - node_id (str): Node ID (e.g., '1:2' or '1-2')
            - settings: framework, useColorVariables, embedVectors, icon thresholds
            - resolve_images, embed_images_as_base64, export_vector_svgs: network options
            - response_format: 'markdown' or 'json'

    Returns:
        str: Normalized nodes with conversion metadata, or an error message
    """
    try:
        token = _get_figma_token()
        context = ConversionContext(settings=params.settings)

        async with httpx.AsyncClient() as client:
            start = time.perf_counter()
            data = await _make_figma_request(
                client,
                f"files/{params.file_key}/nodes",
                token,
                params={"ids": params.node_id, "geometry": "paths"}
            )
            raw_nodes = extract_nodes(data)
            if not raw_nodes:
                raise ValueError(f"Node '{params.node_id}' not found in file.")

            if params.resolve_images:
                await resolve_image_refs(
                    client, raw_nodes, params.file_key, token,
                    embed_as_base64=params.embed_images_as_base64,
                    cache={}
                )
            if params.settings.use_color_variables:
                context.variable_names = await fetch_variable_names(client, params.file_key, token)
            fetch_ms = _elapsed_ms(start)

            start = time.perf_counter()
            nodes = normalize(raw_nodes, params.settings, context)
            if not nodes:
                raise ValueError("No processable nodes found after conversion")
            processing_ms = _elapsed_ms(start)

            start = time.perf_counter()
            if params.export_vector_svgs and params.settings.embed_vectors:
                await attach_exported_svgs(client, nodes, params.file_key, token)
            export_ms = _elapsed_ms(start)

        return _format_result(nodes, context, params.settings, params.response_format, {
            'fetch': fetch_ms,
            'processing': processing_ms,
            'svgExport': export_ms,
        })

    except Exception as e:
        return _handle_api_error(e)


# ============================================================================
# Entry Point
# ============================================================================

def main() -> None:
    # stdout carries the MCP stdio protocol; logs go to stderr
    logging.basicConfig(
        level=os.environ.get("FIGMA_NORMALIZE_LOG_LEVEL", "INFO").upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )
    mcp.run()


if __name__ == "__main__":
    main()

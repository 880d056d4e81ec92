"""
Request-scoped conversion state.

A ``ConversionContext`` is created for every document that goes through
the pipeline and threaded through each recursive call. Nothing in here is
shared between conversions.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from normalizer.base import NAME_SUFFIX_WIDTH, UNNAMED
from normalizer.settings import ConversionSettings

logger = logging.getLogger(__name__)


@dataclass
class ConversionContext:
    settings: ConversionSettings
    name_counters: Dict[str, int] = field(default_factory=dict)
    node_cache: Dict[str, Dict[str, Any]] = field(default_factory=dict)
    variable_names: Dict[str, str] = field(default_factory=dict)
    failed_node_ids: List[str] = field(default_factory=list)

    def unique_name(self, name: Optional[str]) -> str:
        """Return a document-wide unique name for ``name``.

        The first occurrence keeps the bare name; later ones get a
        zero-padded suffix: ``button``, ``button_01``, ``button_02``.
        """
        base_name = (name or '').strip() or UNNAMED
        count = self.name_counters.get(base_name, 0)
        self.name_counters[base_name] = count + 1
        if count == 0:
            return base_name
        return f"{base_name}_{count:0{NAME_SUFFIX_WIDTH}d}"

    def populate_node_cache(self, raw_nodes: List[Dict[str, Any]]) -> None:
        """Index every raw node with an id, depth first."""
        def add(node: Any) -> None:
            if not isinstance(node, dict):
                return
            if node.get('id'):
                self.node_cache[node['id']] = node
            for child in node.get('children') or []:
                add(child)

        for node in raw_nodes:
            add(node)
        logger.debug(f"Populated node cache with {len(self.node_cache)} nodes")

    def get_node_by_id(self, node_id: str) -> Optional[Dict[str, Any]]:
        return self.node_cache.get(node_id)

    def record_failure(self, node_id: Optional[str]) -> None:
        self.failed_node_ids.append(node_id or 'unknown')

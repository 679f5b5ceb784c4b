"""Application-defined (managed) tool servers."""

from dataclasses import dataclass


@dataclass(frozen=True)
class ManagedServerDefinition:
    managed_id: str
    id: str
    name: str
    url_path: str


MANAGED_SERVER_DEFINITIONS: tuple[ManagedServerDefinition, ...] = (
    ManagedServerDefinition(
        managed_id="jamaica-market",
        id="mcp-managed-jamaica-market",
        name="Jamaica Market Data",
        url_path="/api/mcp/jamaica-market",
    ),
)

MANAGED_IDS = frozenset(definition.managed_id for definition in MANAGED_SERVER_DEFINITIONS)

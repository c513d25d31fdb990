"""Common type aliases for vnscript."""

from typing import TypeAlias

NodeID: TypeAlias = str
AssetIdentifier: TypeAlias = str
SlotID: TypeAlias = int

# Identifier that ends a session instead of naming a node
END: NodeID = "END"

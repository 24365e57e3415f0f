"""
Chain - Collaborators that talk to the node.

Provides the async HTTP network client and the canonical binary codec the
write pipeline serializes transactions with.

Uses httpx + eth-abi instead of a full node SDK.
"""

"""Context Adapter: NGSI context updates to third-party HTTP services and back."""

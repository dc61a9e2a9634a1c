"""Protocol buffer definitions of the catalog RPC API."""

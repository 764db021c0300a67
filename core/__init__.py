# =============================================================================
# core/__init__.py
# =============================================================================
# Everything that talks to Apollo.io: configuration, argument records, the
# query-string formatter and the HTTP client.
#
# Nothing in this package imports FastMCP or the MCP SDK.  The tools/ layer
# wraps it; core/ can be used (and tested) from a plain Python REPL.
# =============================================================================

# =============================================================================
# tools/__init__.py
# =============================================================================
# The MCP-facing layer.
#
#   catalog.py     static descriptors of the 8 tools (name, schema, binding)
#   dispatcher.py  tool name + argument bag → one ApolloClient call → text
#   mcp_server.py  FastMCP registration and the stderr request/response log
#
# Tools hold no business logic; they translate between MCP and core/.
# =============================================================================

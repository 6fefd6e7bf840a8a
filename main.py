#!/usr/bin/env python3
"""MCP stdio server - Main entry point.

Serves tools, resources and prompts to an LLM host over newline-delimited
JSON-RPC on stdin/stdout. Equivalent to the ``mcp-stdio-server`` console
script.

================================================================================
DEVELOPER GUIDE: Adding Components
================================================================================

1. WRITE A COMPONENT MODULE
   Create an importable module defining Tool, Resource or Prompt values at
   module level, or a get_components() function returning them:

    from mcp_stdio_server import Tool, ToolParameter

    echo = Tool(
        name="echo",
        description="Echo the given text",
        parameters=[ToolParameter("text", "Text to echo", "string", required=True)],
        handler=lambda args: args["text"],
    )

2. LIST IT IN THE MANIFEST
   Add the module to the ``components`` list of config/server.yaml, or pass
   ``--component my_package.echo`` on the command line.

3. STATE SHARED BETWEEN CALLS
   Keep it in an object captured by the handler (a closure or a class
   instance), never in module globals, so handlers can be tested alone.

NOTES
-----
- Stdout is reserved for protocol messages; print diagnostics to stderr.
- Handlers run one at a time; a slow handler blocks the whole connection.
- Tool names are not checked for uniqueness; the first registration wins
  and duplicates are logged as warnings.

================================================================================
"""

import sys

from mcp_stdio_server.cli import main

if __name__ == "__main__":
    sys.exit(main())

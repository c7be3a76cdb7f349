"""Entrypoint for the Mozart MCP server.

Runs the tools over stdio. stdout carries the MCP protocol, so all logging
goes to stderr.
"""

import logging
import sys

import mozart.config
import mozart.mcp_app
import mozart.registry


logger = logging.getLogger(__name__)


def main () -> None:

	"""Load configuration, build a registry for this session and serve MCP over stdio."""

	logging.basicConfig(level=logging.INFO, stream=sys.stderr)

	config = mozart.config.load_config()
	logging.getLogger().setLevel(config.log_level.upper())

	registry = mozart.registry.DocumentRegistry(defaults=config.defaults)
	mcp = mozart.mcp_app.create_mcp_app(registry, config)

	logger.info(f"Mozart MCP server '{config.server_name}' starting on stdio")

	mcp.run(transport="stdio")


if __name__ == "__main__":
	main()

"""
Agent wallet canonical entrypoint.

This is the single source of truth for:
- MCP server name
- tool registration order
- loading the wallet snapshot at start and flushing it at shutdown
"""

from __future__ import annotations

import logging

from fastmcp import FastMCP

from app.core.container import global_container
from app.core.settings import settings
from app.tools.accounts import register_account_tools
from app.tools.chain import register_chain_tools
from app.tools.transactions import register_transaction_tools
from observability import configure_logging

logger = logging.getLogger("wallet.server")

# Initialize FastMCP server
mcp = FastMCP("mcp-wallet")

# Register Tools
register_account_tools(mcp)
register_transaction_tools(mcp)
register_chain_tools(mcp)


def main() -> None:
    configure_logging(settings.WALLET_LOG_LEVEL)
    global_container.load()
    logger.info("MCP wallet server starting (stdio, rpc=%s)", settings.RPC_URL)
    try:
        mcp.run()
    finally:
        if global_container.flush():
            logger.info("Wallet saved to %s", global_container.wallet_file)


if __name__ == "__main__":
    main()

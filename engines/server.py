"""
PSW Direct Calculation Engines - MCP Server

FastMCP server exposing the pricing and payroll tools:
- Pricing Engine: surge evaluation and booking quotes
- Payroll Engine: settlement of completed shifts
"""

import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

# Importing the tool modules registers every tool on the shared MCP instance
from engines.tools.pricing_engine import mcp  # noqa: E402
from engines.tools import payroll_engine  # noqa: E402, F401


def main():
    """Run the MCP server."""
    logger.info("Starting PSW Direct Calculation Engines MCP Server")
    mcp.run()


if __name__ == "__main__":
    main()

import asyncio
from logging import Logger
from typing import Literal

import click
from fastmcp import FastMCP
from fastmcp.server.middleware.logging import LoggingMiddleware
from fastmcp.utilities.logging import get_logger

from github_classroom.records.database import DatabaseConnection
from github_classroom.servers.provisioning import ProvisioningServer

logger: Logger = get_logger(name=__name__)

mcp: FastMCP[None] = FastMCP[None](name="GitHub Classroom MCP")

mcp.add_middleware(middleware=LoggingMiddleware(include_payloads=True, logger=logger))

database: DatabaseConnection = DatabaseConnection()

provisioning_server: ProvisioningServer = ProvisioningServer(database=database, logger=logger)
_ = provisioning_server.register_tools(fastmcp=mcp)


@click.command()
@click.option(
    "--mcp-transport",
    type=click.Choice(["stdio", "streamable-http"]),
    default="stdio",
    help="The transport to run the MCP server on",
)
@click.option(
    "--create-tables/--no-create-tables",
    default=False,
    help="Create the classroom tables before serving, if they do not exist yet",
)
def run_mcp(mcp_transport: Literal["stdio", "streamable-http"], create_tables: bool):
    if create_tables:
        asyncio.run(database.create_tables())

    mcp.run(transport=mcp_transport)


if __name__ == "__main__":
    run_mcp()

import asyncio
import socket

import pytest


@pytest.fixture
async def serve():
    """ Factory fixture: start an in-process TCP server on a free local port
        running the supplied connection *handler*, and return the port.
    """

    servers = list()

    async def start(handler):
        server = await asyncio.start_server(handler, '127.0.0.1', 0)
        servers.append(server)
        return server.sockets[0].getsockname()[1]

    yield start

    for server in servers:
        server.close()


@pytest.fixture
async def replying(serve):
    """ Factory fixture: a server that records each request line it
        receives, answers with the given reply lines, and hangs up. Returns
        the port and the list of recorded requests.
    """

    async def start(*lines):

        requests = list()

        async def handler(reader, writer):
            requests.append(await reader.readline())
            for line in lines:
                writer.write(line + b'\n')
            try:
                await writer.drain()
            except ConnectionError:
                pass
            writer.close()

        port = await serve(handler)
        return port, requests

    return start


@pytest.fixture
def closed_port():
    """ A local port number with nothing listening on it.
    """

    probe = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    probe.bind(('127.0.0.1', 0))
    port = probe.getsockname()[1]
    probe.close()
    return port


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

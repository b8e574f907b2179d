""" Classes and functions implemented here move query envelopes to a
    Montycat server and bring its replies back, one TCP connection per
    logical query. The wire format is text: the request is one JSON
    document followed by a newline, and every reply is one newline
    terminated line.

    There are two reply modes. A one-shot request reads exactly one line
    and closes the connection; a subscription hands every line to a
    callback until the server closes the connection or the caller stops it.
"""

import asyncio
import inspect
import logging
import ssl

from .. import config
from ..protocol import fields
from ..protocol.decode import DecodeFailure, decode
from ..protocol.errors import ValidationError
from .base import State, TransportConnectionError, TransportError, TransportTimeout

logger = logging.getLogger(__name__)

terminator = b'\n'


class Transport:
    """ A single connection to the server at *host* and *port*. Each
        :class:`Transport` instance owns exactly one socket, and is good for
        exactly one request or one subscription; concurrent queries each
        use their own instance.

        :ivar state: The current :class:`~montycat.transport.base.State`.
        :ivar delivered: The number of lines handed to a subscription callback.
    """

    def __init__(self, host, port, use_tls=False):

        self.host = host
        self.port = int(port)
        self.use_tls = use_tls
        self.state = State.IDLE
        self.delivered = 0

        self._reader = None
        self._writer = None
        self._stopped = False
        self._used = False


    def __repr__(self):
        return 'Transport(%s:%d, %s)' % (self.host, self.port, self.state.value)


    @property
    def stopped(self):
        return self._stopped


    async def _connect(self):

        if self._used:
            raise TransportError('transport has already been used', self.host, self.port)

        self._used = True
        self.state = State.CONNECTING

        if self.use_tls:
            context = ssl.create_default_context()
        else:
            context = None

        opening = asyncio.open_connection(self.host, self.port, ssl=context, limit=config.max_line)

        try:
            self._reader, self._writer = await asyncio.wait_for(opening, timeout=config.connect_timeout)
        except asyncio.TimeoutError:
            self.state = State.CLOSED
            error = 'connection timed out after %.1f sec' % (config.connect_timeout)
            raise TransportTimeout(error, self.host, self.port) from None
        except OSError as e:
            self.state = State.CLOSED
            raise TransportConnectionError('connection failed: ' + str(e), self.host, self.port) from e

        logger.debug('montycat_connected', extra={'host': self.host, 'port': self.port})

        # A stop request may have arrived while the connection was pending.

        if self._stopped:
            self._writer.close()


    async def _send(self, data):

        self.state = State.SENDING

        try:
            self._writer.write(data + terminator)
            await self._writer.drain()
        except OSError as e:
            if self._stopped:
                return
            raise TransportConnectionError('send failed: ' + str(e), self.host, self.port) from e


    async def _close(self):

        writer = self._writer

        if self._stopped:
            self.state = State.STOPPED
        else:
            self.state = State.CLOSED

        if writer is None:
            return

        writer.close()

        try:
            await writer.wait_closed()
        except OSError as e:
            logger.debug('montycat_close_failed', extra={'host': self.host, 'port': self.port, 'error': repr(e)})

        logger.debug('montycat_closed', extra={'host': self.host, 'port': self.port})


    async def request(self, data):
        """ Send the encoded envelope *data* and return the decoded reply.
            The reply must arrive within :data:`montycat.config.read_timeout`
            seconds; a slower reply raises
            :class:`~montycat.transport.base.TransportTimeout`.
        """

        await self._connect()

        try:
            await self._send(data)
            self.state = State.AWAITING_REPLY

            try:
                line = await asyncio.wait_for(self._reader.readline(), timeout=config.read_timeout)
            except asyncio.TimeoutError:
                error = 'no reply received in %.1f sec' % (config.read_timeout)
                raise TransportTimeout(error, self.host, self.port) from None
            except ValueError as e:
                # StreamReader.readline() raises ValueError on an overlong line.
                raise TransportError('reply exceeds the line limit: ' + str(e), self.host, self.port) from e
            except OSError as e:
                raise TransportConnectionError('receive failed: ' + str(e), self.host, self.port) from e
        finally:
            await self._close()

        if not line:
            raise TransportConnectionError('connection closed before a reply was received', self.host, self.port)

        text = line.decode('utf-8', errors='replace').strip()
        return decode(text)


    async def stream(self, data, callback):
        """ Send the encoded envelope *data*, and hand every reply line,
            decoded, to *callback* in the order received. The callback may
            be a plain function or a coroutine function. This method returns
            when the server closes the connection or :func:`stop` is called;
            there is no idle timeout.
        """

        if self._stopped:
            self.state = State.STOPPED
            return

        await self._connect()

        try:
            if self._stopped:
                return

            await self._send(data)
            self.state = State.STREAMING

            while not self._stopped:
                try:
                    line = await self._reader.readline()
                except ValueError as e:
                    if self._stopped:
                        break
                    raise TransportError('message exceeds the line limit: ' + str(e), self.host, self.port) from e
                except OSError as e:
                    if self._stopped:
                        break
                    raise TransportConnectionError('receive failed: ' + str(e), self.host, self.port) from e

                if not line or self._stopped:
                    break

                await self._deliver(line, callback)
        finally:
            await self._close()

        logger.debug('montycat_stream_ended', extra={'host': self.host, 'port': self.port, 'lines': self.delivered})


    async def _deliver(self, line, callback):
        """ Decode one line and invoke the callback with the result. Neither
            a decoding failure nor an exception raised by the callback ends
            the stream.
        """

        text = line.decode('utf-8', errors='replace').strip()

        try:
            value = decode(text)
        except Exception as e:
            logger.warning('montycat_decode_failed', extra={'host': self.host, 'port': self.port, 'error': repr(e)})
            value = DecodeFailure(text, repr(e))

        self.delivered += 1

        try:
            result = callback(value)
            if inspect.isawaitable(result):
                await result
        except Exception:
            logger.exception('montycat_callback_failed', extra={'host': self.host, 'port': self.port})


    def stop(self):
        """ Stop a subscription: no further callback invocations will occur,
            and the socket is released, which unblocks the pending read.
            Calling :func:`stop` more than once has no further effect.
        """

        if self._stopped:
            return

        self._stopped = True

        if self.state is not State.CLOSED:
            self.state = State.STOPPED

        if self._writer is not None:
            self._writer.close()

        logger.debug('montycat_stopped', extra={'host': self.host, 'port': self.port})


# end of class Transport



class Subscription:
    """ A long-lived query whose replies are streamed to *callback*. The
        subscription does nothing until :func:`run` is awaited; it can be
        stopped from any task with :func:`stop`.
    """

    def __init__(self, query, callback):

        if not query.subscription:
            raise ValidationError("command %r does not stream replies" % (query.command))

        self.query = query
        self.callback = callback
        self.transport = Transport(query.context.host, query.context.port, query.context.use_tls)


    def __repr__(self):
        return 'Subscription(%r, %r)' % (self.query.command, self.transport)


    @property
    def state(self):
        return self.transport.state


    @property
    def stopped(self):
        return self.transport.stopped


    async def run(self):
        await self.transport.stream(self.query.data, self.callback)


    def stop(self):
        self.transport.stop()


# end of class Subscription



async def execute(query, callback=None):
    """ Run a :class:`~montycat.protocol.envelope.Query` on a fresh
        :class:`Transport`. One-shot queries return the decoded reply;
        subscriptions stream to *callback* and return None once finished.
    """

    context = query.context
    transport = Transport(context.host, context.port, context.use_tls)

    logger.debug('montycat_query', extra={'host': context.host, 'port': context.port, 'command': query.command})

    if query.subscription:
        if callback is None:
            raise ValidationError('a subscription requires a callback')
        await transport.stream(query.data, callback)
        return None

    return await transport.request(query.data)



async def send(host, port, data, callback=None, subscription=None, use_tls=False):
    """ Send a pre-encoded envelope, bytes or text, to *host* and *port*. When
        *subscription* is not given, a request containing the subscription
        marker text is treated as a subscription.
    """

    if isinstance(data, str):
        data = data.encode('utf-8')

    if subscription is None:
        subscription = fields.SUBSCRIPTION_MARKER in data

    transport = Transport(host, port, use_tls)

    if subscription:
        if callback is None:
            raise ValidationError('a subscription requires a callback')
        await transport.stream(data, callback)
        return None

    return await transport.request(data)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:

"""
Connection Management Module.

- models.py: Connection record
- store.py: Connection records and the Connection Set
- channels.py: Bidirectional channel membership
- dispatcher.py: Lifecycle event handling
- fanout.py: Message delivery and pruning of gone connections
"""

from ws_gateway.core.connection.models import Connection
from ws_gateway.core.connection.store import ConnectionStore
from ws_gateway.core.connection.channels import ChannelIndex
from ws_gateway.core.connection.dispatcher import Dispatcher, make_response
from ws_gateway.core.connection.fanout import Fanout, encode_payload

__all__ = [
    "Connection",
    "ConnectionStore",
    "ChannelIndex",
    "Dispatcher",
    "make_response",
    "Fanout",
    "encode_payload",
]

"""
Fan-out.

Delivers a payload to one, many or all connections through the transport.
Each recipient is independent: a failure for one never aborts the others,
and every call returns a per-connection success map.

Delivery is at-most-once. A connection the gateway reports as gone is
pruned from the store; any other failure is logged and reported as False.
Nothing is retried here beyond the transport client's own retry policy.
"""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, Any, Iterable

from shared.config.logging import get_logger
from shared.utils.exceptions import TransportError, TransportGone
from ws_gateway.components.core.constants import WSConstants
from ws_gateway.components.core.context import sanitize_log_data

if TYPE_CHECKING:
    from ws_gateway.components.transport.apigateway import Transport
    from ws_gateway.core.connection.store import ConnectionStore

logger = get_logger(__name__)


def encode_payload(payload: Any) -> bytes:
    """Serialize a payload as UTF-8 JSON."""
    return json.dumps(payload, default=str).encode("utf-8")


class Fanout:
    """
    Sends messages to connections.

    Sends run concurrently in batches of batch_size, which bounds the
    number of in-flight post_to_connection calls.
    """

    def __init__(
        self,
        store: "ConnectionStore",
        transport: "Transport",
        batch_size: int = WSConstants.FANOUT_BATCH_SIZE,
    ) -> None:
        self._store = store
        self._transport = transport
        self._batch_size = max(1, batch_size)

    @property
    def transport(self) -> "Transport":
        return self._transport

    async def send_one(self, connection_id: str, payload: Any) -> bool:
        """
        Send to a single connection.

        Returns:
            True if the gateway accepted the message, False otherwise.
        """
        return await self._send(connection_id, encode_payload(payload))

    async def send_many(self, connection_ids: Iterable[str], payload: Any) -> dict[str, bool]:
        """Send to several connections; duplicate ids are sent to once."""
        ids = list(dict.fromkeys(connection_ids))
        if not ids:
            return {}

        data = encode_payload(payload)
        results: dict[str, bool] = {}

        for i in range(0, len(ids), self._batch_size):
            batch = ids[i : i + self._batch_size]
            sent = await asyncio.gather(*(self._send(cid, data) for cid in batch))
            results.update(zip(batch, sent))

        failed = sum(1 for ok in results.values() if not ok)
        if failed:
            logger.debug(
                "Fan-out completed with failures",
                total=len(results),
                failed=failed,
            )
        return results

    async def broadcast(self, payload: Any) -> dict[str, bool]:
        """Send to every connection in the Connection Set."""
        return await self.send_many(await self._store.list_all(), payload)

    async def _send(self, connection_id: str, data: bytes) -> bool:
        try:
            await self._transport.post(connection_id, data)
            return True
        except TransportGone:
            logger.info(
                "Connection gone, removing",
                connection_id=sanitize_log_data(connection_id),
            )
            await self._store.remove(connection_id)
            return False
        except TransportError as e:
            logger.error(
                "Failed to send WebSocket message",
                connection_id=sanitize_log_data(connection_id),
                code=e.code,
                error=str(e),
            )
            return False

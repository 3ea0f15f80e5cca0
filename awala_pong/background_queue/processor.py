"""Answering of queued pings."""

import logging

from ..config.base import BaseSettings
from ..config.store import ConfigItem, ConfigStore
from ..core.error import StartupError
from ..keys.base import BasePrivateKeyStore
from ..keys.error import UnknownKeyError
from ..messaging.ping.codecs import BasePingCodec
from ..messaging.ping.dispatch import PoHTTPReplyDispatcher
from ..messaging.ping.handlers.ping_handler import PingHandler, PingHandlingResult
from ..messaging.ping.unwrapping import ParcelUnwrapper
from ..transport.parcel import BaseParcelFormat
from ..transport.pohttp import PoHTTPClient
from .error import InvalidJobError
from .models import PingJob

LOGGER = logging.getLogger(__name__)


class PingProcessor:
    """Turn queued pings into delivered pongs."""

    def __init__(
        self,
        parcel_format: BaseParcelFormat,
        key_store: BasePrivateKeyStore,
        pohttp_client: PoHTTPClient,
        codec: BasePingCodec,
        *,
        current_id: str,
        identity_private_key,
        default_gateway_address: str = None,
    ):
        """Initialize the processor."""
        self.parcel_format = parcel_format
        self.key_store = key_store
        self.pohttp_client = pohttp_client
        self.codec = codec
        self.current_id = current_id
        self.identity_private_key = identity_private_key
        self.default_gateway_address = default_gateway_address
        self.unwrapper = ParcelUnwrapper(parcel_format, key_store)

    @classmethod
    async def create(
        cls,
        settings: BaseSettings,
        config_store: ConfigStore,
        parcel_format: BaseParcelFormat,
        key_store: BasePrivateKeyStore,
        pohttp_client: PoHTTPClient,
        codec: BasePingCodec,
    ) -> "PingProcessor":
        """
        Build a processor for the current identity of this endpoint.

        Raises:
            StartupError: If the endpoint has not been provisioned

        """
        current_id = await config_store.get(ConfigItem.CURRENT_ID)
        if not current_id:
            raise StartupError("There is no current endpoint")
        try:
            identity_private_key = await key_store.retrieve_identity_key(current_id)
        except UnknownKeyError as err:
            raise StartupError("Private key for current identity key is missing") from err
        LOGGER.info("Answering pings as %s", current_id)
        return cls(
            parcel_format,
            key_store,
            pohttp_client,
            codec,
            current_id=current_id,
            identity_private_key=identity_private_key,
            default_gateway_address=settings.get_str("delivery.gateway_address"),
        )

    async def process(self, job: PingJob) -> PingHandlingResult:
        """
        Answer the ping in `job`.

        Raises:
            InvalidJobError: If the job says nowhere to deliver the pong

        """
        gateway_address = job.data.gateway_address or self.default_gateway_address
        if not gateway_address:
            raise InvalidJobError(f"Job {job.job_id} has no gateway address")

        dispatcher = PoHTTPReplyDispatcher(
            self.parcel_format,
            self.key_store,
            self.pohttp_client,
            identity_private_key=self.identity_private_key,
            current_id=self.current_id,
            gateway_address=gateway_address,
        )
        handler = PingHandler(self.unwrapper, dispatcher, self.codec)
        return await handler.handle(job.data.parcel_serialized, jobId=job.job_id)

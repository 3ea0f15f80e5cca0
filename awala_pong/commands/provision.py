"""Provision command for creating the endpoint keys before starting."""

import asyncio
import binascii
import logging
from base64 import b64decode
from typing import Sequence

from configargparse import ArgumentParser

from ..config import argparse as arg
from ..config.base import BaseSettings
from ..config.settings import Settings
from ..config.store import ConfigItem, ConfigStore
from ..config.util import common_config
from ..core.error import BaseError
from ..keys.base import BasePrivateKeyStore
from ..keys.error import UnknownKeyError
from ..keys.vault import VaultPrivateKeyStore
from ..pki.keys import generate_ecdh_key_pair, generate_rsa_key_pair
from . import PROG

LOGGER = logging.getLogger(__name__)


class ProvisionError(BaseError):
    """Base exception for provisioning errors."""


def init_argument_parser(parser: ArgumentParser):
    """Initialize an argument parser with the module's arguments."""
    return arg.load_argument_groups(
        parser, *arg.group.get_registered(arg.CAT_PROVISION)
    )


def decode_session_key_id(session_key_id_base64: str) -> bytes:
    """
    Decode the id of the initial session key.

    Raises:
        ProvisionError: If the id is not base64-encoded

    """
    try:
        session_key_id = b64decode(session_key_id_base64, validate=True)
    except (binascii.Error, ValueError) as err:
        raise ProvisionError("Session key id is not base64-encoded") from err
    if not session_key_id:
        raise ProvisionError("Session key id is empty")
    return session_key_id


async def provision_identity_key(
    config_store: ConfigStore, key_store: BasePrivateKeyStore
) -> str:
    """Create the identity key unless the current endpoint already has one.

    Returns:
        The id of the current endpoint

    """
    current_id = await config_store.get(ConfigItem.CURRENT_ID)
    if current_id:
        try:
            await key_store.retrieve_identity_key(current_id)
        except UnknownKeyError:
            LOGGER.warning("Identity key for %s is missing; replacing it", current_id)
        else:
            LOGGER.info("Identity key for %s already exists", current_id)
            return current_id

    current_id = await key_store.save_identity_key(generate_rsa_key_pair())
    await config_store.set(ConfigItem.CURRENT_ID, current_id)
    LOGGER.info("Created identity key for %s", current_id)
    return current_id


async def provision_initial_session_key(
    config_store: ConfigStore,
    key_store: BasePrivateKeyStore,
    current_id: str,
    session_key_id_base64: str,
):
    """Create the initial session key unless it already exists."""
    session_key_id = decode_session_key_id(session_key_id_base64)
    try:
        await key_store.retrieve_unbound_session_key(session_key_id, current_id)
    except UnknownKeyError:
        await key_store.save_session_key(
            generate_ecdh_key_pair(), session_key_id, current_id
        )
        LOGGER.info("Created initial session key %s", session_key_id_base64)
    else:
        LOGGER.info("Initial session key %s already exists", session_key_id_base64)
    await config_store.set(ConfigItem.INITIAL_SESSION_KEY_ID_BASE64, session_key_id_base64)


async def provision(settings: BaseSettings):
    """Perform provisioning."""
    config_store = ConfigStore.from_url(settings.require_str("config.url"))
    key_store = VaultPrivateKeyStore.from_settings(settings)
    try:
        async with key_store:
            current_id = await provision_identity_key(config_store, key_store)
            await provision_initial_session_key(
                config_store,
                key_store,
                current_id,
                settings.require_str("provision.session_key_id"),
            )
    except BaseError as e:
        raise ProvisionError("Error during provisioning") from e
    finally:
        await config_store.close()


def execute(argv: Sequence[str] = None):
    """Entrypoint."""
    parser = arg.create_argument_parser(prog=PROG)
    parser.prog += " provision"
    get_settings = init_argument_parser(parser)
    args = parser.parse_args(argv)
    settings = Settings(get_settings(args))
    common_config(settings)

    asyncio.run(provision(settings))


def main():
    """Execute the main line."""
    if __name__ == "__main__":
        execute()


main()

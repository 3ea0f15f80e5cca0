"""Command line option parsing."""

import abc

from typing import Type

from configargparse import ArgumentParser, Namespace, YAMLConfigFileParser

from .error import ArgsParseError
from .util import BoundedInt, ByteSize

CAT_START = "start"
CAT_POHTTP = "pohttp"
CAT_WORKER = "worker"
CAT_PROVISION = "provision"

DEFAULT_CE_TRANSPORT = "ce-http-binary"
DEFAULT_PING_CODEC = "json"
DEFAULT_REDIS_PORT = 6379
DEFAULT_QUEUE_NAME = "pong"


class ArgumentGroup(abc.ABC):
    """A class representing a group of related command line arguments."""

    GROUP_NAME = None

    @abc.abstractmethod
    def add_arguments(self, parser: ArgumentParser):
        """Add arguments to the provided argument parser."""

    @abc.abstractmethod
    def get_settings(self, args: Namespace) -> dict:
        """Extract settings from the parsed arguments."""


class group:
    """Decorator for registering argument groups."""

    _registered = []

    def __init__(self, *categories):
        """Initialize the decorator."""
        self.categories = tuple(categories)

    def __call__(self, group_cls: ArgumentGroup):
        """Register a class in the given categories."""
        setattr(group_cls, "CATEGORIES", self.categories)
        self._registered.append((self.categories, group_cls))
        return group_cls

    @classmethod
    def get_registered(cls, category: str = None):
        """Fetch the set of registered classes in a category."""
        return (
            grp
            for (cats, grp) in cls._registered
            if category is None or category in cats
        )


def create_argument_parser(*, prog: str = None):
    """Create an instance of an arg parser, force yaml format for external config."""
    return ArgumentParser(config_file_parser_class=YAMLConfigFileParser, prog=prog)


def load_argument_groups(parser: ArgumentParser, *groups: Type[ArgumentGroup]):
    """
    Load a set of argument groups into a parser.

    Returns:
        A callable to convert loaded arguments into a settings dictionary

    """
    group_inst = []
    for group in groups:
        g_parser = parser.add_argument_group(group.GROUP_NAME)
        inst = group()
        inst.add_arguments(g_parser)
        group_inst.append(inst)

    def get_settings(args: Namespace):
        settings = {}
        try:
            for group in group_inst:
                settings.update(group.get_settings(args))
        except ArgsParseError as e:
            parser.print_help()
            raise e
        return settings

    return get_settings


def _require(value, flag: str, env_var: str):
    if not value:
        raise ArgsParseError(f"Parameter {flag} ({env_var}) must be provided")
    return value


@group(CAT_START, CAT_POHTTP, CAT_WORKER, CAT_PROVISION)
class GeneralGroup(ArgumentGroup):
    """General settings."""

    GROUP_NAME = "General"

    def add_arguments(self, parser: ArgumentParser):
        """Add general command line arguments to the parser."""
        parser.add_argument(
            "--arg-file",
            is_config_file=True,
            help=(
                "Load argument values from the specified file in YAML format. "
                "Arguments given on the command line take precedence."
            ),
        )

    def get_settings(self, args: Namespace) -> dict:
        """Extract general settings."""
        return {}


@group(CAT_START, CAT_POHTTP, CAT_WORKER, CAT_PROVISION)
class LoggingGroup(ArgumentGroup):
    """Logging settings."""

    GROUP_NAME = "Logging"

    def add_arguments(self, parser: ArgumentParser):
        """Add logging-specific command line arguments to the parser."""
        parser.add_argument(
            "--log-config",
            dest="log_config",
            type=str,
            metavar="<path-to-config>",
            default=None,
            env_var="LOG_CONFIG",
            help="Specifies a custom logging configuration file",
        )
        parser.add_argument(
            "--log-file",
            dest="log_file",
            type=str,
            metavar="<log-file>",
            default=None,
            env_var="LOG_FILE",
            help=(
                "Overrides the output destination for the root logger (as defined "
                "by the log config file) to the named <log-file>."
            ),
        )
        parser.add_argument(
            "--log-level",
            dest="log_level",
            type=str,
            metavar="<log-level>",
            default=None,
            env_var="LOG_LEVEL",
            help=(
                "Specifies a custom logging level as one of: "
                "('debug', 'info', 'warning', 'error', 'critical')"
            ),
        )

    def get_settings(self, args: Namespace) -> dict:
        """Extract logging settings."""
        settings = {}
        if args.log_config:
            settings["log.config"] = args.log_config
        if args.log_file:
            settings["log.file"] = args.log_file
        if args.log_level:
            settings["log.level"] = args.log_level
        return settings


@group(CAT_START, CAT_POHTTP)
class ServerGroup(ArgumentGroup):
    """HTTP server settings."""

    GROUP_NAME = "Server"

    def add_arguments(self, parser: ArgumentParser):
        """Add server-specific command line arguments to the parser."""
        parser.add_argument(
            "--host",
            type=str,
            metavar="<host>",
            default="0.0.0.0",
            env_var="PONG_HOST",
            help="Specify the host on which to run the HTTP server. Default: 0.0.0.0",
        )
        parser.add_argument(
            "--port",
            type=BoundedInt(1, 65535),
            metavar="<port>",
            default=8080,
            env_var="PONG_PORT",
            help="Specify the port on which to run the HTTP server. Default: 8080",
        )
        parser.add_argument(
            "--request-id-header",
            type=str,
            metavar="<header>",
            default="X-Request-Id",
            env_var="REQUEST_ID_HEADER",
            help=(
                "Name of the request header carrying the request id that is "
                "attached to every log entry. Default: X-Request-Id"
            ),
        )
        parser.add_argument(
            "--max-message-size",
            type=ByteSize(min=1024),
            metavar="<message-size>",
            default=None,
            env_var="PONG_MAX_MESSAGE_SIZE",
            help="Set the maximum size in bytes of an inbound request body.",
        )

    def get_settings(self, args: Namespace) -> dict:
        """Extract server settings."""
        settings = {
            "server.host": args.host,
            "server.port": args.port,
            "server.request_id_header": args.request_id_header,
        }
        if args.max_message_size:
            settings["server.max_message_size"] = args.max_message_size
        return settings


@group(CAT_START)
class EventingGroup(ArgumentGroup):
    """CloudEvents settings."""

    GROUP_NAME = "Eventing"

    def add_arguments(self, parser: ArgumentParser):
        """Add eventing-specific command line arguments to the parser."""
        parser.add_argument(
            "--ce-transport",
            type=str,
            metavar="<transport>",
            default=DEFAULT_CE_TRANSPORT,
            env_var="CE_TRANSPORT",
            help=(
                "Transport used to emit outgoing CloudEvents. "
                f"Default: {DEFAULT_CE_TRANSPORT}"
            ),
        )
        parser.add_argument(
            "--ce-channel",
            type=str,
            metavar="<url>",
            env_var="CE_CHANNEL",
            help="URL of the channel onto which outgoing CloudEvents are emitted.",
        )
        parser.add_argument(
            "--ce-timeout",
            type=float,
            metavar="<seconds>",
            default=5.0,
            env_var="CE_TIMEOUT",
            help="Timeout in seconds for emitting a CloudEvent. Default: 5",
        )
        parser.add_argument(
            "--endpoint-id",
            type=str,
            metavar="<id>",
            env_var="PONG_ENDPOINT_ID",
            help=(
                "Id of this endpoint. When set, pings addressed to any other "
                "endpoint are refused."
            ),
        )

    def get_settings(self, args: Namespace) -> dict:
        """Extract eventing settings."""
        settings = {
            "eventing.transport": args.ce_transport,
            "eventing.channel": _require(args.ce_channel, "--ce-channel", "CE_CHANNEL"),
            "eventing.timeout": args.ce_timeout,
        }
        if args.endpoint_id:
            settings["endpoint.id"] = args.endpoint_id
        return settings


@group(CAT_START, CAT_WORKER)
class PingCodecGroup(ArgumentGroup):
    """Ping codec settings."""

    GROUP_NAME = "Ping codec"

    def add_arguments(self, parser: ArgumentParser):
        """Add codec-specific command line arguments to the parser."""
        parser.add_argument(
            "--ping-codec",
            type=str,
            choices=("json", "binary"),
            default=DEFAULT_PING_CODEC,
            env_var="PONG_PING_CODEC",
            help=(
                "Serialization of incoming pings: 'json' or the legacy 'binary' "
                f"framing. Default: {DEFAULT_PING_CODEC}"
            ),
        )

    def get_settings(self, args: Namespace) -> dict:
        """Extract codec settings."""
        return {"endpoint.ping_codec": args.ping_codec}


@group(CAT_POHTTP, CAT_WORKER)
class ParcelGroup(ArgumentGroup):
    """Parcel format settings."""

    GROUP_NAME = "Parcels"

    def add_arguments(self, parser: ArgumentParser):
        """Add parcel-specific command line arguments to the parser."""
        parser.add_argument(
            "--parcel-format",
            type=str,
            metavar="<module.Class>",
            env_var="PONG_PARCEL_FORMAT",
            help=(
                "Class path of the parcel format implementation providing "
                "parcel serialization and enveloped data."
            ),
        )

    def get_settings(self, args: Namespace) -> dict:
        """Extract parcel settings."""
        return {
            "endpoint.parcel_format": _require(
                args.parcel_format, "--parcel-format", "PONG_PARCEL_FORMAT"
            )
        }


@group(CAT_POHTTP)
class PoHTTPGroup(ArgumentGroup):
    """PoHTTP endpoint settings."""

    GROUP_NAME = "PoHTTP"

    def add_arguments(self, parser: ArgumentParser):
        """Add PoHTTP-specific command line arguments to the parser."""
        parser.add_argument(
            "--internet-address",
            type=str,
            metavar="<domain>",
            env_var="PONG_INTERNET_ADDRESS",
            help="Internet address that inbound parcels must be bound for.",
        )

    def get_settings(self, args: Namespace) -> dict:
        """Extract PoHTTP settings."""
        return {
            "endpoint.internet_address": _require(
                args.internet_address, "--internet-address", "PONG_INTERNET_ADDRESS"
            )
        }


@group(CAT_POHTTP, CAT_WORKER)
class QueueGroup(ArgumentGroup):
    """Background queue settings."""

    GROUP_NAME = "Queue"

    def add_arguments(self, parser: ArgumentParser):
        """Add queue-specific command line arguments to the parser."""
        parser.add_argument(
            "--redis-host",
            type=str,
            metavar="<host>",
            env_var="REDIS_HOST",
            help="Host name of the Redis server backing the ping queue.",
        )
        parser.add_argument(
            "--redis-port",
            type=BoundedInt(1, 65535),
            metavar="<port>",
            default=DEFAULT_REDIS_PORT,
            env_var="REDIS_PORT",
            help=f"Port of the Redis server. Default: {DEFAULT_REDIS_PORT}",
        )
        parser.add_argument(
            "--queue-name",
            type=str,
            metavar="<name>",
            default=DEFAULT_QUEUE_NAME,
            env_var="PONG_QUEUE_NAME",
            help=f"Prefix of the Redis keys of the queue. Default: {DEFAULT_QUEUE_NAME}",
        )
        parser.add_argument(
            "--queue-max-attempts",
            type=BoundedInt(1),
            metavar="<attempts>",
            default=5,
            env_var="PONG_QUEUE_MAX_ATTEMPTS",
            help="Number of times a ping is processed before giving up. Default: 5",
        )

    def get_settings(self, args: Namespace) -> dict:
        """Extract queue settings."""
        return {
            "queue.redis_host": _require(args.redis_host, "--redis-host", "REDIS_HOST"),
            "queue.redis_port": args.redis_port,
            "queue.name": args.queue_name,
            "queue.max_attempts": args.queue_max_attempts,
        }


@group(CAT_WORKER, CAT_PROVISION)
class ConfigStoreGroup(ArgumentGroup):
    """Runtime configuration store settings."""

    GROUP_NAME = "Config store"

    def add_arguments(self, parser: ArgumentParser):
        """Add config store command line arguments to the parser."""
        parser.add_argument(
            "--config-url",
            type=str,
            metavar="<redis-url>",
            env_var="CONFIG_URL",
            help="Redis URL of the store holding the runtime configuration.",
        )

    def get_settings(self, args: Namespace) -> dict:
        """Extract config store settings."""
        return {"config.url": _require(args.config_url, "--config-url", "CONFIG_URL")}


@group(CAT_POHTTP, CAT_WORKER, CAT_PROVISION)
class VaultGroup(ArgumentGroup):
    """Vault key store settings."""

    GROUP_NAME = "Vault"

    def add_arguments(self, parser: ArgumentParser):
        """Add Vault-specific command line arguments to the parser."""
        parser.add_argument(
            "--vault-url",
            type=str,
            metavar="<url>",
            env_var="VAULT_URL",
            help="URL of the Vault server holding the private keys.",
        )
        parser.add_argument(
            "--vault-token",
            type=str,
            metavar="<token>",
            env_var="VAULT_TOKEN",
            help="Token used to authenticate against Vault.",
        )
        parser.add_argument(
            "--vault-kv-prefix",
            type=str,
            metavar="<path>",
            env_var="VAULT_KV_PREFIX",
            help="Path of the KV (version 2) secrets engine holding the keys.",
        )
        parser.add_argument(
            "--vault-timeout",
            type=float,
            metavar="<seconds>",
            default=3.0,
            env_var="VAULT_TIMEOUT",
            help="Timeout in seconds for each Vault request. Default: 3",
        )

    def get_settings(self, args: Namespace) -> dict:
        """Extract Vault settings."""
        return {
            "vault.url": _require(args.vault_url, "--vault-url", "VAULT_URL"),
            "vault.token": _require(args.vault_token, "--vault-token", "VAULT_TOKEN"),
            "vault.kv_prefix": _require(
                args.vault_kv_prefix, "--vault-kv-prefix", "VAULT_KV_PREFIX"
            ),
            "vault.timeout": args.vault_timeout,
        }


@group(CAT_WORKER)
class DeliveryGroup(ArgumentGroup):
    """Pong delivery settings."""

    GROUP_NAME = "Delivery"

    def add_arguments(self, parser: ArgumentParser):
        """Add delivery-specific command line arguments to the parser."""
        parser.add_argument(
            "--gateway-address",
            type=str,
            metavar="<url>",
            env_var="PONG_GATEWAY_ADDRESS",
            help=(
                "PoHTTP address of the gateway that pongs are delivered to when "
                "the queued ping does not name one."
            ),
        )
        parser.add_argument(
            "--delivery-timeout",
            type=float,
            metavar="<seconds>",
            default=5.0,
            env_var="PONG_DELIVERY_TIMEOUT",
            help="Timeout in seconds for delivering a pong parcel. Default: 5",
        )

    def get_settings(self, args: Namespace) -> dict:
        """Extract delivery settings."""
        settings = {"delivery.timeout": args.delivery_timeout}
        if args.gateway_address:
            settings["delivery.gateway_address"] = args.gateway_address
        return settings


@group(CAT_PROVISION)
class ProvisionGroup(ArgumentGroup):
    """Provisioning settings."""

    GROUP_NAME = "Provision"

    def add_arguments(self, parser: ArgumentParser):
        """Add provisioning command line arguments to the parser."""
        parser.add_argument(
            "--session-key-id",
            type=str,
            metavar="<base64-id>",
            env_var="ENDPOINT_SESSION_KEY_ID",
            help="Base64-encoded id of the initial session key.",
        )

    def get_settings(self, args: Namespace) -> dict:
        """Extract provisioning settings."""
        return {
            "provision.session_key_id": _require(
                args.session_key_id, "--session-key-id", "ENDPOINT_SESSION_KEY_ID"
            )
        }

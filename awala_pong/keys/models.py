"""Stored private key records."""

from base64 import b64decode, b64encode

from marshmallow import fields, validate

from ..messaging.models.base import BaseModel, BaseModelSchema
from ..pki.keys import deserialize_private_key, serialize_private_key


class StoredPrivateKey(BaseModel):
    """A private key as kept in the key store."""

    class Meta:
        """StoredPrivateKey metadata."""

        schema_class = "StoredPrivateKeySchema"
        repr_exclude = ["private_key"]

    TYPE_IDENTITY = "identity"
    TYPE_SESSION = "session"

    def __init__(
        self,
        *,
        private_key: str = None,
        key_type: str = None,
        node_id: str = None,
        peer_id: str = None,
    ):
        """
        Initialize a stored key.

        Args:
            private_key: Base64-encoded PKCS#8 DER private key
            key_type: `identity` or `session`
            node_id: Id of the node that owns the key
            peer_id: Id of the peer a session key is bound to, if any

        """
        super().__init__()
        self.private_key = private_key
        self.key_type = key_type
        self.node_id = node_id
        self.peer_id = peer_id

    @classmethod
    def wrap(cls, private_key, key_type: str, node_id: str, peer_id: str = None):
        """Build a record from a private key object."""
        return cls(
            private_key=b64encode(serialize_private_key(private_key)).decode("ascii"),
            key_type=key_type,
            node_id=node_id,
            peer_id=peer_id,
        )

    def load_private_key(self):
        """Decode the private key object."""
        return deserialize_private_key(b64decode(self.private_key))


class StoredPrivateKeySchema(BaseModelSchema):
    """StoredPrivateKey schema."""

    class Meta:
        """StoredPrivateKeySchema metadata."""

        model_class = StoredPrivateKey

    private_key = fields.Str(required=True, data_key="privateKey")
    key_type = fields.Str(
        required=True,
        data_key="type",
        validate=validate.OneOf(
            [StoredPrivateKey.TYPE_IDENTITY, StoredPrivateKey.TYPE_SESSION]
        ),
    )
    node_id = fields.Str(required=True, data_key="nodeId")
    peer_id = fields.Str(required=False, allow_none=True, data_key="peerId")

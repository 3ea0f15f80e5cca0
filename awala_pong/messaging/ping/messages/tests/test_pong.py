from unittest import TestCase

from .....tests.pki import make_pda_path
from ...message_types import PING_CONTENT_TYPE, PONG_CONTENT_TYPE
from ..ping import Ping
from ..pong import Pong, derive_pong


class TestDerivePong(TestCase):
    def setUp(self):
        self.pda_path = make_pda_path()

    def test_text_id(self):
        pong = derive_pong(Ping("the ping id", self.pda_path))
        assert pong.content == b"the ping id"

    def test_binary_id(self):
        ping_id = bytes(range(36))
        assert derive_pong(Ping(ping_id, self.pda_path)).content == ping_id

    def test_content_type(self):
        pong = derive_pong(Ping("the ping id", self.pda_path))
        assert pong.content_type == PONG_CONTENT_TYPE
        assert pong.content_type != PING_CONTENT_TYPE

    def test_equality(self):
        assert Pong(b"a") == Pong(b"a")
        assert Pong(b"a") != Pong(b"b")
        assert repr(Pong(b"a")) == "<Pong(content=b'a')>"

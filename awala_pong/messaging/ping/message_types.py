"""Content types of the ping service."""

PING_CONTENT_TYPE = "application/vnd.awala.ping-v1.ping"
PONG_CONTENT_TYPE = "application/vnd.awala.ping-v1.pong"

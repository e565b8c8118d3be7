"""dockerfu.

Keeps a Hipache routing table in Redis in step with the Docker containers
running on this host:
 - sync: derive `frontend:<fqdn>` entries from container images and ports
 - show: list stored routes and whether a live container still backs them
"""

__version__ = "0.3.0"

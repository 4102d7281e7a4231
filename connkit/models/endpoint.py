"""
Connection endpoint model: one reachable node with its credentials.
"""

from dataclasses import dataclass
from typing import Tuple

from ..exceptions import ConfigurationError


@dataclass(frozen=True)
class ConnectionEndpoint:
    """
    A single database node.

    The port is kept as a string, the way it arrives from configuration
    files. An empty port leaves the choice to the driver.
    """

    host: str = ""
    port: str = ""
    username: str = ""
    password: str = ""

    @property
    def address(self) -> str:
        """Return host:port, or just the host when no port is set."""
        if self.port:
            return f"{self.host}:{self.port}"
        return self.host

    def validate(self, label: str = "endpoint") -> None:
        """
        Check the fields every grammar needs.

        Args:
            label: Name used in the error message, e.g. "replica 2"

        Raises:
            ConfigurationError: If the host is empty or the port is not numeric
        """
        if not self.host:
            raise ConfigurationError(f"{label}: host is required")
        if self.port and not self.port.isdigit():
            raise ConfigurationError(f"{label}: port must be numeric, got {self.port!r}")

    def __str__(self) -> str:
        """String representation hiding sensitive information."""
        password_display = "***" if self.password else "None"
        return (
            f"ConnectionEndpoint(host={self.host}, port={self.port}, "
            f"username={self.username}, password={password_display})"
        )


def split_address(address: str, default_port: int) -> Tuple[str, int]:
    """
    Split a host:port string into its parts.

    Bracketed IPv6 literals ("[::1]:6379") are supported. A missing port
    falls back to default_port.

    Raises:
        ConfigurationError: If the host is empty or the port is not numeric
    """
    address = address.strip()
    if address.startswith("["):
        host, _, rest = address[1:].partition("]")
        port_text = rest[1:] if rest.startswith(":") else ""
    elif address.count(":") == 1:
        host, _, port_text = address.partition(":")
    else:
        host, port_text = address, ""

    if not host:
        raise ConfigurationError(f"address {address!r} has no host")
    if not port_text:
        return host, default_port
    if not port_text.isdigit():
        raise ConfigurationError(f"address {address!r} has a non-numeric port")
    return host, int(port_text)

from .client_ip import extract_real_ip
from .transport import Link, State, TransportServer

__all__ = ["extract_real_ip", "Link", "State", "TransportServer"]

"""Pre-shared keys for the three simulated channels (TA<->Node, Node<->MW, TA<->MW)."""

from dataclasses import dataclass
from typing import Tuple

from config import PASSPHRASE_TA_NODE, PASSPHRASE_NODE_MW, PASSPHRASE_TA_MW
from core.crypto_utils import derive_key

DEFAULT_PASSPHRASES = (PASSPHRASE_TA_NODE, PASSPHRASE_NODE_MW, PASSPHRASE_TA_MW)


@dataclass(frozen=True)
class KeyMaterial:
    """Read-only key set shared by every worker of a run."""
    ta_node: bytes
    node_mw: bytes
    ta_mw: bytes


def build_key_material(passphrases: Tuple[str, str, str] = DEFAULT_PASSPHRASES) -> KeyMaterial:
    """Derive the three channel keys. Call once, before any worker starts."""
    ta_node, node_mw, ta_mw = passphrases
    return KeyMaterial(
        ta_node=derive_key(ta_node),
        node_mw=derive_key(node_mw),
        ta_mw=derive_key(ta_mw),
    )

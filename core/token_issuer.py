from dataclasses import dataclass

from config import TOKEN_BYTES
from core.crypto_utils import generate_token_hex, encrypt_message
from core.keystore import KeyMaterial

TOKEN_MARKER = "TOKEN:"


@dataclass(frozen=True)
class IssuedTokens:
    token_plain: str
    enc_for_node: str
    enc_for_mw: str


def node_payload(node_id: str, token: str) -> str:
    return f"NODE_ID:{node_id};{TOKEN_MARKER}{token}"


def mw_payload(node_id: str, token: str) -> str:
    return f"MW_EXPECTS_NODE:{node_id};{TOKEN_MARKER}{token}"


def issue_tokens(node_id: str, keys: KeyMaterial) -> IssuedTokens:
    """TA issues one fresh token and hands it out over two independent channels."""
    token = generate_token_hex(TOKEN_BYTES)
    return IssuedTokens(
        token_plain=token,
        enc_for_node=encrypt_message(keys.ta_node, node_payload(node_id, token)),
        enc_for_mw=encrypt_message(keys.ta_mw, mw_payload(node_id, token)),
    )


def extract_token(text: str) -> str:
    """Everything after the first TOKEN: marker, or "" when there is none."""
    pos = text.find(TOKEN_MARKER)
    return text[pos + len(TOKEN_MARKER):] if pos != -1 else ""

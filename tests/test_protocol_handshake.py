import random

import pytest

from core import protocol_handshake
from core.crypto_utils import encrypt_message
from core.errors import FormatError
from core.protocol_handshake import (
    build_request, parse_request_body, parse_request_token, simulate_node, body_char_for,
)
from core.token_issuer import IssuedTokens


class RecordingSleep:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


@pytest.mark.parametrize("index,payload", [(0, 0), (1, 1), (25, 500), (26, 17), (123, 1024)])
def test_request_body_is_uniform_and_exact_length(index, payload):
    request = build_request(index, "tok", payload)
    body = parse_request_body(request)
    assert len(body) == payload
    assert set(body) <= {body_char_for(index)}


def test_body_char_depends_only_on_index():
    assert body_char_for(0) == "A"
    assert body_char_for(25) == "Z"
    assert body_char_for(26) == "A"
    assert body_char_for(3) != body_char_for(4)


def test_request_layout_and_token_parse():
    request = build_request(4, "deadbeef", 3)
    assert request == "HEADER[NODE_ID:node-4;TOKEN:deadbeef]|BODY[EEE]"
    assert parse_request_token(request) == "deadbeef"


@pytest.mark.parametrize("request_text", ["BODY[xxx]", "HEADER[NODE_ID:node-1;TOKEN:abc"])
def test_parse_request_token_without_header(request_text):
    assert parse_request_token(request_text) is None


def test_successful_handshake(fast_config, keys):
    m = simulate_node(5, fast_config(), keys, random.Random(1), sleep=RecordingSleep())
    assert m.node_index == 5
    assert m.success is True
    assert m.dropped is False
    assert m.error is None
    assert m.total_us >= 0


def test_dropped_node_skips_protocol(fast_config, keys, monkeypatch):
    def no_issue(*args, **kwargs):
        raise AssertionError("tokens must not be issued for a dropped node")

    monkeypatch.setattr(protocol_handshake, "issue_tokens", no_issue)
    m = simulate_node(2, fast_config(fail_percent=100), keys, random.Random(1), sleep=RecordingSleep())
    assert m.dropped is True
    assert m.success is False


def test_tampered_token_fails_validation(fast_config, keys):
    rng = random.Random(7)
    results = [simulate_node(i, fast_config(tamper_percent=100), keys, rng, sleep=RecordingSleep()) for i in range(10)]
    assert not any(m.success for m in results)
    assert not any(m.dropped for m in results)


def test_delays_are_drawn_from_configured_ranges(fast_config, keys):
    sleep = RecordingSleep()
    cfg = fast_config(node_jitter_ms=5, net_ta_node=(10, 10), net_node_mw=(20, 30), db_delay=(40, 40))
    simulate_node(0, cfg, keys, random.Random(3), sleep=sleep)
    # jitter may draw 0, in which case no sleep is issued for it
    ms = [round(s * 1000) for s in sleep.calls]
    assert ms[-3] == 10
    assert 20 <= ms[-2] <= 30
    assert ms[-1] == 40
    assert len(ms) in (3, 4)


def test_dropped_node_sleeps_only_before_drop_check(fast_config, keys):
    sleep = RecordingSleep()
    cfg = fast_config(fail_percent=100, net_ta_node=(1, 1), db_delay=(50, 50))
    simulate_node(0, cfg, keys, random.Random(3), sleep=sleep)
    assert [round(s * 1000) for s in sleep.calls] == [1]


def test_malformed_envelope_propagates(fast_config, keys, monkeypatch):
    def bad_issue(node_id, k):
        return IssuedTokens(token_plain="x", enc_for_node="no-separator",
                            enc_for_mw=encrypt_message(k.ta_mw, "TOKEN:x"))

    monkeypatch.setattr(protocol_handshake, "issue_tokens", bad_issue)
    with pytest.raises(FormatError):
        simulate_node(0, fast_config(), keys, random.Random(1), sleep=RecordingSleep())


def test_middleware_parses_request_body(fast_config, keys, monkeypatch):
    bodies = []
    original = protocol_handshake.parse_request_body

    def spy(request):
        body = original(request)
        bodies.append(body)
        return body

    monkeypatch.setattr(protocol_handshake, "parse_request_body", spy)
    simulate_node(27, fast_config(payload_bytes=9), keys, random.Random(2), sleep=RecordingSleep())
    assert bodies == ["BBBBBBBBB"]

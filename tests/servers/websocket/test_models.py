"""Tests for the mock server configuration value."""

import dataclasses

import pytest

from surimi.servers.websocket.models import (
    DEFAULT_MAX_MESSAGE_SIZE,
    MockServerConfig,
    configure,
    encode_response,
)

pytestmark = pytest.mark.unit


class TestConfigure:
    """Tests for configure()."""

    def test_defaults(self) -> None:
        config = configure()

        assert config.host == "localhost"
        assert config.port == 0
        assert config.responses == ()
        assert config.frames == ()
        assert config.exhaustion == "sentinel"
        assert config.idle_timeout is None
        assert config.ping_interval is None
        assert config.ping_timeout is None
        assert config.max_message_size == DEFAULT_MAX_MESSAGE_SIZE

    def test_explicit_values(self) -> None:
        config = configure(host="127.0.0.1", port=8080, responses=[{"a": 1}])

        assert config.host == "127.0.0.1"
        assert config.port == 8080
        assert config.responses == ({"a": 1},)

    def test_accepts_any_iterable(self) -> None:
        config = configure(responses=(x for x in [1, 2, 3]))
        assert config.frames == ("1", "2", "3")

    def test_extra_options(self) -> None:
        config = configure(exhaustion="silent", idle_timeout=2.5, max_message_size=128)

        assert config.exhaustion == "silent"
        assert config.idle_timeout == 2.5
        assert config.max_message_size == 128

    def test_unknown_option_rejected(self) -> None:
        with pytest.raises(TypeError):
            configure(colour="blue")

    def test_frames_cannot_be_passed(self) -> None:
        with pytest.raises(TypeError):
            configure(frames=("x",))


class TestResponseEncoding:
    """Responses are encoded once, in order, as compact JSON."""

    def test_order_preserved(self) -> None:
        config = configure(responses=[{"hello": "world"}, {"hello": "france"}])
        assert config.frames == ('{"hello":"world"}', '{"hello":"france"}')

    def test_later_mutation_does_not_leak(self) -> None:
        payload = {"hello": "world"}
        config = configure(responses=[payload])

        payload["hello"] = "changed"

        assert config.frames == ('{"hello":"world"}',)

    def test_string_payload_is_json_text(self) -> None:
        assert encode_response("text") == '"text"'

    def test_non_ascii_kept(self) -> None:
        assert encode_response({"ville": "Montpellier é"}) == '{"ville":"Montpellier é"}'

    def test_nested_documents(self) -> None:
        payload = {"a": [1, {"b": None}], "c": True}
        assert encode_response(payload) == '{"a":[1,{"b":null}],"c":true}'

    def test_unserializable_payload_rejected(self) -> None:
        with pytest.raises(ValueError, match="not JSON-serializable"):
            configure(responses=[{"when": object()}])

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_non_finite_number_rejected(self, value: float) -> None:
        with pytest.raises(ValueError, match="not JSON-serializable"):
            configure(responses=[{"v": value}])

    def test_circular_payload_rejected(self) -> None:
        circular: list = []
        circular.append(circular)
        with pytest.raises(ValueError):
            encode_response(circular)


class TestValidation:
    """Tests for MockServerConfig validation."""

    @pytest.mark.parametrize("port", [0, 1, 8080, 65535])
    def test_valid_ports(self, port: int) -> None:
        assert configure(port=port).port == port

    @pytest.mark.parametrize("port", [-1, 65536, 100000])
    def test_port_out_of_range(self, port: int) -> None:
        with pytest.raises(ValueError, match="between 0 and 65535"):
            configure(port=port)

    @pytest.mark.parametrize("port", ["8080", 80.0, True])
    def test_port_must_be_int(self, port: object) -> None:
        with pytest.raises(ValueError, match="must be an integer"):
            configure(port=port)  # type: ignore[arg-type]

    def test_unknown_exhaustion_policy(self) -> None:
        with pytest.raises(ValueError, match="Exhaustion policy"):
            configure(exhaustion="close")

    def test_idle_timeout_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="idle_timeout"):
            configure(idle_timeout=0)

    @pytest.mark.parametrize("option", ["ping_interval", "ping_timeout"])
    @pytest.mark.parametrize("value", [0, -1])
    def test_ping_settings_must_be_positive(self, option: str, value: float) -> None:
        with pytest.raises(ValueError, match=f"{option} must be positive"):
            configure(**{option: value})

    def test_ping_settings_accept_none(self) -> None:
        config = configure(ping_interval=None, ping_timeout=None)
        assert config.ping_interval is None

    def test_max_message_size_must_be_positive(self) -> None:
        with pytest.raises(ValueError, match="max_message_size"):
            configure(max_message_size=0)


class TestImmutability:
    """The config is a value: changes produce copies."""

    def test_frozen(self) -> None:
        config = configure()
        with pytest.raises(dataclasses.FrozenInstanceError):
            config.port = 1  # type: ignore[misc]

    def test_with_host_returns_copy(self) -> None:
        original = configure()
        changed = original.with_host("0.0.0.0")

        assert changed.host == "0.0.0.0"
        assert original.host == "localhost"

    def test_with_port_validates(self) -> None:
        with pytest.raises(ValueError):
            configure().with_port(70000)

    def test_with_responses_replaces_wholesale(self) -> None:
        config = configure(responses=[1, 2, 3]).with_responses([{"only": "one"}])

        assert config.responses == ({"only": "one"},)
        assert config.frames == ('{"only":"one"}',)

    def test_last_write_wins(self) -> None:
        config = (
            MockServerConfig()
            .with_host("a")
            .with_port(1000)
            .with_host("b")
            .with_port(2000)
            .with_responses([1])
            .with_responses([2, 3])
        )

        assert config.host == "b"
        assert config.port == 2000
        assert config.frames == ("2", "3")

    def test_with_keeps_other_options(self) -> None:
        config = configure(exhaustion="silent", idle_timeout=1.0).with_port(9000)

        assert config.exhaustion == "silent"
        assert config.idle_timeout == 1.0

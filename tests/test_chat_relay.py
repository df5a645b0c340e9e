import asyncio
from types import SimpleNamespace

import pytest
from groq import GroqError

from src.core.exceptions import StreamAbortedError, UpstreamError, ValidationError
from src.services.chat_relay import RelayState, format_frame


MESSAGES = {"messages": [{"role": "user", "content": "Hello?"}]}


async def collect(session, frames):
    async for frame in session.frames():
        frames.append(frame)


def run_session(relay, body=MESSAGES):
    session = relay.session()
    frames = []

    async def go():
        await session.open(session.validate(body))
        await collect(session, frames)

    asyncio.run(go())
    return session, frames


def test_format_frame_single_line():
    assert format_frame("Hel") == "data: Hel\n\n"


def test_format_frame_splits_lines():
    assert format_frame("a\nb\r\nc") == "data: a\ndata: b\ndata: c\n\n"


def test_fragments_relayed_in_order_then_done(relay, fake_groq):
    fake_groq.respond_with("Hel", "lo")

    session, frames = run_session(relay)

    assert frames == ["data: Hel\n\n", "data: lo\n\n", "data: [DONE]\n\n"]
    assert session.state is RelayState.COMPLETED
    assert fake_groq.completions.streams[0].closed


def test_empty_fragments_are_skipped(relay, fake_groq):
    fake_groq.respond_with("", None, "Hi")
    fake_groq.completions.chunks.insert(0, SimpleNamespace(choices=[]))

    _, frames = run_session(relay)

    assert frames == ["data: Hi\n\n", "data: [DONE]\n\n"]


def test_upstream_request_carries_model_and_messages(relay, fake_groq, llm_client):
    fake_groq.respond_with("ok")

    run_session(relay)

    [call] = fake_groq.completions.calls
    assert call["model"] == llm_client.model
    assert call["stream"] is True
    assert call["messages"] == [{"role": "user", "content": "Hello?"}]
    assert "temperature" not in call
    assert "max_tokens" not in call


def test_turns_forwarded_as_sent(relay, fake_groq):
    body = {
        "messages": [
            {"role": "system", "content": "Be brief.", "name": "onboarding"},
            {"role": "assistant", "content": None},
            {"role": "user", "content": "Hello?"},
        ]
    }
    fake_groq.respond_with("ok")

    session, _ = run_session(relay, body)

    assert session.state is RelayState.COMPLETED
    assert fake_groq.completions.calls[0]["messages"] == body["messages"]


@pytest.mark.parametrize(
    "body",
    [
        None,
        {},
        {"messages": "hello"},
        {"messages": []},
        {"messages": [{"role": "user"}]},
        {"messages": [{"content": "no role"}]},
        ["not", "a", "mapping"],
    ],
)
def test_invalid_bodies_fail_validation(relay, fake_groq, body):
    session = relay.session()

    with pytest.raises(ValidationError) as exc_info:
        session.validate(body)

    assert exc_info.value.message == "Invalid messages format"
    assert session.state is RelayState.FAILED
    assert fake_groq.completions.calls == []


def test_open_failure_becomes_upstream_error(relay, fake_groq):
    fake_groq.completions.open_error = GroqError("connection refused")
    session = relay.session()

    with pytest.raises(UpstreamError):
        asyncio.run(session.open(session.validate(MESSAGES)))

    assert session.state is RelayState.FAILED


def test_mid_stream_failure_stops_frames(relay, fake_groq):
    fake_groq.respond_with("Hel", error=RuntimeError("connection reset"))
    session = relay.session()
    frames = []

    async def go():
        await session.open(session.validate(MESSAGES))
        await collect(session, frames)

    with pytest.raises(StreamAbortedError) as exc_info:
        asyncio.run(go())

    assert not isinstance(exc_info.value, UpstreamError)
    assert exc_info.value.frames_sent == 1
    assert frames == ["data: Hel\n\n"]
    assert session.state is RelayState.FAILED
    assert fake_groq.completions.streams[0].closed


def test_abandoned_stream_closes_upstream(relay, fake_groq):
    fake_groq.respond_with("a", "b", "c")
    session = relay.session()

    async def go():
        await session.open(session.validate(MESSAGES))
        frames = session.frames()
        first = await frames.__anext__()
        await frames.aclose()
        return first

    first = asyncio.run(go())

    stream = fake_groq.completions.streams[0]
    assert first == "data: a\n\n"
    assert stream.closed
    assert stream.consumed == 1
    assert session.state is RelayState.STREAMING


def test_frames_requires_open_session(relay):
    session = relay.session()

    async def go():
        async for _ in session.frames():
            pass

    with pytest.raises(RuntimeError):
        asyncio.run(go())

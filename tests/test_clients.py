import json

import httpx
import pytest

from shared.clients.blob.BlobClientManager import BlobClientManager
from shared.clients.blob.local.BlobClientLocal import BlobClientLocal
from shared.clients.blob.webdav.BlobClientWebdav import BlobClientWebdav
from shared.clients.embed.EmbedClientManager import EmbedClientManager
from shared.clients.embed.ollama.EmbedClientOllama import EmbedClientOllama
from shared.clients.embed.openai.EmbedClientOpenai import EmbedClientOpenai
from shared.clients.llm.LLMClientManager import LLMClientManager
from shared.clients.llm.ollama.LLMClientOllama import LLMClientOllama
from shared.clients.llm.openai.LLMClientOpenai import LLMClientOpenai


@pytest.fixture
def client_env(monkeypatch, helper_config):
    monkeypatch.setenv("EMBED_MODEL", "nomic-embed-text")
    monkeypatch.setenv("EMBED_OLLAMA_BASE_URL", "http://ollama.test")
    monkeypatch.setenv("EMBED_OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("LLM_CHAT_MODEL", "llama3")
    monkeypatch.setenv("LLM_OLLAMA_BASE_URL", "http://ollama.test")
    monkeypatch.setenv("LLM_OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("BLOB_WEBDAV_BASE_URL", "http://dav.test/files")
    for key in ("EMBED_DIMENSIONS", "EMBED_OLLAMA_KEEP_ALIVE", "EMBED_OLLAMA_TRUNCATE"):
        monkeypatch.delenv(key, raising=False)
    return helper_config


##########################################
################# EMBED ##################
##########################################

async def test_ollama_embed(client_env):
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"embeddings": [[0.1, 0.2], [0.3, 0.4]]})

    client = EmbedClientOllama(helper_config=client_env)
    await client.boot(transport=httpx.MockTransport(handler))
    vectors = await client.do_embed(["a", "b"])
    await client.close()

    assert vectors == [[0.1, 0.2], [0.3, 0.4]]
    assert str(seen[0].url) == "http://ollama.test/api/embed"
    assert json.loads(seen[0].content) == {"model": "nomic-embed-text", "input": ["a", "b"]}


def test_ollama_embed_optional_settings(client_env, monkeypatch):
    monkeypatch.setenv("EMBED_OLLAMA_KEEP_ALIVE", "10m")
    monkeypatch.setenv("EMBED_OLLAMA_TRUNCATE", "false")
    client = EmbedClientOllama(helper_config=client_env)

    assert client.get_embed_payload(["a"]) == {
        "model": "nomic-embed-text", "input": ["a"], "keep_alive": "10m", "truncate": False,
    }


async def test_ollama_embed_error_body_raises(client_env):
    client = EmbedClientOllama(helper_config=client_env)
    await client.boot(transport=httpx.MockTransport(
        lambda request: httpx.Response(200, json={"error": "input length exceeds the context length"})
    ))
    with pytest.raises(ValueError):
        await client.do_embed("text")
    await client.close()


async def test_openai_embed_sorts_by_index(client_env):
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer sk-test"
        return httpx.Response(200, json={"data": [
            {"index": 1, "embedding": [0.0, 1.0]},
            {"index": 0, "embedding": [1.0, 0.0]},
        ]})

    client = EmbedClientOpenai(helper_config=client_env)
    await client.boot(transport=httpx.MockTransport(handler))
    vectors = await client.do_embed(["first", "second"])
    await client.close()

    assert vectors == [[1.0, 0.0], [0.0, 1.0]]


async def test_embed_error_status_raises(client_env):
    client = EmbedClientOllama(helper_config=client_env)
    await client.boot(transport=httpx.MockTransport(lambda request: httpx.Response(500, text="boom")))
    with pytest.raises(Exception):
        await client.do_embed("text")
    await client.close()


async def test_embed_dimension_check(client_env, monkeypatch):
    monkeypatch.setenv("EMBED_DIMENSIONS", "3")
    client = EmbedClientOllama(helper_config=client_env)
    await client.boot(transport=httpx.MockTransport(
        lambda request: httpx.Response(200, json={"embeddings": [[0.1, 0.2]]})
    ))
    with pytest.raises(ValueError):
        await client.do_embed("text")
    await client.close()


def test_embed_manager_picks_engine(client_env, monkeypatch):
    monkeypatch.setenv("EMBED_ENGINE", "openai")
    assert isinstance(EmbedClientManager(client_env).get_client(), EmbedClientOpenai)
    monkeypatch.setenv("EMBED_ENGINE", "unknown")
    with pytest.raises(ValueError):
        EmbedClientManager(client_env)


async def test_request_before_boot_raises(client_env):
    client = EmbedClientOllama(helper_config=client_env)
    assert not client.is_booted()
    with pytest.raises(Exception):
        await client.do_embed("text")


##########################################
################## LLM ###################
##########################################

async def test_ollama_chat(client_env):
    def handler(request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        assert body["stream"] is False
        assert body["messages"][0]["role"] == "system"
        return httpx.Response(200, json={"message": {"role": "assistant", "content": "Refunds within 30 days."}})

    client = LLMClientOllama(helper_config=client_env)
    await client.boot(transport=httpx.MockTransport(handler))
    reply = await client.do_complete("Answer from context only.", "Question: refunds?")
    await client.close()

    assert reply == "Refunds within 30 days."


async def test_openai_chat_error_raises(client_env):
    client = LLMClientOpenai(helper_config=client_env)
    await client.boot(transport=httpx.MockTransport(lambda request: httpx.Response(429, json={"error": "slow down"})))
    with pytest.raises(Exception):
        await client.do_chat([{"role": "user", "content": "hi"}])
    await client.close()


async def test_openai_chat_without_choices(client_env):
    client = LLMClientOpenai(helper_config=client_env)
    await client.boot(transport=httpx.MockTransport(lambda request: httpx.Response(200, json={"choices": []})))
    with pytest.raises(ValueError):
        await client.do_chat([{"role": "user", "content": "hi"}])
    await client.close()


def test_llm_manager_requires_engine(client_env, monkeypatch):
    monkeypatch.delenv("LLM_ENGINE", raising=False)
    with pytest.raises(ValueError):
        LLMClientManager(client_env)


##########################################
################# BLOB ###################
##########################################

async def test_local_blob_roundtrip(client_env, base_env):
    client = BlobClientLocal(helper_config=client_env)
    await client.boot()
    assert (await client.do_healthcheck()).status_code == 200

    stored = await client.do_put(b"Refunds within 30 days.", "text/plain", "uploads/u1/refund.txt")
    path = base_env / "uploads" / stored.key
    assert stored.key.startswith("uploads/u1/") and stored.key.endswith(".txt")
    assert path.read_bytes() == b"Refunds within 30 days."

    await client.do_delete(stored.key)
    assert not path.exists()
    # deleting again is fine
    await client.do_delete(stored.key)


async def test_local_blob_rejects_escaping_keys(client_env):
    client = BlobClientLocal(helper_config=client_env)
    await client.boot()
    with pytest.raises(ValueError):
        await client.do_delete("../../etc/passwd")


def test_blob_manager_defaults_to_local(client_env):
    assert isinstance(BlobClientManager(client_env).get_client(), BlobClientLocal)


async def test_webdav_put_creates_collections(client_env):
    seen: list[tuple[str, str]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path))
        if request.method == "MKCOL":
            return httpx.Response(405 if request.url.path.endswith("/uploads/") else 201)
        return httpx.Response(201)

    client = BlobClientWebdav(helper_config=client_env)
    await client.boot(transport=httpx.MockTransport(handler))
    stored = await client.do_put(b"data", "text/plain", "uploads/u1/refund.txt")
    await client.close()

    assert seen[0] == ("MKCOL", "/files/uploads/")
    assert seen[1] == ("MKCOL", "/files/uploads/u1/")
    assert seen[2] == ("PUT", f"/files/{stored.key}")
    assert stored.url == f"http://dav.test/files/{stored.key}"


async def test_webdav_delete_missing_is_ok(client_env):
    client = BlobClientWebdav(helper_config=client_env)
    await client.boot(transport=httpx.MockTransport(lambda request: httpx.Response(404)))
    await client.do_delete("uploads/u1/gone.txt")
    await client.close()


async def test_webdav_delete_error_raises(client_env):
    client = BlobClientWebdav(helper_config=client_env)
    await client.boot(transport=httpx.MockTransport(lambda request: httpx.Response(403)))
    with pytest.raises(Exception):
        await client.do_delete("uploads/u1/locked.txt")
    await client.close()

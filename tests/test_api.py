import httpx
import pytest

API_KEY = "test-key"


@pytest.fixture
async def api_client(monkeypatch, base_env, helper_config, bot_service, indexing_service, rag_service):
    monkeypatch.setenv("ROOT_DIR", str(base_env))
    from server.api_server import app

    # services are wired by hand, the lifespan is not run
    app.state.helper_config = helper_config
    app.state.bot_service = bot_service
    app.state.indexing_service = indexing_service
    app.state.rag_service = rag_service

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://docbot.test", headers={"X-Api-Key": API_KEY}) as client:
        yield client


async def create_bot(client: httpx.AsyncClient, user_id: str = "u1", name: str = "Support") -> str:
    response = await client.post(f"/users/{user_id}/bots", json={"name": name})
    assert response.status_code == 201
    return response.json()["id"]


async def upload(client: httpx.AsyncClient, bot_id: str, data: bytes, name: str, content_type: str, user_id: str = "u1") -> httpx.Response:
    return await client.post(
        f"/users/{user_id}/bots/{bot_id}/documents/upload",
        files={"file": (name, data, content_type)},
    )


##########################################
################## AUTH ##################
##########################################

async def test_health_needs_no_key(api_client):
    response = await api_client.get("/health", headers={"X-Api-Key": ""})
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_missing_or_wrong_key_is_rejected(api_client):
    response = await api_client.get("/users/u1/bots", headers={"X-Api-Key": "wrong"})
    assert response.status_code == 401

    from server.api_server import app

    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://docbot.test") as anonymous:
        response = await anonymous.get("/users/u1/bots")
    assert response.status_code == 401


##########################################
################## BOTS ##################
##########################################

async def test_bot_quota_over_http(api_client):
    await create_bot(api_client, name="Sales")
    await create_bot(api_client, name="Support")

    response = await api_client.post("/users/u1/bots", json={"name": "Billing"})

    assert response.status_code == 409
    assert response.json()["error"] == "QuotaExceeded"
    assert "(2)" in response.json()["detail"]

    listing = await api_client.get("/users/u1/bots")
    assert listing.json()["total"] == 2


async def test_bot_session_routes(api_client):
    bot_id = await create_bot(api_client)

    response = await api_client.post(f"/users/u1/bots/{bot_id}/initialize")
    assert response.status_code == 200
    assert response.json()["qr_code"]

    status = await api_client.get(f"/users/u1/bots/{bot_id}/status")
    assert status.json()["state"] == "pairing"

    response = await api_client.post(f"/users/u1/bots/{bot_id}/disconnect")
    assert response.status_code == 200
    status = await api_client.get(f"/users/u1/bots/{bot_id}/status")
    assert status.json() == {"bot_id": bot_id, "state": "disconnected", "is_active": False, "last_active": None}


async def test_other_users_bot_is_404(api_client):
    bot_id = await create_bot(api_client, user_id="u1")
    assert (await api_client.delete(f"/users/u2/bots/{bot_id}")).status_code == 404
    assert (await api_client.get(f"/users/u2/bots/{bot_id}/documents")).status_code == 404
    response = await api_client.post(f"/users/u2/bots/{bot_id}/chat", json={"message": "hi"})
    assert response.status_code == 404


##########################################
############### DOCUMENTS ################
##########################################

async def test_upload_then_chat(api_client):
    bot_id = await create_bot(api_client)

    response = await upload(api_client, bot_id, b"Refunds within 30 days.", "refund.txt", "text/plain")
    assert response.status_code == 201
    document_id = response.json()["document_id"]

    documents = await api_client.get(f"/users/u1/bots/{bot_id}/documents")
    assert [d["id"] for d in documents.json()["documents"]] == [document_id]
    assert "content" not in documents.json()["documents"][0]

    response = await api_client.post(f"/users/u1/bots/{bot_id}/chat", json={"message": "What is the refund policy?"})
    assert response.status_code == 200
    assert "30 days" in response.json()["reply"]


async def test_chat_without_documents(api_client):
    bot_id = await create_bot(api_client)
    response = await api_client.post(f"/users/u1/bots/{bot_id}/chat", json={"message": "What is the refund policy?"})
    assert response.json()["reply"] == "Maaf, saya tidak memiliki dokumen referensi untuk menjawab pertanyaan Anda."


async def test_generic_content_type_uses_extension(api_client):
    bot_id = await create_bot(api_client)
    response = await upload(api_client, bot_id, b"Refunds within 30 days.", "refund.txt", "application/octet-stream")
    assert response.status_code == 201


async def test_upload_errors(api_client, indexing_service):
    bot_id = await create_bot(api_client)

    response = await upload(api_client, bot_id, b"<p>hi</p>", "page.html", "text/html")
    assert response.status_code == 415

    response = await api_client.post(f"/users/u1/bots/{bot_id}/documents/upload")
    assert response.status_code == 400
    assert response.json()["error"] == "MissingFile"

    indexing_service.max_upload_bytes = 5
    response = await upload(api_client, bot_id, b"Refunds within 30 days.", "refund.txt", "text/plain")
    assert response.status_code == 413


async def test_embedding_failure_is_502(api_client, embed_client):
    bot_id = await create_bot(api_client)
    embed_client.fail = True
    response = await upload(api_client, bot_id, b"Refunds within 30 days.", "refund.txt", "text/plain")
    assert response.status_code == 502
    assert response.json()["detail"] == "The document could not be indexed."


async def test_attach_detach_and_delete(api_client):
    sales = await create_bot(api_client, name="Sales")
    support = await create_bot(api_client, name="Support")
    response = await upload(api_client, sales, b"Refunds within 30 days.", "refund.txt", "text/plain")
    document_id = response.json()["document_id"]

    response = await api_client.post(f"/users/u1/bots/{support}/documents", json={"document_ids": [document_id]})
    assert response.status_code == 200
    response = await api_client.post(f"/users/u1/bots/{support}/documents", json={"document_ids": [document_id]})
    assert response.status_code == 409

    response = await api_client.delete(f"/users/u1/bots/{support}/documents/{document_id}/association")
    assert response.status_code == 200
    response = await api_client.delete(f"/users/u1/bots/{support}/documents/{document_id}/association")
    assert response.status_code == 404

    for _ in range(2):
        response = await api_client.delete(f"/users/u1/bots/{sales}/documents/{document_id}")
        assert response.status_code == 200
    documents = await api_client.get(f"/users/u1/bots/{sales}/documents")
    assert documents.json()["total"] == 0


async def test_delete_bot(api_client):
    bot_id = await create_bot(api_client)
    assert (await api_client.delete(f"/users/u1/bots/{bot_id}")).status_code == 200
    assert (await api_client.delete(f"/users/u1/bots/{bot_id}")).status_code == 404


async def test_chat_updates_status_last_active(api_client):
    bot_id = await create_bot(api_client)
    await upload(api_client, bot_id, b"Refunds within 30 days.", "refund.txt", "text/plain")

    await api_client.post(f"/users/u1/bots/{bot_id}/chat", json={"message": "What is the refund policy?"})

    status = await api_client.get(f"/users/u1/bots/{bot_id}/status")
    assert status.json()["last_active"] is not None

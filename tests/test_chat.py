import pytest
import requests
from sqlmodel import select

from app.config import settings
from app.models.chat_history import ChatHistory
from app.models.generated_image import GeneratedImage
from app.models.training_data import TrainingData
from app.services.chat_service import FALLBACK_REPLY
from tests.fakes import FakeResponse, RecordingPost, perplexity_reply, runware_responder

CARD_REPLY = "Try these:\nname: Blush Garden\nprice: $85\ncolor: pink\n"


def route_by_url(reply=CARD_REPLY, runware=None):
    runware = runware or runware_responder()

    def respond(url, body):
        if url == settings.perplexity_api_url:
            return perplexity_reply(reply) if isinstance(reply, str) else reply
        return runware(url, body)

    return respond


@pytest.fixture
def outbound(monkeypatch):
    post = RecordingPost(route_by_url())
    monkeypatch.setattr(requests, "post", post)
    return post


def test_chat_reply_is_formatted_and_stored(client, session, outbound):
    response = client.post("/chat", json={"message": "Something for an anniversary?"})

    assert response.status_code == 200
    data = response.json()
    assert data["reply"] == CARD_REPLY
    assert data["flowers"] == [{"name": "Blush Garden", "price": "$85", "color": "pink"}]
    assert data["image_url"] is None

    history = client.get(f"/chat/history/{data['session_id']}").json()
    assert [m["is_user"] for m in history] == [True, False]
    assert history[0]["message"] == "Something for an anniversary?"


def test_chat_continues_existing_session(client, outbound):
    first = client.post("/chat", json={"message": "hi"}).json()
    client.post("/chat", json={"message": "roses?", "session_id": first["session_id"]})

    history = client.get(f"/chat/history/{first['session_id']}").json()
    assert len(history) == 4


def test_training_data_is_sent_as_context(client, session, outbound):
    session.add(TrainingData(question="Do you deliver on Sundays?", answer="Yes, until noon."))
    session.commit()

    client.post("/chat", json={"message": "Sunday delivery?"})

    system_prompt = outbound.calls[0]["json"]["messages"][0]["content"]
    assert "Do you deliver on Sundays?" in system_prompt
    assert "Yes, until noon." in system_prompt
    assert settings.store_name in system_prompt


def test_image_mode_generates_and_describes(client, session, customer, customer_headers, outbound):
    response = client.post(
        "/chat",
        json={"message": "white lilies in a glass vase", "image_mode": True},
        headers=customer_headers,
    )

    data = response.json()
    assert data["image_url"] == "https://im.runware.ai/image/flowers.webp"

    image = session.get(GeneratedImage, data["generated_image_id"])
    assert image.user_id == customer.id
    assert image.prompt == "white lilies in a glass vase"

    question = outbound.calls[1]["json"]["messages"][1]["content"]
    assert "white lilies in a glass vase" in question

    reply = session.exec(
        select(ChatHistory).where(ChatHistory.is_user == False)  # noqa: E712
    ).one()
    assert reply.image_url == data["image_url"]
    assert reply.meta == {"generated_image_id": image.id}


def test_image_failure_still_answers(client, monkeypatch):
    failing_runware = lambda url, body: FakeResponse({"error": "quota exceeded"})
    monkeypatch.setattr(requests, "post", RecordingPost(route_by_url(runware=failing_runware)))

    response = client.post("/chat", json={"message": "orchids", "image_mode": True})

    assert response.status_code == 200
    assert response.json()["image_url"] is None
    assert response.json()["reply"] == CARD_REPLY


def test_unexpected_payload_falls_back(client, monkeypatch):
    monkeypatch.setattr(
        requests, "post",
        RecordingPost(route_by_url(reply=FakeResponse({"choices": []}))),
    )

    data = client.post("/chat", json={"message": "hello"}).json()

    assert data["reply"] == FALLBACK_REPLY
    assert data["flowers"] == []


def test_upstream_failure(client, monkeypatch):
    monkeypatch.setattr(
        requests, "post",
        RecordingPost(route_by_url(reply=FakeResponse({}, status_code=401, reason="Unauthorized"))),
    )

    response = client.post("/chat", json={"message": "hello"})

    assert response.status_code == 500
    assert "Unauthorized" in response.json()["error"]


def test_empty_message_is_rejected(client, outbound):
    assert client.post("/chat", json={"message": ""}).status_code == 400


# -------- CUSTOM ORDERS --------

def test_custom_order_waits_for_admin_price(client, session, customer, customer_headers, admin_headers):
    image = GeneratedImage(prompt="white lilies", image_url="https://img.example/l.webp", user_id=customer.id)
    session.add(image)
    session.commit()

    response = client.post(
        "/chat/custom-order",
        json={
            "generated_image_id": image.id,
            "customer_name": "Rose Tyler",
            "customer_email": "rose@example.com",
            "delivery_address": "12 Petal Lane",
            "estimated_price": 85,
        },
        headers=customer_headers,
    )

    assert response.status_code == 201
    order = response.json()["order"]
    assert order["status"] == "waiting_admin_confirmation"
    assert order["final_price"] is None
    assert order["generated_image_id"] == image.id

    # confirming still needs an admin price
    response = client.post(
        "/admin/orders/update-status",
        json={"id": order["id"], "status": "confirmed"},
        headers=admin_headers,
    )
    assert response.status_code == 400


def test_custom_order_unknown_image(client):
    response = client.post(
        "/chat/custom-order",
        json={
            "generated_image_id": "missing",
            "customer_name": "Rose Tyler",
            "customer_email": "rose@example.com",
            "delivery_address": "12 Petal Lane",
        },
    )

    assert response.status_code == 404
    assert response.json() == {"error": "Generated image not found"}


# -------- TRAINING DATA --------

def test_admin_manages_training_data(client, admin_headers, customer_headers):
    response = client.post(
        "/admin/training-data",
        json={"question": "Are roses in season?", "answer": "All year round."},
        headers=admin_headers,
    )
    assert response.status_code == 201
    entry_id = response.json()["id"]
    assert response.json()["category"] == "general"

    assert len(client.get("/admin/training-data", headers=admin_headers).json()) == 1
    assert client.get("/admin/training-data", headers=customer_headers).status_code == 403

    assert client.delete(f"/admin/training-data/{entry_id}", headers=admin_headers).status_code == 200
    assert client.get("/admin/training-data", headers=admin_headers).json() == []


def test_admin_grants_roles(client, customer, admin_headers, customer_headers):
    response = client.post(
        "/admin/roles",
        json={"email": customer.email, "role": "seller"},
        headers=admin_headers,
    )

    assert sorted(response.json()["roles"]) == ["customer", "seller"]
    assert client.get("/auth/session", headers=customer_headers).json()["is_seller"] is True


def test_grant_unknown_role(client, customer, admin_headers):
    response = client.post(
        "/admin/roles",
        json={"email": customer.email, "role": "florist"},
        headers=admin_headers,
    )

    assert response.status_code == 400

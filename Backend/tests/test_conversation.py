# tests/test_conversation.py
"""
Tests for the conversation store helpers that do not need MongoDB.
"""
import json
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from appforge.services.conversation import ConversationStore, previous_images, to_turn


class TestPreviousImages:

    def test_reference_image_from_enhanced_prompt(self):
        project = SimpleNamespace(enh_prompt=json.dumps({"data": "base64...", "url": "https://x/ref.png"}))

        assert previous_images(project) == ["https://x/ref.png"]

    @pytest.mark.parametrize("enh_prompt", [None, "", "not json", json.dumps({"url": "https://x/a.png"}), json.dumps([1])])
    def test_no_reference_image(self, enh_prompt):
        assert previous_images(SimpleNamespace(enh_prompt=enh_prompt)) == []


class TestToTurn:

    def test_ai_role_maps_to_assistant(self):
        created = datetime(2025, 1, 1, tzinfo=timezone.utc)
        message = SimpleNamespace(id="m1", role="ai", text="Done", images=None, created_at=created)

        turn = to_turn(message)

        assert turn.role == "assistant"
        assert turn.images == []
        assert turn.created_at == created

    def test_user_role(self):
        message = SimpleNamespace(id=None, role="user", text="hi", images=["https://x/a.png"], created_at=datetime.now(timezone.utc))

        turn = to_turn(message)

        assert turn.role == "user"
        assert turn.id is None


class TestCodeBundle:

    @pytest.mark.asyncio
    async def test_loader_is_called_every_time(self):
        calls = []

        async def loader(url):
            calls.append(url)
            return {"src/App.tsx": {"code": str(len(calls))}}

        store = ConversationStore(bundle_loader=loader)

        first = await store.load_code_bundle("https://cdn.example.com/bundle.json")
        second = await store.load_code_bundle("https://cdn.example.com/bundle.json")

        assert first != second
        assert len(calls) == 2

    @pytest.mark.asyncio
    async def test_loader_failure_yields_none(self):
        async def loader(url):
            raise ValueError("Bundle fetch returned HTTP 404")

        store = ConversationStore(bundle_loader=loader)

        assert await store.load_code_bundle("https://cdn.example.com/missing.json") is None
        assert await store.load_code_bundle(None) is None


class FakeDocument:
    inserted = []

    def __init__(self, **fields):
        self.__dict__.update(fields)
        self.id = None

    async def insert(self):
        FakeDocument.inserted.append(self)


def _saving(**fields):
    record = SimpleNamespace(saves=0, **fields)

    async def save():
        record.saves += 1

    record.save = save
    return record


class TestSaveMessage:

    @pytest.fixture(autouse=True)
    def fake_documents(self, monkeypatch):
        FakeDocument.inserted = []
        monkeypatch.setattr("appforge.services.conversation.Message", FakeDocument)
        monkeypatch.setattr("appforge.services.conversation.Plan", FakeDocument)

    @pytest.mark.asyncio
    async def test_ai_message_spends_a_prompt_and_marks_responder(self):
        project = _saving(id="proj-1", last_responder="user")
        user = _saving(id="user-1", prompt_count=3)

        message = await ConversationStore().save_message(project, user, "Added a navbar", role="ai")

        assert message.text == "Added a navbar"
        assert user.prompt_count == 2
        assert user.saves == 1
        assert project.last_responder == "ai"
        assert project.saves == 1

    @pytest.mark.asyncio
    async def test_exhausted_prompts_do_not_go_negative(self):
        project = _saving(id="proj-1", last_responder=None)
        user = _saving(id="user-1", prompt_count=0)

        await ConversationStore().save_message(project, user, "hello", role="user")

        assert user.prompt_count == 0
        assert user.saves == 0
        assert project.last_responder == "user"

    @pytest.mark.asyncio
    async def test_plan_is_stored_without_markers(self):
        project = _saving(id="proj-1", last_responder=None)
        user = _saving(id="user-1", prompt_count=1)

        await ConversationStore().save_message(project, user, "Done", plan='___start___{"Steps": []}___end___')

        assert [doc.text for doc in FakeDocument.inserted] == ["Done", '{"Steps": []}']

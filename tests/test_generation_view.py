import asyncio
import io

import pytest
from docx import Document
from sqlalchemy.exc import SQLAlchemyError

from memoraize.core.result import ErrorKind
from memoraize.core.store import COLLECTIONS_FIELD, SqlDocumentStore
from memoraize.modules.views.base import effects_for
from memoraize.modules.views.generate import DUPLICATE_NAME, GenerationView, Upload


class RecordingStore(SqlDocumentStore):
    def __init__(self, session_maker):
        super().__init__(session_maker)
        self.batches = []

    async def commit_batch(self, writes):
        self.batches.append(list(writes))
        await super().commit_batch(writes)


class FailOnSecondCard(SqlDocumentStore):
    def __init__(self, session_maker):
        super().__init__(session_maker)
        self.cards_seen = 0

    async def apply_write(self, session, write):
        if write.kind == "create_card":
            self.cards_seen += 1
            if self.cards_seen == 2:
                raise SQLAlchemyError("connection lost")
        await super().apply_write(session, write)


@pytest.fixture
def recording_store(session_maker):
    return RecordingStore(session_maker)


def generated_view(store, client, identity):
    view = GenerationView(store, client, identity)
    view.set_options(text="Astronomy")
    assert asyncio.run(view.generate()).ok
    return view


def docx_bytes(*paragraphs):
    doc = Document()
    for p in paragraphs:
        doc.add_paragraph(p)
    buf = io.BytesIO()
    doc.save(buf)
    return buf.getvalue()


def test_default_options(store, generation_client, identity):
    state = GenerationView(store, generation_client, identity).state
    assert state.lang == "English"
    assert state.num_flashcards == 10
    assert state.difficulty == "Medium"
    assert state.answer_type == "True or False"
    assert state.input_type == "topic"


def test_set_options_validates_choices(store, generation_client, identity):
    view = GenerationView(store, generation_client, identity)
    assert view.set_options(lang="French", num_flashcards=5, difficulty="Hard").ok
    assert (view.state.lang, view.state.num_flashcards) == ("French", 5)

    assert not view.set_options(num_flashcards=7).ok
    assert not view.set_options(lang="Klingon").ok
    assert not view.set_options(colour="red").ok
    assert view.state.num_flashcards == 5


def test_recommended_topic_uses_existing_collection_names(
    store, generation_client, generation_stub, identity
):
    asyncio.run(
        store.write_user_record(
            identity.id, {COLLECTIONS_FIELD: [{"name": "Biology"}, {"name": "Chemistry"}]}
        )
    )
    view = GenerationView(store, generation_client, identity)
    result = asyncio.run(view.fetch_recommended_topic())
    assert result.value == "Astronomy basics"
    assert view.state.recommended_topic == "Astronomy basics"
    assert generation_stub.requests[-1].url.params["topics"] == "Biology, Chemistry"


def test_recommendation_skipped_when_signed_out(
    store, generation_client, generation_stub, anonymous
):
    view = GenerationView(store, generation_client, anonymous)
    assert asyncio.run(view.fetch_recommended_topic()).ok
    assert generation_stub.requests == []


def test_generate_sends_form_options(store, generation_client, generation_stub, identity):
    view = GenerationView(store, generation_client, identity)
    view.set_options(text="Planets", lang="Spanish", answer_type="Multiple Choice")
    result = asyncio.run(view.generate())
    assert result.ok
    assert [c.front for c in view.state.flashcards][0] == "The sun is a star."
    assert generation_stub.last_body() == {
        "data": "Planets",
        "lang": "Spanish",
        "numFlashcards": 10,
        "difficulty": "Medium",
        "answerType": "Multiple Choice",
        "fileType": None,
    }


def test_blank_input_is_rejected_without_calling_service(
    store, generation_client, generation_stub, identity
):
    view = GenerationView(store, generation_client, identity)
    view.set_options(text="   ")
    result = asyncio.run(view.generate())
    assert not result.ok and result.error.kind == ErrorKind.VALIDATION
    assert generation_stub.requests == []


def test_service_error_becomes_notice(store, generation_client, generation_stub, identity):
    generation_stub.fail = True
    view = GenerationView(store, generation_client, identity)
    view.set_options(text="Planets")
    result = asyncio.run(view.generate())
    assert not result.ok and result.error.kind == ErrorKind.REMOTE
    assert [e.type for e in effects_for(result)] == ["notice"]
    assert view.state.flashcards == []


def test_word_upload_is_extracted(store, generation_client, generation_stub, identity):
    view = GenerationView(store, generation_client, identity)
    view.set_options(input_type="word")
    upload = Upload("notes.docx", docx_bytes("Cells divide.", "", "DNA replicates."))
    assert asyncio.run(view.generate(upload)).ok
    body = generation_stub.last_body()
    assert body["data"] == "Cells divide.\nDNA replicates."
    assert body["fileType"] == "word"


def test_unreadable_upload_is_an_extraction_alert(
    store, generation_client, generation_stub, identity
):
    view = GenerationView(store, generation_client, identity)
    view.set_options(input_type="image")
    result = asyncio.run(view.generate(Upload("scan.png", b"not an image")))
    assert not result.ok and result.error.kind == ErrorKind.EXTRACTION
    assert [e.type for e in effects_for(result)] == ["alert"]
    assert generation_stub.requests == []


def test_flip_preview_card(store, generation_client, identity):
    view = generated_view(store, generation_client, identity)
    assert view.flip(1).ok
    assert view.state.flipped == {"1": True}
    assert not view.flip(9).ok


def test_save_writes_one_batch(recording_store, generation_client, identity):
    asyncio.run(
        recording_store.write_user_record(identity.id, {COLLECTIONS_FIELD: [{"name": "Bio"}]})
    )
    recording_store.batches.clear()
    view = generated_view(recording_store, generation_client, identity)
    view.open_save_dialog()

    result = asyncio.run(view.save("Space"))
    assert result.ok and result.value == "/flashcards?id=Space"
    assert view.state.save_dialog_open is False

    assert len(recording_store.batches) == 1
    kinds = [w.kind for w in recording_store.batches[0]]
    assert kinds == ["set_user", "create_card", "create_card", "create_card"]
    assert recording_store.batches[0][0].merge is True

    assert asyncio.run(recording_store.read_collections(identity.id)) == [
        {"name": "Bio"},
        {"name": "Space"},
    ]
    cards = asyncio.run(recording_store.read_collection_cards(identity.id, "Space"))
    assert len(cards) == 3


def test_save_without_record_creates_it(recording_store, generation_client, identity):
    view = generated_view(recording_store, generation_client, identity)
    assert asyncio.run(view.save("Space")).ok
    first = recording_store.batches[0][0]
    assert first.merge is False
    assert first.payload == {COLLECTIONS_FIELD: [{"name": "Space"}]}


def test_duplicate_name_writes_nothing(recording_store, generation_client, identity):
    asyncio.run(
        recording_store.write_user_record(identity.id, {COLLECTIONS_FIELD: [{"name": "Space"}]})
    )
    recording_store.batches.clear()
    view = generated_view(recording_store, generation_client, identity)

    result = asyncio.run(view.save("Space"))
    assert not result.ok and result.error.message == DUPLICATE_NAME
    assert recording_store.batches == []
    assert asyncio.run(recording_store.read_collection_cards(identity.id, "Space")) == []


def test_save_requires_name(recording_store, generation_client, identity):
    view = generated_view(recording_store, generation_client, identity)
    result = asyncio.run(view.save(""))
    assert result.error.message == "Please enter a name"
    assert recording_store.batches == []


def test_failed_save_leaves_no_partial_collection(session_maker, generation_client, identity):
    store = FailOnSecondCard(session_maker)
    asyncio.run(store.write_user_record(identity.id, {COLLECTIONS_FIELD: [{"name": "Bio"}]}))
    view = generated_view(store, generation_client, identity)

    result = asyncio.run(view.save("Space"))
    assert not result.ok and result.error.kind == ErrorKind.REMOTE
    assert asyncio.run(store.read_collections(identity.id)) == [{"name": "Bio"}]
    assert asyncio.run(store.read_collection_cards(identity.id, "Space")) == []

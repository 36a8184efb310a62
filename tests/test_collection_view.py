import asyncio

from sqlalchemy.exc import SQLAlchemyError

from memoraize.core.result import ErrorKind
from memoraize.core.store import COLLECTIONS_FIELD, SqlDocumentStore, StoreError
from memoraize.modules.flashcards.models import Flashcard
from memoraize.modules.views.base import SIGN_IN_REQUIRED, effects_for
from memoraize.modules.views.collections import CollectionView


class BrokenStore:
    """Store whose every read fails."""

    async def read_collections(self, user_id):
        raise StoreError("unavailable")


def names(view):
    return [c.name for c in view.state.collections]


def test_anonymous_load_is_an_empty_success(store, anonymous):
    view = CollectionView(store, anonymous)
    result = asyncio.run(view.load())
    assert result.ok and result.value == []
    assert view.state.collections == []


def test_load_reads_collections_in_stored_order(store, identity):
    asyncio.run(
        store.write_user_record(
            identity.id, {COLLECTIONS_FIELD: [{"name": "Zoo"}, {"name": "Art"}]}
        )
    )
    view = CollectionView(store, identity)
    assert asyncio.run(view.load()).ok
    assert names(view) == ["Zoo", "Art"]
    assert view.state.loaded


def test_create_without_record_creates_it(store, identity):
    view = CollectionView(store, identity)
    result = asyncio.run(view.create("Biology"))
    assert result.ok
    assert names(view) == ["Biology"]
    record = asyncio.run(store.read_user_record(identity.id))
    assert record == {COLLECTIONS_FIELD: [{"name": "Biology"}]}


def test_create_appends_and_closes_dialog(store, identity):
    view = CollectionView(store, identity)
    asyncio.run(view.create("Biology"))
    view.open_dialog()
    view.set_draft_name("Chemistry")
    result = asyncio.run(view.create())
    assert result.ok
    assert names(view) == ["Biology", "Chemistry"]
    assert view.state.dialog_open is False
    assert view.state.draft_name == ""


def test_create_keeps_other_record_fields(store, identity):
    asyncio.run(store.write_user_record(identity.id, {"theme": "dark"}, merge=False))
    view = CollectionView(store, identity)
    asyncio.run(view.create("Biology"))
    record = asyncio.run(store.read_user_record(identity.id))
    assert record["theme"] == "dark"


def test_create_rejects_duplicates_empty_names_and_anonymous(store, identity, anonymous):
    view = CollectionView(store, identity)
    asyncio.run(view.create("Biology"))

    duplicate = asyncio.run(view.create("Biology"))
    assert not duplicate.ok and duplicate.error.kind == ErrorKind.VALIDATION
    assert names(view) == ["Biology"]

    empty = asyncio.run(view.create(""))
    assert not empty.ok

    signed_out = asyncio.run(CollectionView(store, anonymous).create("Art"))
    assert not signed_out.ok and signed_out.error.message == SIGN_IN_REQUIRED
    assert effects_for(signed_out)[0].type == "alert"


def test_delete_removes_only_the_named_entry(store, identity):
    view = CollectionView(store, identity)
    for name in ("A", "B", "C"):
        asyncio.run(view.create(name))
    result = asyncio.run(view.delete("B"))
    assert result.ok
    assert names(view) == ["A", "C"]
    stored = asyncio.run(store.read_collections(identity.id))
    assert stored == [{"name": "A"}, {"name": "C"}]


def test_delete_of_unknown_name_or_missing_record_is_a_no_op(store, identity):
    view = CollectionView(store, identity)
    assert asyncio.run(view.delete("ghost")).ok
    assert asyncio.run(store.read_user_record(identity.id)) is None

    asyncio.run(view.create("A"))
    assert asyncio.run(view.delete("ghost")).ok
    assert names(view) == ["A"]


def test_delete_keeps_cards_unless_cascading(store, identity):
    asyncio.run(view_with_cards(store, identity, "Bio"))
    view = CollectionView(store, identity)
    asyncio.run(view.load())
    asyncio.run(view.delete("Bio"))
    assert len(asyncio.run(store.read_collection_cards(identity.id, "Bio"))) == 1

    asyncio.run(view_with_cards(store, identity, "Chem"))
    cascading = CollectionView(store, identity, cascade_delete=True)
    asyncio.run(cascading.delete("Chem"))
    assert asyncio.run(store.read_collection_cards(identity.id, "Chem")) == []


async def view_with_cards(store, identity, name):
    await CollectionView(store, identity).create(name)
    await store.create_card(identity.id, name, Flashcard(front="q", back="a"))


def test_store_failure_becomes_a_notice_and_keeps_state(identity):
    view = CollectionView(BrokenStore(), identity)
    result = asyncio.run(view.create("Biology"))
    assert not result.ok and result.error.kind == ErrorKind.REMOTE
    assert [e.type for e in effects_for(result)] == ["notice"]
    assert view.state.collections == []


def test_navigate_returns_encoded_url(store, identity):
    view = CollectionView(store, identity)
    result = view.navigate("World History")
    assert result.value == "/flashcards?id=World%20History"
    assert view.state.selected == "World History"
    assert not view.navigate("").ok


class CountingStore(SqlDocumentStore):
    def __init__(self, session_maker):
        super().__init__(session_maker)
        self.commits = 0

    async def commit_batch(self, writes):
        self.commits += 1
        await super().commit_batch(writes)


def test_duplicate_create_does_not_write(session_maker, identity):
    store = CountingStore(session_maker)
    view = CollectionView(store, identity)
    asyncio.run(view.create("Biology"))
    assert store.commits == 1
    asyncio.run(view.create("Biology"))
    assert store.commits == 1


class RejectingWrites(SqlDocumentStore):
    """Reads work; every write rolls back."""

    async def apply_write(self, session, write):
        raise SQLAlchemyError("permission denied")


def test_failed_delete_keeps_state_and_store(session_maker, identity):
    seed = SqlDocumentStore(session_maker)
    asyncio.run(
        seed.write_user_record(identity.id, {COLLECTIONS_FIELD: [{"name": "A"}, {"name": "B"}]})
    )
    asyncio.run(seed.create_card(identity.id, "A", Flashcard(front="q", back="a")))

    view = CollectionView(RejectingWrites(session_maker), identity, cascade_delete=True)
    asyncio.run(view.load())
    before = view.state

    result = asyncio.run(view.delete("A"))
    assert not result.ok and result.error.kind == ErrorKind.REMOTE
    assert [e.type for e in effects_for(result)] == ["notice"]
    assert view.state == before
    assert names(view) == ["A", "B"]
    assert asyncio.run(seed.read_collections(identity.id)) == [{"name": "A"}, {"name": "B"}]
    assert len(asyncio.run(seed.read_collection_cards(identity.id, "A"))) == 1

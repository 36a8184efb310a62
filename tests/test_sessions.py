from datetime import timedelta

from memoraize.modules.auth.identity import Identity
from memoraize.modules.views.sessions import ViewSessionManager


def test_same_cookie_reuses_session(store, generation_client, identity):
    manager = ViewSessionManager()
    first = manager.get_or_create(None, identity, store=store, client=generation_client)
    again = manager.get_or_create(first.id, identity, store=store, client=generation_client)
    assert again is first


def test_identity_change_resets_session(store, generation_client, identity):
    manager = ViewSessionManager()
    first = manager.get_or_create(None, identity, store=store, client=generation_client)
    first.flashcards.toggle_audio()

    other = Identity(id="user-2", is_signed_in=True)
    second = manager.get_or_create(first.id, other, store=store, client=generation_client)
    assert second is not first
    assert second.id == first.id
    assert second.flashcards.state.audio_mode is False


def test_sweep_drops_idle_sessions(store, generation_client, identity):
    manager = ViewSessionManager()
    idle = manager.get_or_create(None, identity, store=store, client=generation_client)
    fresh = manager.get_or_create(None, identity, store=store, client=generation_client)
    idle.last_activity -= timedelta(hours=2)

    assert manager.sweep() == 1
    assert set(manager.sessions) == {fresh.id}

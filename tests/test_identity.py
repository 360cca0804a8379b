from conftest import make_technician

from mantemos.services.events import ChangeNotifier
from mantemos.services.identity import IdentityStore, PlainTextVerifier


def _store():
    events = []
    notifier = ChangeNotifier()
    notifier.subscribe(events.append)
    return IdentityStore(notifier), events


def test_add_assigns_fresh_opaque_ids():
    store, events = _store()
    a = store.add(make_technician(login='a'))
    b = store.add(make_technician(login='b'))
    assert a.id != b.id
    assert len(a.id) == 9
    assert [t.login for t in store.list()] == ['a', 'b']
    assert events == ['technicians', 'technicians']


def test_find_by_credentials_exact_match():
    store, _ = _store()
    tech = store.add(make_technician(login='ana', password='Secret'))
    assert store.find_by_credentials('ana', 'Secret') == tech
    assert store.find_by_credentials('ana', 'secret') is None
    assert store.find_by_credentials('Ana', 'Secret') is None


def test_blank_credentials_never_match():
    store, _ = _store()
    store.add(make_technician(login='', password=''))
    assert store.find_by_credentials('', '') is None
    assert store.find_by_credentials('   ', 'x') is None


def test_duplicate_login_returns_first_in_storage_order():
    store, _ = _store()
    first = store.add(make_technician(login='dup', password='pw', full_name='First'))
    store.add(make_technician(login='dup', password='pw', full_name='Second'))
    assert store.find_by_credentials('dup', 'pw').id == first.id


def test_remove_missing_id_is_a_silent_noop():
    store, events = _store()
    store.add(make_technician())
    before = store.list()
    events.clear()
    store.remove('does-not-exist')
    assert store.list() == before
    assert events == []


def test_remove_filters_by_id():
    store, _ = _store()
    a = store.add(make_technician(login='a'))
    b = store.add(make_technician(login='b'))
    store.remove(a.id)
    assert [t.id for t in store.list()] == [b.id]


def test_plain_text_verifier():
    verifier = PlainTextVerifier()
    assert verifier.verify('pw', 'pw')
    assert not verifier.verify('pw', None)
    assert not verifier.verify('', '')

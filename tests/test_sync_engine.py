import asyncio
import json

from conftest import make_technician

from mantemos.schemas.settings import FieldCreate


def _count_writes(workspace):
    calls = []
    original = workspace.mirror.write_snapshot

    async def counting(snapshot):
        calls.append(snapshot.version)
        return await original(snapshot)

    workspace.mirror.write_snapshot = counting
    return calls


def _cloud(storage, key):
    raw = storage.get(key)
    return json.loads(raw) if raw else None


def _cloud_order(order_id):
    return {
        'id': order_id,
        'technicianId': 'remote',
        'technicianName': 'Remote Tech',
        'technicianRegistrationNumber': '500',
        'issuedAtEpochMillis': 1700000000000,
        'fields': {'Location': 'Remote'},
        'status': 'Completed',
    }


def test_push_after_change_replaces_mirror(workspace, storage):
    async def scenario():
        workspace.sync.start()
        await workspace.sync.wait_idle()
        tech = workspace.identities.add(make_technician())
        workspace.workflow.submit(tech, {})
        await workspace.sync.wait_idle()

    asyncio.run(scenario())
    assert [o['id'] for o in _cloud(storage, 'cloud_orders')] == ['0001']
    assert _cloud(storage, 'cloud_technicians')[0]['login'] == 'ana'
    assert _cloud(storage, 'cloud_settings')['appTitle'] == 'MantemOS'
    status = workspace.sync.status()
    assert status.syncing is False
    assert status.failed is False
    assert status.confirmed_version == status.local_version


def test_push_suppressed_while_technicians_and_orders_empty(workspace, storage):
    async def scenario():
        workspace.sync.start()
        await workspace.sync.wait_idle()
        workspace.schema.add_field(FieldCreate(label='Priority'))
        await workspace.sync.wait_idle()
        assert storage.get('cloud_settings') is None
        assert workspace.sync.local_version == 0
        workspace.identities.add(make_technician())
        await workspace.sync.wait_idle()

    asyncio.run(scenario())
    labels = [f['label'] for f in _cloud(storage, 'cloud_settings')['fields']]
    assert labels[-1] == 'Priority'


def test_rapid_changes_are_coalesced_into_ordered_pushes(workspace, storage):
    calls = _count_writes(workspace)

    async def scenario():
        workspace.sync.start()
        await workspace.sync.wait_idle()
        for i in range(5):
            workspace.identities.add(make_technician(login=f'tech{i}'))
        await workspace.sync.wait_idle()

    asyncio.run(scenario())
    assert calls == [5]
    assert len(_cloud(storage, 'cloud_technicians')) == 5


def test_change_during_push_triggers_one_follow_up_push(workspace, storage):
    workspace.mirror.push_latency_s = 0.05
    calls = _count_writes(workspace)

    async def scenario():
        workspace.sync.start()
        await workspace.sync.wait_idle()
        workspace.identities.add(make_technician(login='a'))
        await asyncio.sleep(0.01)
        assert workspace.sync.status().syncing is True
        workspace.identities.add(make_technician(login='b'))
        workspace.identities.add(make_technician(login='c'))
        assert workspace.sync.status().pending is True
        await workspace.sync.wait_idle()

    asyncio.run(scenario())
    assert calls == [1, 3]
    assert [t['login'] for t in _cloud(storage, 'cloud_technicians')] == ['a', 'b', 'c']
    assert workspace.sync.status().syncing is False


def test_initial_pull_overwrites_only_present_parts(workspace, storage):
    workspace.identities.add(make_technician(login='local'))
    storage.put('cloud_orders', json.dumps([_cloud_order('0009')]))
    storage.put('cloud_version', '4')

    async def scenario():
        workspace.sync.start()
        await workspace.sync.wait_idle()

    asyncio.run(scenario())
    assert [o.id for o in workspace.ledger.list_all()] == ['0009']
    # technicians and settings were never pushed remotely: local kept, then mirrored
    assert [t.login for t in workspace.identities.list()] == ['local']
    assert workspace.schema.get_settings().app_title == 'MantemOS'
    assert _cloud(storage, 'cloud_technicians')[0]['login'] == 'local'
    assert workspace.sync.confirmed_version == 5


def test_full_pull_does_not_echo_a_push(workspace, storage):
    calls = _count_writes(workspace)
    storage.put('cloud_orders', json.dumps([_cloud_order('0002'), _cloud_order('0001')]))
    storage.put('cloud_technicians', json.dumps([]))
    storage.put('cloud_settings', json.dumps({'appTitle': 'Remote OS', 'fields': []}))
    storage.put('cloud_version', '2')

    async def scenario():
        workspace.sync.start()
        await workspace.sync.wait_idle()

    asyncio.run(scenario())
    assert calls == []
    assert workspace.schema.get_settings().app_title == 'Remote OS'
    assert workspace.schema.list_fields() == []
    # local copy was persisted as well
    assert json.loads(storage.get('mantemos_settings'))['appTitle'] == 'Remote OS'
    assert workspace.sync.local_version == 2


def test_pulled_ledger_continues_sequence(workspace, storage):
    storage.put('cloud_orders', json.dumps([_cloud_order('0041')]))
    storage.put('cloud_version', '1')

    async def scenario():
        workspace.sync.start()
        await workspace.sync.wait_idle()
        tech = workspace.identities.add(make_technician())
        order = workspace.workflow.submit(tech, {})
        await workspace.sync.wait_idle()
        return order

    order = asyncio.run(scenario())
    assert order.id == '0042'


def test_stale_snapshot_is_refused_by_mirror(workspace, storage):
    async def scenario():
        workspace.sync.start()
        await workspace.sync.wait_idle()
        # another writer moved the mirror ahead
        storage.put('cloud_version', '10')
        workspace.identities.add(make_technician())
        await workspace.sync.wait_idle()

    asyncio.run(scenario())
    status = workspace.sync.status()
    assert status.failed is True
    assert status.last_error.startswith('push')
    assert storage.get('cloud_technicians') is None
    assert status.confirmed_version < status.local_version


def test_offline_mirror_retries_then_reports_failure(workspace, storage):
    calls = _count_writes(workspace)

    async def scenario():
        workspace.sync.start()
        await workspace.sync.wait_idle()
        workspace.mirror.set_online(False)
        workspace.identities.add(make_technician())
        await workspace.sync.wait_idle()
        failed = workspace.sync.status()
        workspace.mirror.set_online(True)
        ok = await workspace.sync.push()
        return failed, ok

    failed, ok = asyncio.run(scenario())
    assert failed.failed is True
    assert failed.confirmed_version == 0
    assert failed.local_version == 1
    assert len(calls) == 1 + 3 + 1  # first try, 3 retries, manual push
    assert ok is True
    status = workspace.sync.status()
    assert status.failed is False
    assert status.last_error is None
    assert _cloud(storage, 'cloud_technicians')[0]['login'] == 'ana'


def test_failed_pull_leaves_local_state_untouched(workspace, storage):
    workspace.identities.add(make_technician(login='local'))
    storage.put('cloud_technicians', json.dumps([]))
    workspace.mirror.set_online(False)

    async def scenario():
        workspace.sync.start()
        await workspace.sync.wait_idle()

    asyncio.run(scenario())
    assert [t.login for t in workspace.identities.list()] == ['local']
    status = workspace.sync.status()
    assert status.failed is True
    assert status.last_error.startswith('pull')


def test_unreadable_mirror_is_reported_and_repaired_by_next_push(workspace, storage):
    workspace.identities.add(make_technician(login='local'))
    storage.put('cloud_settings', json.dumps({'borderStyle': None}))

    async def scenario():
        workspace.sync.start()
        await workspace.sync.wait_idle()
        status = workspace.sync.status()
        assert status.failed is True
        assert status.last_error == 'pull: Cloud mirror holds an unreadable snapshot'
        workspace.identities.add(make_technician(login='second'))
        await workspace.sync.wait_idle()

    asyncio.run(scenario())
    assert [t.login for t in workspace.identities.list()] == ['local', 'second']
    assert _cloud(storage, 'cloud_settings')['borderStyle'] == '2xl'
    assert workspace.sync.status().failed is False


def test_unreadable_mirror_version_fails_push_without_raising(workspace, storage):
    storage.put('cloud_version', 'garbage')

    async def scenario():
        workspace.sync.start()
        await workspace.sync.wait_idle()
        workspace.identities.add(make_technician())
        await workspace.sync.wait_idle()

    asyncio.run(scenario())
    status = workspace.sync.status()
    assert status.failed is True
    assert status.last_error.startswith('push')
    assert storage.get('cloud_technicians') is None


def test_stop_waits_for_in_flight_push(workspace, storage):
    workspace.mirror.push_latency_s = 0.02

    async def scenario():
        workspace.sync.start()
        await workspace.sync.wait_idle()
        workspace.identities.add(make_technician())
        await workspace.sync.stop()

    asyncio.run(scenario())
    assert _cloud(storage, 'cloud_technicians') is not None

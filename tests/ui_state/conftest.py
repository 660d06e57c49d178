from types import SimpleNamespace

import pytest

import task_deadline as td


@pytest.fixture
def picker(clock):
    """Open session plus key bindings, without starting an Application."""
    emitted = []
    session = td.PickerSession(on_emit=emitted.append, clock=clock)
    session.open(None)
    state = td.new_picker_state(session)
    invalidations = []
    kb = td.build_picker_key_bindings(session, state, lambda: invalidations.append(1))
    return SimpleNamespace(session=session, state=state, kb=kb, emitted=emitted, invalidations=invalidations)

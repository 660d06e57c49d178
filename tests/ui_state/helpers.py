from types import SimpleNamespace

from prompt_toolkit.keys import Keys


class DummyApp:
    def __init__(self):
        self.exit_calls = 0

    def exit(self, result=None):
        self.exit_calls += 1


def dummy_event(app=None):
    return SimpleNamespace(app=app or DummyApp(), data='')


def press(kb, key, app=None):
    """Invoke the handler bound to ``key`` the way prompt_toolkit would."""
    bindings = kb.get_bindings_for_keys((key,))
    if not bindings:
        raise AssertionError(f'Binding for {key!r} not found')
    event = dummy_event(app)
    bindings[-1].handler(event)
    return event


def fragments_text(fragments):
    return ''.join(text for _style, text in fragments)


def styles_for(fragments, style):
    return [text for frag_style, text in fragments if frag_style == style]


ENTER = Keys.Enter
ESCAPE = Keys.Escape

import pytest

import state
from services.pipeline import STAGE_NO_UPLOAD, SessionContext


@pytest.fixture
def ss(workdir):
    d: dict = {}
    yield d
    ctx = d.get(state.CTX_KEY)
    if ctx is not None:
        ctx.close()


def test_get_context_creates_once(ss):
    ctx = state.get_context(ss, session_slug="s1")
    assert isinstance(ctx, SessionContext)
    assert state.get_context(ss) is ctx
    assert ss["session_slug"] == "s1"


def test_is_new_upload_once_per_distinct_file(ss, make_uploaded):
    a = make_uploaded("a.csv", b"x\n1\n")
    assert state.is_new_upload(ss, None) is False
    assert state.is_new_upload(ss, a) is True
    assert state.is_new_upload(ss, make_uploaded("a.csv", b"x\n1\n")) is False
    assert state.is_new_upload(ss, make_uploaded("a.csv", b"x\n2\n")) is True


def test_reset_context(ss, make_uploaded):
    ctx = state.get_context(ss, session_slug="s1")
    up = make_uploaded("a.csv", b"x\n1\n")
    state.is_new_upload(ss, up)
    ctx.receive_file(up)
    state.reset_context(ss)
    assert ctx.stage == STAGE_NO_UPLOAD
    assert ss[state.LAST_UPLOAD_SIG_KEY] is None
    # same file can be ingested again after a reset
    assert state.is_new_upload(ss, up) is True


def test_reset_gives_uploader_a_fresh_widget(ss, make_uploaded):
    ctx = state.get_context(ss, session_slug="s1")
    up = make_uploaded("a.csv", b"x\n1\n")
    key = state.uploader_key(ss)
    ss[key] = up  # widget value before the reset
    assert state.is_new_upload(ss, ss[key]) is True
    ctx.receive_file(up)
    state.reset_context(ss)
    new_key = state.uploader_key(ss)
    assert new_key != key
    # the widget under the new key starts empty, so nothing is ingested again
    assert state.is_new_upload(ss, ss.get(new_key)) is False
    assert ctx.upload is None
    state.reset_context(ss)
    assert state.uploader_key(ss) not in {key, new_key}

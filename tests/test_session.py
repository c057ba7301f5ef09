from PIL import Image

from guess_the_child.core.pipeline import CaptionPipeline
from guess_the_child.core.roster import Slot
from guess_the_child.core.session import (
    EMPTY_ROSTER_MESSAGE,
    GENERATION_FAILED_MESSAGE,
    UNREADABLE_IMAGE_MESSAGE,
    GeneratingView,
    PresentingView,
    Session,
    UploadView,
)

from conftest import FakeCaptioner, make_image_bytes


def add_people(session, count):
    for _ in range(count):
        session.select_image(make_image_bytes("PNG"), "childhood")
        session.select_image(make_image_bytes("JPEG"), "current")
        session.add_person()


def test_new_session_is_upload(pipeline):
    session = Session(pipeline)
    assert session.view == UploadView()
    assert session.error is None
    assert session.progress == ""
    assert session.slideshow is None


def test_empty_roster_is_validation_error(pipeline, captioner):
    session = Session(pipeline)

    views = list(session.start_presentation())

    assert views == [UploadView(error=EMPTY_ROSTER_MESSAGE)]
    assert session.error == EMPTY_ROSTER_MESSAGE
    assert captioner.requests == []


def test_scenario_two_entries_succeed(pipeline, captioner):
    session = Session(pipeline)
    add_people(session, 2)

    session.generate_captions()

    assert isinstance(session.view, PresentingView)
    assert session.slideshow.cursor == (0, False)
    assert len(session.slideshow) == 2
    assert [e.caption for e in session.entries] == ["caption 1", "caption 2"]
    assert session.progress == ""
    assert session.error is None


def test_generation_streams_progress(pipeline):
    session = Session(pipeline)
    add_people(session, 2)

    views = list(session.start_presentation())

    assert views[0] == GeneratingView()
    assert [v.progress for v in views[1:-1]] == [
        "Generating caption 1 of 2...",
        "Generating caption 2 of 2...",
    ]
    assert isinstance(views[-1], PresentingView)


def test_scenario_single_entry_fails():
    session = Session(CaptionPipeline(FakeCaptioner(fail_on_call=1)))
    add_people(session, 1)

    session.generate_captions()

    assert session.view == UploadView(error=GENERATION_FAILED_MESSAGE)
    assert session.progress == ""
    assert len(session.entries) == 1
    assert session.entries[0].caption is None


def test_failure_discards_captions_from_this_run():
    captioner = FakeCaptioner(fail_on_call=3)
    session = Session(CaptionPipeline(captioner))
    add_people(session, 4)
    before = list(session.entries)

    session.generate_captions()

    assert isinstance(session.view, UploadView)
    assert session.error == GENERATION_FAILED_MESSAGE
    assert session.entries == before
    assert all(e.caption is None for e in session.entries)


def test_generation_keeps_captions_on_seeded_roster(pipeline, captioner, make_roster):
    roster = make_roster(3)
    seeded = [roster.entries[0].with_caption("already here"), roster.entries[1].with_caption("me too")]
    roster.replace_entries(seeded + roster.entries[2:])
    session = Session(pipeline, roster=roster)

    session.generate_captions()

    assert len(captioner.requests) == 1
    assert session.entries[:2] == seeded
    assert session.entries[2].caption == "caption 1"
    assert len(session.slideshow) == 3


def test_abandoned_generation_leaves_generating_view(pipeline):
    session = Session(pipeline)
    add_people(session, 2)

    run = session.start_presentation()
    next(run)
    next(run)
    assert isinstance(session.view, GeneratingView)
    run.close()

    assert session.view == UploadView()
    assert session.progress == ""


def test_unreadable_upload_sets_notice_only(pipeline):
    session = Session(pipeline)

    assert not session.select_image(b"not an image", "childhood")
    assert session.notice == UNREADABLE_IMAGE_MESSAGE
    assert session.view == UploadView()
    assert session.roster.pending[Slot.CHILDHOOD] is None

    assert session.select_image(make_image_bytes(), "childhood")
    assert session.notice is None


def test_scenario_reveal_next_prev(pipeline):
    session = Session(pipeline)
    add_people(session, 3)
    session.generate_captions()
    observed = []

    session.reveal()
    observed.append(session.slideshow.cursor)
    session.next_slide()
    observed.append(session.slideshow.cursor)
    session.prev_slide()
    observed.append(session.slideshow.cursor)

    assert observed == [(0, True), (1, False), (0, False)]


def test_navigation_outside_presenting_is_noop(pipeline):
    session = Session(pipeline)
    assert not session.reveal()
    assert not session.next_slide()
    assert not session.prev_slide()


def test_reset_from_presenting(pipeline):
    session = Session(pipeline)
    add_people(session, 2)
    session.select_image(make_image_bytes(), "childhood")
    session.generate_captions()

    session.reset()

    assert session.view == UploadView()
    assert session.entries == []
    assert session.roster.pending[Slot.CHILDHOOD] is None


def test_delete_person(pipeline):
    session = Session(pipeline)
    add_people(session, 2)
    first = session.entries[0]

    assert session.delete_person(first.id)
    assert not session.delete_person(first.id)
    assert len(session.entries) == 1


def test_roster_is_locked_while_presenting(pipeline):
    session = Session(pipeline)
    add_people(session, 2)
    session.generate_captions()
    assert isinstance(session.view, PresentingView)

    add_people(session, 1)
    assert not session.delete_person(session.entries[0].id)
    assert not session.select_image(make_image_bytes(), "childhood")
    assert not session.clear_image("childhood")

    assert len(session.entries) == 2
    assert session.roster.pending[Slot.CHILDHOOD] is None
    assert len(session.slideshow) == 2


def test_start_presentation_from_presenting_is_noop(pipeline, captioner):
    session = Session(pipeline)
    add_people(session, 2)
    session.generate_captions()
    view = session.view
    session.reveal()
    captioner.requests.clear()

    views = list(session.start_presentation())

    assert views == [view]
    assert session.view is view
    assert session.slideshow.cursor == (0, True)
    assert captioner.requests == []


def test_oversized_upload_sets_notice(pipeline, monkeypatch):
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 1000)
    session = Session(pipeline)

    assert not session.select_image(make_image_bytes(size=(64, 48)), "childhood")
    assert session.notice == UNREADABLE_IMAGE_MESSAGE
    assert session.view == UploadView()
    assert session.roster.pending[Slot.CHILDHOOD] is None


def test_clear_image_empties_slot(pipeline):
    session = Session(pipeline)
    session.select_image(make_image_bytes("PNG"), "childhood")
    session.select_image(make_image_bytes("JPEG"), "current")

    assert session.clear_image("current")

    assert session.roster.pending[Slot.CURRENT] is None
    assert session.add_person() is None
    assert session.entries == []

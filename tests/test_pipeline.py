import pytest

from guess_the_child.core.config import CAPTION_PROMPT
from guess_the_child.core.pipeline import (
    CaptionGenerationError,
    CaptionPipeline,
    ImagePart,
    TextPart,
)

from conftest import FakeCaptioner


def test_request_shape(pipeline, captioner, make_roster):
    entry = make_roster(1).entries[0]

    pipeline.generate_captions([entry])

    assert len(captioner.requests) == 1
    request = captioner.requests[0]
    assert request.model == "gemini-2.5-flash"
    childhood, current, prompt = request.parts
    assert childhood == ImagePart(data=entry.childhood.data, mime_type="image/png")
    assert current == ImagePart(data=entry.current.data, mime_type="image/jpeg")
    assert prompt == TextPart(text=CAPTION_PROMPT)


def test_captions_attached_in_order(pipeline, make_roster):
    entries = make_roster(3).entries

    captioned = pipeline.generate_captions(entries)

    assert [e.id for e in captioned] == [e.id for e in entries]
    assert [e.caption for e in captioned] == ["caption 1", "caption 2", "caption 3"]
    # Input entries are untouched
    assert all(e.caption is None for e in entries)


def test_progress_messages_in_order(pipeline, make_roster):
    messages = []

    pipeline.generate_captions(make_roster(4).entries, on_progress=lambda p: messages.append(p.message))

    assert messages == [f"Generating caption {i} of 4..." for i in range(1, 5)]


def test_progress_precedes_each_call(captioner, make_roster):
    pipeline = CaptionPipeline(captioner)
    seen = []

    def on_progress(progress):
        seen.append((progress.index, len(captioner.requests)))

    pipeline.generate_captions(make_roster(3).entries, on_progress=on_progress)

    assert seen == [(1, 0), (2, 1), (3, 2)]


def test_already_captioned_entries_are_skipped(pipeline, captioner, make_roster):
    entries = make_roster(3).entries
    entries[1] = entries[1].with_caption("kept from last time")

    captioned = pipeline.generate_captions(entries)

    assert len(captioner.requests) == 2
    assert captioned[1] is entries[1]
    assert captioned[1].caption == "kept from last time"


def test_idempotent_when_all_captioned(pipeline, captioner, make_roster):
    first = pipeline.generate_captions(make_roster(2).entries)
    captioner.requests.clear()

    second = pipeline.generate_captions(first)

    assert captioner.requests == []
    assert second == first


def test_failure_aborts_and_names_entry(make_roster):
    captioner = FakeCaptioner(fail_on_call=2)
    pipeline = CaptionPipeline(captioner)
    entries = make_roster(3).entries

    with pytest.raises(CaptionGenerationError) as excinfo:
        pipeline.generate_captions(entries)

    assert excinfo.value.index == 2
    assert excinfo.value.entry_id == entries[1].id
    # Entry 3 is never attempted
    assert len(captioner.requests) == 2
    assert all(e.caption is None for e in entries)


def test_encoding_failure_is_generation_error(pipeline, captioner, make_roster):
    entry = make_roster(1).entries[0]
    corrupt = type(entry.current)(data=b"broken", mime_type="image/png", preview=entry.current.preview)
    broken_entry = type(entry)(id=entry.id, childhood=entry.childhood, current=corrupt)

    with pytest.raises(CaptionGenerationError):
        pipeline.generate_captions([broken_entry])

    assert captioner.requests == []


def test_custom_model_and_prompt(captioner, make_roster):
    pipeline = CaptionPipeline(captioner, model="gemini-2.5-pro", prompt="Be nice.")

    pipeline.generate_captions(make_roster(1).entries)

    request = captioner.requests[0]
    assert request.model == "gemini-2.5-pro"
    assert request.parts[-1] == TextPart(text="Be nice.")


def test_empty_roster_makes_no_calls(pipeline, captioner):
    assert pipeline.generate_captions([]) == []
    assert captioner.requests == []

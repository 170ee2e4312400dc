import pytest

from src.selection import ImageSelection, PreviewAllocator, SelectedImage


def test_select_from_bytes_returns_selected_image():
    selection = ImageSelection()

    selected = selection.select_from_bytes(b"jpeg-bytes", "cat.jpg")

    assert isinstance(selected, SelectedImage)
    assert selected.data == b"jpeg-bytes"
    assert selected.name == "cat.jpg"
    assert selection.current() is selected


def test_select_from_bytes_defaults_name():
    selection = ImageSelection()
    assert selection.select_from_bytes(b"x", "").name == "image.jpg"


def test_preview_present_iff_bytes_present():
    selection = ImageSelection()
    selected = selection.select_from_bytes(b"abcd", "a.jpg")

    assert selected.preview is not None
    assert bytes(selected.preview.view()) == b"abcd"
    assert selected.preview.nbytes == 4


def test_replacing_selection_releases_previous_preview():
    allocator = PreviewAllocator()
    selection = ImageSelection(allocator)

    first = selection.select_from_bytes(b"one", "1.jpg")
    second = selection.select_from_bytes(b"two", "2.jpg")

    assert first.preview.released
    assert not second.preview.released
    assert allocator.outstanding == 1


def test_released_preview_cannot_be_read():
    selection = ImageSelection()
    selected = selection.select_from_bytes(b"one", "1.jpg")
    selection.clear()

    with pytest.raises(ValueError):
        selected.preview.view()


def test_at_most_one_preview_outstanding_for_any_sequence():
    allocator = PreviewAllocator()
    selection = ImageSelection(allocator)
    operations = [
        lambda: selection.select_from_bytes(b"a", "a.jpg"),
        selection.clear,
        lambda: selection.select_from_bytes(b"b", "b.jpg"),
        lambda: selection.select_from_bytes(b"c", "c.jpg"),
        selection.clear,
        selection.clear,
        lambda: selection.select_from_bytes(b"d", "d.jpg"),
    ]

    def _apply(op):
        op()
        assert allocator.outstanding <= 1

    list(map(_apply, operations))
    assert allocator.outstanding == 1
    selection.close()
    assert allocator.outstanding == 0


def test_clear_resets_to_empty():
    allocator = PreviewAllocator()
    selection = ImageSelection(allocator)
    selection.select_from_bytes(b"a", "a.jpg")

    selection.clear()

    assert selection.current() is None
    assert allocator.outstanding == 0


def test_clear_twice_is_idempotent():
    allocator = PreviewAllocator()
    selection = ImageSelection(allocator)
    selection.select_from_bytes(b"a", "a.jpg")

    selection.clear()
    selection.clear()

    assert selection.current() is None
    assert allocator.outstanding == 0


def test_clear_on_empty_selection_is_safe():
    selection = ImageSelection()
    selection.clear()
    assert selection.current() is None


def test_stale_token_is_discarded_without_allocating():
    allocator = PreviewAllocator()
    selection = ImageSelection(allocator)

    stale = selection.begin()
    newer = selection.select_from_bytes(b"upload", "upload.jpg")
    result = selection.select_from_bytes(b"sample", "sample.jpg", token=stale)

    assert result is None
    assert selection.current() is newer
    assert allocator.outstanding == 1


def test_current_token_is_accepted():
    selection = ImageSelection()
    token = selection.begin()

    selected = selection.select_from_bytes(b"sample", "sample.jpg", token=token)

    assert selected is not None
    assert selection.current() is selected


def test_clear_invalidates_pending_token():
    selection = ImageSelection()
    token = selection.begin()
    selection.clear()

    assert not selection.is_current(token)
    assert selection.select_from_bytes(b"late", "late.jpg", token=token) is None
    assert selection.current() is None


def test_tokens_are_monotonic():
    selection = ImageSelection()
    first = selection.begin()
    second = selection.begin()
    assert second > first
    assert selection.is_current(second)
    assert not selection.is_current(first)


def test_allocator_rejects_double_release():
    allocator = PreviewAllocator()
    handle = allocator.allocate(b"x")
    allocator.release(handle)

    with pytest.raises(ValueError):
        allocator.release(handle)

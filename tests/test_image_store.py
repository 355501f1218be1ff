from core.errors import BackendConnectionError, BackendResponseError, DeleteFailure, UploadFailure
from core.models.domain import DeleteState, ErrorKind, FetchKey, Mode, SearchResult, UploadStatus
from gui.image_store import OP_ALL_IMAGES, OP_BROWSE, OP_DELETE, OP_SEARCH, OP_UPLOAD, get_image_store


def _stage(tmp_path, *names):
    paths = []
    for name in names:
        path = tmp_path / name
        path.write_bytes(b"\x89PNG")
        paths.append(path)
    return paths


def test_initial_state(store):
    assert store.mode is Mode.BROWSE
    assert store.search_query == ""
    assert store.pagination.page == 1
    assert store.pagination.page_size == 12
    assert store.staged_files == ()
    assert store.delete_state is DeleteState.IDLE


def test_load_fetches_every_surface(store, backend):
    store.load()

    assert backend.calls_to("paginated_images") == [(1, 12)]
    assert store.browse_page.images[0] == "img000.jpg"
    assert len(store.browse_page.images) == 12
    assert store.pagination.total == 100
    assert len(store.all_images) == 100
    assert store.storage.size_bytes == 100 * 1024


def test_dogs_playing_search(store, backend):
    backend.search_results["dogs playing"] = (
        SearchResult(path="dog_park.jpg", similarity=91.23),
        SearchResult(path="beach_dog.jpg", similarity=78.4),
    )
    store.load()
    backend.reset_calls()
    modes = []
    store.mode_changed.connect(modes.append)

    assert store.search("dogs playing")

    assert store.mode is Mode.SEARCH
    assert modes == [Mode.SEARCH]
    assert [r.path for r in store.search_results] == ["dog_park.jpg", "beach_dog.jpg"]
    assert not store.is_searching
    assert backend.calls_to("search") == [("dogs playing",)]
    assert backend.calls_to("paginated_images") == []
    assert store.browse_fetch_key() is None
    assert store.recent_searches == ("dogs playing",)


def test_blank_search_clears(store, backend):
    backend.search_results["cats"] = (SearchResult(path="cat.jpg", similarity=50.0),)
    store.search("cats")
    assert not store.search("   ")
    assert store.mode is Mode.BROWSE
    assert store.search_results == ()


def test_zero_result_search_falls_back_to_browse(store, backend):
    store.load()
    store.search("unicorns")

    assert store.mode is Mode.BROWSE
    assert store.no_match_query == "unicorns"
    assert store.browse_page is not None


def test_clear_search_returns_to_first_page(store, backend):
    backend.search_results["cats"] = (SearchResult(path="cat.jpg", similarity=50.0),)
    store.load()
    store.change_page(3)
    store.search("cats")
    backend.reset_calls()

    store.clear_search()

    assert store.mode is Mode.BROWSE
    assert store.search_query == ""
    assert store.search_results == ()
    assert store.pagination.page == 1
    assert backend.calls_to("paginated_images") == [(1, 12)]


def test_no_browse_requests_while_searching(store, backend):
    backend.search_results["cats"] = (SearchResult(path="cat.jpg", similarity=50.0),)
    store.load()
    store.search("cats")
    backend.reset_calls()

    store.change_page(2)
    store.change_page_size(24)
    store.refresh_browse(force=True)

    assert backend.calls_to("paginated_images") == []


def test_browse_response_ignored_after_search_starts(manual_store, manual_runner, backend):
    backend.search_results["cats"] = (SearchResult(path="cat.jpg", similarity=50.0),)
    manual_store.refresh_browse()
    manual_store.search("cats")

    manual_runner.resolve_operation(OP_BROWSE)
    assert manual_store.browse_page is None

    manual_runner.resolve_operation(OP_SEARCH)
    assert manual_store.mode is Mode.SEARCH
    assert [r.path for r in manual_store.search_results] == ["cat.jpg"]


def test_stale_search_response_discarded(manual_store, manual_runner, backend):
    backend.search_results["cats"] = (SearchResult(path="cat.jpg", similarity=40.0),)
    backend.search_results["dogs"] = (SearchResult(path="dog.jpg", similarity=60.0),)
    manual_store.search("cats")
    manual_store.search("dogs")

    manual_runner.resolve_key(FetchKey.of(OP_SEARCH, query="dogs"))
    manual_runner.resolve_key(FetchKey.of(OP_SEARCH, query="cats"))

    assert manual_store.search_query == "dogs"
    assert [r.path for r in manual_store.search_results] == ["dog.jpg"]
    assert manual_store.recent_searches == ("dogs",)


def test_rapid_page_changes_keep_latest(manual_store, manual_runner):
    manual_store.refresh_browse()
    manual_runner.resolve_all()
    manual_store.change_page(2)
    manual_store.change_page(3)

    manual_runner.resolve_key(FetchKey.of(OP_BROWSE, page=3, page_size=12))
    manual_runner.resolve_key(FetchKey.of(OP_BROWSE, page=2, page_size=12))

    assert manual_store.pagination.page == 3
    assert manual_store.browse_page.key == FetchKey.of(OP_BROWSE, page=3, page_size=12)
    assert manual_store.browse_page.images[0] == "img024.jpg"


def test_identical_requests_deduplicated(manual_store, manual_runner):
    assert manual_store.refresh_browse()
    assert not manual_store.refresh_browse()
    assert manual_store.fetch_all_images()
    assert not manual_store.fetch_all_images()
    assert manual_store.is_loading(OP_ALL_IMAGES)
    assert manual_runner.operations() == [OP_BROWSE, OP_ALL_IMAGES]

    manual_runner.resolve_all()
    assert not manual_store.is_loading(OP_ALL_IMAGES)
    assert manual_store.fetch_all_images()


def test_page_change_requests_scroll_to_top(store):
    store.load()
    fired = []
    store.scroll_to_top_requested.connect(lambda: fired.append(True))

    assert store.change_page(2)
    assert not store.change_page(2)
    assert not store.change_page(42)
    assert fired == [True]


def test_page_size_change_resets_page(store, backend):
    store.load()
    store.change_page(4)
    backend.reset_calls()

    assert store.change_page_size(24)

    assert store.pagination.page == 1
    assert store.pagination.page_size == 24
    assert backend.calls_to("paginated_images") == [(1, 24)]


def test_shrinking_corpus_clamps_page(store, backend):
    store.load()
    store.change_page(9)
    backend.images = backend.images[:20]

    store.refresh_browse(force=True)

    assert store.pagination.page == 2
    assert store.pagination.total == 20
    assert store.browse_page.images[0] == "img012.jpg"


def test_connection_error_surfaces_and_retry_recovers(store, backend):
    backend.failures["paginated_images"] = BackendConnectionError("connection refused")
    store.load()

    assert store.error is not None
    assert store.error.kind is ErrorKind.CONNECTION
    assert store.error.operation == OP_BROWSE
    assert store.browse_page is None

    del backend.failures["paginated_images"]
    store.retry()

    assert store.error is None
    assert len(store.browse_page.images) == 12


def test_search_failure_surfaces_error(store, backend):
    backend.failures["search"] = BackendResponseError("HTTP 500", status_code=500)
    store.search("cats")

    assert store.error.kind is ErrorKind.RESPONSE
    assert store.error.operation == OP_SEARCH
    assert not store.is_searching
    assert store.mode is Mode.BROWSE


def test_points_failure_kept_separate(store, backend):
    backend.failures["image_points"] = BackendResponseError("bad payload")
    store.load()

    assert store.error is None
    assert store.points_error.kind is ErrorKind.RESPONSE


def test_recent_searches_bounded(store):
    for query in ("one", "two", "three", "four", "five", "six"):
        store.search(query)
    assert store.recent_searches == ("six", "five", "four", "three", "two")

    store.clear_recent_searches()
    assert store.recent_searches == ()


def test_upload_success_refreshes_corpus(store, backend, tmp_path):
    store.load()
    backend.reset_calls()

    assert store.set_selected_files(_stage(tmp_path, "a.png", "b.png"))
    assert len(store.staged_files) == 2
    assert store.upload()

    assert len(backend.calls_to("upload")[0][0]) == 2
    assert store.staged_files == ()
    assert not store.is_uploading
    assert backend.calls_to("list_images") == [()]
    assert len(store.all_images) == 102
    assert store.pagination.total == 102


def test_upload_is_single_flight(manual_store, manual_runner, tmp_path):
    manual_store.set_selected_files(_stage(tmp_path, "a.png"))

    assert manual_store.upload()
    assert manual_store.is_uploading
    assert not manual_store.upload()
    assert not manual_store.set_selected_files(_stage(tmp_path, "b.png"))
    assert not manual_store.cancel_staged_file(0)
    assert manual_runner.operations() == [OP_UPLOAD]

    manual_runner.resolve_operation(OP_UPLOAD)
    assert manual_store.staged_files == ()


def test_upload_failure_keeps_files(store, backend, tmp_path):
    backend.failures["upload"] = UploadFailure("rejected")
    store.set_selected_files(_stage(tmp_path, "a.png", "b.png"))
    backend.reset_calls()

    store.upload()

    assert [item.status for item in store.staged_files] == [UploadStatus.FAILED, UploadStatus.FAILED]
    assert store.upload_error == "rejected"
    assert backend.calls_to("list_images") == []


def test_cancel_staged_file(store, tmp_path):
    store.set_selected_files(_stage(tmp_path, "a.png", "b.png"))
    assert store.cancel_staged_file(1)
    assert [item.name for item in store.staged_files] == ["a.png"]
    assert store.clear_staged_files()
    assert store.staged_files == ()


def test_delete_cancel_issues_no_request(store, backend):
    assert store.request_delete()
    assert store.delete_state is DeleteState.CONFIRMING
    assert store.cancel_delete_confirm()

    assert store.delete_state is DeleteState.IDLE
    assert backend.calls_to("delete_all") == []


def test_confirm_without_request_does_nothing(store, backend):
    assert not store.confirm_delete()
    assert backend.calls_to("delete_all") == []


def test_delete_all_resets_everything(store, backend):
    backend.search_results["cats"] = (SearchResult(path="cat.jpg", similarity=50.0),)
    store.load()
    store.change_page(3)
    store.search("cats")
    backend.reset_calls()

    store.request_delete()
    assert store.confirm_delete()

    assert backend.calls_to("delete_all") == [()]
    assert store.delete_state is DeleteState.IDLE
    assert store.mode is Mode.BROWSE
    assert store.search_query == ""
    assert store.browse_page.images == ()
    assert store.all_images == ()
    assert store.pagination.page == 1
    assert store.pagination.total == 0
    assert backend.calls_to("paginated_images") == [(1, 12)]


def test_delete_is_single_flight(manual_store, manual_runner):
    manual_store.request_delete()
    assert manual_store.confirm_delete()
    assert manual_store.is_deleting
    assert not manual_store.confirm_delete()
    assert not manual_store.request_delete()
    assert manual_runner.operations() == [OP_DELETE]


def test_delete_failure_is_retryable(store, backend):
    backend.failures["delete_all"] = DeleteFailure("storage locked")
    store.load()

    store.request_delete()
    store.confirm_delete()

    assert store.delete_state is DeleteState.IDLE
    assert store.delete_error == "storage locked"
    assert len(store.all_images) == 100
    assert store.request_delete()


def test_get_image_store_is_a_singleton(qapp):
    assert get_image_store() is get_image_store()


def test_delete_all_supersedes_requests_issued_before_it(manual_store, manual_runner, backend):
    manual_store.load()
    # These responses carry the 100 images that existed before the delete.
    manual_runner.run_ahead()

    manual_store.request_delete()
    manual_store.confirm_delete()
    manual_runner.resolve_operation(OP_DELETE)

    assert manual_runner.operations().count(OP_ALL_IMAGES) == 2
    assert manual_runner.operations().count(OP_BROWSE) == 2
    manual_runner.resolve_all()

    assert manual_store.all_images == ()
    assert manual_store.browse_page.images == ()
    assert manual_store.browse_page.total == 0
    assert manual_store.pagination.total == 0
    assert manual_store.storage.size_bytes == 0
    assert not manual_store.is_loading(OP_ALL_IMAGES)


def test_upload_refreshes_even_with_listing_in_flight(manual_store, manual_runner, backend, tmp_path):
    manual_store.load()
    manual_runner.run_ahead()
    manual_store.set_selected_files(_stage(tmp_path, "a.png"))
    manual_store.upload()
    manual_runner.resolve_operation(OP_UPLOAD)

    manual_runner.resolve_all()

    assert len(manual_store.all_images) == 101
    assert manual_store.pagination.total == 101
    assert manual_store.storage.size_bytes == 101 * 1024


def test_corpus_unchanged_keeps_deduplicating(manual_store, manual_runner):
    manual_store.load()
    manual_store.load()
    assert manual_runner.operations().count(OP_ALL_IMAGES) == 1
    assert manual_runner.operations().count(OP_BROWSE) == 1

"""Tests for viewer reconciliation."""

import asyncio

import httpx

from listenai.remote import RemoteState
from listenai.viewer import TRANSLATION_PLACEHOLDER, BlockChange, ViewerReconciler, diff_block


def _apply_all(reconciler, *states):
    async def scenario():
        for state in states:
            await reconciler.apply(state)

    asyncio.run(scenario())


class TestDiffBlock:
    """Tests for diff_block."""

    def test_unchanged(self):
        assert diff_block("abc", "abc") == (BlockChange.UNCHANGED, "")

    def test_prefix_is_append_with_suffix(self):
        assert diff_block("Hello", "Hello world") == (BlockChange.APPENDED, " world")

    def test_non_prefix_is_replace(self):
        assert diff_block("Hello world", "Hallo world") == (BlockChange.REPLACED, "Hallo world")

    def test_deletion_is_replace(self):
        assert diff_block("Hello world", "Hello") == (BlockChange.REPLACED, "Hello")


class TestViewerReconciler:
    """Tests for ViewerReconciler.apply."""

    def test_append_renders_only_suffix(self, store_client, renderer, translator):
        reconciler = ViewerReconciler(store_client, renderer, translator)
        _apply_all(reconciler, RemoteState("Hello", "en", "pl"), RemoteState("Hello world", "en", "pl"))

        assert renderer.of_kind("append") == [("append", 0, "Hello"), ("append", 0, " world")]
        assert renderer.of_kind("replace") == []
        assert reconciler.blocks[0].source_text == "Hello world"
        assert reconciler.cache.get(0) == "pl:Hello world"

    def test_non_prefix_change_replaces_block(self, store_client, renderer, translator):
        reconciler = ViewerReconciler(store_client, renderer, translator)
        _apply_all(reconciler, RemoteState("Hello world"), RemoteState("Hallo world"))

        assert renderer.of_kind("replace") == [("replace", 0, "Hallo world")]
        assert reconciler.cache.get(0) == "pl:Hallo world"

    def test_unchanged_block_is_not_retranslated(self, store_client, renderer, translator):
        reconciler = ViewerReconciler(store_client, renderer, translator)
        _apply_all(
            reconciler,
            RemoteState("first"),
            RemoteState("first\n\nsecond"),
            RemoteState("first\n\nsecond"),
        )

        assert [call[0] for call in translator.calls] == ["first", "second"]
        assert reconciler.fullscreen_text == "pl:first\n\npl:second"

    def test_fullscreen_follows_translations(self, store_client, renderer, translator):
        reconciler = ViewerReconciler(store_client, renderer, translator)
        _apply_all(reconciler, RemoteState("a\n\nb"))

        assert renderer.of_kind("fullscreen")[-1] == ("fullscreen", "pl:a\n\npl:b")

    def test_empty_text_resets_view(self, store_client, renderer, translator):
        reconciler = ViewerReconciler(store_client, renderer, translator)
        _apply_all(reconciler, RemoteState("one\n\ntwo"), RemoteState(""))

        assert reconciler.blocks == []
        assert len(reconciler.cache) == 0
        assert ("reset",) in renderer.events
        assert renderer.events[-1] == ("fullscreen", "")

    def test_empty_text_on_empty_view_is_quiet(self, store_client, renderer, translator):
        reconciler = ViewerReconciler(store_client, renderer, translator)
        _apply_all(reconciler, RemoteState(""), RemoteState(""))

        assert renderer.events == []
        assert translator.calls == []

    def test_text_after_reset_starts_fresh(self, store_client, renderer, translator):
        reconciler = ViewerReconciler(store_client, renderer, translator)
        _apply_all(reconciler, RemoteState("old"), RemoteState(""), RemoteState("new"))

        assert reconciler.fullscreen_text == "pl:new"
        assert renderer.of_kind("append")[-1] == ("append", 0, "new")

    def test_target_change_retranslates_all_blocks(self, store_client, renderer, translator):
        reconciler = ViewerReconciler(store_client, renderer, translator)
        _apply_all(reconciler, RemoteState("a\n\nb", "en", "pl"), RemoteState("a\n\nb", "en", "de"))

        assert renderer.of_kind("languages") == [("languages", "en", "de")]
        assert sorted(call for call in translator.calls if call[2] == "de") == [
            ("a", "en", "de"),
            ("b", "en", "de"),
        ]
        assert reconciler.fullscreen_text == "de:a\n\nde:b"

    def test_failed_translation_leaves_cache_unset(self, store_client, renderer, translator):
        translator.fail = True
        reconciler = ViewerReconciler(store_client, renderer, translator)
        _apply_all(reconciler, RemoteState("hello"))

        assert 0 not in reconciler.cache
        assert renderer.of_kind("translation") == [("translation", 0, TRANSLATION_PLACEHOLDER)]
        assert renderer.of_kind("fullscreen") == []

    def test_failed_retranslation_keeps_previous_text(self, store_client, renderer, translator):
        reconciler = ViewerReconciler(store_client, renderer, translator)
        _apply_all(reconciler, RemoteState("hello"))
        translator.fail = True
        _apply_all(reconciler, RemoteState("hello there"))

        assert 0 not in reconciler.cache
        assert reconciler.blocks[0].translated_text == "pl:hello"
        assert TRANSLATION_PLACEHOLDER not in [event[2] for event in renderer.of_kind("translation")]

    def test_shrinking_text_prunes_trailing_blocks(self, store_client, renderer, translator):
        reconciler = ViewerReconciler(store_client, renderer, translator)
        _apply_all(reconciler, RemoteState("a\n\nb\n\nc"), RemoteState("a"))

        assert [block.source_text for block in reconciler.blocks] == ["a"]
        assert renderer.of_kind("removed") == [("removed", 2), ("removed", 1)]
        assert reconciler.fullscreen_text == "pl:a"

    def test_long_block_translated_in_chunks(self, store_client, renderer, translator):
        text = " ".join(f"word{i}" for i in range(200))
        reconciler = ViewerReconciler(store_client, renderer, translator)
        _apply_all(reconciler, RemoteState(text))

        assert len(translator.calls) > 1
        assert reconciler.cache.get(0) == " ".join(f"pl:{call[0]}" for call in translator.calls)


class TestViewerPolling:
    """Tests for the poll loop."""

    def test_poll_failure_keeps_view(self, store_client, renderer, translator):
        reconciler = ViewerReconciler(store_client, renderer, translator)
        _apply_all(reconciler, RemoteState("kept"))
        store_client.read_error = httpx.ConnectError("down")

        ok = asyncio.run(reconciler.poll_once())
        assert ok is False
        assert reconciler.blocks[0].source_text == "kept"

    def test_run_polls_until_stopped(self, store_client, renderer, translator):
        store_client.states = [RemoteState("one"), RemoteState("one two")]
        reconciler = ViewerReconciler(store_client, renderer, translator, poll_sec=0.01)

        async def scenario():
            stop = asyncio.Event()
            task = asyncio.create_task(reconciler.run(stop))
            await asyncio.sleep(0.1)
            stop.set()
            await task

        asyncio.run(scenario())
        assert reconciler.poll_count >= 3
        assert renderer.events[0] == ("languages", "en", "pl")
        assert renderer.of_kind("append") == [("append", 0, "one"), ("append", 0, " two")]
        # Queue exhausted: the fake store then serves the default empty record
        assert reconciler.blocks == []


class TestTranslationFailures:
    """Tests for how failed lookups are shown."""

    def test_failed_retranslation_after_language_change_shows_placeholder(
        self, store_client, renderer, translator
    ):
        reconciler = ViewerReconciler(store_client, renderer, translator)
        _apply_all(reconciler, RemoteState("hello", "en", "pl"))
        translator.fail = True
        _apply_all(reconciler, RemoteState("hello", "en", "de"))

        assert reconciler.blocks[0].translated_text is None
        assert 0 not in reconciler.cache
        assert renderer.of_kind("translation")[-1] == ("translation", 0, TRANSLATION_PLACEHOLDER)

    def test_malformed_lookup_response_renders_placeholder(self, store_client, renderer):
        from listenai.backends.translation.mymemory import MyMemoryBackend

        def handler(request):
            return httpx.Response(200, json=["not", "an", "object"])

        backend = MyMemoryBackend(api_url="http://mt.test/get", transport=httpx.MockTransport(handler))
        store_client.states = [RemoteState("hello")]
        reconciler = ViewerReconciler(store_client, renderer, backend)

        ok = asyncio.run(reconciler.poll_once())

        assert ok is True
        assert reconciler.blocks[0].source_text == "hello"
        assert renderer.of_kind("translation") == [("translation", 0, TRANSLATION_PLACEHOLDER)]

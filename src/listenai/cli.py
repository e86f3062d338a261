"""
Console entry points.

    listenai-server  - run the relay store (uvicorn)
    listenai-record  - capture the microphone and publish the transcript
    listenai-viewer  - poll the relay and print blocks with translations

Each entry point loads .env before importing the modules that read their
configuration from the environment.
"""

from __future__ import annotations

import argparse
import asyncio
import sys

from dotenv import load_dotenv


def server_main():
    parser = argparse.ArgumentParser(description="Run the ListenAI relay store")
    parser.add_argument("--host", default="0.0.0.0", help="Bind address")
    parser.add_argument("--port", type=int, default=8000, help="Bind port")
    args = parser.parse_args()

    load_dotenv()
    import uvicorn

    uvicorn.run("listenai.main:app", host=args.host, port=args.port)


async def _read_line() -> str:
    return await asyncio.get_running_loop().run_in_executor(None, sys.stdin.readline)


async def _record(args: argparse.Namespace) -> None:
    from listenai.capture import MicrophoneInput
    from listenai.controller import SOURCE_LANG, TARGET_LANG, SpeechController
    from listenai.remote import STORE_URL, RemoteStoreClient
    from listenai.sync import SyncPublisher

    client = RemoteStoreClient(args.url or STORE_URL)
    publisher = SyncPublisher(client)
    microphone = MicrophoneInput(device=args.device)
    controller = SpeechController(
        publisher,
        audio_source=microphone,
        source_lang=args.source or SOURCE_LANG,
        target_lang=args.target or TARGET_LANG,
        auto_speak=not args.no_speak,
    )
    microphone.level_callback = controller.report_level
    publisher.status.subscribe(lambda status: print(f"  [store] {status.value}"))
    controller.error_message.subscribe(lambda message: message and print(f"  [error] {message}"))

    print("Loading speech recognition model...")
    controller.recognizer.warmup()

    if args.reset:
        controller.reset()
    else:
        # Announce the language pair so viewers pick it up before any speech
        controller.set_languages(controller.source_lang, controller.target_lang)

    print("Press Enter to start/stop recording, 'r' + Enter to reset, 'q' + Enter to quit.")
    try:
        while True:
            raw = await _read_line()
            line = raw.strip().lower()
            # EOF on stdin quits like 'q'
            if not raw or line == "q":
                break
            if line == "r":
                await controller.stop_recording()
                controller.reset()
                print("Transcript cleared")
                continue
            if controller.is_recording.value:
                await controller.stop_recording()
                print(f"\n--- transcript ---\n{controller.transcript}\n------------------")
            else:
                controller.start_recording()
    finally:
        await controller.stop_recording()
        await publisher.flush()
        await publisher.aclose()
        await client.aclose()


def record_main():
    parser = argparse.ArgumentParser(description="Record speech and publish the live transcript")
    parser.add_argument("--url", help="Relay store URL (default: STORE_URL)")
    parser.add_argument("--source", help="Spoken language code (default: SOURCE_LANG)")
    parser.add_argument("--target", help="Viewer target language code (default: TARGET_LANG)")
    parser.add_argument("--device", help="sounddevice input device index or name")
    parser.add_argument("--reset", action="store_true", help="Clear the relay transcript on start")
    parser.add_argument("--no-speak", action="store_true", help="Don't read the transcript back on stop")
    args = parser.parse_args()
    if args.device is not None and args.device.isdigit():
        args.device = int(args.device)

    load_dotenv()
    try:
        asyncio.run(_record(args))
    except KeyboardInterrupt:
        pass


class TerminalRenderer:
    """Prints render instructions as plain lines."""

    def __init__(self, fullscreen: bool = False) -> None:
        self.fullscreen = fullscreen

    def on_languages(self, source_lang: str, target_lang: str) -> None:
        print(f"== {source_lang} -> {target_lang} ==")

    def on_block_append(self, index: int, suffix: str) -> None:
        if not self.fullscreen:
            print(f"[{index}] +{suffix}")

    def on_block_replace(self, index: int, text: str) -> None:
        if not self.fullscreen:
            print(f"[{index}] {text}")

    def on_block_removed(self, index: int) -> None:
        if not self.fullscreen:
            print(f"[{index}] (removed)")

    def on_block_translation(self, index: int, text: str) -> None:
        if not self.fullscreen:
            print(f"[{index}] => {text}")

    def on_fullscreen(self, text: str) -> None:
        if self.fullscreen:
            print("\033[2J\033[H" + text, flush=True)

    def on_reset(self) -> None:
        print("== transcript cleared ==")


async def _view(args: argparse.Namespace) -> None:
    from listenai.remote import STORE_URL, RemoteStoreClient
    from listenai.viewer import POLL_SEC, ViewerReconciler

    client = RemoteStoreClient(args.url or STORE_URL)
    reconciler = ViewerReconciler(
        client,
        renderer=TerminalRenderer(fullscreen=args.fullscreen),
        poll_sec=args.interval or POLL_SEC,
    )
    try:
        await reconciler.run()
    finally:
        await client.aclose()


def viewer_main():
    parser = argparse.ArgumentParser(description="Follow the live transcript with translations")
    parser.add_argument("--url", help="Relay store URL (default: STORE_URL)")
    parser.add_argument("--interval", type=float, help="Poll interval in seconds (default: POLL_SEC)")
    parser.add_argument("--fullscreen", action="store_true", help="Show only the aggregated translation")
    args = parser.parse_args()

    load_dotenv()
    try:
        asyncio.run(_view(args))
    except KeyboardInterrupt:
        pass

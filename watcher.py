# watcher.py
"""
Watch mode for the AGENTS.md build.

Builds once on start, then rebuilds whenever SKILL.md or a Markdown file
under the rules directory changes. A failing rebuild is logged and the
watcher keeps running until interrupted.
"""

import os
import threading
import time
from pathlib import Path
from typing import Any, Callable, Optional

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from config import DEFAULTS, BuildConfig, WatchConfig
from utils import log_error, log_info, log_warn

# open/close notifications carry no content change
CHANGE_EVENTS = {"created", "modified", "deleted", "moved"}


class _ForwardingHandler(FileSystemEventHandler):
    def __init__(self, watcher: "AgentsWatcher"):
        super().__init__()
        self.watcher = watcher

    def on_any_event(self, event: FileSystemEvent) -> None:
        self.watcher.handle_event(event)


class AgentsWatcher:
    """Rebuilds AGENTS.md on changes to SKILL.md or the rules directory."""

    def __init__(
        self,
        rebuild: Callable[[], Any],
        cfg: Optional[BuildConfig] = None,
        watch_cfg: Optional[WatchConfig] = None,
        observer_factory: Callable[[], Any] = Observer,
    ):
        self.cfg = cfg or DEFAULTS.build
        self.watch_cfg = watch_cfg or DEFAULTS.watch
        self._rebuild = rebuild
        self._observer_factory = observer_factory
        self._observer = None
        self._handler = _ForwardingHandler(self)
        self._build_lock = threading.Lock()
        self._timer_lock = threading.Lock()
        self._timer: Optional[threading.Timer] = None
        self._stopped = threading.Event()
        self.source_path = Path(self.cfg.source_path).resolve()
        self.rules_dir = Path(self.cfg.rules_dir).resolve()
        self.build_count = 0

    # ---------- Lifecycle ----------

    def start(self) -> None:
        log_info(f"Watching {self.source_path}")
        log_info(f"Watching {self.rules_dir}")
        self.rebuild()

        self._stopped.clear()
        self._observer = self._observer_factory()
        self._observer.schedule(self._handler, str(self.source_path.parent), recursive=False)
        if self.rules_dir.is_dir():
            self._observer.schedule(self._handler, str(self.rules_dir), recursive=True)
        else:
            log_warn(f"Rules directory not found, watching {self.cfg.source_file} only: {self.rules_dir}")
        self._observer.start()
        log_info("Watching started, press Ctrl+C to stop")

    def stop(self) -> None:
        self._stopped.set()
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        if self._observer is not None:
            self._observer.stop()
            self._observer.join()
            self._observer = None

    def serve_forever(self) -> None:
        """Start watching and block until Ctrl+C or stop()."""
        self.start()
        try:
            while not self._stopped.is_set():
                self._stopped.wait(self.watch_cfg.poll_interval)
        except KeyboardInterrupt:
            log_info("Stopping watcher")
        finally:
            self.stop()

    # ---------- Event handling ----------

    def handle_event(self, event: FileSystemEvent) -> bool:
        """Trigger a rebuild for a qualifying event. Returns whether one was triggered."""
        if self.is_source_event(event):
            self.trigger(f"{self.cfg.source_file} changed")
            return True
        if self.is_rule_event(event):
            self.trigger(f"Rule changed: {os.fsdecode(event.src_path)}")
            return True
        return False

    def is_source_event(self, event: FileSystemEvent) -> bool:
        if event.is_directory or event.event_type not in CHANGE_EVENTS:
            return False
        return any(p == self.source_path for p in _event_paths(event))

    def is_rule_event(self, event: FileSystemEvent) -> bool:
        if event.is_directory or event.event_type not in CHANGE_EVENTS:
            return False
        for p in _event_paths(event):
            if p.name.endswith(self.watch_cfg.rule_suffix) and _is_within(p, self.rules_dir):
                return True
        return False

    def trigger(self, reason: str) -> None:
        log_info(reason)
        delay = self.watch_cfg.debounce_seconds
        if delay <= 0:
            self.rebuild()
            return
        # Restart the window so a burst of saves collapses into one rebuild
        with self._timer_lock:
            if self._timer is not None:
                self._timer.cancel()
            self._timer = threading.Timer(delay, self.rebuild)
            self._timer.daemon = True
            self._timer.start()

    def rebuild(self) -> bool:
        """Run one build; serialized so two rebuilds never write at once."""
        with self._build_lock:
            self.build_count += 1
            log_info(f"[{time.strftime('%H:%M:%S')}] Rebuilding {self.cfg.output_file}...")
            try:
                self._rebuild()
            except Exception as e:
                log_error(f"Build failed: {e}")
                return False
            return True


def _event_paths(event: FileSystemEvent):
    paths = [event.src_path, getattr(event, "dest_path", "")]
    return [Path(os.fsdecode(p)).resolve() for p in paths if p]


def _is_within(path: Path, directory: Path) -> bool:
    try:
        path.relative_to(directory)
    except ValueError:
        return False
    return True

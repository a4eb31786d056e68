import time
from pathlib import Path
from typing import Callable, Iterable, Set

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer


class SourceUpdateHandler(FileSystemEventHandler):
    """
    Listens for changes to a set of source files and triggers a callback
    with the path that changed.
    """
    def __init__(self, target_files: Iterable[str], callback: Callable[[str], None]):
        self.target_files: Set[str] = {str(Path(f).resolve()) for f in target_files}
        self.callback = callback
        self.last_triggered = 0.0
        self.debounce_seconds = 0.5  # some editors write twice per save

    def on_modified(self, event):
        if event.is_directory:
            return

        path = str(Path(event.src_path).resolve())
        if path in self.target_files:
            now = time.time()
            if now - self.last_triggered > self.debounce_seconds:
                self.callback(path)
                self.last_triggered = now


class FileWatcher:
    """
    Manages the watchdog observer thread.
    """
    def __init__(self):
        self.observer = Observer()
        self.watches = []

    def start_watching(self, file_paths: Iterable[str], callback: Callable[[str], None]):
        """
        Watch the parent directory of every file in `file_paths`.
        """
        paths = [Path(p).resolve() for p in file_paths]
        for path in paths:
            if not path.exists():
                raise FileNotFoundError(f"Cannot watch non-existent file: {path}")

        handler = SourceUpdateHandler([str(p) for p in paths], callback)
        for directory in sorted({p.parent for p in paths}):
            self.watches.append(self.observer.schedule(handler, str(directory), recursive=False))
        self.observer.start()

    def stop_watching(self):
        if self.observer.is_alive():
            self.observer.stop()
            self.observer.join()

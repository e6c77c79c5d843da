import json
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from shikhi.utils.logger import get_logger
from shikhi.utils.mongo import as_utc, utcnow

logger = get_logger("CompletionStore")

Listener = Callable[[str, Optional[dict]], None]


def completion_key(course_id: str, user_id: str, quiz_id: str) -> str:
    return f"quiz_completed_{course_id}_{user_id}_{quiz_id}"


class CompletionStore:
    """
    Client-local record of completed quizzes.

    Markers are keyed by course, user and the quiz's stable id, and persisted
    to a JSON file when ``path`` is given. Listeners are told about every
    change so other views can refresh their completion state.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path) if path else None
        self._markers: Dict[str, dict] = {}
        self._listeners: List[Listener] = []
        self._load()

    def _load(self):
        if self.path is None or not self.path.exists():
            return
        try:
            self._markers = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.warning(f"Ignoring unreadable completion store {self.path}: {e}")
            self._markers = {}

    def _save(self):
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self._markers, indent=2), encoding="utf-8")

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)
        return lambda: self._listeners.remove(listener)

    def _notify(self, key: str, value: Optional[dict]):
        for listener in list(self._listeners):
            try:
                listener(key, value)
            except Exception as e:
                logger.error(f"Completion listener failed: {e}")

    def get(self, course_id: str, user_id: str, quiz_id: str) -> Optional[dict]:
        return self._markers.get(completion_key(course_id, user_id, quiz_id))

    def is_completed(self, course_id: str, user_id: str, quiz_id: str) -> bool:
        return self.get(course_id, user_id, quiz_id) is not None

    def mark_completed(self, course_id: str, user_id: str, quiz_id: str, score: int, completed_at=None) -> dict:
        key = completion_key(course_id, user_id, quiz_id)
        marker = {
            "score": score,
            "completedAt": (as_utc(completed_at) or utcnow()).isoformat(),
        }
        self._markers[key] = marker
        self._save()
        self._notify(key, marker)
        return marker

    def clear(self, course_id: str, user_id: str, quiz_id: str):
        key = completion_key(course_id, user_id, quiz_id)
        if self._markers.pop(key, None) is not None:
            self._save()
            self._notify(key, None)

    def reconcile(self, user_id: str, server_results: Iterable[dict]) -> int:
        """
        Overwrite local markers with the server's stored results.

        Local markers the server does not know about are kept, since result
        posting is best-effort. Returns the number of markers changed.
        """
        changed = 0
        for result in server_results:
            key = completion_key(result["courseId"], user_id, result["quizId"])
            current = self._markers.get(key)
            if current and current.get("score") == result.get("score"):
                continue
            self.mark_completed(
                result["courseId"], user_id, result["quizId"], result.get("score", 0), result.get("completedAt")
            )
            changed += 1
        return changed

from typing import Any, Dict, Optional


class WaitTimeoutError(TimeoutError):
    def __init__(self, goal_name: str, timeout_seconds: float) -> None:
        super().__init__(f"Timeout waiting for {goal_name}")
        self.goal_name = goal_name
        self.timeout_seconds = timeout_seconds
        # Only filled in when the wait target is a MediaElement.
        self.diagnostics: Optional[Dict[str, Any]] = None

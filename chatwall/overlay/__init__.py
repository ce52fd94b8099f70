"""
Stream overlay: deduplicated chat columns exposed as an OBS browser source.

- OverlayState: updated by the session, served as /api/state.
- In OBS add a browser source pointing at http://127.0.0.1:8765/.
"""

from chatwall.overlay.state import OverlayState

__all__ = ["OverlayState"]

"""Holds the active RuleSet and swaps it atomically on reload."""

import logging
import threading
from pathlib import Path
from typing import Optional

from .ruleset import RuleSet, load_ruleset

logger = logging.getLogger(__name__)


class RuleSetProvider:
    """
    Reference to the active RuleSet.
    Pipeline runs read `current` once and keep that snapshot; `reload` builds a new
    RuleSet and replaces the reference, so a run in flight never sees a mix.
    """

    def __init__(self, path: Optional[str | Path] = None, rules: Optional[RuleSet] = None):
        self._path = path
        self._lock = threading.Lock()
        self._rules = rules if rules is not None else load_ruleset(path)

    @property
    def current(self) -> RuleSet:
        return self._rules

    def reload(self) -> RuleSet:
        """Load rules again from the configured source. On failure the old rules stay active."""
        try:
            fresh = load_ruleset(self._path)
        except Exception:
            logger.exception("Rule reload failed; keeping previous rules")
            raise
        with self._lock:
            self._rules = fresh
        logger.info("Rules reloaded")
        return fresh

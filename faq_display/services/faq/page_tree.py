"""Expand storage pids to their descendant pages."""

import logging
from typing import Callable, List, Sequence

from faq_display.services.faq.identifiers import unique_positive

logger = logging.getLogger(__name__)

ChildFetcher = Callable[[List[int]], List[int]]


class PageTreeExpander:
    """Breadth-first expansion of a pid list through the page tree.

    Each level costs one query for all pages of the current frontier.
    """

    def __init__(self, fetch_children: ChildFetcher):
        self._fetch_children = fetch_children

    def expand(self, pids: Sequence[int], depth: int) -> List[int]:
        """Add descendants of ``pids`` down to ``depth`` levels.

        Args:
            pids: Root storage pids (positive ints)
            depth: Recursion depth; 0 or less returns ``pids`` unchanged

        Returns:
            Deduplicated pids, roots first, then each level in fetch order
        """
        expanded = unique_positive(list(pids))
        if not expanded or depth <= 0:
            return expanded

        seen = set(expanded)
        frontier = list(expanded)

        for level in range(depth):
            if not frontier:
                break

            children = unique_positive(self._fetch_children(frontier))
            if not children:
                break

            # Pages reached through another path earlier are not revisited.
            frontier = [uid for uid in children if uid not in seen]
            seen.update(frontier)
            expanded.extend(frontier)
            logger.debug(
                f"Page tree level {level + 1}: {len(children)} children, "
                f"{len(frontier)} new"
            )

        return expanded

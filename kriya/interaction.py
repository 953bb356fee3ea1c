"""Selection and node-linking gesture state.

:class:`InteractionState` is an immutable value: every handler takes the
current state and returns the next one, so the gesture state machine can be
driven without a canvas.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Optional, Tuple


@dataclass(frozen=True)
class LinkRequest:
    """An edge the linking gesture asks the flowchart to create."""

    source_id: str
    target_id: str


@dataclass(frozen=True)
class InteractionState:
    """Transient UI state: the selected node and a pending link source."""

    selected_id: Optional[str] = None
    link_start_id: Optional[str] = None

    @property
    def is_linking(self) -> bool:
        return self.link_start_id is not None

    def select(self, node_id: str) -> "InteractionState":
        return replace(self, selected_id=node_id)

    def deselect(self) -> "InteractionState":
        return replace(self, selected_id=None)

    def cancel_link(self) -> "InteractionState":
        return replace(self, link_start_id=None)

    def forget(self, node_id: str) -> "InteractionState":
        """Drop every reference to a node that no longer exists."""
        return InteractionState(
            selected_id=None if self.selected_id == node_id else self.selected_id,
            link_start_id=None if self.link_start_id == node_id else self.link_start_id,
        )

    def activate_node(self, node_id: str) -> Tuple["InteractionState", Optional[LinkRequest]]:
        """Advance the two-phase linking gesture.

        The first activation marks ``node_id`` as link source. Activating the
        same node again cancels; activating another node completes the link
        and returns the edge to create. The activated node always becomes the
        selected node.

        Args:
            node_id: The node the user activated.

        Returns:
            The next state and the requested edge, if any.
        """
        if self.link_start_id is None:
            return InteractionState(selected_id=node_id, link_start_id=node_id), None
        if self.link_start_id == node_id:
            return InteractionState(selected_id=node_id), None
        request = LinkRequest(source_id=self.link_start_id, target_id=node_id)
        return InteractionState(selected_id=node_id), request

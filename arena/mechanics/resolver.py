"""
ActionResolver - validates and applies tank actions.

This module handles:
- The entry gate (exhausted or defeated tanks cannot act)
- Destination clamping
- Per-kind validation and effects for MOVE, SHOOT, GIVE_ACTION, UPGRADE, HEAL
- Action point accounting
- Audit records

Each resolution is all-or-nothing: a rejected action changes nothing and
leaves no audit entry. All validation and mutation happen under the match
lock without awaiting. The audit append awaits, still under the lock, so
the audit log follows commit order; the cost is deducted once it returns.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Tuple

from infra.logger import get_logger

from ..core.actions import Action
from ..core.types import ActionKind, ActionValidation, GridPos
from ..core.validation import clamp_destination, validate_action_in_match
from ..world.match import ActionRecord, MatchContractError

if TYPE_CHECKING:
    from ..entities.tank import Tank
    from ..world.match import Match

log = get_logger(__name__)

# (affected tank, destination to record)
Effect = Tuple[Optional["Tank"], Optional[GridPos]]


@dataclass
class ResolutionResult:
    """
    Outcome of resolving one action.

    Attributes:
        action: The enriched action, or None if it was rejected
        validation: Why the action was accepted or rejected
        record: Audit entry written for an applied action
    """
    action: Optional[Action]
    validation: ActionValidation
    record: Optional[ActionRecord] = None

    @property
    def applied(self) -> bool:
        return self.action is not None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "applied": self.applied,
            "action": self.action.to_dict() if self.action is not None else None,
            "reason": self.validation.error_code,
            "message": self.validation.message,
            "sequence": self.record.sequence if self.record is not None else None,
        }


class ActionResolver:
    """
    Stateless resolver for tank actions.

    The resolver never holds match state; every call receives the match
    and the acting tank explicitly.
    """

    def __init__(self):
        self._effects: Dict[ActionKind, Callable[[Match, Tank, Optional[GridPos]], Effect]] = {
            ActionKind.MOVE: self._move,
            ActionKind.SHOOT: self._shoot,
            ActionKind.GIVE_ACTION: self._give_action,
            ActionKind.UPGRADE: self._upgrade,
            ActionKind.HEAL: self._heal,
        }

    async def apply_action(self, match: Match, tank: Tank, action: Action) -> Optional[Action]:
        """
        Apply ``action`` on behalf of ``tank``.

        Returns:
            The action, enriched with the clamped destination and the
            affected tank, or None if the action was rejected

        Raises:
            MatchContractError: If ``tank`` is not registered in ``match``
        """
        result = await self.resolve(match, tank, action)
        return result.action

    async def resolve(self, match: Match, tank: Tank, action: Action) -> ResolutionResult:
        """Like apply_action, but also reports the validation outcome."""
        if not match.owns(tank):
            raise MatchContractError(f"{tank.label()} is not part of match {match.id}")

        async with match.lock:
            validation = validate_action_in_match(match, tank, action)
            if not validation.valid:
                log.debug("Rejected %s by %s: %s (%s)", action, tank.label(), validation.error_code,
                          validation.message)
                return ResolutionResult(action=None, validation=validation)

            kind = action.kind
            destination = None
            if action.destination is not None and kind.needs_destination:
                destination = clamp_destination(match.grid, action.destination)

            affected, recorded_destination = self._effects[kind](match, tank, destination)

            action.destination = destination
            action.affected = affected

            # Listeners see the actor before the cost is paid.
            try:
                record = await match.record_action(tank, kind, recorded_destination, affected)
            finally:
                tank.consume_action_points(kind.cost)

        return ResolutionResult(action=action, validation=validation, record=record)

    def check(self, match: Match, tank: Tank, action: Action) -> ActionValidation:
        """Read-only legality check, without taking the lock."""
        return validate_action_in_match(match, tank, action)

    # ========================================================================
    # EFFECTS (run only after validation passed)
    # ========================================================================

    def _move(self, match: Match, tank: Tank, destination: GridPos) -> Effect:
        match.board.move_tank(tank.pos, destination)
        tank.pos = destination

        if match.heart_location == destination:
            tank.life += 1
            match.clear_heart()
            log.info("%s picked up the heart at %s", tank.label(), destination)

        return None, destination

    def _shoot(self, match: Match, tank: Tank, destination: GridPos) -> Effect:
        enemy = match.get_occupant(destination)
        enemy.life = max(0, enemy.life - 1)

        if enemy.life == 0:
            # The killer takes over whatever the victim had left
            tank.actions += enemy.actions
            log.info("%s was killed by %s", enemy.label(), tank.label())
            enemy.die()

        return enemy, destination

    def _give_action(self, match: Match, tank: Tank, destination: GridPos) -> Effect:
        ally = match.get_occupant(destination)
        ally.actions += 1
        return ally, destination

    def _upgrade(self, match: Match, tank: Tank, destination: Optional[GridPos]) -> Effect:
        tank.range += 1
        return None, None

    def _heal(self, match: Match, tank: Tank, destination: GridPos) -> Effect:
        if destination == tank.pos:
            tank.life += 1
            return None, destination

        patient = match.get_occupant(destination)
        patient.life += 1
        return patient, destination

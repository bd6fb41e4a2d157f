import asyncio

import pytest

from arena.core import Action, ActionKind
from arena.entities import Tank
from arena.world import Match, MatchContractError

from conftest import run, snapshot


ALL_ACTIONS = [
    Action.move((2, 3)),
    Action.shoot((3, 3)),
    Action.give_action((3, 3)),
    Action.upgrade(),
    Action.heal((2, 2)),
]


def apply(resolver, match, tank, action):
    return run(resolver.apply_action(match, tank, action))


# ============================================================================
# ENTRY GATE / ALL-OR-NOTHING
# ============================================================================

@pytest.mark.parametrize("action", ALL_ACTIONS, ids=lambda a: a.kind.label)
@pytest.mark.parametrize("life, actions", [(3, 0), (3, -1), (0, 5)])
def test_entry_gate_rejects_every_kind(match, place, resolver, action, life, actions):
    place("me", (2, 2), life=life, actions=actions)
    place("other", (3, 3), actions=1)
    before = snapshot(match)

    assert apply(resolver, match, match.get_tank("me"), action) is None

    assert snapshot(match) == before
    assert match.action_log == []


def test_entry_gate_reason_is_reported(match, place, resolver):
    me = place("me", (2, 2), actions=0)

    result = run(resolver.resolve(match, me, Action.upgrade()))

    assert not result.applied
    assert result.validation.error_code == "NO_ACTIONS"
    assert result.record is None


def test_rejection_leaves_board_and_log_untouched(match, place, resolver):
    me = place("me", (2, 2), actions=2)
    place("other", (2, 3), actions=1)
    before = snapshot(match)
    cells = match.board.occupied_cells()

    assert apply(resolver, match, me, Action.move((2, 3))) is None  # occupied
    assert apply(resolver, match, me, Action.shoot((4, 4))) is None  # empty cell
    assert apply(resolver, match, me, Action.heal((2, 3))) is None  # too expensive

    assert snapshot(match) == before
    assert match.board.occupied_cells() == cells
    assert match.action_log == []


def test_foreign_tank_is_a_contract_violation(match, place, resolver):
    place("me", (0, 0), actions=3)
    stranger = Tank(id="me", match_id=match.id, pos=(0, 0), actions=3)
    other_match_tank = Tank(id="x", match_id="elsewhere", pos=(1, 1), actions=3)

    with pytest.raises(MatchContractError):
        apply(resolver, match, stranger, Action.upgrade())
    with pytest.raises(MatchContractError):
        apply(resolver, match, other_match_tank, Action.upgrade())


# ============================================================================
# MOVE
# ============================================================================

def test_move_to_adjacent_free_cell(match, place, resolver):
    me = place("me", (2, 2), actions=2)

    result = apply(resolver, match, me, Action.move((2, 3)))

    assert result is not None
    assert result.destination == (2, 3)
    assert result.affected is None
    assert me.pos == (2, 3)
    assert me.actions == 1
    assert match.board.get_occupant_id(2, 3) == "me"
    assert not match.board.is_occupied(2, 2)


def test_move_diagonally_is_adjacent(match, place, resolver):
    me = place("me", (2, 2), actions=1)

    assert apply(resolver, match, me, Action.move((3, 3))) is not None
    assert me.pos == (3, 3)


def test_move_two_cells_away_is_rejected(match, place, resolver):
    me = place("me", (2, 2), actions=3)

    assert apply(resolver, match, me, Action.move((2, 4))) is None
    assert me.pos == (2, 2)
    assert me.actions == 3


def test_move_onto_own_cell_is_rejected(match, place, resolver):
    me = place("me", (2, 2), actions=1)

    assert apply(resolver, match, me, Action.move((2, 2))) is None


def test_move_destination_is_clamped_before_checks(match, place, resolver):
    left = place("left", (1, 3), actions=1)
    right = place("right", (1, 1), actions=1)

    clamped = apply(resolver, match, left, Action.move((-5, 3)))
    exact = apply(resolver, match, right, Action.move((0, 1)))

    assert clamped.destination == (0, 3)
    assert left.pos == (0, 3)
    assert exact.destination == (0, 1)
    assert (left.actions, right.actions) == (0, 0)


def test_clamped_destination_far_away_is_still_out_of_range(match, place, resolver):
    me = place("me", (2, 2), actions=1)

    assert apply(resolver, match, me, Action.move((99, 2))) is None


def test_move_onto_heart_heals_and_clears_it(match, place, resolver):
    me = place("me", (2, 2), actions=2)
    match.place_heart((2, 1))

    apply(resolver, match, me, Action.move((2, 1)))

    assert me.life == 4
    assert match.heart_location is None


def test_move_elsewhere_keeps_heart(match, place, resolver):
    me = place("me", (2, 2), actions=1)
    match.place_heart((4, 4))

    apply(resolver, match, me, Action.move((1, 1)))

    assert me.life == 3
    assert match.heart_location == (4, 4)


# ============================================================================
# SHOOT
# ============================================================================

def test_shoot_removes_one_life(match, place, resolver):
    me = place("me", (0, 0), actions=2)
    enemy = place("enemy", (2, 2), life=3, actions=1)

    result = apply(resolver, match, me, Action.shoot((2, 2)))

    assert result.affected is enemy
    assert enemy.life == 2
    assert enemy.actions == 1
    assert me.actions == 1


def test_shoot_kill_transfers_remaining_actions(match, place, resolver):
    me = place("me", (0, 0), actions=5, range=3)
    enemy = place("enemy", (3, 3), life=1, actions=4)

    result = apply(resolver, match, me, Action.shoot((3, 3)))

    assert result.affected is enemy
    assert enemy.life == 0
    assert enemy.actions == 0
    assert me.actions == 5 + 4 - 1


def test_kill_with_last_action_still_credits_victims_points(match, place, resolver):
    me = place("me", (0, 0), actions=1)
    enemy = place("enemy", (1, 0), life=1, actions=2)

    apply(resolver, match, me, Action.shoot((1, 0)))

    assert me.actions == 2
    assert enemy.actions == 0


def test_shoot_self_is_rejected(match, place, resolver):
    me = place("me", (2, 2), actions=3)

    assert apply(resolver, match, me, Action.shoot((2, 2))) is None
    assert me.life == 3


def test_shoot_out_of_range_is_rejected(match, place, resolver):
    me = place("me", (0, 0), actions=3, range=2)
    enemy = place("enemy", (3, 0))

    assert apply(resolver, match, me, Action.shoot((3, 0))) is None
    assert enemy.life == 3


def test_shoot_defeated_tank_is_rejected(match, place, resolver):
    me = place("me", (0, 0), actions=3)
    place("corpse", (1, 1), life=0)

    result = run(resolver.resolve(match, me, Action.shoot((1, 1))))

    assert not result.applied
    assert result.validation.error_code == "TARGET_DEFEATED"
    assert me.actions == 3


def test_shoot_empty_cell_is_rejected(match, place, resolver):
    me = place("me", (0, 0), actions=3)

    assert apply(resolver, match, me, Action.shoot((1, 1))) is None


# ============================================================================
# GIVE_ACTION
# ============================================================================

def test_give_action_moves_one_point(match, place, resolver):
    me = place("me", (0, 0), actions=2)
    ally = place("ally", (2, 1), actions=0)

    result = apply(resolver, match, me, Action.give_action((2, 1)))

    assert result.affected is ally
    assert ally.actions == 1
    assert me.actions == 1


def test_give_action_to_self_or_defeated_is_rejected(match, place, resolver):
    me = place("me", (0, 0), actions=2)
    corpse = place("corpse", (1, 0), life=0)

    assert apply(resolver, match, me, Action.give_action((0, 0))) is None
    assert apply(resolver, match, me, Action.give_action((1, 0))) is None
    assert corpse.actions == 0
    assert me.actions == 2


def test_give_action_out_of_range_is_rejected(match, place, resolver):
    me = place("me", (0, 0), actions=2, range=2)
    ally = place("ally", (4, 4))

    assert apply(resolver, match, me, Action.give_action((4, 4))) is None
    assert ally.actions == 0


# ============================================================================
# UPGRADE
# ============================================================================

def test_upgrade_needs_three_actions(match, place, resolver):
    me = place("me", (0, 0), actions=2)

    assert apply(resolver, match, me, Action.upgrade()) is None
    assert (me.range, me.actions) == (2, 2)

    me.actions = 3
    result = apply(resolver, match, me, Action.upgrade())

    assert result is not None
    assert result.destination is None
    assert (me.range, me.actions) == (3, 0)


def test_upgrade_extends_shooting_reach(match, place, resolver):
    me = place("me", (0, 0), actions=4, range=2)
    enemy = place("enemy", (3, 0))

    assert apply(resolver, match, me, Action.shoot((3, 0))) is None
    apply(resolver, match, me, Action.upgrade())
    assert apply(resolver, match, me, Action.shoot((3, 0))) is not None
    assert enemy.life == 2


# ============================================================================
# HEAL
# ============================================================================

def test_self_heal_increments_own_life(match, place, resolver):
    me = place("me", (2, 2), actions=3)

    result = apply(resolver, match, me, Action.heal((2, 2)))

    assert result is not None
    assert result.affected is None
    assert me.life == 4
    assert me.actions == 0


def test_ally_heal_increments_occupant_life_only(match, place, resolver):
    me = place("me", (2, 2), actions=4)
    ally = place("ally", (3, 2), life=1)

    result = apply(resolver, match, me, Action.heal((3, 2)))

    assert result.affected is ally
    assert ally.life == 2
    assert me.life == 3
    assert me.actions == 1


def test_heal_has_no_ceiling(match, place, resolver):
    me = place("me", (2, 2), life=9, actions=3)

    apply(resolver, match, me, Action.heal((2, 2)))

    assert me.life == 10


def test_heal_rejections(match, place, resolver):
    me = place("me", (0, 0), actions=2)
    place("far", (4, 4))
    place("near", (1, 0))

    assert apply(resolver, match, me, Action.heal((0, 0))) is None  # too expensive
    me.actions = 3
    assert apply(resolver, match, me, Action.heal((2, 2))) is None  # empty cell
    assert apply(resolver, match, me, Action.heal((4, 4))) is None  # out of range
    assert me.actions == 3


# ============================================================================
# AUDIT / DEFEAT
# ============================================================================

def test_successful_actions_are_audited_in_commit_order(match, place, resolver):
    me = place("me", (0, 0), actions=5)
    enemy = place("enemy", (1, 1), actions=1)

    apply(resolver, match, me, Action.move((0, 1)))
    apply(resolver, match, me, Action.shoot((1, 1)))
    apply(resolver, match, me, Action.shoot((4, 4)))  # rejected
    apply(resolver, match, enemy, Action.give_action((0, 1)))

    log = match.action_log
    assert [r.kind for r in log] == [ActionKind.MOVE, ActionKind.SHOOT, ActionKind.GIVE_ACTION]
    assert [r.sequence for r in log] == [1, 2, 3]
    assert log[1].affected_id == "enemy"
    assert log[1].destination == (1, 1)
    assert log[2].actor_id == "enemy"


def test_listeners_see_the_actor_before_the_cost_is_paid(match, place, resolver):
    me = place("me", (2, 2), actions=3)
    seen = []

    async def listener(record):
        seen.append((record.kind, me.range, me.actions))

    match.subscribe(listener)
    apply(resolver, match, me, Action.upgrade())

    assert seen == [(ActionKind.UPGRADE, 3, 3)]
    assert (me.range, me.actions) == (3, 0)


def test_cost_is_paid_even_if_the_audit_step_is_cancelled(match, place, resolver):
    me = place("me", (2, 2), actions=3)

    async def listener(record):
        raise asyncio.CancelledError

    match.subscribe(listener)
    with pytest.raises(asyncio.CancelledError):
        apply(resolver, match, me, Action.upgrade())

    assert (me.range, me.actions) == (3, 0)


def test_defeated_tank_stays_on_board_and_cannot_act(match, place, resolver):
    me = place("me", (0, 0), actions=3)
    enemy = place("enemy", (1, 0), life=1, actions=3)

    apply(resolver, match, me, Action.shoot((1, 0)))

    assert match.get_occupant((1, 0)) is enemy
    assert match.board.is_occupied(1, 0)

    enemy.actions = 5  # even if points reach it somehow
    for action in (Action.move((1, 1)), Action.upgrade(), Action.heal((1, 0)), Action.shoot((0, 0))):
        assert apply(resolver, match, enemy, action) is None
    assert enemy.pos == (1, 0)
    assert enemy.life == 0


def test_defeated_tank_blocks_movement(match, place, resolver):
    me = place("me", (0, 0), actions=2)
    place("corpse", (1, 0), life=0)

    assert apply(resolver, match, me, Action.move((1, 0))) is None


def test_check_matches_resolution(match, place, resolver):
    me = place("me", (0, 0), actions=1)

    assert resolver.check(match, me, Action.move((1, 1))).valid
    assert resolver.check(match, me, Action.upgrade()).error_code == "INSUFFICIENT_ACTIONS"
    assert me.actions == 1


def test_concurrent_shots_cannot_overkill(match, place, resolver):

    a = place("a", (0, 0), actions=1)
    b = place("b", (2, 0), actions=1)
    target = place("target", (1, 0), life=1, actions=2)

    async def both():
        return await asyncio.gather(
            resolver.apply_action(match, a, Action.shoot((1, 0))),
            resolver.apply_action(match, b, Action.shoot((1, 0))),
        )

    results = run(both())

    assert sum(r is not None for r in results) == 1
    assert target.life == 0
    assert len(match.action_log) == 1
    assert sorted([a.actions, b.actions]) == [1, 2]  # killer: 1 + 2 - 1, the other untouched
